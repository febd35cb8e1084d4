"""Parts for a chat and peer-to-peer calling service: config, replies, sockets, jobs, contacts, P2P signalling, playback and storage."""

__version__ = "0.1.0"