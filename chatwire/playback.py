"""Common receive loop for audio and video playback of a peer stream."""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Protocol

from chatwire.logger import get_logger
from chatwire.request import Request


class PlaybackStatus(Enum):
    STARTED = "Started"
    STOPPED = "Stopped"
    INVALID = "Invalid"


class DataKind(Enum):
    """What a received payload holds."""

    TEXT = "Text"
    AUDIO = "Audio"
    VIDEO = "Video"
    DONE = "Done"
    EMPTY = "Empty"


class PeerLink(Protocol):
    def make_request(self) -> Request: ...

    def receive_package(self, request: Request) -> None: ...


def data_kind(data: Any) -> DataKind:
    """Return the kind of a payload; no payload counts as EMPTY and text as TEXT."""
    if data is None:
        return DataKind.EMPTY
    if isinstance(data, str):
        return DataKind.TEXT
    return data.kind


class Playback(ABC):
    """Reads packages from a peer and hands them to a concrete player."""

    MAX_TRIES = 100
    WARNING_TRIES = 300

    def __init__(self) -> None:
        self.done_received = False
        self.status = PlaybackStatus.STOPPED

    @abstractmethod
    def start(self, p2p: PeerLink, hangup_callback: Callable[[], None]) -> None:
        """Begin playing packages received from ``p2p``."""

    @abstractmethod
    def stop(self) -> None:
        """Stop playing."""

    @abstractmethod
    def load(self, data: Any) -> None:
        """Queue one received payload for playing."""

    def buffer(self, p2p: PeerLink, nb_packages: int) -> None:
        get_logger().info("Buffering '%d' packets of Audio/Video data...", nb_packages)
        for _ in range(nb_packages):
            self.read_package(p2p)

    def read_package(self, p2p: PeerLink) -> bool:
        """Receive one package and load it; False when only empty ones arrived."""
        request = p2p.make_request()
        p2p.receive_package(request)
        tries = 0
        while data_kind(request.data) is DataKind.EMPTY:
            p2p.receive_package(request)
            get_logger().trace("Received an empty Data Package. Trying again....")
            if tries > self.WARNING_TRIES:
                get_logger().info(
                    "Playback has received '%d' empty packages. Waiting for 50ms.", tries
                )
                time.sleep(0.05)
            if tries > self.MAX_TRIES:
                get_logger().error(
                    "Playback has received '%d' empty packages. giving up...", tries
                )
                return False
            tries += 1

        if data_kind(request.data) is DataKind.DONE:
            self.stop()
            self.done_received = True
            return True

        self.load(request.data)
        return True

    def spawn_network_read_thread(
        self, p2p: PeerLink, hangup_callback: Callable[[], None]
    ) -> threading.Thread:
        """Read packages on a daemon thread while started; hang up when DONE arrives."""

        def run() -> None:
            while self.status is PlaybackStatus.STARTED:
                self.read_package(p2p)
            if self.done_received:
                hangup_callback()

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        return thread

    def valid_data_type(self, data: Any, kind: DataKind) -> bool:
        """True when ``data`` is of ``kind``; otherwise mark the playback invalid."""
        actual = data_kind(data)
        if actual is not kind:
            get_logger().error(
                "Attempted to load Playback with the wrong data type. Was: '%s' "
                "Should be: '%s'.",
                actual.value,
                kind.value,
            )
            self.status = PlaybackStatus.INVALID
            return False
        return True