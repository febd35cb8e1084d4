"""Readiness polling over a listening socket and its connected clients."""

from __future__ import annotations

import select
import socket
from typing import Optional

from chatwire.logger import get_logger

MAX_CONNECTIONS = 10


def _is_open(sock: socket.socket) -> bool:
    return sock.fileno() != -1


class ConnectionPoll:
    """Sockets to watch: the first added is the listener, the rest are clients."""

    def __init__(self, timeout: int = 100, max_connections: int = MAX_CONNECTIONS) -> None:
        self.timeout = timeout
        self.max_connections = max_connections
        self._sockets: list[socket.socket] = []

    @property
    def sockets(self) -> tuple[socket.socket, ...]:
        return tuple(self._sockets)

    def __len__(self) -> int:
        return len(self._sockets)

    def _wait(self, candidates: list[socket.socket]) -> list[socket.socket]:
        open_sockets = [s for s in candidates if _is_open(s)]
        if not open_sockets:
            return []
        readable, _, _ = select.select(open_sockets, [], [], self.timeout / 1000)
        return readable

    def add_socket(self, sock: socket.socket) -> bool:
        """Watch a socket; False when the poll is full."""
        if len(self._sockets) >= self.max_connections:
            return False
        self._sockets.append(sock)
        return True

    def remove_socket(self, sock: socket.socket) -> None:
        """Close a connected socket and stop watching it."""
        clients = self._sockets[1:]
        if sock in clients:
            clients.remove(sock)
            sock.close()
            self._sockets[1:] = clients

    def accept_awaits(self) -> bool:
        """True when the listener has a client waiting to be accepted."""
        return bool(self._wait(self._sockets[:1]))

    def select_socket_with_events(self) -> Optional[socket.socket]:
        """Return the first connected socket with data to read, or None."""
        clients = self._sockets[1:]
        readable = set(self._wait(clients))
        return next((s for s in clients if s in readable), None)

    def close_all(self) -> None:
        """Close every connected socket, keeping the listener."""
        for sock in self._sockets[1:]:
            sock.close()
        del self._sockets[1:]

    def has_timeout(self, label: str) -> bool:
        """True, and logged, when nothing reached the listener within the timeout."""
        if self._wait(self._sockets[:1]):
            return False
        get_logger().info("%s timeout.", label)
        return True