"""Listening TCP endpoint that accepts clients and exchanges requests."""

from __future__ import annotations

import socket
from abc import ABC, abstractmethod

from chatwire.connection import Connection, address_to_string
from chatwire.connection_poll import ConnectionPoll
from chatwire.logger import get_logger
from chatwire.request import Request

QUEUE_SIZE = 10


class IOStrategy(ABC):
    """How a request's payload is read from and written to its socket."""

    @abstractmethod
    def receive(self, request: Request) -> bool:
        """Read from ``request.socket`` into ``request.data``; True on success."""

    @abstractmethod
    def respond(self, request: Request) -> bool:
        """Write ``request.data`` to ``request.socket``; True on success."""


class PassiveConn(Connection):
    """A server socket with a poll of its connected clients."""

    def __init__(self, port: int, io: IOStrategy) -> None:
        super().__init__(port)
        self.io = io
        self._poll = ConnectionPoll()
        self._addresses: dict[socket.socket, str] = {}

    def bind_and_listen(self, address: str) -> bool:
        if not self.setup(address) or self.socket is None:
            return False
        try:
            self.socket.bind(self.address)
        except OSError:
            get_logger().error("Could not bind to socket.")
            return False
        self.socket.listen(QUEUE_SIZE)
        self._poll.add_socket(self.socket)
        get_logger().info("Listening on %d.", self.socket.getsockname()[1])
        return True

    def accept_connection(self) -> Request:
        """Accept one waiting client; the request is invalid when none waits."""
        request = Request()
        if not self.is_setup or self.socket is None:
            get_logger().error("The connection has not been set up.")
            return request
        if not self._poll.accept_awaits():
            return request
        try:
            client, peer = self.socket.accept()
        except OSError:
            get_logger().debug("Could not accept connection.")
            return request
        self._poll.add_socket(client)
        text = address_to_string(peer)
        self._addresses[client] = text
        request.socket = client
        request.address = text
        request.valid = True
        return request

    def receive(self, request: Request) -> bool:
        """Read from the first client with pending data."""
        sock = self._poll.select_socket_with_events()
        if sock is None:
            get_logger().debug("Nothing to receive.")
            request.socket = -1
            request.valid = False
            return False
        request.socket = sock
        request.valid = self.io.receive(request)
        request.address = self._addresses[sock]
        return request.valid

    def respond(self, request: Request) -> bool:
        if request.valid:
            request.valid = self.io.respond(request)
        return request.valid

    def disconnect_client(self, request: Request) -> None:
        sock = request.socket
        self._addresses.pop(sock, None)
        self._poll.remove_socket(sock)
        if isinstance(sock, socket.socket):
            sock.close()

    def close(self) -> None:
        """Shut the listener down and close every client."""
        if self.socket is not None:
            try:
                self.socket.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
        self._poll.close_all()
        self._addresses.clear()
        super().close()