"""Base IPv4 socket connection shared by the TCP and UDP endpoints."""

from __future__ import annotations

import socket
from typing import Optional

from chatwire.logger import get_logger

Address = tuple[str, int]


class Connection:
    """An IPv4 socket bound to a port and an address once set up."""

    def __init__(self, port: int = -1, protocol: int = socket.SOCK_STREAM) -> None:
        self.port = port
        self.protocol = protocol
        self.address: Address = ("", port)
        self._socket: Optional[socket.socket] = None
        self._is_setup = False

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def socket(self) -> Optional[socket.socket]:
        return self._socket

    @property
    def is_setup(self) -> bool:
        return self._is_setup

    def setup(self, address: Optional[str] = None, timeout: int = 0) -> bool:
        """Create the socket; with an address also set options and the target.

        A positive ``timeout`` (seconds) applies to receiving. Without an
        address only the socket is created and the connection is not marked
        as set up.
        """
        if address is None:
            return self._create_socket()
        self._is_setup = (
            self._create_socket()
            and self._set_options(timeout)
            and self._set_address(address)
        )
        return self._is_setup

    def reset_socket(self) -> bool:
        """Close the current socket and open a fresh one."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self._is_setup = self._create_socket()
        return self._is_setup

    def close(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        self._is_setup = False

    def _create_socket(self) -> bool:
        try:
            self._socket = socket.socket(socket.AF_INET, self.protocol)
        except OSError:
            get_logger().error("Could not create socket.")
            self._socket = None
            return False
        return True

    def _set_options(self, timeout: int) -> bool:
        sock = self._socket
        if sock is None:
            return False
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError:
            get_logger().error("Invalid options - reuse address.")
            return False
        reuse_port = getattr(socket, "SO_REUSEPORT", None)
        if reuse_port is not None:
            try:
                sock.setsockopt(socket.SOL_SOCKET, reuse_port, 1)
            except OSError:
                get_logger().error("Invalid option - reuse port.")
                return False
        if timeout > 0:
            try:
                sock.settimeout(timeout)
            except OSError:
                get_logger().error("Invalid options - receive timeout.")
                return False
        return True

    def _set_address(self, address: str) -> bool:
        try:
            socket.inet_pton(socket.AF_INET, address)
        except OSError:
            get_logger().error("Invalid IP address.")
            return False
        self.address = (address, self.port)
        return True


def address_to_string(address: Address) -> str:
    """Return the IP part of an ``(ip, port)`` address."""
    return address[0]


def port_to_string(address: Address) -> str:
    """Return the port part of an ``(ip, port)`` address as text."""
    return str(address[1])


def to_address(port: str, address: str) -> Address:
    """Build an ``(ip, port)`` address; a port that is not a number becomes 0."""
    try:
        number = int(port)
    except ValueError:
        get_logger().error("Invalid port integer '%s'", port)
        number = 0
    return (address, number)