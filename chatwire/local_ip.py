"""Discovery of this machine's non-loopback IPv4 addresses."""

from __future__ import annotations

import socket
from typing import Iterable, Optional

import psutil

from chatwire.logger import get_logger

LOCALHOST = "127.0.0.1"


def local_ipv4_addresses() -> list[str]:
    """Return every IPv4 address of the network interfaces, loopback excluded."""
    return [
        entry.address
        for entries in psutil.net_if_addrs().values()
        for entry in entries
        if entry.family == socket.AF_INET and entry.address != LOCALHOST
    ]


class LocalIP:
    """The local IPv4 addresses, discovered or given."""

    def __init__(self, addresses: Optional[Iterable[str]] = None) -> None:
        self.reason = ""
        if addresses is None:
            try:
                addresses = local_ipv4_addresses()
            except OSError as err:
                self.reason = f"getifaddrs() call was unsuccessful: {err}"
                addresses = []
        self.addresses = [a for a in addresses if a != LOCALHOST]

    @property
    def valid(self) -> bool:
        return not self.reason

    def _check_valid(self) -> None:
        if not self.valid:
            get_logger().error("LocalIP is invalid. reason: %s", self.reason)
            raise OSError(self.reason)

    def get_first(self) -> str:
        """Return the first address; LookupError when there is none."""
        self._check_valid()
        if not self.addresses:
            get_logger().error("LocalIP does not contain any IP addresses.")
            raise LookupError("no local IP addresses")
        return self.addresses[0]

    def get_at(self, pos: int) -> str:
        """Return the address at ``pos``; IndexError when it does not exist."""
        self._check_valid()
        if not 0 <= pos < len(self.addresses):
            get_logger().error("LocalIP: IP Address at position %d does not exist.", pos)
            raise IndexError(pos)
        return self.addresses[pos]