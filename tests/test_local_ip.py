import socket
from types import SimpleNamespace
from unittest import mock

import pytest

from chatwire.local_ip import LocalIP, local_ipv4_addresses


def _entry(family, address):
    return SimpleNamespace(family=family, address=address)


FAKE_INTERFACES = {
    "lo": [_entry(socket.AF_INET, "127.0.0.1")],
    "eth0": [
        _entry(socket.AF_INET, "10.0.0.5"),
        _entry(socket.AF_INET6, "fe80::1"),
    ],
    "wlan0": [_entry(socket.AF_INET, "192.168.1.20")],
}


@mock.patch("psutil.net_if_addrs", return_value=FAKE_INTERFACES)
def test_discovery_skips_loopback_and_ipv6(_mocked):
    assert local_ipv4_addresses() == ["10.0.0.5", "192.168.1.20"]


@mock.patch("psutil.net_if_addrs", return_value=FAKE_INTERFACES)
def test_discovered_first_address(_mocked):
    local = LocalIP()
    assert local.valid is True
    assert local.get_first() == "10.0.0.5"
    assert local.get_at(1) == "192.168.1.20"


@mock.patch("psutil.net_if_addrs", side_effect=OSError("boom"))
def test_failed_discovery_is_invalid(_mocked):
    local = LocalIP()
    assert local.valid is False
    assert "boom" in local.reason
    with pytest.raises(OSError):
        local.get_first()


def test_given_addresses_drop_localhost():
    local = LocalIP(["127.0.0.1", "10.1.2.3"])
    assert local.get_first() == "10.1.2.3"


def test_get_at_out_of_range():
    local = LocalIP(["10.1.2.3"])
    with pytest.raises(IndexError):
        local.get_at(5)


def test_get_first_without_addresses():
    with pytest.raises(LookupError):
        LocalIP([]).get_first()