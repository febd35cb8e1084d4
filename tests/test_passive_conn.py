import socket

import pytest

from chatwire.passive_conn import IOStrategy, PassiveConn
from chatwire.request import Request


class EchoIO(IOStrategy):
    def __init__(self):
        self.responded = []

    def receive(self, request):
        payload = request.socket.recv(1024)
        request.data = payload.decode()
        return bool(payload)

    def respond(self, request):
        self.responded.append(request.data)
        request.socket.sendall(request.data.encode())
        return True


@pytest.fixture
def server():
    conn = PassiveConn(0, EchoIO())
    yield conn
    conn.close()


def test_io_strategy_is_abstract():
    with pytest.raises(TypeError):
        IOStrategy()


def test_accept_before_setup_is_invalid(server):
    request = server.accept_connection()
    assert request.valid is False


def test_bind_with_bad_address_fails(server):
    assert server.bind_and_listen("999.1.1.1") is False


def test_accept_without_client_is_invalid(server):
    assert server.bind_and_listen("127.0.0.1")
    assert server.accept_connection().valid is False


def test_full_exchange(server):
    assert server.bind_and_listen("127.0.0.1")
    port = server.socket.getsockname()[1]
    client = socket.create_connection(("127.0.0.1", port))
    try:
        accepted = server.accept_connection()
        assert accepted.valid is True
        assert accepted.address == "127.0.0.1"

        client.sendall(b"hello")
        request = Request()
        assert server.receive(request) is True
        assert request.data == "hello"
        assert request.address == "127.0.0.1"

        request.data = "world"
        assert server.respond(request) is True
        assert client.recv(1024) == b"world"

        sock = request.socket
        server.disconnect_client(request)
        assert sock.fileno() == -1
    finally:
        client.close()


def test_receive_with_nothing_pending(server):
    assert server.bind_and_listen("127.0.0.1")
    request = Request(valid=True)
    assert server.receive(request) is False
    assert request.socket == -1
    assert request.valid is False


def test_respond_skips_invalid_request(server):
    request = Request(valid=False, data="ignored")
    assert server.respond(request) is False
    assert server.io.responded == []