"""Peer-to-peer call set-up through the server, then a direct UDP link."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Protocol

from chatwire.config import Config
from chatwire.local_ip import LocalIP
from chatwire.logger import get_logger
from chatwire.reply import ReplyCode, from_string, get_message
from chatwire.request import Request

DELIM = " "
LOCAL = "LOCAL"


class P2PError(RuntimeError):
    """Raised when a peer operation is attempted in the wrong state."""


class P2PStatus(Enum):
    IDLE = "Idle"
    AWAITING = "Awaiting"
    ACCEPTED = "Accepted"
    CONNECTED = "Connected"
    ERROR = "Error"

    def __str__(self) -> str:
        return self.value


class P2PType(Enum):
    INITIATOR = "Initiator"
    ACCEPTOR = "Acceptor"
    NONE = "None"

    def __str__(self) -> str:
        return self.value


class PeerNetwork(Enum):
    """Whether the peer sits in the local network or behind the web."""

    LOCAL = "Local"
    WEB = "Web"
    UNSELECTED = "Unselected"


class ServerCommand(Enum):
    CONNECT = "CONNECT"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    PING = "PING"
    HANGUP = "HANGUP"


class UDPLink(Protocol):
    """The datagram endpoint a peer connection talks through."""

    port: int

    def bind_socket(self, address: str) -> Any: ...

    def respond(self, request: Request) -> Any: ...

    def receive(self, request: Request) -> bool: ...

    def use_stream_strategy(self) -> None: ...


def _text(request: Request) -> str:
    return "" if request.data is None else str(request.data)


class P2P:
    """One side of a call: negotiates with the server, then handshakes the peer."""

    MAX_PING_TRIALS = 5
    MAX_PUNCH_TRIALS = 20

    def __init__(
        self,
        token: str,
        conn: UDPLink,
        local_ip: Optional[LocalIP] = None,
        server_address: Optional[str] = None,
    ) -> None:
        self.token = token
        self.conn = conn
        self.local_ip = local_ip if local_ip is not None else LocalIP()
        if server_address is None:
            config = Config.get_instance()
            server_address = f"{config.get_str('SERVER_ADDRESS')}:{config.get_str('UDP_PORT')}"
        self.server_address = server_address
        self.peer_address = ""
        self.status = P2PStatus.IDLE
        self.type = P2PType.NONE
        self.last_reply = ReplyCode.NONE
        self.network_type = PeerNetwork.UNSELECTED
        host, sep, _ = server_address.rpartition(":")
        self.conn.bind_socket(host if sep else server_address)

    def make_request(self) -> Request:
        """Return a ready request addressed to the peer."""
        return Request(address=self.peer_address, valid=True)

    def send_package(self, request: Request) -> None:
        if self.status is P2PStatus.CONNECTED:
            self.conn.respond(request)
        else:
            request.valid = False
            get_logger().debug("Cannot send package. P2P Not connected.")

    def receive_package(self, request: Request) -> None:
        if self.status is P2PStatus.CONNECTED:
            self.conn.receive(request)
        else:
            request.valid = False
            get_logger().debug("Cannot receive package. P2P Not connected.")

    def reset(self) -> None:
        self.last_reply = ReplyCode.NONE
        self.peer_address = ""
        self.status = P2PStatus.IDLE
        self.type = P2PType.NONE

    def handshake_peer(self) -> None:
        """Exchange confirmations with the peer; CONNECTED on success."""
        self._check_can_handshake()
        request = Request(address=f"{self.peer_address}:{self.conn.port}", valid=True)
        if self.type is P2PType.ACCEPTOR:
            self._handshake_acceptor(request)
        if self.type is P2PType.INITIATOR:
            self._handshake_initiator(request)
        if self.status is P2PStatus.CONNECTED:
            get_logger().info("Setting UDP connection strategy to streaming")
            self.conn.use_stream_strategy()

    def connect_peer(self, peer_id: str) -> None:
        argument = f"{peer_id} {self.local_ip.get_first()}"
        response = self._send_server(ServerCommand.CONNECT, argument)
        self.type = P2PType.INITIATOR
        if self.last_reply is ReplyCode.R_200:
            self.status = P2PStatus.AWAITING
        elif self.last_reply is ReplyCode.R_306:
            self.status = P2PStatus.AWAITING
            get_logger().error("%s", response)
        else:
            self.status = P2PStatus.ERROR
            get_logger().error("%s", response)

    def accept_peer(self, peer_id: str) -> None:
        self.type = P2PType.ACCEPTOR
        argument = f"{peer_id} {self.local_ip.get_first()}"
        response = self._send_server(ServerCommand.ACCEPT, argument)
        if self.last_reply is ReplyCode.R_201:
            self.status = P2PStatus.ACCEPTED
            self._set_peer(response)
        else:
            self.status = P2PStatus.ERROR
            get_logger().error("%s", response)

    def reject_peer(self, peer_id: str) -> None:
        self.type = P2PType.ACCEPTOR
        response = self._send_server(ServerCommand.REJECT, peer_id)
        if self.last_reply is ReplyCode.R_200:
            self.status = P2PStatus.IDLE
        else:
            self.status = P2PStatus.ERROR
            get_logger().error("%s", response)

    def ping_peer(self) -> None:
        """Ask the server whether the called peer has accepted."""
        if self.type is not P2PType.INITIATOR:
            raise P2PError(
                f"A peer cannot PING if it has not initiated with CONNECT. Type was '{self.type}'."
            )
        if self.status is P2PStatus.ACCEPTED:
            get_logger().trace("This connection has already been accepted. Ignoring ping...")
            return
        response = self._send_server(ServerCommand.PING)
        if self.last_reply is ReplyCode.R_201:
            self.status = P2PStatus.ACCEPTED
            self._set_peer(response)
            get_logger().info("successful ping from address `%s`.", self.peer_address)
        elif self.last_reply is ReplyCode.R_203:
            self.status = P2PStatus.AWAITING
            get_logger().info("%s", response)
        else:
            self.status = P2PStatus.ERROR
            get_logger().error(
                "The response was '%s' and should have been 201 or 203", response
            )

    def hangup_peer(self) -> None:
        if self.type is not P2PType.INITIATOR:
            raise P2PError(
                f"A peer cannot HANGUP if it has not initiated with CONNECT. Type was '{self.type}'."
            )
        response = self._send_server(ServerCommand.HANGUP)
        if self.last_reply is ReplyCode.R_200:
            self.status = P2PStatus.IDLE
        else:
            self.status = P2PStatus.ERROR
            get_logger().error("%s", response)

    def _set_peer(self, response: str) -> None:
        address, _, address_type = response.partition(DELIM)
        self.peer_address = address
        self.network_type = PeerNetwork.LOCAL if address_type == LOCAL else PeerNetwork.WEB

    def _send_server(self, command: ServerCommand, argument: Optional[str] = None) -> str:
        """Send a command with the token; return the reply text after its code."""
        parts = [command.value, self.token]
        if argument is not None:
            parts.append(argument)
        request = Request(address=self.server_address, valid=True, data=DELIM.join(parts))
        self.conn.respond(request)
        self.conn.receive(request)
        code, _, message = _text(request).partition(DELIM)
        self.last_reply = from_string(code)
        return message

    def _check_can_handshake(self) -> None:
        if self.status is not P2PStatus.ACCEPTED:
            raise P2PError(f"Status must be 'Accepted' to handshake. Was '{self.status}'")
        if not self.peer_address:
            raise P2PError(
                f"'{self.type}' failed to handshake. Peer address was not set correctly."
            )
        if self.network_type is PeerNetwork.UNSELECTED:
            raise P2PError("The peer network must be Web or Local to handshake.")

    def _handshake_acceptor(self, request: Request) -> None:
        if self.network_type is PeerNetwork.WEB:
            self._hole_punch(request)
        get_logger().debug(
            "Acceptor: waiting for handshake confirmation from '%s'.", request.address
        )
        self._retry(request, self.conn.receive(request))
        if self.status is P2PStatus.ERROR:
            return
        ok_msg = get_message(ReplyCode.R_200)
        response = _text(request)
        if response == ok_msg:
            get_logger().info("Acceptor: handshake with '%s' was successful.", request.address)
            self.status = P2PStatus.CONNECTED
            request.data = ok_msg
            self.conn.respond(request)
        else:
            get_logger().error(
                "Handshake message '%s' should be '%s'. Handshake failed.", response, ok_msg
            )
            self.status = P2PStatus.ERROR

    def _handshake_initiator(self, request: Request) -> None:
        if self.network_type is PeerNetwork.WEB:
            self._hole_punch(request)
        ok_msg = get_message(ReplyCode.R_200)
        request.data = ok_msg
        get_logger().debug("Initiator: Sending 200 OK to confirm.")
        self.conn.respond(request)
        self._retry(request, self.conn.receive(request))
        if self.status is P2PStatus.ERROR:
            return
        response = _text(request)
        if response == ok_msg:
            get_logger().info("Handshake with '%s' was successful.", request.address)
            self.status = P2PStatus.CONNECTED
        else:
            get_logger().error(
                "Initiator: handshake message '%s' should be '%s'. Handshake failed.",
                response,
                ok_msg,
            )
            self.status = P2PStatus.ERROR

    def _retry(self, request: Request, got_response: bool) -> None:
        if got_response:
            return
        for _ in range(self.MAX_PUNCH_TRIALS):
            get_logger().debug(
                "%s: Did not receive response from peer. Sending punch message again...",
                self.type,
            )
            self._hole_punch(request)
            if self.conn.receive(request):
                get_logger().debug("Hole punch retry was successful.")
                return
        get_logger().debug("Giving up on hole punch after %d trials.", self.MAX_PUNCH_TRIALS)
        self.status = P2PStatus.ERROR

    def _hole_punch(self, request: Request) -> None:
        get_logger().debug("Hole punch: Sending 200 OK to '%s'...", request.address)
        request.data = get_message(ReplyCode.R_200)
        self.conn.respond(request)