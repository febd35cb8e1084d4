"""Contact list requests to the server and tracking of contact state."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional, Protocol

from chatwire.job_bus import Job, JobBus, JobType
from chatwire.logger import get_logger
from chatwire.reply import ReplyCode, get_message
from chatwire.request import Request

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class _Conn(Protocol):
    def respond(self, request: Request) -> Any: ...

    def receive(self, request: Request) -> Any: ...


@dataclass
class Contact:
    """One contact as reported by the server."""

    id: int
    username: str = ""
    online: bool = False
    awaiting: bool = False


def parse_contact(text: str) -> Optional[Contact]:
    """Parse ``id:..,username:..,online:..,awaiting:..``; None without a non-zero id."""
    contact = Contact(0)
    for field in text.split(","):
        key, _, value = field.partition(":")
        if key == "id":
            match = _LEADING_INT.match(value)
            if match is None:
                get_logger().error("Couldn't get ID")
            else:
                contact.id = int(match.group(1))
        elif key == "username":
            contact.username = value
        elif key == "online":
            contact.online = value == "true"
        elif key == "awaiting":
            contact.awaiting = value == "true"
    if contact.id == 0:
        return None
    get_logger().trace(
        "User => %s, Online => %s Awaiting => %s",
        contact.username,
        "TRUE" if contact.online else "FALSE",
        "TRUE" if contact.awaiting else "FALSE",
    )
    return contact


def _text(request: Request) -> str:
    return "" if request.data is None else str(request.data)


def _valid_response(code: ReplyCode, response: str) -> bool:
    return get_message(code) in response


class Contacts:
    """The user's contacts, refreshed through server commands."""

    def __init__(self, bus: Optional[JobBus] = None) -> None:
        self.bus = bus if bus is not None else JobBus()
        self._contacts: dict[int, Contact] = {}

    def _exchange(self, conn: _Conn, request: Request, command: str) -> Optional[str]:
        request.data = command
        conn.respond(request)
        conn.receive(request)
        if not request.valid:
            return None
        return _text(request)

    def _user_command(
        self, conn: _Conn, request: Request, verb: str, expected: ReplyCode
    ) -> Optional[str]:
        user = _text(request)
        if not user:
            return None
        response = self._exchange(conn, request, f"{verb} {user}")
        if response is None:
            return None
        if not _valid_response(expected, response):
            get_logger().error("%s", response)
            return None
        return user

    def list(self, conn: _Conn, request: Request) -> bool:
        """Ask for the contact list and update the tracked contacts."""
        response = self._exchange(conn, request, "LIST " + _text(request))
        if response is None:
            return False
        self.update_contacts(response)
        return True

    def search(self, conn: _Conn, request: Request) -> bool:
        user = self._user_command(conn, request, "SEARCH", ReplyCode.R_201)
        if user is None:
            return False
        get_logger().info("Searched database and found user %s!", user)
        return True

    def add_user(self, conn: _Conn, request: Request) -> bool:
        user = self._user_command(conn, request, "ADD", ReplyCode.R_200)
        if user is None:
            return False
        get_logger().info("Added user %s", user)
        self.list(conn, request)
        get_logger().info("Added new user and updated contacts")
        return True

    def remove_user(self, conn: _Conn, request: Request) -> bool:
        if self._user_command(conn, request, "REMOVE", ReplyCode.R_200) is None:
            return False
        self.list(conn, request)
        get_logger().info("Removed user and updated contacts")
        return True

    def available(self, conn: _Conn, request: Request) -> bool:
        user = self._user_command(conn, request, "AVAILABLE", ReplyCode.R_201)
        if user is None:
            return False
        get_logger().info("User %s is available!", user)
        return True

    def display_contacts(self) -> dict[int, Contact]:
        """Return a copy of the tracked contacts keyed by id."""
        return dict(self._contacts)

    def update_contacts(self, response: str) -> None:
        """Replace the contacts from a server reply and queue the jobs it calls for."""
        old = self._contacts
        self._contacts = {}
        for entry in response.split():
            contact = parse_contact(entry)
            if contact is not None:
                self._contacts[contact.id] = contact

        if len(old) != len(self._contacts) or not self._contacts:
            get_logger().debug("Updating map")
            self.bus.create(Job(JobType.DISP_CONTACTS))
            return

        for contact in self._contacts.values():
            previous = old.get(contact.id)
            if previous is None or previous.online != contact.online:
                get_logger().debug("Updating map")
                self.bus.create(Job(JobType.DISP_CONTACTS))
                return
            if previous.awaiting != contact.awaiting:
                get_logger().debug("Sending Awaiting call")
                self.bus.create(
                    Job(
                        JobType.AWAITING,
                        int_value=contact.id,
                        bool_value=contact.awaiting,
                    )
                )
                return