"""Storage of users, contacts, session tokens and chats in a SQL database."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    and_,
    create_engine,
    delete,
    exists,
    func,
    insert,
    or_,
    select,
    update,
)
from sqlalchemy.exc import SQLAlchemyError

from chatwire.config import Config
from chatwire.logger import get_logger

_NULL_ADDRESS = " "

metadata = MetaData()

users_table = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("online", Boolean, nullable=False, default=False),
    Column("address", String(255), nullable=True),
)

tokens_table = Table(
    "tokens",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("token", String(255), nullable=False),
)

contacts_table = Table(
    "contacts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("contact_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
)

chats_table = Table(
    "chats",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("created_at", DateTime, nullable=False, default=datetime.now),
    Column("sender_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("recipient_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("text", Text, nullable=False),
    Column("delivered", Boolean, nullable=False, default=False),
)


class UserField(Enum):
    """User columns that can be changed with ``User.update``."""

    USERNAME = "username"
    PASSWORD = "password"
    ADDRESS = "address"
    ONLINE = "online"


@dataclass
class User:
    """A user record; an empty username marks an empty (not found) user."""

    id: int = 0
    username: str = ""
    password: str = ""
    online: bool = False
    address: str = ""
    updated_fields: list[UserField] = field(default_factory=list, compare=False, repr=False)

    def empty(self) -> bool:
        return not self.username

    def update(self, value: Any, field: UserField) -> bool:
        """Change one field and remember it for ``Database.update_user``."""
        if not isinstance(field, UserField):
            return False
        if field is UserField.ONLINE:
            if not isinstance(value, bool):
                return False
        elif not isinstance(value, str):
            return False
        setattr(self, field.value, value)
        if field not in self.updated_fields:
            self.updated_fields.append(field)
        return True

    def __str__(self) -> str:
        return (
            f"id:{self.id},username:{self.username},password:{self.password},"
            f"online:{'true' if self.online else 'false'},address:{self.address}"
        )


@dataclass
class UserChat:
    """A chat message; a chat without a sender is empty."""

    id: int = 0
    created_at: str = ""
    sender: int = 0
    recipient: int = 0
    text: str = ""
    delivered: bool = False

    def empty(self) -> bool:
        return not self.sender


def _user_from_row(row: Any) -> User:
    m = row._mapping
    address = m["address"]
    return User(
        id=m["id"],
        username=m["username"],
        password=m["password"],
        online=bool(m["online"]),
        address=_NULL_ADDRESS if address is None else address,
    )


def _chat_from_row(row: Any) -> UserChat:
    m = row._mapping
    return UserChat(
        id=m["id"],
        created_at=str(m["created_at"]),
        sender=m["sender_id"],
        recipient=m["recipient_id"],
        text=m["text"],
        delivered=bool(m["delivered"]),
    )


class Database:
    """Queries and updates over the users, tokens, contacts and chats tables."""

    def __init__(self, url: Optional[str] = None) -> None:
        if url is None:
            url = Config.get_instance().get_db()
        self.url = url
        self.engine = create_engine(url)
        get_logger().info("Connected to database: %s", self.engine.url.database or "")

    def create_schema(self) -> None:
        """Create the tables that do not exist yet."""
        metadata.create_all(self.engine)

    def _fetch_all(self, statement: Any) -> list[Any]:
        with self.engine.begin() as conn:
            return list(conn.execute(statement))

    def _fetch_one(self, statement: Any) -> Optional[Any]:
        with self.engine.begin() as conn:
            return conn.execute(statement).first()

    def _execute(self, statement: Any) -> bool:
        try:
            with self.engine.begin() as conn:
                conn.execute(statement)
        except SQLAlchemyError as err:
            get_logger().debug("%s", str(err))
            return False
        return True

    def list_users(self) -> list[User]:
        try:
            rows = self._fetch_all(select(users_table).order_by(users_table.c.id))
        except SQLAlchemyError as err:
            get_logger().debug("%s", str(err))
            return []
        return [_user_from_row(row) for row in rows]

    def list_user_contacts(self, user: User) -> list[User]:
        """Return the contacts of the user with ``user.username``: id, username, online."""
        owner = users_table.alias("owner")
        contact = users_table.alias("contact")
        statement = (
            select(contact.c.id, contact.c.username, contact.c.online)
            .select_from(
                contacts_table.join(owner, contacts_table.c.user_id == owner.c.id).join(
                    contact, contacts_table.c.contact_id == contact.c.id
                )
            )
            .where(owner.c.username == user.username)
            .order_by(contacts_table.c.id)
        )
        try:
            rows = self._fetch_all(statement)
        except SQLAlchemyError as err:
            get_logger().debug("%s", str(err))
            return []
        return [
            User(id=row.id, username=row.username, online=bool(row.online)) for row in rows
        ]

    def list_user_chats(
        self, user: User, pending: bool, sender: Optional[User] = None
    ) -> list[UserChat]:
        """Chats received by ``user``, optionally only from ``sender`` or undelivered.

        Without a sender and not pending, the user's own sent messages are included.
        """
        c = chats_table.c
        has_sender = sender is not None and not sender.empty()
        conditions = [c.recipient_id == user.id]
        if has_sender:
            conditions.append(c.sender_id == sender.id)
        if pending:
            conditions.append(c.delivered.is_(False))
        where = and_(*conditions)
        if not pending and not has_sender:
            where = or_(where, c.sender_id == user.id)
        statement = (
            select(chats_table).where(where).distinct().order_by(c.created_at.asc(), c.id.asc())
        )
        try:
            rows = self._fetch_all(statement)
        except SQLAlchemyError as err:
            get_logger().debug("%s", str(err))
            return []
        return [_chat_from_row(row) for row in rows]

    def search_user_by_token(self, token: str) -> User:
        statement = (
            select(users_table)
            .select_from(
                tokens_table.join(users_table, tokens_table.c.user_id == users_table.c.id)
            )
            .where(tokens_table.c.token == token)
        )
        return self._one_user(statement)

    def search_user_by(self, term: str, field: str) -> User:
        """Find a user whose column ``field`` equals ``term``; empty when none."""
        try:
            column = users_table.c[field]
        except KeyError:
            get_logger().debug("Invalid user field %s", field)
            return User()
        return self._one_user(select(users_table).where(column == term))

    def search_user_chat_by(self, term: str, field: str) -> UserChat:
        """Find a chat whose column ``field`` equals ``term``; empty when none."""
        try:
            column = chats_table.c[field]
        except KeyError:
            get_logger().debug("Invalid chat field %s", field)
            return UserChat()
        value: Any = term
        if isinstance(column.type, Integer):
            try:
                value = int(term)
            except ValueError:
                get_logger().debug("Invalid integer %s", term)
                return UserChat()
        try:
            row = self._fetch_one(select(chats_table).where(column == value))
        except SQLAlchemyError as err:
            get_logger().debug("%s", str(err))
            return UserChat()
        return UserChat() if row is None else _chat_from_row(row)

    def search_user_contact(self, user: User, contact_username: str) -> User:
        statement = (
            select(users_table)
            .select_from(
                contacts_table.join(users_table, contacts_table.c.contact_id == users_table.c.id)
            )
            .where(contacts_table.c.user_id == user.id)
            .where(users_table.c.username == contact_username)
        )
        return self._one_user(statement)

    def _one_user(self, statement: Any) -> User:
        try:
            row = self._fetch_one(statement)
        except SQLAlchemyError as err:
            get_logger().debug("%s", str(err))
            return User()
        return User() if row is None else _user_from_row(row)

    def user_contact_exists(self, user: User, contact: User) -> bool:
        statement = select(
            exists().where(
                contacts_table.c.user_id == user.id,
                contacts_table.c.contact_id == contact.id,
            )
        )
        try:
            row = self._fetch_one(statement)
        except SQLAlchemyError as err:
            get_logger().debug("%s", str(err))
            return False
        return bool(row is not None and row[0])

    def add_user_chat(self, chat: UserChat) -> bool:
        if chat.empty():
            get_logger().debug("Cannot add a new chat as an empty user.")
            return False
        return self._execute(
            insert(chats_table).values(
                sender_id=chat.sender,
                recipient_id=chat.recipient,
                text=chat.text,
                delivered=chat.delivered,
            )
        )

    def add_user(self, user: User) -> bool:
        if user.empty():
            get_logger().debug("Cannot add an empty user.")
            return False
        return self._execute(
            insert(users_table).values(
                username=user.username,
                password=user.password,
                online=user.online,
                address=user.address,
            )
        )

    def add_user_contact(self, user: User, contact: User) -> bool:
        if user.empty() or contact.empty():
            get_logger().debug("Cannot add an empty user.")
            return False
        return self._execute(
            insert(contacts_table).values(user_id=user.id, contact_id=contact.id)
        )

    def add_user_token(self, user: User, token: str) -> bool:
        if user.empty():
            get_logger().debug("Cannot add token to an empty user.")
            return False
        return self._execute(insert(tokens_table).values(user_id=user.id, token=token))

    def remove_user(self, user: User) -> bool:
        if user.empty():
            get_logger().debug("Cannot remove an empty user.")
            return False
        return self._execute(delete(users_table).where(users_table.c.id == user.id))

    def remove_user_token(self, user: User) -> bool:
        """Delete every token of the user: only one session per user exists."""
        if user.empty():
            get_logger().debug("Cannot remove token from an empty user.")
            return False
        return self._execute(delete(tokens_table).where(tokens_table.c.user_id == user.id))

    def remove_user_contact(self, user: User, contact: User) -> bool:
        if user.empty() or contact.empty():
            get_logger().debug("Cannot remove an empty user or contact.")
            return False
        return self._execute(
            delete(contacts_table).where(
                contacts_table.c.user_id == user.id,
                contacts_table.c.contact_id == contact.id,
            )
        )

    def update_user(self, user: User) -> bool:
        """Write the fields changed through ``User.update``; False when there are none."""
        if user.empty():
            get_logger().debug("Cannot update an empty user.")
            return False
        values = {f.value: getattr(user, f.value) for f in user.updated_fields}
        if not values:
            get_logger().debug("No updated fields for user %s.", user.username)
            return False
        return self._execute(
            update(users_table).where(users_table.c.id == user.id).values(**values)
        )

    def set_user_chat_to_delivered(self, chat: UserChat) -> bool:
        if chat.empty():
            get_logger().debug("Cannot update an empty chat.")
            return False
        return self._execute(
            update(chats_table).where(chats_table.c.id == chat.id).values(delivered=True)
        )

    def logoff(self, user: User) -> bool:
        """Clear the user's address and mark them offline."""
        return self._execute(
            update(users_table)
            .where(users_table.c.id == user.id)
            .values(address=None, online=False)
        )

    def count_users(self) -> int:
        try:
            row = self._fetch_one(select(func.count()).select_from(users_table))
        except SQLAlchemyError as err:
            get_logger().debug("%s", str(err))
            return 0
        return int(row[0]) if row is not None else 0