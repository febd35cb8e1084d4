import pytest

from chatwire.database import Database, User, UserChat, UserField

password = "password"

SEED = [
    ("khalil", False, "123.453.3.1"),
    ("mario", False, "1.453.32.1"),
    ("shakira", False, "53.423.4.1"),
    ("dubius", False, "33.53.3.1"),
    ("martha", True, "127.0.0.1"),
]


@pytest.fixture
def db():
    database = Database("sqlite://")
    database.create_schema()
    for name, online, address in SEED:
        assert database.add_user(
            User(username=name, password=password, online=online, address=address)
        )
    khalil = database.search_user_by("khalil", "username")
    mario = database.search_user_by("mario", "username")
    assert database.add_user_contact(khalil, mario)
    return database


def test_list_users(db):
    expected = [
        f"id:{i},username:{name},password:{password},online:{'true' if online else 'false'},"
        f"address:{address}"
        for i, (name, online, address) in enumerate(SEED, start=1)
    ]
    assert [str(u) for u in db.list_users()] == expected


def test_search_by_username(db):
    u = db.search_user_by("mario", "username")
    assert u.empty() is False
    assert u.username == "mario"


def test_search_by_address(db):
    u = db.search_user_by("53.423.4.1", "address")
    assert u.empty() is False
    assert u.username == "shakira"


def test_search_unexisting_user(db):
    assert db.search_user_by("jose", "username").empty() is True


def test_search_invalid_field_gives_empty(db):
    assert db.search_user_by("mario", "nonsense").empty() is True


def test_search_user_contact(db):
    khalil = db.search_user_by("khalil", "username")
    assert khalil.empty() is False
    mario = db.search_user_contact(khalil, "mario")
    assert mario.username == "mario"


def test_add_and_remove_contact(db):
    user = db.search_user_by("khalil", "username")
    contact = db.search_user_by("dubius", "username")
    assert db.add_user_contact(user, contact)
    assert db.search_user_contact(user, "dubius").username == "dubius"
    assert db.user_contact_exists(user, contact) is True
    assert db.remove_user_contact(user, contact)
    assert db.search_user_contact(user, "dubius").empty()
    assert db.user_contact_exists(user, contact) is False


def test_list_user_contacts(db):
    khalil = db.search_user_by("khalil", "username")
    contacts = db.list_user_contacts(khalil)
    assert [(c.username, c.online) for c in contacts] == [("mario", False)]
    assert db.list_user_contacts(User(username="nobody")) == []


def test_add_and_remove_user(db):
    assert db.add_user(User(username="pedro", password=password, online=True, address="123"))
    res = db.search_user_by("pedro", "username")
    assert res.username == "pedro"
    assert db.remove_user(res)
    assert db.search_user_by("pedro", "username").empty() is True


def test_empty_user_rejected(db):
    assert db.add_user(User()) is False
    assert db.remove_user(User()) is False
    assert db.update_user(User()) is False


def test_update_existing_user(db):
    db.add_user(User(username="pedro", password=password, address="123.43.453.12"))
    u = db.search_user_by("pedro", "username")
    assert u.update("marco", UserField.USERNAME) is True
    assert db.update_user(u)
    u2 = db.search_user_by("marco", "username")
    assert u2.username == "marco"
    assert u2.update("pedro", UserField.USERNAME) is True
    assert db.update_user(u2)
    u3 = db.search_user_by("pedro", "username")
    assert u3.username == "pedro"
    assert u3.id == u.id


def test_update_rejects_wrong_type():
    u = User(username="pedro")
    assert u.update("yes", UserField.ONLINE) is False
    assert u.updated_fields == []


def test_update_without_changes_fails(db):
    u = db.search_user_by("mario", "username")
    assert db.update_user(u) is False


def test_tokens(db):
    mario = db.search_user_by("mario", "username")
    assert db.add_user_token(mario, "token")
    assert db.search_user_by_token("token").username == "mario"
    assert db.remove_user_token(mario)
    assert db.search_user_by_token("token").empty()


def test_logoff_clears_address(db):
    martha = db.search_user_by("martha", "username")
    assert db.logoff(martha)
    after = db.search_user_by("martha", "username")
    assert after.online is False
    assert after.address == " "


def test_chats(db):
    khalil = db.search_user_by("khalil", "username")
    mario = db.search_user_by("mario", "username")
    shakira = db.search_user_by("shakira", "username")
    assert db.add_user_chat(UserChat(sender=mario.id, recipient=khalil.id, text="hi"))
    assert db.add_user_chat(UserChat(sender=khalil.id, recipient=mario.id, text="hello"))
    assert db.add_user_chat(UserChat(sender=shakira.id, recipient=khalil.id, text="hey"))
    assert db.add_user_chat(UserChat()) is False

    all_chats = db.list_user_chats(khalil, False)
    assert [c.text for c in all_chats] == ["hi", "hello", "hey"]

    from_mario = db.list_user_chats(khalil, False, mario)
    assert [c.text for c in from_mario] == ["hi"]

    pending = db.list_user_chats(khalil, True)
    assert [c.text for c in pending] == ["hi", "hey"]

    assert db.set_user_chat_to_delivered(pending[0])
    assert [c.text for c in db.list_user_chats(khalil, True)] == ["hey"]

    found = db.search_user_chat_by(str(pending[0].id), "id")
    assert found.text == "hi"
    assert found.delivered is True
    assert db.search_user_chat_by("999", "id").empty()
    assert db.search_user_chat_by("1", "bogus").empty()