from chatwire.reply import ReplyCode, get_message
from chatwire.request import Request, set_request_reply


def test_defaults():
    req = Request()
    assert req.socket == -1
    assert req.valid is False
    assert req.exit is False
    assert req.data_empty() is True


def test_address_and_data():
    req = Request("127.0.0.1:7000", True)
    assert req.address == "127.0.0.1:7000"
    assert req.valid is True
    req.data = "hello"
    assert req.data_empty() is False


def test_reply_from_code():
    req = Request()
    set_request_reply(req, ReplyCode.R_301)
    assert req.data == "301 User not found"


def test_reply_from_code_with_message():
    req = Request()
    set_request_reply(req, ReplyCode.R_201, "alice")
    assert req.data == "201 alice"


def test_true_flag_is_ok():
    req = Request()
    set_request_reply(req, True)
    assert req.data == "200 OK"


def test_false_flag_is_server_error():
    req = Request()
    set_request_reply(req, False)
    assert req.data == "500 Internal server error"


def test_true_flag_with_message_uses_201():
    req = Request()
    set_request_reply(req, True, "token")
    assert req.data == get_message(ReplyCode.R_201) + " token"


def test_false_flag_with_message_drops_message():
    req = Request()
    set_request_reply(req, False, "ignored")
    assert req.data == get_message(ReplyCode.R_500)


def test_reply_replaces_previous_data():
    req = Request(data="old")
    set_request_reply(req, True)
    assert req.data == get_message(ReplyCode.R_200)