import pytest

from chatwire.reply import ReplyCode, append_message, from_string, get_message

REAL_CODES = [code for code in ReplyCode if code is not ReplyCode.NONE]


def test_ok_message():
    assert get_message(ReplyCode.R_200) == "200 OK"


def test_201_is_bare():
    assert get_message(ReplyCode.R_201) == "201"


@pytest.mark.parametrize("code", REAL_CODES)
def test_message_starts_with_code(code):
    assert get_message(code).startswith(code.value)


@pytest.mark.parametrize("code", REAL_CODES)
def test_from_string_round_trip(code):
    assert from_string(get_message(code).split(" ", 1)[0]) is code


def test_none_has_no_message():
    assert get_message(ReplyCode.NONE) == ""


def test_unknown_string():
    assert from_string("999") is ReplyCode.NONE
    assert from_string("OK") is ReplyCode.NONE


def test_append_message():
    assert append_message(ReplyCode.R_201, "alice bob") == "201 alice bob"
    assert append_message(ReplyCode.R_300, "x") == "300 Not OK x"


def test_append_to_none_raises():
    with pytest.raises(KeyError):
        append_message(ReplyCode.NONE, "x")