"""Numeric reply codes exchanged between client and server."""

from __future__ import annotations

from enum import Enum

from chatwire.logger import get_logger


class ReplyCode(Enum):
    R_200 = "200"
    R_201 = "201"
    R_202 = "202"
    R_203 = "203"
    R_300 = "300"
    R_301 = "301"
    R_302 = "302"
    R_303 = "303"
    R_304 = "304"
    R_305 = "305"
    R_306 = "306"
    R_307 = "307"
    R_500 = "500"
    R_501 = "501"
    R_502 = "502"
    NONE = ""


_REPLIES = {
    ReplyCode.R_200: "200 OK",
    ReplyCode.R_201: "201",
    ReplyCode.R_202: "202 Invalid token. Please login",
    ReplyCode.R_203: "203 Awaiting",
    ReplyCode.R_300: "300 Not OK",
    ReplyCode.R_301: "301 User not found",
    ReplyCode.R_302: "302 User already exist",
    ReplyCode.R_303: "303 Recipient not found",
    ReplyCode.R_304: "304 Sender not found",
    ReplyCode.R_305: "305 Invalid chat id",
    ReplyCode.R_306: "306 Already awaiting. Please HANGUP before connecting",
    ReplyCode.R_307: "307 Connection requests not found for this user",
    ReplyCode.R_500: "500 Internal server error",
    ReplyCode.R_501: "501 Invalid command or wrong number of arguments",
    ReplyCode.R_502: "502 Empty argument",
}

_CODES = {code.value: code for code in _REPLIES}


def get_message(code: ReplyCode) -> str:
    """Return the full reply text for a code, or "" when it has none."""
    try:
        return _REPLIES[code]
    except KeyError:
        get_logger().error("Reply code %s does not exist", code)
        return ""


def append_message(code: ReplyCode, message: str) -> str:
    """Return the reply text followed by a space and ``message``."""
    return f"{_REPLIES[code]} {message}"


def from_string(text: str) -> ReplyCode:
    """Parse a three-digit code; unknown text gives ``ReplyCode.NONE``."""
    try:
        return _CODES[text]
    except KeyError:
        get_logger().error("Invalid reply code %s", text)
        return ReplyCode.NONE