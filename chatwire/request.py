"""Request objects passed between connections and controllers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from chatwire.reply import ReplyCode, append_message, get_message


@dataclass
class Request:
    """One message in flight: its peer, session token, validity and payload."""

    address: str = ""
    valid: bool = False
    exit: bool = False
    socket: int = -1
    token: str = ""
    data: Any = None

    def data_empty(self) -> bool:
        return self.data is None


def set_request_reply(
    request: Request,
    outcome: Union[ReplyCode, bool],
    message: Optional[str] = None,
) -> None:
    """Put a reply text into ``request.data``.

    ``outcome`` is either a reply code or a success flag. A true flag maps to
    200, or to 201 followed by ``message`` when one is given; a false flag
    maps to 500.
    """
    if isinstance(outcome, bool):
        if not outcome:
            code, message = ReplyCode.R_500, None
        elif message is None:
            code = ReplyCode.R_200
        else:
            code = ReplyCode.R_201
    else:
        code = outcome
    request.data = get_message(code) if message is None else append_message(code, message)