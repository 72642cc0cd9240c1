import re
import uuid
from contextvars import ContextVar, Token
from typing import Optional

REQUEST_ID_HEADER = "X-Request-ID"

# Accepted shape for caller-supplied ids.
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

_current: ContextVar[Optional[str]] = ContextVar("booking_admin_request_id", default=None)


def generate_request_id() -> str:
    return uuid.uuid4().hex


def get_request_id() -> Optional[str]:
    return _current.get()


def set_request_id(request_id: Optional[str]) -> Token:
    """Store ``request_id`` for the current context; None clears it."""
    return _current.set(request_id)


def bind_request_id(incoming: Optional[str]) -> str:
    """
    Bind the id for the request being served and return it.

    The caller's ``X-Request-ID`` is reused so a request can be traced through
    the booking backend; a missing or malformed header gets a fresh id.
    """
    candidate = (incoming or "").strip()
    request_id = candidate if _SAFE_ID.fullmatch(candidate) else generate_request_id()
    set_request_id(request_id)
    return request_id
