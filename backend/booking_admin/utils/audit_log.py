import json
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from .request_id import get_request_id

AuditAction = Literal[
    "booking.created",
    "booking.rejected",
    "booking.deleted",
    "timeslot.availability_changed",
    "timeslot.minimum_person_changed",
    "blackout.created",
    "blackout.removed",
]

AUDIT_LOGGER_NAME = "audit"


def _build_audit_logger() -> logging.Logger:
    audit = logging.getLogger(AUDIT_LOGGER_NAME)
    audit.setLevel(logging.INFO)
    if not audit.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        audit.addHandler(handler)
    # Records go out only through the bare-message handler above.
    audit.propagate = False
    return audit


_audit_logger = _build_audit_logger()


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return str(value.value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def subject(
    *,
    package_id: Optional[str] = None,
    package_type: Any = None,
    date: Any = None,
    time: Optional[str] = None,
) -> dict[str, Any]:
    """Slot coordinates in the shape audit records use."""
    return {
        "package_id": package_id,
        "package_type": _plain(package_type),
        "date": _plain(date),
        "time": time,
    }


def emit_audit_log(
    *,
    action: AuditAction,
    package_id: Optional[str] = None,
    package_type: Any = None,
    date: Any = None,
    time: Optional[str] = None,
    booking_id: Optional[str] = None,
    guests: Optional[int] = None,
    reason: Any = None,
    message: Optional[str] = None,
    extra: Optional[dict[str, Any]] = None,
) -> None:
    """Write one admin action to the audit log as compact JSON.

    Empty fields are omitted. Raises RuntimeError if the record cannot be
    written; callers turn that into a failed request.
    """
    record: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "actor": "admin",
        "request_id": get_request_id(),
        **subject(package_id=package_id, package_type=package_type, date=date, time=time),
        "booking_id": booking_id,
        "guests": guests,
        "reason": _plain(reason),
        "message": message,
    }
    for key, value in (extra or {}).items():
        record[key] = _plain(value)

    try:
        line = json.dumps({k: v for k, v in record.items() if v is not None}, ensure_ascii=True)
        _audit_logger.info(line)
    except Exception as exc:
        raise RuntimeError("failed to emit audit log") from exc
