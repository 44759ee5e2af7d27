"""
Wire <-> domain mapping.

Every backend record passes through exactly one function here, called from
the transport layer. The functions rename fields, parse dates and build the
nested Audience; they do no filtering and no defaulting beyond:

- missing registrations / feedback      -> []
- missing registration_count            -> 0
- missing is_registered                 -> False   (wire: true, 1 or "1")
- missing user institution              -> the ``institution`` argument
- missing description / location / creator_name -> ""
- department / class audience without a value -> unresolved (never visible)

Dates are trusted: a malformed one raises ValueError.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from eventdesk.model import (
    Audience,
    AudienceType,
    Event,
    EventDraft,
    Feedback,
    Institution,
    Registration,
    Role,
    User,
)


def parse_instant(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into a timezone-aware datetime.

    Accepts a trailing 'Z' and the 'YYYY-MM-DD HH:MM:SS' form databases emit.
    Naive values are read as local time, the same way a browser would.
    """
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt


def _opt_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x)
    return s if s else None


def _truthy_flag(x: Any) -> bool:
    # MySQL-backed endpoints send "1"/"0" for computed booleans
    if isinstance(x, str):
        return x.strip().lower() in ("1", "true")
    return bool(x)


def user_from_wire(record: dict[str, Any], institution: Optional[str] = None) -> User:
    class_level = record.get("class_level")
    if class_level is None:
        class_level = record.get("classLevel")
    return User(
        id=str(record["id"]),
        email=str(record["email"]),
        role=Role(record["role"]),
        institution=str(record.get("institution") or institution or ""),
        username=_opt_str(record.get("username")),
        department=_opt_str(record.get("department")),
        class_level=_opt_str(class_level),
    )


def institution_from_wire(record: dict[str, Any]) -> Institution:
    return Institution(id=str(record["id"]), name=str(record["name"]))


def audience_from_wire(type_: Any, value: Any) -> Audience:
    raw = str(type_ or AudienceType.GENERAL.value)
    try:
        kind: AudienceType | str = AudienceType(raw)
    except ValueError:
        kind = raw
    if kind == AudienceType.GENERAL:
        return Audience.general()
    text = _opt_str(value)
    if kind in (AudienceType.DEPARTMENT, AudienceType.CLASS) and not text:
        return Audience.unresolved_target(kind)
    return Audience(kind, text)


def registration_from_wire(record: dict[str, Any]) -> Registration:
    email = str(record.get("email") or "")
    student_id = record.get("student_id") or record.get("id")
    return Registration(
        student_id=str(student_id),
        student_name=str(record.get("username") or email.split("@")[0]),
        student_email=email,
        registered_at=parse_instant(record["registered_at"]),
    )


def feedback_from_wire(record: dict[str, Any]) -> Feedback:
    return Feedback(
        rating=int(record["rating"]),
        comment=str(record.get("comment") or ""),
        submitted_at=parse_instant(record["submitted_at"]),
        student_id=_opt_str(record.get("student_id")),
        student_name=_opt_str(record.get("student_name") or record.get("username")),
    )


def event_from_wire(record: dict[str, Any]) -> Event:
    return Event(
        id=str(record["id"]),
        title=str(record["title"]),
        description=str(record.get("description") or ""),
        location=str(record.get("location") or ""),
        date=parse_instant(record["event_date"]),
        creator_id=str(record.get("creator_id") or ""),
        creator_name=str(record.get("creator_name") or ""),
        institution=str(record.get("institution") or ""),
        audience=audience_from_wire(record.get("target_audience_type"), record.get("target_audience_value")),
        registrations=[registration_from_wire(r) for r in record.get("registrations") or []],
        feedback=[feedback_from_wire(f) for f in record.get("feedback") or []],
        registration_count=int(record.get("registration_count") or 0),
        is_registered=_truthy_flag(record.get("is_registered", False)),
    )


# ---------------------------------------------------------------------------
# Outgoing
# ---------------------------------------------------------------------------


def event_to_wire(draft: EventDraft) -> dict[str, Any]:
    """
    Build the POST /events body. Audience value is omitted for general events.
    """
    aud = draft.audience
    aud_type = aud.type.value if isinstance(aud.type, AudienceType) else str(aud.type)
    payload: dict[str, Any] = {
        "title": draft.title,
        "description": draft.description,
        "eventDate": draft.date.astimezone(timezone.utc).isoformat(),
        "location": draft.location,
        "targetAudienceType": aud_type,
    }
    if aud.type != AudienceType.GENERAL and aud.value is not None:
        payload["targetAudienceValue"] = aud.value
    return payload


def user_to_wire(
    email: str,
    role: Role,
    department: Optional[str] = None,
    class_level: Optional[str] = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"email": email, "role": role.value}
    if department:
        payload["department"] = department
    if class_level:
        payload["classLevel"] = class_level
    return payload
