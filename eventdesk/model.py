"""
Central data model definitions used across the project.

This module defines the canonical client-side shapes of users and events so that:
- the transport layer, the stores and the views share the same field names
- wire records (snake_case, string dates) never leak past the mappers
- the audience invariant is checked in exactly one place
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from eventdesk.errors import ValidationError


class Role(str, Enum):
    """Closed set of roles a user can hold."""

    ADMIN = "admin"
    LECTURER = "lecturer"
    STUDENT = "student"


class AudienceType(str, Enum):
    GENERAL = "general"
    DEPARTMENT = "department"
    CLASS = "class"


@dataclass(frozen=True)
class Audience:
    """
    Which students can see / register for an event.

    ``value`` is present if and only if the type is not general. A tag the
    backend sends that is not an AudienceType is kept as a plain string, and a
    targeted audience the backend sent without a value is kept as unresolved;
    neither is visible to anyone (see visibility.is_visible).
    """

    type: Union[AudienceType, str]
    value: Optional[str] = None
    unresolved: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.type, AudienceType):
            try:
                object.__setattr__(self, "type", AudienceType(self.type))
            except ValueError:
                return
        if self.unresolved:
            return
        if self.type == AudienceType.GENERAL:
            if self.value is not None:
                raise ValidationError("A general audience cannot carry a value.")
        elif self.type in (AudienceType.DEPARTMENT, AudienceType.CLASS):
            if not self.value:
                raise ValidationError(f"A {self.type.value} audience needs a value.")

    @classmethod
    def unresolved_target(cls, kind: Union[AudienceType, str]) -> "Audience":
        return cls(kind, None, unresolved=True)

    @classmethod
    def general(cls) -> "Audience":
        return cls(AudienceType.GENERAL)

    @classmethod
    def department(cls, name: str) -> "Audience":
        return cls(AudienceType.DEPARTMENT, name)

    @classmethod
    def for_class(cls, name: str) -> "Audience":
        return cls(AudienceType.CLASS, name)

    @property
    def label(self) -> str:
        if self.type == AudienceType.GENERAL:
            return "Open to all"
        if self.type == AudienceType.DEPARTMENT:
            return f"Dept: {self.value or '?'}"
        if self.type == AudienceType.CLASS:
            return f"Class: {self.value or '?'}"
        return f"{self.type}: {self.value or ''}".strip()


@dataclass(frozen=True)
class User:
    """
    An identity as the client sees it.

    Frozen: the only local change allowed is a display-name mirror, which
    goes through dataclasses.replace in SessionStore.update_identity.
    """

    id: str
    email: str
    role: Role
    institution: str
    username: Optional[str] = None
    department: Optional[str] = None
    class_level: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.username or self.email

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class Institution:
    id: str
    name: str


@dataclass(frozen=True)
class Registration:
    student_id: str
    student_name: str
    student_email: str
    registered_at: datetime


@dataclass(frozen=True)
class Feedback:
    rating: int
    comment: str
    submitted_at: datetime
    student_id: Optional[str] = None
    student_name: Optional[str] = None


@dataclass
class Event:
    """
    One event as returned by the backend.

    ``registrations`` is only filled by GET /events/{id}; the list endpoint
    returns ``registration_count`` instead.
    """

    id: str
    title: str
    description: str
    location: str
    date: datetime
    creator_id: str
    creator_name: str
    institution: str
    audience: Audience
    registrations: List[Registration] = field(default_factory=list)
    feedback: List[Feedback] = field(default_factory=list)
    registration_count: int = 0
    is_registered: bool = False


@dataclass
class EventDraft:
    """
    Outgoing payload for creating an event.

    The creator and institution are taken from the bearer credential server-side.
    """

    title: str
    description: str
    date: datetime
    location: str
    audience: Audience = field(default_factory=Audience.general)

    def validate(self) -> None:
        if not self.title.strip():
            raise ValidationError("Event title is required.")
        if not self.location.strip():
            raise ValidationError("Event location is required.")
