"""Domain models for the leave-request system."""

from __future__ import annotations

import re
import uuid
from datetime import date, datetime, time, timezone
from enum import StrEnum

from dateutil.parser import isoparse
from pydantic import BaseModel, Field, field_validator, model_validator

from leavedesk.domain.errors import InvalidDateRange


class UserRole(StrEnum):
    EMPLOYEE = "employee"
    MANAGER = "manager"


class Department(StrEnum):
    PREVENDITA = "Prevendita"
    HELPDESK = "Helpdesk"
    COMMERCIALI = "Commerciali"
    MANAGEMENT = "Management"


class RequestStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveKind(StrEnum):
    LEAVE = "leave"
    PERMIT = "permit"


class CoverageState(StrEnum):
    APPROVED = "approved"
    PENDING = "pending"
    NONE = "none"


ACTIVE_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.APPROVED})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# Full calendar date, optionally followed by an ISO time part.
_FULL_DAY = re.compile(r"\d{4}-\d{2}-\d{2}(?:T|$)")


def to_day(value: date | datetime | str) -> date:
    """Normalize a date-like value to a calendar day.

    Datetimes are truncated to their date. Strings must be ``YYYY-MM-DD`` or
    an ISO 8601 datetime; reduced forms such as ``2024-06`` are refused.
    Raises ``InvalidDateRange`` for anything that cannot be read as a day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not _FULL_DAY.match(text):
            raise InvalidDateRange(f"Unparsable date: {value!r}")
        try:
            return isoparse(text).date()
        except (ValueError, OverflowError) as exc:
            raise InvalidDateRange(f"Unparsable date: {value!r}") from exc
    raise InvalidDateRange(f"Unsupported date value: {value!r}")


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class User(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    email: str
    role: UserRole = UserRole.EMPLOYEE
    department: Department | str
    avatar: str | None = None
    password_hash: str | None = Field(default=None, exclude=True)


class LeaveRequest(BaseModel):
    id: str = Field(default_factory=_new_id)
    user_id: str
    start_date: date
    end_date: date
    kind: LeaveKind = LeaveKind.LEAVE
    start_time: time | None = None
    end_time: time | None = None
    status: RequestStatus = RequestStatus.PENDING
    reason: str = ""
    created_at: datetime = Field(default_factory=_utcnow)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _as_day(cls, value):
        return to_day(value)


class Conflict(BaseModel):
    """Another active request that overlaps the subject request."""

    request_id: str
    user_id: str
    user_name: str
    status: RequestStatus


class Advisory(BaseModel):
    """Non-blocking warning shown before a request is submitted."""

    count: int = 0
    department: str | None = None
    message: str | None = None
    conflicts: list[Conflict] = Field(default_factory=list)


class CalendarRow(BaseModel):
    user_id: str
    user_name: str
    department: str
    days: list[CoverageState]


class MonthGrid(BaseModel):
    year: int
    month: int
    rows: list[CalendarRow] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    email: str
    password: str | None = None
    role: UserRole


class UserCreate(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    email: str
    role: UserRole = UserRole.EMPLOYEE
    department: Department | str
    avatar: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def _manager_needs_password(self) -> UserCreate:
        if self.role == UserRole.MANAGER and not self.password:
            raise ValueError("Managers must have a password")
        return self


class LeaveRequestCreate(BaseModel):
    user_id: str
    start_date: date
    end_date: date
    kind: LeaveKind = LeaveKind.LEAVE
    start_time: time | None = None
    end_time: time | None = None
    reason: str = ""

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _as_day(cls, value):
        return to_day(value)

    @model_validator(mode="after")
    def _valid_range(self) -> LeaveRequestCreate:
        if self.end_date < self.start_date:
            raise InvalidDateRange("end_date must not be before start_date")
        if self.kind == LeaveKind.PERMIT:
            if self.start_date != self.end_date:
                raise InvalidDateRange("A permit must start and end on the same day")
            if self.start_time is None or self.end_time is None:
                raise ValueError("A permit needs start_time and end_time")
            if self.end_time <= self.start_time:
                raise ValueError("end_time must be after start_time")
        return self


class ConflictCheckRequest(BaseModel):
    user_id: str
    start_date: date
    end_date: date

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _as_day(cls, value):
        return to_day(value)


class StatusUpdate(BaseModel):
    status: RequestStatus


class LeaveRequestView(BaseModel):
    request: LeaveRequest
    conflicts: list[Conflict] = Field(default_factory=list)


class SubmissionResponse(BaseModel):
    request: LeaveRequest
    advisory: Advisory


class NotifyRequest(BaseModel):
    to: str
    subject: str
    body: str
