"""Service for painting the team absence calendar."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date, datetime

from dateutil.rrule import DAILY, rrule

from leavedesk.domain.models import (
    ACTIVE_STATUSES,
    CalendarRow,
    CoverageState,
    LeaveRequest,
    MonthGrid,
    RequestStatus,
    User,
    UserRole,
    to_day,
)


def is_covered(
    user_id: str, day: date | datetime | str, requests: Iterable[LeaveRequest]
) -> CoverageState:
    """Return how *user_id* is away on *day*.

    Only pending and approved requests count. When more than one covers the
    day, the first one in iteration order decides the state.
    """
    day = to_day(day)
    for req in requests:
        if req.user_id != user_id or req.status not in ACTIVE_STATUSES:
            continue
        if to_day(req.start_date) <= day <= to_day(req.end_date):
            if req.status == RequestStatus.APPROVED:
                return CoverageState.APPROVED
            return CoverageState.PENDING
    return CoverageState.NONE


def visible_users(viewer: User | None, users: Iterable[User]) -> list[User]:
    """Managers see everyone; employees only see their own department."""
    users = list(users)
    if viewer is None or viewer.role == UserRole.MANAGER:
        return users
    return [u for u in users if u.department == viewer.department]


def month_days(year: int, month: int) -> list[date]:
    last = calendar.monthrange(year, month)[1]
    rule = rrule(
        DAILY,
        dtstart=datetime(year, month, 1),
        until=datetime(year, month, last),
    )
    return [dt.date() for dt in rule]


def month_grid(
    year: int,
    month: int,
    viewer: User | None,
    users: Iterable[User],
    requests: Iterable[LeaveRequest],
) -> MonthGrid:
    """Build one row of per-day coverage for every user the viewer can see."""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be between 1 and 12, got {month}")

    days = month_days(year, month)
    requests = list(requests)
    rows = []
    for user in visible_users(viewer, users):
        own = [r for r in requests if r.user_id == user.id]
        rows.append(
            CalendarRow(
                user_id=user.id,
                user_name=user.name,
                department=str(user.department),
                days=[is_covered(user.id, d, own) for d in days],
            )
        )
    return MonthGrid(year=year, month=month, rows=rows)
