"""Service for detecting overlapping leave within a department."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Protocol

from leavedesk.domain.errors import UnknownSubject
from leavedesk.domain.models import (
    ACTIVE_STATUSES,
    Advisory,
    Conflict,
    Department,
    LeaveRequest,
    RequestStatus,
    User,
    to_day,
)


class RequestLike(Protocol):
    user_id: str
    start_date: date | datetime | str
    end_date: date | datetime | str
    status: RequestStatus


@dataclass(frozen=True)
class ConflictPolicy:
    """Which departments never get conflict warnings."""

    exempt_departments: frozenset[str] = field(
        default_factory=lambda: frozenset({Department.MANAGEMENT})
    )

    def is_exempt(self, department: str) -> bool:
        return department in self.exempt_departments


DEFAULT_POLICY = ConflictPolicy()


@dataclass(frozen=True)
class _Candidate:
    user_id: str
    start_date: date
    end_date: date
    status: RequestStatus = RequestStatus.PENDING
    id: str | None = None


def ranges_overlap(
    start_a: date | datetime | str,
    end_a: date | datetime | str,
    start_b: date | datetime | str,
    end_b: date | datetime | str,
) -> bool:
    """Return True if two inclusive day ranges share at least one day.

    Overlap rule: start_a <= end_b AND end_a >= start_b.
    Touching endpoints (end_a == start_b) ARE considered conflicts.
    """
    return to_day(start_a) <= to_day(end_b) and to_day(end_a) >= to_day(start_b)


def find_conflicts(
    target: RequestLike,
    all_requests: Iterable[LeaveRequest],
    all_users: Iterable[User],
    policy: ConflictPolicy = DEFAULT_POLICY,
) -> list[Conflict]:
    """Return active requests of department colleagues that overlap *target*.

    Results follow the iteration order of *all_requests*. Raises
    ``UnknownSubject`` when the target's owner is not in *all_users*.
    """
    users = {u.id: u for u in all_users}
    owner = users.get(target.user_id)
    if owner is None:
        raise UnknownSubject(target.user_id)

    if target.status == RequestStatus.REJECTED or policy.is_exempt(owner.department):
        return []

    target_id = getattr(target, "id", None)
    start, end = to_day(target.start_date), to_day(target.end_date)

    conflicts: list[Conflict] = []
    for other in all_requests:
        if target_id is not None and other.id == target_id:
            continue
        if other.user_id == owner.id or other.status not in ACTIVE_STATUSES:
            continue
        colleague = users.get(other.user_id)
        if colleague is None or colleague.department != owner.department:
            continue
        if ranges_overlap(start, end, other.start_date, other.end_date):
            conflicts.append(
                Conflict(
                    request_id=other.id,
                    user_id=colleague.id,
                    user_name=colleague.name,
                    status=other.status,
                )
            )
    return conflicts


def colleagues_away(
    user_id: str,
    start_date: date | datetime | str,
    end_date: date | datetime | str,
    all_requests: Iterable[LeaveRequest],
    all_users: Iterable[User],
    policy: ConflictPolicy = DEFAULT_POLICY,
) -> Advisory:
    """Advisory for a request that has not been submitted yet."""
    users = list(all_users)
    candidate = _Candidate(
        user_id=user_id, start_date=to_day(start_date), end_date=to_day(end_date)
    )
    conflicts = find_conflicts(candidate, all_requests, users, policy)
    department = next(u.department for u in users if u.id == user_id)

    message = None
    if conflicts:
        noun = "colleague" if len(conflicts) == 1 else "colleagues"
        message = (
            f"{len(conflicts)} {noun} from department {department} "
            "already away in this period."
        )
    return Advisory(
        count=len(conflicts),
        department=str(department),
        message=message,
        conflicts=conflicts,
    )


def conflict_badge(
    request: LeaveRequest,
    all_requests: Iterable[LeaveRequest],
    all_users: Iterable[User],
    policy: ConflictPolicy = DEFAULT_POLICY,
) -> list[Conflict]:
    """Conflicts to show next to *request* in a list; empty when suppressed."""
    if request.status == RequestStatus.REJECTED:
        return []
    try:
        return find_conflicts(request, all_requests, all_users, policy)
    except UnknownSubject:
        return []
