"""Tests for the calendar coverage service."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from leavedesk.domain.models import (
    CoverageState,
    Department,
    LeaveRequest,
    RequestStatus,
    User,
    UserRole,
)
from leavedesk.services.absences import is_covered, month_days, month_grid, visible_users


def _request(user_id: str, start: date, end: date, status: RequestStatus) -> LeaveRequest:
    return LeaveRequest(user_id=user_id, start_date=start, end_date=end, status=status)


_USERS = [
    User(id="m", name="Mario", email="m@example.com", role=UserRole.MANAGER,
         department=Department.MANAGEMENT),
    User(id="l", name="Luca", email="l@example.com", department=Department.HELPDESK),
    User(id="c", name="Chiara", email="c@example.com", department=Department.HELPDESK),
    User(id="g", name="Giulia", email="g@example.com", department=Department.PREVENDITA),
]


# ---------------------------------------------------------------------------
# is_covered
# ---------------------------------------------------------------------------


def test_day_inside_approved_range():
    reqs = [_request("l", date(2024, 6, 3), date(2024, 6, 7), RequestStatus.APPROVED)]
    assert is_covered("l", date(2024, 6, 5), reqs) == CoverageState.APPROVED


def test_range_endpoints_are_inclusive():
    reqs = [_request("l", date(2024, 6, 3), date(2024, 6, 7), RequestStatus.PENDING)]
    assert is_covered("l", date(2024, 6, 3), reqs) == CoverageState.PENDING
    assert is_covered("l", date(2024, 6, 7), reqs) == CoverageState.PENDING
    assert is_covered("l", date(2024, 6, 8), reqs) == CoverageState.NONE


def test_rejected_request_leaves_day_empty():
    reqs = [_request("l", date(2024, 6, 3), date(2024, 6, 7), RequestStatus.REJECTED)]
    assert is_covered("l", date(2024, 6, 5), reqs) == CoverageState.NONE


def test_other_users_requests_ignored():
    reqs = [_request("c", date(2024, 6, 3), date(2024, 6, 7), RequestStatus.APPROVED)]
    assert is_covered("l", date(2024, 6, 5), reqs) == CoverageState.NONE


def test_first_matching_request_wins():
    reqs = [
        _request("l", date(2024, 6, 1), date(2024, 6, 10), RequestStatus.PENDING),
        _request("l", date(2024, 6, 5), date(2024, 6, 5), RequestStatus.APPROVED),
    ]
    assert is_covered("l", date(2024, 6, 5), reqs) == CoverageState.PENDING


def test_datetime_day_is_truncated():
    reqs = [_request("l", date(2024, 6, 3), date(2024, 6, 3), RequestStatus.APPROVED)]
    assert is_covered("l", datetime(2024, 6, 3, 23, 30), reqs) == CoverageState.APPROVED


# ---------------------------------------------------------------------------
# month_grid
# ---------------------------------------------------------------------------


def test_month_days_handles_leap_february():
    days = month_days(2024, 2)
    assert len(days) == 29
    assert days[0] == date(2024, 2, 1)
    assert days[-1] == date(2024, 2, 29)


def test_manager_sees_everyone():
    assert [u.id for u in visible_users(_USERS[0], _USERS)] == ["m", "l", "c", "g"]


def test_employee_sees_own_department():
    assert [u.id for u in visible_users(_USERS[1], _USERS)] == ["l", "c"]


def test_grid_paints_each_user_row():
    reqs = [
        _request("l", date(2024, 6, 29), date(2024, 7, 2), RequestStatus.APPROVED),
        _request("c", date(2024, 6, 1), date(2024, 6, 1), RequestStatus.PENDING),
    ]

    grid = month_grid(2024, 6, _USERS[1], _USERS, reqs)

    assert grid.year == 2024 and grid.month == 6
    rows = {row.user_id: row for row in grid.rows}
    assert set(rows) == {"l", "c"}
    assert len(rows["l"].days) == 30
    assert rows["l"].days[28:] == [CoverageState.APPROVED, CoverageState.APPROVED]
    assert rows["l"].days[27] == CoverageState.NONE
    assert rows["c"].days[0] == CoverageState.PENDING
    assert rows["c"].days[1] == CoverageState.NONE


def test_grid_rejects_invalid_month():
    with pytest.raises(ValueError):
        month_grid(2024, 13, None, _USERS, [])
