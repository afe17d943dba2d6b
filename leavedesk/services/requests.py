"""Service for leave-request status changes and list ordering."""

from __future__ import annotations

from collections.abc import Iterable

from leavedesk.domain.errors import InvalidTransition
from leavedesk.domain.models import LeaveRequest, RequestStatus, User, UserRole


def apply_status(request: LeaveRequest, status: RequestStatus) -> LeaveRequest:
    """Move a pending request to approved or rejected.

    Both outcomes are terminal; anything else raises ``InvalidTransition``.
    """
    if status == RequestStatus.PENDING:
        raise InvalidTransition("Status can only change to approved or rejected")
    if request.status != RequestStatus.PENDING:
        raise InvalidTransition(f"Request is already {request.status}")
    request.status = status
    return request


def requests_for_viewer(
    viewer: User | None, requests: Iterable[LeaveRequest]
) -> list[LeaveRequest]:
    """Order requests the way each role reviews them.

    Managers get every request, pending ones first, newest first within each
    group. Employees get only their own, newest first.
    """
    requests = list(requests)
    if viewer is None:
        return sorted(requests, key=lambda r: r.created_at, reverse=True)
    if viewer.role == UserRole.MANAGER:
        newest_first = sorted(requests, key=lambda r: r.created_at, reverse=True)
        return sorted(newest_first, key=lambda r: r.status != RequestStatus.PENDING)
    own = [r for r in requests if r.user_id == viewer.id]
    return sorted(own, key=lambda r: r.created_at, reverse=True)


def status_counts(requests: Iterable[LeaveRequest]) -> dict[str, int]:
    counts = {status.value: 0 for status in RequestStatus}
    for req in requests:
        counts[req.status.value] += 1
    return counts
