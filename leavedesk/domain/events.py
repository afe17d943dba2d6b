"""Domain events emitted during the leave-request lifecycle."""

from __future__ import annotations

from pydantic import BaseModel

from leavedesk.domain.models import RequestStatus


class LeaveRequested(BaseModel):
    """Fired when a new LeaveRequest is stored."""

    request_id: str


class LeaveStatusChanged(BaseModel):
    """Fired when a manager approves or rejects a request."""

    request_id: str
    status: RequestStatus


class UserRegistered(BaseModel):
    """Fired when a new User is created."""

    user_id: str
