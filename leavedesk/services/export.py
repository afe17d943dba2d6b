"""Service for exporting leave requests as a CSV report."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import date

from leavedesk.domain.models import LeaveRequest, User

CSV_HEADER = [
    "Request ID",
    "Employee",
    "Email",
    "Department",
    "Start date",
    "End date",
    "Status",
    "Reason",
]


def requests_to_csv(requests: Iterable[LeaveRequest], users: Iterable[User]) -> str:
    """Render one row per request; requests whose owner is unknown are skipped."""
    by_id = {u.id: u for u in users}
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for req in requests:
        user = by_id.get(req.user_id)
        if user is None:
            continue
        writer.writerow(
            [
                req.id,
                user.name,
                user.email,
                user.department,
                req.start_date.isoformat(),
                req.end_date.isoformat(),
                req.status,
                req.reason,
            ]
        )
    return buffer.getvalue()


def report_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"leave_report_{today.isoformat()}.csv"
