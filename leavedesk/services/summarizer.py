"""Service for asking an LLM to review the team absence schedule."""

from __future__ import annotations

import json
from collections.abc import Iterable

from leavedesk.config import Settings
from leavedesk.domain.models import ACTIVE_STATUSES, LeaveRequest, User

_SYSTEM_PROMPT = """\
You are an HR assistant. You receive a JSON list of employee absences with \
their department, start date, end date and status.

Point out:
- periods where too many people from the same department are away at once;
- critical periods worth the manager's attention.

Be concise, professional and helpful. Answer in plain text, no markdown tables.
"""


def build_schedule(
    requests: Iterable[LeaveRequest], users: Iterable[User]
) -> list[dict]:
    """Reduce active requests to the fields the model needs."""
    by_id = {u.id: u for u in users}
    schedule = []
    for req in requests:
        if req.status not in ACTIVE_STATUSES:
            continue
        user = by_id.get(req.user_id)
        schedule.append(
            {
                "employee": user.name if user else None,
                "department": str(user.department) if user else None,
                "start": req.start_date.isoformat(),
                "end": req.end_date.isoformat(),
                "status": str(req.status),
            }
        )
    return schedule


def _complete_with_llm(prompt: str, settings: Settings) -> str:
    """Call OpenAI with the schedule prompt and return the text answer."""
    from openai import OpenAI

    client = OpenAI(api_key=settings.openai_api_key)
    response = client.chat.completions.create(
        model=settings.openai_model,
        messages=[
            {"role": "system", "content": _SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ],
        temperature=0,
    )
    return response.choices[0].message.content or ""


def analyze_schedule(
    requests: Iterable[LeaveRequest], users: Iterable[User], settings: Settings
) -> str:
    """Return the model's review of the active schedule.

    An empty schedule short-circuits without calling the model.
    """
    schedule = build_schedule(requests, users)
    if not schedule:
        return "No active leave requests to analyze."
    prompt = "Data:\n" + json.dumps(schedule, indent=2)
    return _complete_with_llm(prompt, settings)
