"""Smoke tests for the LLM schedule summarizer."""

from __future__ import annotations

import json
from datetime import date
from unittest.mock import patch

from leavedesk.config import Settings
from leavedesk.domain.models import Department, LeaveRequest, RequestStatus, User
from leavedesk.services.summarizer import analyze_schedule, build_schedule

_USERS = [User(id="u", name="Luca", email="luca@example.com", department=Department.HELPDESK)]


def _patch_llm(answer: str):
    """Patch _complete_with_llm to return *answer* without calling OpenAI."""
    return patch("leavedesk.services.summarizer._complete_with_llm", return_value=answer)


def test_build_schedule_skips_rejected():
    requests = [
        LeaveRequest(user_id="u", start_date=date(2024, 6, 1), end_date=date(2024, 6, 2)),
        LeaveRequest(
            user_id="u",
            start_date=date(2024, 7, 1),
            end_date=date(2024, 7, 2),
            status=RequestStatus.REJECTED,
        ),
    ]

    schedule = build_schedule(requests, _USERS)

    assert schedule == [
        {
            "employee": "Luca",
            "department": "Helpdesk",
            "start": "2024-06-01",
            "end": "2024-06-02",
            "status": "pending",
        }
    ]


def test_analyze_sends_schedule_to_model():
    requests = [
        LeaveRequest(user_id="u", start_date=date(2024, 6, 1), end_date=date(2024, 6, 2))
    ]

    with _patch_llm("Helpdesk is thin in early June.") as llm:
        result = analyze_schedule(requests, _USERS, Settings())

    assert result == "Helpdesk is thin in early June."
    prompt = llm.call_args.args[0]
    assert json.loads(prompt.removeprefix("Data:\n"))[0]["employee"] == "Luca"


def test_analyze_empty_schedule_skips_model():
    with _patch_llm("unused") as llm:
        result = analyze_schedule([], _USERS, Settings())

    assert result == "No active leave requests to analyze."
    llm.assert_not_called()
