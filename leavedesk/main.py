"""FastAPI entry point for the leave-request service."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import Depends, FastAPI, HTTPException, Query, Response
from openai import OpenAIError

from leavedesk.config import configure_logging, get_settings
from leavedesk.domain.bus import EventBus
from leavedesk.domain.errors import AuthenticationError, InvalidTransition, UnknownSubject
from leavedesk.domain.events import LeaveRequested, LeaveStatusChanged, UserRegistered
from leavedesk.domain.handlers import HandlerRegistry
from leavedesk.domain.models import (
    Advisory,
    Conflict,
    ConflictCheckRequest,
    LeaveRequest,
    LeaveRequestCreate,
    LeaveRequestView,
    LoginRequest,
    MonthGrid,
    NotifyRequest,
    StatusUpdate,
    SubmissionResponse,
    User,
    UserCreate,
    UserRole,
)
from leavedesk.repos.memory import Store, create_store
from leavedesk.services.absences import month_grid
from leavedesk.services.auth import authenticate, hash_password
from leavedesk.services.conflicts import (
    colleagues_away,
    conflict_badge,
    find_conflicts,
)
from leavedesk.services.export import report_filename, requests_to_csv
from leavedesk.services.notifications import EmailSender
from leavedesk.services.requests import apply_status, requests_for_viewer, status_counts
from leavedesk.services.summarizer import analyze_schedule

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# ── Singletons (created at import time for simplicity) ────────────────
event_bus = EventBus()
store = create_store() if settings.seed_demo_data else Store()
mailer = EmailSender(settings)
policy = settings.conflict_policy()

handler_registry = HandlerRegistry(
    bus=event_bus,
    store=store,
    mailer=mailer,
    manager_email=settings.manager_email,
    policy=policy,
)


def _ready() -> None:
    store.ensure_initialized()


app = FastAPI(title="Leave Desk", dependencies=[Depends(_ready)])


def _viewer(viewer_id: str | None) -> User | None:
    if viewer_id is None:
        return None
    viewer = store.users.get(viewer_id)
    if viewer is None:
        raise HTTPException(status_code=404, detail="User not found")
    return viewer


# ── Auth & users ──────────────────────────────────────────────────────


@app.post("/login", response_model=User)
def login(payload: LoginRequest) -> User:
    """Sign in by email and role; managers also need a password."""
    try:
        return authenticate(
            store.users.get_by_email(payload.email), payload.password, payload.role
        )
    except AuthenticationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@app.get("/users", response_model=list[User])
def list_users() -> list[User]:
    return sorted(store.users.list_all(), key=lambda u: u.name)


@app.post("/users", response_model=User, status_code=201)
def create_user(payload: UserCreate) -> User:
    if store.users.get(payload.id) is not None:
        raise HTTPException(status_code=409, detail="User id already exists")
    if store.users.get_by_email(payload.email) is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    user = User(
        id=payload.id,
        name=payload.name,
        email=payload.email,
        role=payload.role,
        department=payload.department,
        avatar=payload.avatar or f"https://picsum.photos/seed/{payload.id}/200",
        password_hash=(
            hash_password(payload.password)
            if payload.role == UserRole.MANAGER
            else None
        ),
    )
    store.users.add(user)
    event_bus.publish(UserRegistered(user_id=user.id))
    return user


# ── Leave requests ────────────────────────────────────────────────────


@app.get("/requests", response_model=list[LeaveRequestView])
def list_requests(viewer_id: str | None = None) -> list[LeaveRequestView]:
    """Return requests visible to the viewer, each with its conflict badge."""
    viewer = _viewer(viewer_id)
    all_requests = store.requests.list_all()
    users = store.users.list_all()
    return [
        LeaveRequestView(
            request=req,
            conflicts=conflict_badge(req, all_requests, users, policy),
        )
        for req in requests_for_viewer(viewer, all_requests)
    ]


@app.post("/requests", response_model=SubmissionResponse, status_code=201)
def submit_request(payload: LeaveRequestCreate) -> SubmissionResponse:
    """Store a new pending request and return the colleagues-away advisory."""
    if store.users.get(payload.user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    advisory = colleagues_away(
        payload.user_id,
        payload.start_date,
        payload.end_date,
        store.requests.list_all(),
        store.users.list_all(),
        policy,
    )
    request = LeaveRequest(**payload.model_dump())
    store.requests.add(request)

    event_bus.publish(LeaveRequested(request_id=request.id))

    return SubmissionResponse(request=request, advisory=advisory)


@app.post("/requests/check", response_model=Advisory)
def check_request(payload: ConflictCheckRequest) -> Advisory:
    """Preview how many colleagues are away before submitting."""
    try:
        return colleagues_away(
            payload.user_id,
            payload.start_date,
            payload.end_date,
            store.requests.list_all(),
            store.users.list_all(),
            policy,
        )
    except UnknownSubject as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.get("/requests/{request_id}/conflicts", response_model=list[Conflict])
def request_conflicts(request_id: str) -> list[Conflict]:
    request = store.requests.get(request_id)
    if request is None:
        raise HTTPException(status_code=404, detail="Request not found")
    try:
        return find_conflicts(
            request, store.requests.list_all(), store.users.list_all(), policy
        )
    except UnknownSubject as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.put("/requests/{request_id}", response_model=LeaveRequest)
def update_request_status(request_id: str, body: StatusUpdate) -> LeaveRequest:
    """Approve or reject a pending request."""
    request = store.requests.get(request_id)
    if request is None:
        raise HTTPException(status_code=404, detail="Request not found")
    try:
        apply_status(request, body.status)
    except InvalidTransition as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    event_bus.publish(LeaveStatusChanged(request_id=request.id, status=request.status))
    return request


# ── Views ─────────────────────────────────────────────────────────────


@app.get("/calendar", response_model=MonthGrid)
def calendar_view(
    viewer_id: str | None = None,
    year: int | None = Query(default=None, ge=1, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
) -> MonthGrid:
    """Per-day absence grid for the users the viewer is allowed to see."""
    today = date.today()
    return month_grid(
        year or today.year,
        month or today.month,
        _viewer(viewer_id),
        sorted(store.users.list_all(), key=lambda u: u.name),
        store.requests.list_all(),
    )


@app.get("/dashboard")
def dashboard(viewer_id: str | None = None) -> dict:
    """Pending/approved counts over the requests the viewer can see."""
    viewer = _viewer(viewer_id)
    visible = requests_for_viewer(viewer, store.requests.list_all())
    counts = status_counts(visible)
    return {**counts, "total": len(visible)}


@app.get("/export.csv")
def export_csv() -> Response:
    content = requests_to_csv(store.requests.list_all(), store.users.list_all())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{report_filename()}"'},
    )


@app.post("/analyze")
def analyze() -> dict:
    """Ask the LLM for a review of the current schedule."""
    try:
        text = analyze_schedule(
            store.requests.list_all(), store.users.list_all(), settings
        )
    except OpenAIError as exc:
        logger.exception("Schedule analysis failed")
        raise HTTPException(status_code=502, detail="Schedule analysis failed") from exc
    return {"analysis": text}


@app.post("/notify")
def notify(payload: NotifyRequest) -> dict:
    delivered = mailer.send(payload.to, payload.subject, payload.body)
    return {"success": delivered}


@app.post("/admin/reset")
def reset_store() -> dict:
    """Drop all data and re-seed the demo data when seeding is enabled."""
    store.reset(seed=settings.seed_demo_data)
    store.ensure_initialized()
    logger.warning("Store reset")
    return {"status": "reset"}
