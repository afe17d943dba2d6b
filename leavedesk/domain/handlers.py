"""Handlers that react to leave lifecycle events."""

from __future__ import annotations

import logging

from leavedesk.domain.bus import EventBus
from leavedesk.domain.errors import UnknownSubject
from leavedesk.domain.events import LeaveRequested, LeaveStatusChanged, UserRegistered
from leavedesk.repos.memory import Store
from leavedesk.services.conflicts import ConflictPolicy, colleagues_away
from leavedesk.services.notifications import EmailSender

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the store."""

    def __init__(
        self,
        bus: EventBus,
        store: Store,
        mailer: EmailSender,
        manager_email: str,
        policy: ConflictPolicy,
    ) -> None:
        self.bus = bus
        self.store = store
        self.mailer = mailer
        self.manager_email = manager_email
        self.policy = policy
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(LeaveRequested, self.on_leave_requested)
        self.bus.subscribe(LeaveStatusChanged, self.on_status_changed)
        self.bus.subscribe(UserRegistered, self.on_user_registered)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_leave_requested(self, event: LeaveRequested) -> None:
        stored = self.store.requests.get(event.request_id)
        if stored is None:
            return
        user = self.store.users.get(stored.user_id)
        if user is None:
            logger.warning("Request %s has no known owner", stored.id)
            return

        lines = [
            f"{user.name} ({user.department}) requested leave "
            f"from {stored.start_date.isoformat()} to {stored.end_date.isoformat()}.",
            f"Reason: {stored.reason or '-'}",
        ]

        # Advisory excludes the request itself
        others = [r for r in self.store.requests.list_all() if r.id != stored.id]
        try:
            advisory = colleagues_away(
                user.id,
                stored.start_date,
                stored.end_date,
                others,
                self.store.users.list_all(),
                self.policy,
            )
        except UnknownSubject:
            advisory = None
        if advisory is not None and advisory.message:
            lines.append(f"Warning: {advisory.message}")

        self.mailer.send(
            self.manager_email,
            f"New leave request: {user.name}",
            "\n".join(lines),
        )

    def on_status_changed(self, event: LeaveStatusChanged) -> None:
        stored = self.store.requests.get(event.request_id)
        if stored is None:
            return
        logger.info("Request %s is now %s", stored.id, event.status)
        user = self.store.users.get(stored.user_id)
        if user is None:
            return

        self.mailer.send(
            user.email,
            f"Leave update: {event.status}",
            f"Hi {user.name}, your leave request starting "
            f"{stored.start_date.isoformat()} has been {event.status}.",
        )

    def on_user_registered(self, event: UserRegistered) -> None:
        user = self.store.users.get(event.user_id)
        if user is None:
            return
        logger.info("Registered %s %s in %s", user.role, user.name, user.department)
