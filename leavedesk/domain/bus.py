"""Synchronous in-process bus for leave lifecycle events."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventBus:
    """Routes each published event to the handlers subscribed to its type.

    Handlers run synchronously in registration order; an exception raised
    by a handler propagates to the publisher and stops the remaining ones.
    """

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[[Any], None]]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        self._handlers[event_type].append(handler)

    def publish(self, event: Any) -> int:
        """Deliver *event*; return how many handlers received it."""
        handlers = list(self._handlers.get(type(event), ()))
        logger.debug("Publishing %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            handler(event)
        return len(handlers)
