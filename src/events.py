# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""In-process event bus for application events.

Services announce what they changed (``user.created``, ``role.updated``,
...) and the loading tracker announces operations in flight. Delivery is
synchronous, on the publisher's thread, in subscription order.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class AppEvent(str, Enum):
    """Application events that listeners can subscribe to."""

    # User events
    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"
    USER_LOGIN = "user.login"
    USER_LOGOUT = "user.logout"
    PASSWORD_RESET = "user.password_reset"
    VERIFICATION_CODE_CREATED = "user.verification_code_created"

    # Role events
    ROLE_CREATED = "role.created"
    ROLE_UPDATED = "role.updated"
    ROLE_DELETED = "role.deleted"

    # Company events
    COMPANY_CREATED = "company.created"
    COMPANY_UPDATED = "company.updated"
    COMPANY_DELETED = "company.deleted"

    # Request template events
    TEMPLATE_CREATED = "template.created"
    TEMPLATE_UPDATED = "template.updated"
    TEMPLATE_DELETED = "template.deleted"

    # Long-running operation indicators
    LOADING_STARTED = "loading.started"
    LOADING_FINISHED = "loading.finished"


@dataclass(frozen=True)
class EventPayload:
    """What a subscriber receives."""

    event_type: AppEvent
    data: dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.utcnow)


EventHandler = Callable[[EventPayload], None]


class EventBus:
    """Fans each published event out to the handlers subscribed to it.

    A handler that raises is logged and skipped; the remaining handlers
    still run and the publisher never sees the error.
    """

    def __init__(self) -> None:
        self._subscriptions: dict[
            AppEvent, list[tuple[str | None, EventHandler]]
        ] = defaultdict(list)

    def subscribe(
        self,
        event_type: AppEvent,
        handler: EventHandler,
        subscriber: str | None = None,
    ) -> None:
        """Call ``handler`` for every ``event_type`` published from now on.

        ``subscriber`` names the listener in logs and must be passed again
        to :meth:`unsubscribe`.
        """
        self._subscriptions[event_type].append((subscriber, handler))
        logger.debug(f"{subscriber or 'anonymous'} subscribed to {event_type.value}")

    def unsubscribe(
        self,
        event_type: AppEvent,
        handler: EventHandler,
        subscriber: str | None = None,
    ) -> None:
        try:
            self._subscriptions[event_type].remove((subscriber, handler))
        except ValueError:
            logger.debug(f"{subscriber or 'anonymous'} was not subscribed to {event_type.value}")

    def publish(self, event_type: AppEvent, data: dict[str, Any]) -> None:
        payload = EventPayload(event_type=event_type, data=data)
        # Copy so handlers may unsubscribe while being called
        for subscriber, handler in list(self._subscriptions.get(event_type, ())):
            try:
                handler(payload)
            except Exception as e:
                logger.error(
                    f"Handler of {subscriber or 'anonymous'} failed on "
                    f"{event_type.value}: {e}"
                )


# Shared by services and API handlers
event_bus = EventBus()
