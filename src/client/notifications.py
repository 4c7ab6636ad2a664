# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Operator notifications raised by the admin client."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A short message shown to the operator, e.g. as a toast."""

    level: NotificationLevel
    title: str
    message: str


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class LoggingNotifier:
    """Notifier that writes notifications to the log."""

    def notify(self, notification: Notification) -> None:
        level = (
            logging.ERROR
            if notification.level is NotificationLevel.ERROR
            else logging.INFO
        )
        logger.log(level, f"{notification.title}: {notification.message}")


class RecordingNotifier:
    """Notifier that keeps every notification, newest last."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def errors(self) -> list[Notification]:
        return [n for n in self.notifications if n.level is NotificationLevel.ERROR]

    @property
    def successes(self) -> list[Notification]:
        return [
            n for n in self.notifications if n.level is NotificationLevel.SUCCESS
        ]
