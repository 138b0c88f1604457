"""
Notification service for purchase workflow events.

Successful mutations (payment recorded, documents uploaded, stage advanced,
...) produce a short human-readable Notification. Delivery is pluggable: the
default notifier writes to the log, and InMemoryNotifier keeps notifications
for inspection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Mapping, Protocol

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    PURCHASE_CREATED = "purchase_created"
    PAYMENT_RECORDED = "payment_recorded"
    DOCUMENTS_UPLOADED = "documents_uploaded"
    DOCUMENT_DELETED = "document_deleted"
    SHIPPING_UPDATED = "shipping_updated"
    STATUS_CHANGED = "status_changed"
    STAGE_ADVANCED = "stage_advanced"
    WORKFLOW_UPDATED = "workflow_updated"
    WORKFLOW_FINALIZED = "workflow_finalized"


@dataclass(frozen=True, slots=True)
class Notification:
    kind: NotificationKind
    purchase_id: str
    message: str
    created_at: datetime
    details: Mapping[str, str] = field(default_factory=dict)


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Default notifier: one INFO record per notification."""

    def notify(self, notification: Notification) -> None:
        logger.info(
            notification.message,
            extra={
                "notification_kind": notification.kind.value,
                "purchase_id": notification.purchase_id,
                **dict(notification.details),
            },
        )


class InMemoryNotifier:
    """Collects notifications in order (used by tests and previews)."""

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def messages(self) -> List[str]:
        return [n.message for n in self.notifications]

    def of_kind(self, kind: NotificationKind) -> List[Notification]:
        return [n for n in self.notifications if n.kind is kind]


__all__ = [
    "NotificationKind",
    "Notification",
    "Notifier",
    "LoggingNotifier",
    "InMemoryNotifier",
]
