"""
Tests for `services/notification_service.py`.
"""

from __future__ import annotations

import logging

from services.notification_service import (
    InMemoryNotifier,
    LoggingNotifier,
    Notification,
    NotificationKind,
)

from builders import T0


def _notification(kind: NotificationKind = NotificationKind.PAYMENT_RECORDED) -> Notification:
    return Notification(
        kind=kind,
        purchase_id="p-1",
        message="Payment recorded successfully",
        created_at=T0,
        details={"amount": "1000"},
    )


def test_in_memory_notifier_keeps_order_and_filters_by_kind() -> None:
    notifier = InMemoryNotifier()
    notifier.notify(_notification())
    notifier.notify(_notification(NotificationKind.STAGE_ADVANCED))

    assert len(notifier.notifications) == 2
    assert [n.kind for n in notifier.of_kind(NotificationKind.STAGE_ADVANCED)] == [NotificationKind.STAGE_ADVANCED]


def test_logging_notifier_logs_at_info(caplog) -> None:
    with caplog.at_level(logging.INFO, logger="services.notification_service"):
        LoggingNotifier().notify(_notification())

    record = caplog.records[-1]
    assert record.levelno == logging.INFO
    assert record.getMessage() == "Payment recorded successfully"
    assert record.purchase_id == "p-1"
    assert record.notification_kind == "payment_recorded"
