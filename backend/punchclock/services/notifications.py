"""Outbound engine events. Delivery is someone else's job; publishing never fails the caller."""

# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompOffEarned:
    """Comp-off units were issued from banked overtime."""

    company_id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str
    unit_count: int
    recipients: tuple[uuid.UUID, ...] = field(default_factory=tuple)

    def message_for(self, recipient_id: uuid.UUID) -> str:
        if recipient_id == self.employee_id:
            return f"Congratulations! You earned {self.unit_count} Comp Off(s) from accumulated Overtime."
        return f"{self.employee_name} has earned {self.unit_count} Comp Off(s) via automatic OT conversion."


@dataclass(frozen=True)
class TaskEscalationDue:
    """A task's next escalation due date has been computed."""

    company_id: uuid.UUID
    task_id: uuid.UUID
    due_date: date
    is_overdue: bool


NotificationEvent = CompOffEarned | TaskEscalationDue


@runtime_checkable
class NotificationPublisher(Protocol):
    """Interface for the notification subsystem."""

    async def publish(self, event: NotificationEvent) -> None:
        """Hand an event to the transport."""
        ...


class InMemoryNotificationPublisher:
    """In-memory stub that records published events."""

    def __init__(self) -> None:
        self.events: list[NotificationEvent] = []

    async def publish(self, event: NotificationEvent) -> None:
        self.events.append(event)


_publisher: NotificationPublisher = InMemoryNotificationPublisher()


def get_notification_publisher() -> NotificationPublisher:
    """Return the active publisher."""
    return _publisher


def set_notification_publisher(publisher: NotificationPublisher) -> None:
    """Override the publisher (for testing or production wiring)."""
    global _publisher
    _publisher = publisher


async def publish_safely(event: NotificationEvent) -> bool:
    """Publish fire-and-forget; delivery errors are logged and swallowed."""
    try:
        await get_notification_publisher().publish(event)
    except Exception:
        logger.exception("Failed to publish %s", type(event).__name__)
        return False
    return True
