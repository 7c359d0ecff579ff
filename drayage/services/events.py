"""
Domain events and event buses.

Events are published by the lifecycle coordinator after its unit of work
commits. Publication is best-effort: a failing bus is logged by the
coordinator and never undoes the committed change.
"""
import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Awaitable, Callable, Union
from uuid import UUID

logger = logging.getLogger(__name__)

SHIPMENT_CREATED = "shipment.created"
ORDER_CREATED = "order.created"
ORDER_STATUS_CHANGED = "order.status_changed"
ORDER_CANCELLED = "order.cancelled"
APPOINTMENT_REQUESTED = "appointment.requested"
APPOINTMENT_CONFIRMED = "appointment.confirmed"
APPOINTMENT_CANCELLED = "appointment.cancelled"
APPOINTMENT_RESCHEDULED = "appointment.rescheduled"
APPOINTMENT_ARRIVAL = "appointment.arrival"
APPOINTMENT_COMPLETED = "appointment.completed"


def to_payload(**values: Any) -> dict[str, Any]:
    """Build a JSON-ready payload: ids and decimals as strings, datetimes as ISO-8601."""
    return {key: _plain(value) for key, value in values.items()}


def _plain(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class DomainEvent:
    name: str
    payload: dict[str, Any]
    source: str = "order-service"
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


Handler = Callable[[DomainEvent], Union[None, Awaitable[None]]]


class EventBus(ABC):

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None: ...


class InMemoryEventBus(EventBus):
    """
    Records every published event and fans out to subscribers.

    Subscribe to "*" to receive every event.
    """

    def __init__(self) -> None:
        self.events: list[DomainEvent] = []
        self._subscribers: dict[str, list[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    async def publish(self, event: DomainEvent) -> None:
        self.events.append(event)
        for handler in self._subscribers.get(event.name, []) + self._subscribers.get("*", []):
            result = handler(event)
            if inspect.isawaitable(result):
                await result

    def named(self, name: str) -> list[DomainEvent]:
        return [e for e in self.events if e.name == name]

    def clear(self) -> None:
        self.events.clear()


class LoggingEventBus(EventBus):
    """Writes each event to the log; the default when no transport is wired."""

    async def publish(self, event: DomainEvent) -> None:
        logger.info(f"event {event.name} from {event.source}: {event.payload}")
