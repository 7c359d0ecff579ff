"""
Order status state machine.

The transition table is the single authority on which order status
changes are legal. Nothing here persists or publishes anything; the
lifecycle coordinator does both after a transition has been applied.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from drayage.core.exceptions import InvalidStateError
from drayage.models.enums import OrderStatus
from drayage.models.order import Order

TRANSITIONS: Mapping[OrderStatus, frozenset[OrderStatus]] = MappingProxyType({
    OrderStatus.PENDING: frozenset({OrderStatus.READY, OrderStatus.HOLD, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.DISPATCHED, OrderStatus.HOLD, OrderStatus.CANCELLED}),
    OrderStatus.DISPATCHED: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.DELIVERED, OrderStatus.FAILED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.HOLD: frozenset({OrderStatus.PENDING, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.FAILED: frozenset(),
})


@dataclass(frozen=True)
class StatusChange:
    """Record of one applied transition."""
    order_id: object
    old_status: OrderStatus
    new_status: OrderStatus
    reason: Optional[str] = None


def allowed_transitions(current: OrderStatus) -> frozenset[OrderStatus]:
    return TRANSITIONS.get(current, frozenset())


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in allowed_transitions(current)


def apply_transition(order: Order, target: OrderStatus, reason: Optional[str] = None) -> StatusChange:
    """
    Move an order to target status in place.

    Raises:
        InvalidStateError: if the transition is not in the table. The
            order is left untouched.
    """
    current = order.status
    if not can_transition(current, target):
        raise InvalidStateError(current, target, allowed=allowed_transitions(current))

    order.status = target
    order.status_reason = reason
    return StatusChange(order_id=order.id, old_status=current, new_status=target, reason=reason)
