"""Tests for the order status state machine."""
from uuid import uuid4

import pytest

from drayage.core.exceptions import InvalidStateError
from drayage.models.enums import OrderStatus
from drayage.models.order import Order
from drayage.services.order_state import (
    TRANSITIONS,
    allowed_transitions,
    apply_transition,
    can_transition,
)


def _order(status=OrderStatus.PENDING):
    return Order(id=uuid4(), order_number="ORD-20261019-00001", status=status)


class TestTransitionTable:

    def test_every_status_has_an_entry(self):
        assert set(TRANSITIONS) == set(OrderStatus)

    @pytest.mark.parametrize("status", [OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.FAILED])
    def test_terminal_statuses_have_no_exits(self, status):
        assert allowed_transitions(status) == frozenset()

    def test_terminal_flag_matches_table(self):
        for status in OrderStatus:
            assert status.is_terminal == (not TRANSITIONS[status])

    def test_every_status_reachable_from_pending(self):
        seen, frontier = {OrderStatus.PENDING}, [OrderStatus.PENDING]
        while frontier:
            for target in TRANSITIONS[frontier.pop()]:
                if target not in seen:
                    seen.add(target)
                    frontier.append(target)
        assert seen == set(OrderStatus)

    def test_no_self_transitions(self):
        for status, targets in TRANSITIONS.items():
            assert status not in targets

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            TRANSITIONS[OrderStatus.PENDING] = frozenset()


class TestCanTransition:

    def test_happy_path(self):
        path = [
            OrderStatus.PENDING,
            OrderStatus.READY,
            OrderStatus.DISPATCHED,
            OrderStatus.IN_PROGRESS,
            OrderStatus.DELIVERED,
            OrderStatus.COMPLETED,
        ]
        for current, target in zip(path, path[1:]):
            assert can_transition(current, target)

    def test_hold_loop(self):
        assert can_transition(OrderStatus.READY, OrderStatus.HOLD)
        assert can_transition(OrderStatus.HOLD, OrderStatus.PENDING)

    def test_cannot_skip_dispatch(self):
        assert not can_transition(OrderStatus.READY, OrderStatus.IN_PROGRESS)

    def test_in_progress_cannot_be_cancelled(self):
        assert not can_transition(OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED)


class TestApplyTransition:

    def test_applies_and_records_reason(self):
        order = _order()
        change = apply_transition(order, OrderStatus.HOLD, "customs exam")
        assert order.status == OrderStatus.HOLD
        assert order.status_reason == "customs exam"
        assert change.old_status == OrderStatus.PENDING
        assert change.new_status == OrderStatus.HOLD

    def test_illegal_transition_leaves_order_untouched(self):
        order = _order(OrderStatus.COMPLETED)
        with pytest.raises(InvalidStateError) as exc_info:
            apply_transition(order, OrderStatus.PENDING)
        assert order.status == OrderStatus.COMPLETED
        assert exc_info.value.details["current_state"] == "COMPLETED"
        assert exc_info.value.details["allowed"] == []

    def test_error_lists_allowed_targets(self):
        order = _order(OrderStatus.DELIVERED)
        with pytest.raises(InvalidStateError) as exc_info:
            apply_transition(order, OrderStatus.CANCELLED)
        assert exc_info.value.allowed == ["COMPLETED"]
