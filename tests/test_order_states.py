"""
Tests for order status transitions.
"""
import pytest

from grocery.domain.enums import OrderStatus
from grocery.domain.errors import InvalidStatusTransition
from grocery.domain.order_states import OrderStateMachine


class TestOrderStateMachine:
    @pytest.mark.parametrize(
        "current, requested",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.CONFIRMED, OrderStatus.SHIPPED),
            (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
        ],
    )
    def test_valid_transitions(self, current, requested):
        OrderStateMachine.validate(current, requested)

    @pytest.mark.parametrize(
        "current, requested",
        [
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.PENDING, OrderStatus.PENDING),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
            (OrderStatus.DELIVERED, OrderStatus.PENDING),
            (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
        ],
    )
    def test_invalid_transitions(self, current, requested):
        with pytest.raises(InvalidStatusTransition) as exc_info:
            OrderStateMachine.validate(current, requested)

        assert exc_info.value.current == current.value
        assert exc_info.value.requested == requested.value

    def test_final_states(self):
        assert OrderStateMachine.is_final(OrderStatus.DELIVERED)
        assert OrderStateMachine.is_final(OrderStatus.CANCELLED)
        assert not OrderStateMachine.is_final(OrderStatus.PENDING)

    def test_every_status_has_an_entry(self):
        assert set(OrderStateMachine.TRANSITIONS) == set(OrderStatus)
