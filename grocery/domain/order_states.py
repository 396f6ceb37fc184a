"""
Order status transitions.

Only a privileged actor moves an order past ``pending``; customers have no
update policy on orders at all.

    pending   -> confirmed | cancelled
    confirmed -> shipped   | cancelled
    shipped   -> delivered
    delivered, cancelled   (final)
"""
from grocery.domain.enums import OrderStatus
from grocery.domain.errors import InvalidStatusTransition


class OrderStateMachine:
    TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
        OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
        OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
        OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
        OrderStatus.DELIVERED: frozenset(),
        OrderStatus.CANCELLED: frozenset(),
    }

    @classmethod
    def is_final(cls, status: OrderStatus) -> bool:
        return not cls.TRANSITIONS[status]

    @classmethod
    def validate(cls, current: OrderStatus, requested: OrderStatus) -> None:
        if requested not in cls.TRANSITIONS[current]:
            raise InvalidStatusTransition(current.value, requested.value)
