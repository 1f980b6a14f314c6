import enum


class OrderStatus(str, enum.Enum):
    IN_TRANSIT = "IN_TRANSIT"
    COMPLETED = "COMPLETED"


# No terminal state: both statuses can move to the other one.
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.IN_TRANSIT: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.IN_TRANSIT}),
}

STATUS_LABELS = {
    OrderStatus.IN_TRANSIT: "In transit",
    OrderStatus.COMPLETED: "Completed",
}


class InvalidStatusTransition(ValueError):
    def __init__(self, current: OrderStatus, target: OrderStatus):
        if current == target:
            msg = f"Order is already {STATUS_LABELS[current].lower()}"
        else:
            msg = f"Cannot move order from {current.value} to {target.value}"
        super().__init__(msg)
        self.current = current
        self.target = target


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(current: OrderStatus, target: OrderStatus) -> OrderStatus:
    """Return the new status or raise InvalidStatusTransition."""
    current, target = OrderStatus(current), OrderStatus(target)
    if not can_transition(current, target):
        raise InvalidStatusTransition(current, target)
    return target
