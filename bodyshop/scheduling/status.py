from typing import Dict, FrozenSet

from bodyshop.core.errors import InvalidStatusTransition

PENDING = "pending"
CONFIRMED = "confirmed"
IN_PROGRESS = "in_progress"
COMPLETED = "completed"
CANCELLED = "cancelled"

STATUSES = (PENDING, CONFIRMED, IN_PROGRESS, COMPLETED, CANCELLED)
TERMINAL_STATUSES = frozenset({COMPLETED, CANCELLED})

TRANSITIONS: Dict[str, FrozenSet[str]] = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({IN_PROGRESS, CANCELLED}),
    IN_PROGRESS: frozenset({COMPLETED, CANCELLED}),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidStatusTransition(f"Cannot change booking status from {current} to {target}")
