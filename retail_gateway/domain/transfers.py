"""Money transfer state machine"""

from typing import Dict, FrozenSet
from retail_gateway.domain.exceptions import InvalidStatusTransitionError, ValidationError
from retail_gateway.domain.models import (
    TRANSFER_PENDING,
    TRANSFER_APPROVED,
    TRANSFER_COMPLETED,
    TRANSFER_REJECTED,
)

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    TRANSFER_PENDING: frozenset({TRANSFER_APPROVED, TRANSFER_REJECTED}),
    TRANSFER_APPROVED: frozenset({TRANSFER_COMPLETED}),
    TRANSFER_COMPLETED: frozenset(),
    TRANSFER_REJECTED: frozenset(),
}


def check_transition(current: str, requested: str) -> bool:
    """
    Validate a transfer status change.

    Returns True when the status actually changes and False for a repeated
    request of the current status (idempotent no-op). Raises
    InvalidStatusTransitionError for anything the state machine forbids.
    """
    if requested not in ALLOWED_TRANSITIONS:
        raise ValidationError("status", f"Unknown transfer status '{requested}'")
    if requested == current:
        return False
    if requested not in ALLOWED_TRANSITIONS.get(current, frozenset()):
        raise InvalidStatusTransitionError("Money transfer", current, requested)
    return True


def triggers_ledger_posting(current: str, requested: str) -> bool:
    """Only the first entry into 'completed' posts ledger entries"""
    return requested == TRANSFER_COMPLETED and current != TRANSFER_COMPLETED
