"""Bid status values and the transitions allowed between them."""

from enum import Enum

from marketplace.core.exceptions import InvalidTransitionError, ValidationError


class BidStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: "str | BidStatus") -> "BidStatus":
        """Parse a status case-insensitively ("APPROVED" == "approved")."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValidationError(f"Invalid bid status: {value!r}")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid bid status: {value!r}") from None


ALLOWED_TRANSITIONS: dict[BidStatus, set[BidStatus]] = {
    BidStatus.PENDING: {
        BidStatus.PENDING,
        BidStatus.APPROVED,
        BidStatus.DENIED,
        BidStatus.CANCELLED,
    },
    BidStatus.DENIED: {BidStatus.PENDING, BidStatus.DENIED, BidStatus.CANCELLED},
    BidStatus.APPROVED: {BidStatus.CANCELLED},
    BidStatus.CANCELLED: set(),
}


def validate_transition(current: BidStatus, target: BidStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransitionError(current.value, target.value)
