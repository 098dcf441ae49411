"""Domain errors raised by the services layer.

Routers translate these into HTTP responses; nothing below the API layer
imports FastAPI.
"""


class MarketplaceError(Exception):
    """Base class for all domain errors."""

    pass


class ValidationError(MarketplaceError):
    """Raised when bid or item data is malformed or incomplete."""

    pass


class NotFoundError(MarketplaceError):
    """Raised when a referenced bid, item or contact does not exist."""

    pass


class PersistenceError(MarketplaceError):
    """Raised when the store fails for a reason other than bad input."""

    pass


class InvalidTransitionError(MarketplaceError):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move bid from '{current}' to '{target}'")


class InsufficientStockError(MarketplaceError):
    """Raised when an approval would take a category below zero."""

    pass


class ConcurrencyError(MarketplaceError):
    """Raised when optimistic lock conflict occurs."""

    pass


class NotificationDeliveryError(MarketplaceError):
    """Raised by the gateway client when an outbound message fails.

    Never propagated past the notification service.
    """

    pass


class TemplateNotFoundError(KeyError):
    """Raised when no notification template exists for an event key."""

    pass
