"""API dependencies for request headers, database access and services."""

from typing import Annotated, NoReturn

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.database import get_db
from marketplace.core.exceptions import (
    ConcurrencyError,
    InsufficientStockError,
    InvalidTransitionError,
    MarketplaceError,
    NotFoundError,
    ValidationError,
)
from marketplace.services.bid_service import BidService
from marketplace.services.item_service import ItemService
from marketplace.services.notification_service import NotificationService


# Domain errors a client can act on; anything else reaches the app-level 500 handler
ERROR_STATUS_CODES: dict[type[MarketplaceError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    InsufficientStockError: status.HTTP_409_CONFLICT,
    ConcurrencyError: status.HTTP_409_CONFLICT,
}


def raise_http_error(exc: MarketplaceError) -> NoReturn:
    """Re-raise a service error as the matching HTTPException."""
    status_code = ERROR_STATUS_CODES.get(type(exc))
    if status_code is None:
        raise exc
    raise HTTPException(status_code=status_code, detail=str(exc)) from exc


async def require_access_token(
    x_access_token: Annotated[str | None, Header()] = None,
) -> str:
    """Require an ``x-access-token`` header.

    The token is not validated; authentication is handled outside this service.
    """
    if not x_access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing access token",
        )
    return x_access_token


def get_notification_service(request: Request) -> NotificationService:
    """Get the app-wide NotificationService created in the lifespan."""
    return request.app.state.notifications


# Type aliases for cleaner dependency injection
AccessToken = Annotated[str, Depends(require_access_token)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]


async def get_bid_service(
    db: DbSession,
    notifications: NotificationServiceDep,
) -> BidService:
    """Get BidService instance with injected dependencies."""
    return BidService(db, notifications)


async def get_item_service(db: DbSession) -> ItemService:
    return ItemService(db)


BidServiceDep = Annotated[BidService, Depends(get_bid_service)]
ItemServiceDep = Annotated[ItemService, Depends(get_item_service)]
