"""Item stock API endpoints."""

from fastapi import APIRouter, HTTPException, status

from marketplace.api.deps import AccessToken, ItemServiceDep, raise_http_error
from marketplace.core.exceptions import MarketplaceError
from marketplace.schemas.item import ItemCreate, ItemResponse

router = APIRouter()


@router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(item_data: ItemCreate, token: AccessToken, item_service: ItemServiceDep):
    """Create a seller's item with per-category stock."""
    try:
        item = await item_service.create(item_data)
    except MarketplaceError as e:
        raise_http_error(e)
    return ItemResponse.model_validate(item)


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: int, token: AccessToken, item_service: ItemServiceDep):
    """Get item by ID."""
    item = await item_service.get_by_id(item_id)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Item not found",
        )
    return ItemResponse.model_validate(item)
