"""Bid lifecycle API endpoints."""

from fastapi import APIRouter, status

from marketplace.api.deps import AccessToken, BidServiceDep, raise_http_error
from marketplace.core.exceptions import MarketplaceError
from marketplace.schemas.bid import (
    BidCreate,
    BidCreatedResponse,
    BidModifiedResponse,
    BidModify,
    BidResponse,
    BidSummary,
    MessageResponse,
)

router = APIRouter()


@router.post(
    "/buyer/{buyer_id}/bids",
    response_model=BidCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_bid(
    buyer_id: int,
    bid_data: BidCreate,
    token: AccessToken,
    bid_service: BidServiceDep,
):
    """Create a bid; buyer and seller are notified once it is stored."""
    try:
        bid = await bid_service.create(buyer_id, bid_data)
    except MarketplaceError as e:
        raise_http_error(e)
    return BidCreatedResponse(
        message="Your bids details are created",
        bids=BidResponse.model_validate(bid),
    )


@router.get("/bids", response_model=list[BidResponse])
async def list_bids(token: AccessToken, bid_service: BidServiceDep):
    """Get all bids."""
    bids = await bid_service.list_all()
    return [BidResponse.model_validate(b) for b in bids]


@router.get("/buyer/{buyer_id}/bids", response_model=list[BidResponse])
async def list_buyer_bids(buyer_id: int, token: AccessToken, bid_service: BidServiceDep):
    """Get all bids placed by a buyer.

    Any caller may list any buyer's bids; ownership is not checked here.
    """
    bids = await bid_service.list_by_buyer(buyer_id)
    return [BidResponse.model_validate(b) for b in bids]


@router.get("/bids/{bid_id}", response_model=BidResponse)
async def get_bid(bid_id: int, token: AccessToken, bid_service: BidServiceDep):
    """Get bid by ID."""
    try:
        bid = await bid_service.get_by_id(bid_id)
    except MarketplaceError as e:
        raise_http_error(e)
    return BidResponse.model_validate(bid)


@router.put("/bids/{bid_id}", response_model=BidModifiedResponse)
async def modify_bid(
    bid_id: int,
    changes: BidModify,
    token: AccessToken,
    bid_service: BidServiceDep,
):
    """Modify a bid. Approving it takes the bid quantities out of the seller's stock."""
    try:
        bid = await bid_service.modify(bid_id, changes)
    except MarketplaceError as e:
        raise_http_error(e)
    return BidModifiedResponse(
        message="bids updated successfully",
        data=BidSummary(seller_id=bid.seller_id, details=bid.details),
    )


@router.delete("/bids/{bid_id}", response_model=MessageResponse)
async def delete_bid(bid_id: int, token: AccessToken, bid_service: BidServiceDep):
    """Cancel and delete a bid."""
    try:
        await bid_service.delete(bid_id)
    except MarketplaceError as e:
        raise_http_error(e)
    return MessageResponse(message="bids successfully deleted")
