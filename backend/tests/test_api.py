"""HTTP-level tests for the bid and item endpoints."""

from typing import AsyncGenerator
from unittest.mock import AsyncMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from marketplace.core.database import get_db
from marketplace.core.exceptions import PersistenceError
from marketplace.main import create_app
from marketplace.services.bid_service import BidService

from conftest import BUYER_ID, SELLER_ID

HEADERS = {"x-access-token": "test-token"}

BID_PAYLOAD = {
    "sellerId": SELLER_ID,
    "contactName": "Asha",
    "pDateTime": "2026-11-01T10:00:00",
    "details": {"glass": {"quantity": 50, "bidQuantity": 10}},
    "totalBid": "1500.00",
    "status": "pending",
}


@pytest.fixture
def app(session_maker, notifications) -> FastAPI:
    app = create_app()

    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.notifications = notifications
    return app


@pytest.fixture
async def client(app, contacts, item) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def place_bid(client: AsyncClient, **overrides) -> dict:
    response = await client.post(
        f"/buyer/{BUYER_ID}/bids", json={**BID_PAYLOAD, **overrides}, headers=HEADERS
    )
    assert response.status_code == 201
    return response.json()["bids"]


class TestBidEndpoints:
    """Test the bid routes end to end against SQLite."""

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.get("/bids")

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing access token"

    @pytest.mark.asyncio
    async def test_create_bid(self, client):
        response = await client.post(f"/buyer/{BUYER_ID}/bids", json=BID_PAYLOAD, headers=HEADERS)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Your bids details are created"
        assert body["bids"]["buyerId"] == BUYER_ID
        assert body["bids"]["sellerId"] == SELLER_ID
        assert body["bids"]["contactName"] == "Asha"
        assert body["bids"]["status"] == "pending"
        assert body["bids"]["details"] == {"glass": {"quantity": 50, "bidQuantity": 10}}

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_status(self, client):
        response = await client.post(
            f"/buyer/{BUYER_ID}/bids", json={**BID_PAYLOAD, "status": "shipped"}, headers=HEADERS
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_and_get(self, client):
        first = await place_bid(client)
        await client.post("/buyer/202/bids", json=BID_PAYLOAD, headers=HEADERS)

        all_bids = await client.get("/bids", headers=HEADERS)
        buyer_bids = await client.get(f"/buyer/{BUYER_ID}/bids", headers=HEADERS)
        one = await client.get(f"/bids/{first['bidId']}", headers=HEADERS)

        assert len(all_bids.json()) == 2
        assert [b["bidId"] for b in buyer_bids.json()] == [first["bidId"]]
        assert one.json()["bidId"] == first["bidId"]

    @pytest.mark.asyncio
    async def test_get_missing_bid(self, client):
        response = await client.get("/bids/4242", headers=HEADERS)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_approve_updates_stock(self, client, item, notifications):
        bid = await place_bid(client)

        response = await client.put(
            f"/bids/{bid['bidId']}", json={"status": "Approved", "totalBid": "1500"}, headers=HEADERS
        )
        await notifications.drain()

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "bids updated successfully"
        assert body["data"]["sellerId"] == SELLER_ID
        assert body["data"]["details"] == {"glass": {"quantity": 50, "bidQuantity": 10}}

        stock = await client.get(f"/items/{item.item_id}", headers=HEADERS)
        assert stock.json()["details"]["glass"]["quantity"] == 40
        assert stock.json()["version"] == 1

    @pytest.mark.asyncio
    async def test_second_approval_conflicts(self, client, notifications):
        bid = await place_bid(client)
        await client.put(f"/bids/{bid['bidId']}", json={"status": "approved"}, headers=HEADERS)

        response = await client.put(
            f"/bids/{bid['bidId']}", json={"status": "approved"}, headers=HEADERS
        )
        await notifications.drain()

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_overselling_conflicts(self, client, notifications):
        bid = await place_bid(client, details={"glass": {"quantity": 50, "bidQuantity": 60}})

        response = await client.put(
            f"/bids/{bid['bidId']}", json={"status": "approved"}, headers=HEADERS
        )
        await notifications.drain()

        assert response.status_code == 409
        fetched = await client.get(f"/bids/{bid['bidId']}", headers=HEADERS)
        assert fetched.json()["status"] == "pending"

    @pytest.mark.asyncio
    async def test_unstocked_category_is_bad_request(self, client, notifications):
        bid = await place_bid(client, details={"metal": {"quantity": 5, "bidQuantity": 1}})

        response = await client.put(
            f"/bids/{bid['bidId']}", json={"status": "approved"}, headers=HEADERS
        )
        await notifications.drain()

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_modify_rejects_unknown_status(self, client):
        bid = await place_bid(client)

        response = await client.put(f"/bids/{bid['bidId']}", json={"status": "shipped"}, headers=HEADERS)

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_modify_missing_bid(self, client):
        response = await client.put("/bids/4242", json={"status": "denied"}, headers=HEADERS)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_bid(self, client, notifications):
        bid = await place_bid(client)

        response = await client.delete(f"/bids/{bid['bidId']}", headers=HEADERS)
        await notifications.drain()

        assert response.status_code == 200
        assert response.json() == {"message": "bids successfully deleted"}
        assert (await client.get(f"/bids/{bid['bidId']}", headers=HEADERS)).status_code == 404
        assert (await client.delete(f"/bids/{bid['bidId']}", headers=HEADERS)).status_code == 404



class TestServerErrors:
    """Failures without a client-facing meaning become a generic 500."""

    @pytest.mark.asyncio
    async def test_persistence_error_hides_detail(self, client):
        failure = AsyncMock(side_effect=PersistenceError("secret db detail"))

        with patch.object(BidService, "create", failure):
            response = await client.post(f"/buyer/{BUYER_ID}/bids", json=BID_PAYLOAD, headers=HEADERS)

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
        assert "secret" not in response.text

    @pytest.mark.asyncio
    async def test_unexpected_error_hides_detail(self, app):
        failure = AsyncMock(side_effect=RuntimeError("secret stack detail"))
        # Starlette re-raises after the 500 handler has responded
        transport = ASGITransport(app=app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            with patch.object(BidService, "list_all", failure):
                response = await ac.get("/bids", headers=HEADERS)

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}
        assert "secret" not in response.text


class TestItemEndpoints:
    """Test item stock routes."""

    @pytest.mark.asyncio
    async def test_create_and_get_item(self, client):
        response = await client.post(
            "/items",
            json={"sellerId": 2, "name": "Blue Bin", "details": {"metal": {"quantity": 12, "unit": "kg"}}},
            headers=HEADERS,
        )

        assert response.status_code == 201
        created = response.json()
        assert created["version"] == 0
        assert created["details"] == {"metal": {"quantity": 12, "unit": "kg"}}

        fetched = await client.get(f"/items/{created['itemId']}", headers=HEADERS)
        assert fetched.json()["sellerId"] == 2

    @pytest.mark.asyncio
    async def test_missing_item(self, client):
        response = await client.get("/items/4242", headers=HEADERS)

        assert response.status_code == 404


class TestOperationalEndpoints:
    """Test health and metrics."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.asyncio
    async def test_metrics(self, client):
        await client.get("/health")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text
