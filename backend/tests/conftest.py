"""Pytest configuration and fixtures for testing."""

import os

# Settings are read at import time; keep tests off the real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import marketplace.models  # noqa: F401  (registers tables on Base.metadata)
from marketplace.core.database import Base
from marketplace.core.exceptions import NotificationDeliveryError
from marketplace.models.item import Item
from marketplace.schemas.bid import BidCreate
from marketplace.schemas.item import ItemCreate
from marketplace.services.contact_service import ContactService
from marketplace.services.item_service import ItemService
from marketplace.services.notification_service import NotificationService
from marketplace.services.templates import TemplateStore

BUYER_ID = 101
SELLER_ID = 1


class FakeGateway:
    """Records outbound messages instead of calling the provider."""

    def __init__(self, fail_sms_to: set[str] | None = None):
        self.sms: list[tuple[str, list[str | None]]] = []
        self.emails: list[tuple[str, str, str]] = []
        self.fail_sms_to = fail_sms_to or set()

    async def send_sms(self, message, recipients, sender=None, country_code=None):
        recipients = list(recipients)
        if not any(recipients):
            return None
        if self.fail_sms_to.intersection(r for r in recipients if r):
            raise NotificationDeliveryError("gateway down")
        self.sms.append((message, recipients))
        return {"type": "success"}

    async def send_email(self, message, subject, recipient, sender=None):
        self.emails.append((subject, message, recipient))
        return {"type": "success"}

    async def aclose(self) -> None:
        pass

    @property
    def messages(self) -> list[str]:
        return [message for message, _ in self.sms]


def make_bid_create(**overrides) -> BidCreate:
    """Build a valid BidCreate using wire (camelCase) names."""
    payload = {
        "sellerId": SELLER_ID,
        "contactName": "Asha",
        "pDateTime": "2026-11-01T10:00:00",
        "details": {"glass": {"quantity": 50, "bidQuantity": 10}},
        "totalBid": "1500.00",
        "status": "pending",
    }
    payload.update(overrides)
    return BidCreate.model_validate(payload)


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite engine so separate sessions use separate connections."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as session:
        yield session


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def templates() -> TemplateStore:
    return TemplateStore.default()


@pytest.fixture
async def notifications(gateway, templates, session_maker) -> AsyncGenerator[NotificationService, None]:
    service = NotificationService(gateway, templates, session_maker)
    yield service
    await service.drain()


@pytest.fixture
async def contacts(db):
    """Buyer 101 and seller 1, SMS only."""
    service = ContactService(db)
    buyer = await service.upsert(BUYER_ID, "Asha Traders", mob_no="9100000101")
    seller = await service.upsert(
        SELLER_ID, "Green Recyclers", mob_no="9000000001", alt_mob_no="9000000011"
    )
    return buyer, seller


@pytest.fixture
async def item(db) -> Item:
    """Seller 1's stock: 50 glass, 30 paper."""
    return await ItemService(db).create(
        ItemCreate(
            seller_id=SELLER_ID,
            name="Green Recyclers stock",
            details={"glass": {"quantity": 50}, "paper": {"quantity": 30}},
        )
    )
