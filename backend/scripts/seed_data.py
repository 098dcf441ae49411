"""Seed data script for development and testing.

Creates (tables are created first if missing):
- 2 sellers and 2 buyers with contact details
- 1 item per seller with per-category stock
- 1 pending bid from each buyer

Environment Variables:
    RESET_DATA: Set to "true" to clear bids/items/user_details before seeding (default: false)
    SEED_STOCK: Starting quantity for each category (default: 50)

Usage:
    cd backend && python -m scripts.seed_data
    RESET_DATA=true SEED_STOCK=100 python -m scripts.seed_data
"""

import asyncio
import os
from datetime import datetime, timedelta
from decimal import Decimal

# Configuration from environment variables
RESET_DATA = os.getenv("RESET_DATA", "false").lower() == "true"
SEED_STOCK = int(os.getenv("SEED_STOCK", "50"))

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.database import Base, async_session_maker, engine
from marketplace.models import Bid, Item
from marketplace.schemas.item import ItemCategory, ItemCreate
from marketplace.services.contact_service import ContactService
from marketplace.services.item_service import ItemService

SELLERS = [
    (1, "Green Recyclers", "9000000001", None, "sales@greenrecyclers.example"),
    (2, "Metro Scrap Co", "9000000002", "9000000012", None),
]
BUYERS = [
    (101, "Asha Traders", "9100000101", None, "asha@traders.example"),
    (102, "Ravi Paper Mills", "9100000102", "9100000112", None),
]
CATEGORIES = ["glass", "paper", "plastic", "metal"]


async def reset_seed_data(session: AsyncSession) -> None:
    """Clear bids, items and contacts."""
    print("Resetting data...")
    await session.execute(text("DELETE FROM bids"))
    await session.execute(text("DELETE FROM items"))
    await session.execute(text("DELETE FROM user_details"))
    await session.commit()
    print("  Cleared bids, items, user_details")


async def seed_contacts(session: AsyncSession) -> None:
    print("Seeding user details...")
    contacts = ContactService(session)
    for user_id, name, mob_no, alt_mob_no, email in SELLERS + BUYERS:
        await contacts.upsert(user_id, name, mob_no=mob_no, alt_mob_no=alt_mob_no, email=email)
    print(f"  Upserted {len(SELLERS) + len(BUYERS)} contacts")


async def seed_items(session: AsyncSession) -> list[Item]:
    print("Seeding items...")
    service = ItemService(session)
    items = []
    for seller_id, name, *_ in SELLERS:
        existing = await service.get_by_seller(seller_id)
        if existing:
            print(f"  Item for seller {seller_id} already exists, skipping...")
            items.append(existing)
            continue
        item = await service.create(
            ItemCreate(
                seller_id=seller_id,
                name=f"{name} stock",
                details={c: ItemCategory(quantity=SEED_STOCK) for c in CATEGORIES},
            )
        )
        print(f"  Created item {item.item_id} for seller {seller_id}")
        items.append(item)
    return items


async def seed_bids(session: AsyncSession) -> None:
    print("Seeding bids...")
    result = await session.execute(select(Bid).limit(1))
    if result.scalar_one_or_none():
        print("  Bids already exist, skipping...")
        return

    pickup = datetime.utcnow().replace(microsecond=0) + timedelta(days=2)
    for (buyer_id, buyer_name, *_), (seller_id, *_) in zip(BUYERS, SELLERS):
        session.add(
            Bid(
                buyer_id=buyer_id,
                seller_id=seller_id,
                contact_name=buyer_name,
                scheduled_at=pickup,
                details={
                    "glass": {"quantity": SEED_STOCK, "bidQuantity": 10},
                    "paper": {"quantity": SEED_STOCK, "bidQuantity": 5},
                },
                total_bid=Decimal("1500.00"),
                status="pending",
            )
        )
    await session.commit()
    print(f"  Created {len(BUYERS)} pending bids")


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_maker() as session:
        if RESET_DATA:
            await reset_seed_data(session)
        await seed_contacts(session)
        await seed_items(session)
        await seed_bids(session)

    print("\nSeeding complete!")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
