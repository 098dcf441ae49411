"""Contact lookup for notification recipients."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models.user_detail import UserDetail


class ContactService:
    """Service class for user contact details."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> UserDetail | None:
        """Get contact details by user ID."""
        result = await self.db.execute(
            select(UserDetail).where(UserDetail.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_pair(
        self, buyer_id: int, seller_id: int
    ) -> tuple[UserDetail | None, UserDetail | None]:
        """Get buyer and seller contacts in one query."""
        result = await self.db.execute(
            select(UserDetail).where(UserDetail.user_id.in_([buyer_id, seller_id]))
        )
        by_id = {c.user_id: c for c in result.scalars().all()}
        return by_id.get(buyer_id), by_id.get(seller_id)

    async def upsert(
        self,
        user_id: int,
        name: str,
        mob_no: str | None = None,
        alt_mob_no: str | None = None,
        email: str | None = None,
    ) -> UserDetail:
        """Create or replace the contact record for a user."""
        contact = await self.get_by_id(user_id)
        if contact is None:
            contact = UserDetail(user_id=user_id, name=name)
            self.db.add(contact)
        contact.name = name
        contact.mob_no = mob_no
        contact.alt_mob_no = alt_mob_no
        contact.email = email

        await self.db.commit()
        await self.db.refresh(contact)
        return contact
