from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from subtrack.models.subscription import Subscription
from subtrack.models.user import User


class SubscriptionStore:
    """Storage primitives for the subscription pipeline, bound to one request's session.

    Each primitive is a single read or write; nothing here spans calls in a
    transaction beyond what the request session already provides.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_user_by_id(self, user_id: str) -> User | None:
        return await self.db.get(User, user_id)

    async def find_subscription_by_id(self, subscription_id: int) -> Subscription | None:
        return await self.db.get(Subscription, subscription_id)

    async def list_subscriptions_by_user(self, user_id: str) -> list[Subscription]:
        result = await self.db.execute(
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .order_by(Subscription.renewal_date.asc(), Subscription.id.asc())
        )
        return list(result.scalars().all())

    async def create_subscription(self, fields: dict) -> Subscription:
        sub = Subscription(**fields)
        self.db.add(sub)
        await self.db.flush()
        await self.db.refresh(sub)
        return sub

    async def update_subscription(self, subscription_id: int, fields: dict) -> Subscription:
        sub = await self.db.get(Subscription, subscription_id)
        if sub is None:
            raise LookupError(f"Subscription {subscription_id} does not exist")

        for key, value in fields.items():
            setattr(sub, key, value)

        await self.db.flush()
        await self.db.refresh(sub)
        return sub

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
