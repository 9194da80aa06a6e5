from fastapi import APIRouter, Depends, Request

from subtrack.dependencies import get_current_identity, get_store
from subtrack.schemas.envelope import Envelope, envelope_response
from subtrack.schemas.user import Identity
from subtrack.services import subscription_service
from subtrack.services.subscription_store import SubscriptionStore

router = APIRouter(prefix="/subscriptions", tags=["subscriptions"])


async def _finish(store: SubscriptionStore, envelope: Envelope):
    # Failed operations never leave partial writes behind
    if envelope.success:
        await store.commit()
    else:
        await store.rollback()
    return envelope_response(envelope)


@router.get("")
async def list_subscriptions(
    identity: Identity | None = Depends(get_current_identity),
    store: SubscriptionStore = Depends(get_store),
):
    """List the caller's subscriptions ordered by renewal date."""
    envelope = await subscription_service.list_subscriptions(store, identity)
    return await _finish(store, envelope)


@router.post("")
async def create_subscription(
    request: Request,
    identity: Identity | None = Depends(get_current_identity),
    store: SubscriptionStore = Depends(get_store),
):
    """Create a subscription owned by the caller."""
    envelope = await subscription_service.create_subscription(
        store, identity, await request.body()
    )
    return await _finish(store, envelope)


@router.put("/{subscription_id}")
async def update_subscription(
    subscription_id: str,
    request: Request,
    identity: Identity | None = Depends(get_current_identity),
    store: SubscriptionStore = Depends(get_store),
):
    """Partially update one of the caller's subscriptions."""
    envelope = await subscription_service.update_subscription(
        store, identity, subscription_id, await request.body()
    )
    return await _finish(store, envelope)


@router.delete("/{subscription_id}")
async def delete_subscription(
    subscription_id: str,
    identity: Identity | None = Depends(get_current_identity),
    store: SubscriptionStore = Depends(get_store),
):
    """Cancel (soft delete) one of the caller's subscriptions."""
    envelope = await subscription_service.delete_subscription(
        store, identity, subscription_id
    )
    return await _finish(store, envelope)
