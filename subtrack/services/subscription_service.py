"""List, create, update and soft-delete operations for tracked subscriptions.

Every operation is a linear pipeline: resolve caller, validate input, load,
authorize, write, re-validate the stored row, map it to the wire form. Errors
are raised as :class:`~subtrack.errors.HttpError` subclasses and converted to
an :class:`~subtrack.schemas.envelope.Envelope` exactly once, in
:func:`run_safely`.
"""
import json
import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

import sentry_sdk

from subtrack.errors import BadRequest, HttpError, NotFound
from subtrack.schemas.envelope import Envelope, create_failure, create_success
from subtrack.schemas.user import Identity
from subtrack.services import mapping, validation
from subtrack.services.guard import ensure_owner, require_identity
from subtrack.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")
# Range of the Integer primary key column
_MIN_ID, _MAX_ID = -(2**31), 2**31 - 1


async def run_safely(operation: Callable[[], Awaitable[Any]]) -> Envelope:
    try:
        value = await operation()
    except HttpError as exc:
        return create_failure(exc.message, exc.status_code)
    except Exception as exc:
        logger.exception("Unexpected failure in subscription pipeline")
        sentry_sdk.capture_exception(exc)
        return create_failure(str(exc) or type(exc).__name__, 500)
    return create_success(value)


def parse_subscription_id(raw_id: str) -> int:
    """Strict integer parse.

    Partially numeric ids such as ``12abc`` and ids outside the key column's
    range are rejected.
    """
    if not isinstance(raw_id, str) or not _INTEGER_RE.fullmatch(raw_id):
        raise BadRequest("Invalid subscription ID")
    try:
        subscription_id = int(raw_id)
    except ValueError:
        # more digits than int() will convert
        raise BadRequest("Invalid subscription ID")
    if not _MIN_ID <= subscription_id <= _MAX_ID:
        raise BadRequest("Invalid subscription ID")
    return subscription_id


def parse_json_body(raw_body: bytes) -> Any:
    try:
        return json.loads(raw_body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise BadRequest("Invalid JSON body")


async def list_subscriptions(store: SubscriptionStore, identity: Identity | None) -> Envelope:
    async def operation():
        caller = require_identity(identity)

        user = await store.find_user_by_id(caller.id)
        if user is None:
            raise NotFound("User not found")

        rows = await store.list_subscriptions_by_user(caller.id)
        subscriptions = [
            mapping.stored_to_wire(validation.validate_stored_row(row)) for row in rows
        ]
        return {"user": mapping.user_to_wire(user), "subscriptions": subscriptions}

    return await run_safely(operation)


async def create_subscription(
    store: SubscriptionStore, identity: Identity | None, raw_body: bytes
) -> Envelope:
    async def operation():
        caller = require_identity(identity)
        payload = validation.validate_create(parse_json_body(raw_body))

        user = await store.find_user_by_id(caller.id)
        if user is None:
            raise NotFound("User not found")

        fields = mapping.payload_to_columns(payload)
        fields["user_id"] = caller.id
        created = await store.create_subscription(fields)

        stored = validation.validate_stored_row(created)
        logger.info("Created subscription %s for user %s", stored.id, caller.id)
        return {"subscription": mapping.stored_to_wire(stored)}

    return await run_safely(operation)


async def update_subscription(
    store: SubscriptionStore,
    identity: Identity | None,
    raw_id: str,
    raw_body: bytes,
) -> Envelope:
    async def operation():
        caller = require_identity(identity)
        subscription_id = parse_subscription_id(raw_id)
        payload = validation.validate_update(parse_json_body(raw_body))

        existing = await store.find_subscription_by_id(subscription_id)
        if existing is None:
            raise NotFound("Subscription not found")
        ensure_owner(existing, caller, "update")

        updated = await store.update_subscription(
            subscription_id, mapping.payload_to_columns(payload)
        )

        stored = validation.validate_stored_row(updated)
        logger.info(
            "Updated subscription %s fields=%s", subscription_id, sorted(payload.model_fields_set)
        )
        return {"subscription": mapping.stored_to_wire(stored)}

    return await run_safely(operation)


async def delete_subscription(
    store: SubscriptionStore, identity: Identity | None, raw_id: str
) -> Envelope:
    """Soft delete: the row stays, only ``is_active`` flips to false."""

    async def operation():
        caller = require_identity(identity)
        subscription_id = parse_subscription_id(raw_id)

        existing = await store.find_subscription_by_id(subscription_id)
        if existing is None:
            raise NotFound("Subscription not found")
        ensure_owner(existing, caller, "delete")

        await store.update_subscription(subscription_id, {"is_active": False})
        logger.info("Cancelled subscription %s", subscription_id)
        return {"message": "Subscription deleted successfully"}

    return await run_safely(operation)
