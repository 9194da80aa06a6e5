"""Conversions between the storage, domain and wire forms of a subscription."""
import json
import logging
from datetime import datetime

import pydantic

from subtrack.errors import MappingError
from subtrack.models.user import User
from subtrack.schemas.subscription import (
    ReminderAlert,
    StoredSubscription,
    SubscriptionCreate,
    SubscriptionRecord,
    SubscriptionResponse,
    SubscriptionUpdate,
)
from subtrack.schemas.user import UserResponse
from subtrack.time_utils import ensure_aware, format_iso8601_utc

logger = logging.getLogger(__name__)

_reminder_list = pydantic.TypeAdapter(list[ReminderAlert])


def _require_timestamp(row: StoredSubscription, field: str) -> datetime:
    value = getattr(row, field)
    if value is None:
        raise MappingError(
            f"Failed to map subscription id={row.id}: {field} is null but expected a valid date"
        )
    return ensure_aware(value)


def parse_reminders(row_id: int, blob: str | None) -> list[ReminderAlert] | None:
    """Decode the stored reminder blob.

    Reminders are best-effort metadata: a malformed blob is logged and dropped.
    """
    if not blob:
        return None
    try:
        decoded = json.loads(blob)
    except json.JSONDecodeError:
        logger.warning("Dropping malformed reminder JSON on subscription %s", row_id)
        return None
    if not isinstance(decoded, list):
        logger.warning("Dropping non-array reminder data on subscription %s", row_id)
        return None
    try:
        return _reminder_list.validate_python(decoded)
    except pydantic.ValidationError:
        logger.warning("Dropping invalid reminder entries on subscription %s", row_id)
        return None


def stored_to_domain(row: StoredSubscription) -> SubscriptionRecord:
    record = SubscriptionRecord(
        id=row.id,
        name=row.name,
        cost=row.cost,
        cycle=row.cycle,
        renewal_date=_require_timestamp(row, "renewal_date"),
        created_at=_require_timestamp(row, "created_at"),
        updated_at=_require_timestamp(row, "updated_at"),
        user_id=row.user_id,
        is_active=row.is_active,
    )
    reminders = parse_reminders(row.id, row.reminder)
    if reminders is not None:
        record.reminder_alert = reminders
    # Empty strings count as unset
    if row.category:
        record.category = row.category
    if row.notes:
        record.notes = row.notes
    return record


def domain_to_wire(record: SubscriptionRecord) -> dict:
    response = SubscriptionResponse(
        id=record.id,
        name=record.name,
        cost=record.cost,
        cycle=record.cycle,
        renewal_date=format_iso8601_utc(record.renewal_date),
        created_at=format_iso8601_utc(record.created_at),
        updated_at=format_iso8601_utc(record.updated_at),
        user_id=record.user_id,
        is_active=record.is_active,
        category=record.category,
        notes=record.notes,
        reminder_alert=record.reminder_alert,
    )
    return response.model_dump(mode="json", by_alias=True, exclude_none=True)


def stored_to_wire(row: StoredSubscription) -> dict:
    return domain_to_wire(stored_to_domain(row))


def payload_to_columns(payload: SubscriptionCreate | SubscriptionUpdate) -> dict:
    """Storage column values for the fields the client actually supplied.

    Create payloads also carry their defaults (``is_active``); update payloads
    only carry what was sent, so absent fields are left untouched.
    """
    exclude_unset = isinstance(payload, SubscriptionUpdate)
    data = payload.model_dump(exclude_unset=exclude_unset)

    columns = {}
    for key, value in data.items():
        if key == "reminder_alert":
            columns["reminder"] = None if value is None else json.dumps(
                [{"timeframe": alert["timeframe"].value, "value": alert["value"]} for alert in value]
            )
        elif key in ("cycle", "category"):
            columns[key] = None if value is None else value.value
        else:
            columns[key] = value
    return columns


def user_to_wire(user: User) -> dict:
    response = UserResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        created_at=format_iso8601_utc(user.created_at) if user.created_at else None,
        email_notifications=user.email_notifications,
        timezone=user.timezone,
    )
    return response.model_dump(mode="json", by_alias=True)
