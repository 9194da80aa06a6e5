import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from subtrack.models.enums import MAX_REMINDER_ALERTS, Category, Cycle, ReminderTimeframe
from subtrack.time_utils import parse_iso_datetime


class ReminderAlert(BaseModel):
    timeframe: ReminderTimeframe
    value: int = Field(gt=0)

    @field_validator("value", mode="before")
    @classmethod
    def value_must_be_integer(cls, value):
        # 1.0 is an integer on the JSON wire; 1.5, true and "2" are not
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise PydanticCustomError("reminder_value", "Reminder value must be an integer")
        return value


class _SubscriptionPayload(BaseModel):
    """Shared rules for client-supplied create and update bodies.

    Keys are camelCase on the wire. Unknown keys, including ``userId``, are
    ignored: ownership always comes from the authenticated caller.
    """

    model_config = ConfigDict(alias_generator=to_camel, extra="ignore")

    @field_validator("cost", mode="before", check_fields=False)
    @classmethod
    def cost_must_be_number(cls, value):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PydanticCustomError("cost_type", "Cost must be a number")
        return value

    @field_validator("cost", check_fields=False)
    @classmethod
    def cost_must_be_non_negative(cls, value: float) -> float:
        if not math.isfinite(value):
            raise PydanticCustomError("cost_finite", "Cost must be a finite number")
        if value < 0:
            raise PydanticCustomError("cost_negative", "Cost must be non-negative")
        return value

    @field_validator("renewal_date", mode="before", check_fields=False)
    @classmethod
    def parse_renewal_date(cls, value):
        if not isinstance(value, str):
            raise PydanticCustomError("renewal_date", "Invalid renewal date format")
        try:
            return parse_iso_datetime(value)
        except ValueError:
            raise PydanticCustomError("renewal_date", "Invalid renewal date format")

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise PydanticCustomError("null_value", "Field cannot be null")
        return value


class SubscriptionCreate(_SubscriptionPayload):
    name: str = Field(min_length=1, strict=True)
    cost: float
    cycle: Cycle
    renewal_date: datetime
    is_active: bool = Field(default=True, strict=True)
    category: Category | None = None
    notes: str | None = Field(default=None, strict=True)
    reminder_alert: list[ReminderAlert] | None = Field(default=None, max_length=MAX_REMINDER_ALERTS)


class SubscriptionUpdate(_SubscriptionPayload):
    name: str | None = Field(default=None, min_length=1, strict=True)
    cost: float | None = None
    cycle: Cycle | None = None
    renewal_date: datetime | None = None
    is_active: bool | None = Field(default=None, strict=True)
    category: Category | None = None
    notes: str | None = Field(default=None, strict=True)
    reminder_alert: list[ReminderAlert] | None = Field(default=None, max_length=MAX_REMINDER_ALERTS)


class StoredSubscription(BaseModel):
    """Shape of a ``subscriptions`` row as returned by storage."""

    id: int
    name: str = Field(min_length=1)
    cost: float = Field(ge=0)
    cycle: Cycle
    renewal_date: datetime | None
    created_at: datetime | None
    updated_at: datetime | None
    user_id: str = Field(min_length=1)
    is_active: bool
    category: Category | None = None
    notes: str | None = None
    reminder: str | None = None  # JSON blob

    model_config = {"from_attributes": True}


class SubscriptionRecord(BaseModel):
    """Validated in-process subscription; timestamps are aware datetimes."""

    id: int
    name: str
    cost: float
    cycle: Cycle
    renewal_date: datetime
    created_at: datetime
    updated_at: datetime
    user_id: str
    is_active: bool
    category: Category | None = None
    notes: str | None = None
    reminder_alert: list[ReminderAlert] | None = None


class SubscriptionResponse(BaseModel):
    id: int
    name: str
    cost: float
    cycle: Cycle
    renewal_date: str | None
    created_at: str | None
    updated_at: str | None
    user_id: str
    is_active: bool
    category: Category | None = None
    notes: str | None = None
    reminder_alert: list[ReminderAlert] | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
