"""Closed value sets shared by the ORM models, validators and mappers.

Adding a cycle, category, timeframe or timezone only requires editing the
matching enum below.
"""
from enum import Enum
from typing import Any


class ClosedSet(str, Enum):
    """String enum with a runtime membership predicate."""

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)

    @classmethod
    def is_member(cls, value: Any) -> bool:
        if isinstance(value, cls):
            return True
        return isinstance(value, str) and value in cls.values()


class Cycle(ClosedSet):
    monthly = "monthly"
    yearly = "yearly"


class Category(ClosedSet):
    entertainment = "entertainment"  # streaming, music, gaming
    fitness = "fitness"
    shopping = "shopping"
    development = "development"  # cloud hosting, dev tooling
    productivity = "productivity"
    utilities = "utilities"  # internet, phone, cloud storage
    finance = "finance"
    education = "education"
    health = "health"
    news = "news"
    food = "food"  # meal kits, delivery plans
    transportation = "transportation"
    other = "other"


class ReminderTimeframe(ClosedSet):
    days = "days"
    hours = "hours"
    weeks = "weeks"


class Timezone(ClosedSet):
    new_york = "America/New_York"
    chicago = "America/Chicago"
    denver = "America/Denver"
    los_angeles = "America/Los_Angeles"
    vancouver = "America/Vancouver"
    toronto = "America/Toronto"
    london = "Europe/London"
    paris = "Europe/Paris"
    berlin = "Europe/Berlin"
    rome = "Europe/Rome"
    madrid = "Europe/Madrid"
    tokyo = "Asia/Tokyo"
    shanghai = "Asia/Shanghai"
    hong_kong = "Asia/Hong_Kong"
    singapore = "Asia/Singapore"
    sydney = "Australia/Sydney"
    melbourne = "Australia/Melbourne"
    auckland = "Pacific/Auckland"
    utc = "UTC"


MAX_REMINDER_ALERTS = 5
