from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from subtrack.models.enums import Timezone


class Identity(BaseModel):
    """Authenticated caller as resolved from the access token."""

    id: str
    email: str | None = None


class UserResponse(BaseModel):
    id: str
    email: str
    username: str
    created_at: str | None
    email_notifications: bool
    timezone: Timezone

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
