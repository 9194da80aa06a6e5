from subtrack.models.base import Base
from subtrack.models.subscription import Subscription
from subtrack.models.user import User

__all__ = [
    "Base",
    "Subscription",
    "User",
]
