from subtrack.errors import Forbidden, Unauthorized
from subtrack.schemas.user import Identity


def require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise Unauthorized()
    return identity


def ensure_owner(record, identity: Identity, action: str) -> None:
    """Only the owning user may mutate a subscription. Call after the record is loaded."""
    if record.user_id != identity.id:
        raise Forbidden(f"Forbidden: You can only {action} your own subscriptions")
