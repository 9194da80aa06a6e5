import logging

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from subtrack.config import settings
from subtrack.database import get_db
from subtrack.schemas.user import Identity
from subtrack.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

# auto_error=False: a missing token is reported through the response envelope
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity | None:
    """Resolve the caller from a bearer access token, or None when there is no valid one."""
    if credentials is None:
        return None
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError as exc:
        logger.info("Rejected access token: %s", exc)
        return None

    if payload.get("type", "access") != "access":
        return None
    user_id = payload.get("sub")
    if not user_id:
        return None
    return Identity(id=str(user_id), email=payload.get("email"))


async def get_store(db: AsyncSession = Depends(get_db)) -> SubscriptionStore:
    return SubscriptionStore(db)
