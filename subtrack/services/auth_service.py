from datetime import datetime, timedelta, timezone

from jose import jwt

from subtrack.config import settings


def issue_access_token(user_id: str, email: str | None = None) -> str:
    """Mint an access token the API accepts.

    Production tokens come from the identity provider; this is for local
    development and tests sharing ``JWT_SECRET``.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
