"""Bearer token helpers.

Tokens are issued by the upstream identity service and signed with the shared
``SECRET_KEY``; this service only needs to read the ``sub`` claim.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from civicvote.config import get_settings

ALGORITHM = "HS256"
DEFAULT_TOKEN_TTL = timedelta(minutes=60)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or DEFAULT_TOKEN_TTL)
    return jwt.encode({**data, "exp": expire}, get_settings().secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc
