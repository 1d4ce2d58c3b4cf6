"""JWT utilities for tokens issued by the external auth provider."""
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from liftlog.config.settings import Settings, get_settings


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    settings: Settings | None = None,
) -> str:
    """Create a JWT access token the way the auth provider signs them.

    Only used by local tooling and tests; production tokens come from the
    provider.

    Args:
        data: Claims to encode (e.g., {"sub": user_id})
        expires_delta: Optional expiration time delta, one hour by default

    Returns:
        Encoded JWT token string
    """
    settings = settings or get_settings()
    to_encode = data.copy()
    to_encode["exp"] = datetime.utcnow() + (expires_delta or timedelta(hours=1))
    if settings.auth_jwt_audience and "aud" not in to_encode:
        to_encode["aud"] = settings.auth_jwt_audience

    return jwt.encode(
        to_encode,
        settings.auth_jwt_secret,
        algorithm=settings.auth_jwt_algorithm,
    )


def decode_access_token(token: str, settings: Settings | None = None) -> Optional[dict]:
    """Decode and verify a JWT access token.

    Returns:
        Decoded token payload or None if invalid or expired
    """
    settings = settings or get_settings()
    options = {} if settings.auth_jwt_audience else {"verify_aud": False}
    try:
        return jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience,
            options=options,
        )
    except JWTError:
        return None


def verify_token(token: str, settings: Settings | None = None) -> Optional[str]:
    """Verify a JWT token and extract the user ID from its ``sub`` claim."""
    payload = decode_access_token(token, settings)

    if payload is None:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    return str(user_id)
