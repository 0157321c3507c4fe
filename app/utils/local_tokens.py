"""JWT session token helpers.

Tokens carry the username only. The caller's role is always re-read from the
database when the token is used.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config.settings import settings

ALGORITHM = "HS256"


def create_local_token(username: str) -> str:
    """Create a JWT access token.

    Args:
        username: Admin username to encode as the token subject

    Returns:
        str: Encoded JWT token
    """
    now = datetime.now(timezone.utc)
    exp = now + timedelta(seconds=settings.LOCAL_AUTH_TOKEN_EXP_SECONDS)
    payload = {
        "sub": username,
        "exp": exp,
        "iat": now,
    }
    return jwt.encode(payload, settings.LOCAL_AUTH_SECRET, algorithm=ALGORITHM)


def decode_local_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        ValueError: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.LOCAL_AUTH_SECRET,
            algorithms=[ALGORITHM],
        )
    except JWTError as exc:
        raise ValueError(f"Invalid token: {exc}") from exc
