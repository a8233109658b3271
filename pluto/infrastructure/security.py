from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from ..config import settings


def create_access_token(sub: str, minutes: int = 60) -> str:
    """Issue a bearer token for ``sub`` (the user's email).

    Sign-in lives in the identity provider; this is what it is expected to
    hand out, and what local tooling uses to mint tokens.
    """
    exp = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    payload = {"sub": sub, "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> str:
    """Email (sub) from the token, or JWTError."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    sub = payload.get("sub")
    if not sub:
        raise JWTError("No subject")
    return sub
