from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from beautyshelf.config import Settings


def create_access_token(settings: Settings, user_id: str, email: Optional[str] = None,
                        expires_minutes: Optional[int] = None) -> str:
    """Issue a session token in the same shape Supabase auth issues (sub, email, aud, role)."""
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    to_encode: Dict[str, Any] = {
        "sub": str(user_id),
        "role": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=minutes),
    }
    if email:
        to_encode["email"] = email
    if settings.JWT_AUDIENCE:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(settings: Settings, token: str) -> Optional[Dict[str, Any]]:
    """Verified claims, or None for an invalid/expired token or one without `sub`."""
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            options={"verify_aud": bool(settings.JWT_AUDIENCE)},
        )
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload
