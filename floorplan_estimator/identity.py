"""
Request identity.

There are no accounts: every browser sends an opaque X-User-Key header and
all saved state (settings, floor plans, the current analysis) is scoped to
that key.
"""

from typing import Optional

from fastapi import Header, HTTPException, status

MAX_USER_KEY_LENGTH = 128


def get_user_key(x_user_key: Optional[str] = Header(None)) -> str:
    """FastAPI dependency - returns the caller's user key."""
    key = (x_user_key or "").strip()
    if not key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Key header required",
        )
    if len(key) > MAX_USER_KEY_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"X-User-Key longer than {MAX_USER_KEY_LENGTH} characters",
        )
    return key
