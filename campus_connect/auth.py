"""Authenticated caller identity.

Sessions are issued upstream; the gateway forwards the caller's user id in a
header. Services never read it themselves: routers pass it in explicitly.
"""

from typing import Optional

from fastapi import Request

from campus_connect import config
from campus_connect.errors import AuthenticationError


def get_current_user_id(request: Request) -> str:
    """Dependency resolving the caller's user id."""
    user_id = _clean(request.headers.get(config.USER_ID_HEADER))
    if user_id is None:
        raise AuthenticationError()
    return user_id


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
