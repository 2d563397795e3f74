"""
Shared dependency injection helpers for FastAPI routes.

Identity is established upstream of this service: the proxy in front of it
sets `X-User-ID` for signed-in users. Anonymous callers holding a link share
present its hash in `X-Link-Share` instead.
"""

import logging
from typing import Optional

from fastapi import Depends, Header

from tasklane.errors import AuthError, LinkShareNotFoundError
from tasklane.permissions.engine import AccessEngine, get_access_engine
from tasklane.permissions.principals import Principal, User
from tasklane.services.link_shares import authenticate_link_share

logger = logging.getLogger(__name__)


def get_engine() -> AccessEngine:
    """Access engine dependency; override in tests via dependency_overrides"""
    return get_access_engine()


def get_current_principal(
    x_user_id: Optional[int] = Header(None),
    x_link_share: Optional[str] = Header(None),
    engine: AccessEngine = Depends(get_engine),
) -> Principal:
    """
    Resolve the calling principal

    Raises:
        AuthError: Neither header is present, or the link share hash is unknown
    """
    if x_link_share:
        try:
            return authenticate_link_share(engine, x_link_share)
        except LinkShareNotFoundError:
            logger.warning("Rejected request with unknown link share hash")
            raise AuthError("Invalid link share")

    if x_user_id is not None:
        if x_user_id < 1:
            raise AuthError("Invalid user id")
        return User(id=x_user_id)

    raise AuthError()


def get_current_user(principal: Principal = Depends(get_current_principal)) -> User:
    """Like get_current_principal, but link shares are rejected"""
    if not isinstance(principal, User):
        raise AuthError("This operation requires a user account")
    return principal


__all__ = [
    "get_engine",
    "get_current_principal",
    "get_current_user",
]
