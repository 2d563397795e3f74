"""
Request helpers for API tests
"""

from tasklane.permissions.principals import LinkShare, User


def auth_headers(user: User) -> dict:
    return {"X-User-ID": str(user.id)}


def share_headers(share: LinkShare) -> dict:
    return {"X-Link-Share": share.hash}
