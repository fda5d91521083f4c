"""Request identity for the storefront API.

Callers identify themselves with an ``X-User-Id`` header carrying a
registered user's id. Credential issuing and sessions live in front of this
service; here the header is resolved to a :class:`User` and role checks are
applied.
"""

from fastapi import Depends, Header, HTTPException
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.identity.user import User


async def current_user(x_user_id: str = Header(default="")) -> User:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    try:
        return current_domain.repository_for(User).get(x_user_id)
    except ObjectNotFoundError:
        raise HTTPException(status_code=401, detail="Unknown user") from None


async def require_admin(user: User = Depends(current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator role required")
    return user


def ensure_owner_or_admin(user: User, order) -> None:
    """Customers may only see and act on their own orders."""
    if not user.is_admin and str(order.user_id) != str(user.id):
        raise HTTPException(status_code=403, detail="Access denied to this order")
