from dataclasses import dataclass
from typing import Optional
from fastapi import Request, Depends
from sqlmodel import Session

from .config import SESSION_COOKIE_NAME
from .database import get_session
from .exceptions import AuthenticationError, PermissionDeniedError
from .services.auth import get_session_by_token


@dataclass(frozen=True)
class Identity:
    """Who is calling: a space member, or the admin of a space."""

    space_id: int
    user_id: Optional[int]
    is_admin: bool
    token: str


def get_request_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


async def get_current_identity(
    request: Request,
    db: Session = Depends(get_session)
) -> Optional[Identity]:
    """Resolve the caller's session, or None when unauthenticated."""
    token = get_request_token(request)
    if not token:
        return None

    auth_session = get_session_by_token(db, token)
    if not auth_session:
        return None

    return Identity(
        space_id=auth_session.space_id,
        user_id=auth_session.user_id,
        is_admin=auth_session.is_admin,
        token=token
    )


async def require_identity(
    identity: Optional[Identity] = Depends(get_current_identity)
) -> Identity:
    """Require any authenticated caller."""
    if not identity:
        raise AuthenticationError("Not authorized, no valid session")
    return identity


async def require_admin(
    identity: Identity = Depends(require_identity)
) -> Identity:
    """Require the admin of the caller's space."""
    if not identity.is_admin:
        raise PermissionDeniedError("Not authorized as an admin")
    return identity


async def require_player(
    identity: Identity = Depends(require_identity)
) -> Identity:
    """Require a regular space member; admins manage, they do not play."""
    if identity.is_admin:
        raise PermissionDeniedError("Action not allowed for admin accounts. Admins manage, users play!")
    if identity.user_id is None:
        raise PermissionDeniedError("Action requires a standard user account.")
    return identity
