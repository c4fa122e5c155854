from datetime import datetime, timedelta
from typing import Optional

from sqlmodel import Session

from playforfun.models import Match, Space, User
from playforfun.services.auth import create_session, hash_password

ADMIN_PASSWORD = "adminpass"


def create_space(session: Session, name: str = "Office League", join_code: str = "ABC123") -> Space:
    space = Space(
        space_name=name,
        admin_password_hash=hash_password(ADMIN_PASSWORD),
        join_code=join_code
    )
    session.add(space)
    session.commit()
    session.refresh(space)
    return space


def create_user(session: Session, space: Space, username: str, points: int = 0) -> User:
    user = User(
        space_id=space.id,
        username=username,
        password_hash="hashed_secret",
        overall_total_points=points
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def create_match(
    session: Session,
    space: Space,
    team1: str = "Mumbai",
    team2: str = "Chennai",
    deadline: Optional[datetime] = None,
    **fields
) -> Match:
    deadline = deadline or datetime.now() + timedelta(days=1)
    match = Match(
        space_id=space.id,
        team1_name=team1,
        team2_name=team2,
        prediction_deadline=deadline,
        scheduled_at=deadline + timedelta(hours=1),
        **fields
    )
    session.add(match)
    session.commit()
    session.refresh(match)
    return match


def bearer(session: Session, space: Space, user: Optional[User] = None) -> dict:
    """Authorization header for a member, or for the space admin when no user is given."""
    if user is None:
        auth_session = create_session(session, space.id, is_admin=True)
    else:
        auth_session = create_session(session, space.id, user_id=user.id)
    return {"Authorization": f"Bearer {auth_session.session_token}"}
