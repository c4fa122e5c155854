import secrets
import bcrypt
from datetime import datetime, timedelta
from typing import Optional
from sqlmodel import Session, select

from ..config import SESSION_EXPIRE_DAYS
from ..models.session import AuthSession


def _password_bytes(password: str) -> bytes:
    # Bcrypt has a 72-byte limit on the password bytes
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        password_bytes = password_bytes[:72]
    return password_bytes


def hash_password(password: str) -> str:
    """Hash a password using bcrypt. Truncates to 72 bytes for bcrypt compatibility."""
    hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode('utf-8'))


def generate_session_token() -> str:
    """Generate a secure random session token."""
    return secrets.token_urlsafe(32)


def create_session(
    db: Session,
    space_id: int,
    user_id: Optional[int] = None,
    is_admin: bool = False
) -> AuthSession:
    """Create a new session for a space member or the space admin."""
    auth_session = AuthSession(
        session_token=generate_session_token(),
        space_id=space_id,
        user_id=user_id,
        is_admin=is_admin,
        expires_at=datetime.now() + timedelta(days=SESSION_EXPIRE_DAYS)
    )

    db.add(auth_session)
    db.commit()
    db.refresh(auth_session)

    return auth_session


def get_session_by_token(db: Session, session_token: str) -> Optional[AuthSession]:
    """Return the session for a token if it exists and has not expired."""
    statement = select(AuthSession).where(AuthSession.session_token == session_token)
    auth_session = db.exec(statement).first()

    if not auth_session:
        return None

    # Check if session has expired
    if auth_session.expires_at < datetime.now():
        db.delete(auth_session)
        db.commit()
        return None

    return auth_session


def delete_session(db: Session, session_token: str) -> bool:
    """Delete a session (logout)."""
    statement = select(AuthSession).where(AuthSession.session_token == session_token)
    auth_session = db.exec(statement).first()

    if auth_session:
        db.delete(auth_session)
        db.commit()
        return True

    return False
