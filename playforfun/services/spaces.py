import logging
import random
import string
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..config import JOIN_CODE_LENGTH, JOIN_CODE_MAX_ATTEMPTS, MIN_PASSWORD_LENGTH
from ..exceptions import (
    AuthenticationError,
    JoinCodeGenerationError,
    NotFoundError,
    ValidationError,
)
from ..models.space import Space
from ..models.user import User
from .auth import hash_password, verify_password

logger = logging.getLogger(__name__)

JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits

INVALID_ADMIN_LOGIN = "Invalid Join Code or Admin Password"
INVALID_USER_LOGIN = "Invalid credentials or space not found."
USERNAME_TAKEN = "Username '{username}' is already taken in this Space. Please choose another."


def generate_join_code(length: int = JOIN_CODE_LENGTH) -> str:
    """Generate a random alphanumeric join code."""
    return ''.join(random.choices(JOIN_CODE_ALPHABET, k=length))


def is_join_code_taken(db: Session, join_code: str) -> bool:
    return db.exec(select(Space.id).where(Space.join_code == join_code)).first() is not None


def get_space_by_join_code(db: Session, join_code: str) -> Optional[Space]:
    return db.exec(select(Space).where(Space.join_code == join_code)).first()


def get_user_in_space(db: Session, space_id: int, username: str) -> Optional[User]:
    statement = select(User).where(User.space_id == space_id, User.username == username)
    return db.exec(statement).first()


def create_space(
    db: Session,
    space_name: str,
    admin_password: str,
    confirm_password: str,
    max_attempts: int = JOIN_CODE_MAX_ATTEMPTS
) -> Space:
    """
    Create a new space with a unique join code.

    The join code is drawn at random and re-drawn on collision, whether the
    collision shows up in the lookup or as a unique-constraint failure on
    insert. After ``max_attempts`` collisions the request fails and nothing
    is written.
    """
    space_name = space_name.strip()
    if not space_name or not admin_password:
        raise ValidationError("Space name and admin passwords are required")
    if admin_password != confirm_password:
        raise ValidationError("Admin passwords do not match")

    admin_password_hash = hash_password(admin_password)

    for attempt in range(1, max_attempts + 1):
        candidate = generate_join_code()
        if is_join_code_taken(db, candidate):
            logger.info("Join code collision on attempt %d/%d", attempt, max_attempts)
            continue

        space = Space(
            space_name=space_name,
            admin_password_hash=admin_password_hash,
            join_code=candidate
        )
        db.add(space)
        try:
            db.commit()
        except IntegrityError:
            # Taken by a concurrent request after the lookup
            db.rollback()
            logger.info("Join code collision on insert, attempt %d/%d", attempt, max_attempts)
            continue

        db.refresh(space)
        logger.info("Created space %s (%s)", space.id, space.space_name)
        return space

    logger.error("Could not generate a unique join code after %d attempts", max_attempts)
    raise JoinCodeGenerationError("Could not generate a unique join code. Please try again.")


def join_space(
    db: Session,
    join_code: str,
    username: str,
    password: str,
    confirm_password: str
) -> tuple[Space, User]:
    """Register a new member in the space identified by ``join_code``."""
    username = username.strip()
    if not username:
        raise ValidationError("Username is required.")
    if password != confirm_password:
        raise ValidationError("Passwords do not match.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")

    space = get_space_by_join_code(db, join_code)
    if not space:
        raise NotFoundError("Invalid Join Code.")

    if get_user_in_space(db, space.id, username):
        raise ValidationError(USERNAME_TAKEN.format(username=username))

    user = User(
        space_id=space.id,
        username=username,
        password_hash=hash_password(password)
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Same username registered by a concurrent request
        db.rollback()
        raise ValidationError(USERNAME_TAKEN.format(username=username)) from exc
    db.refresh(user)

    return space, user


def authenticate_admin(db: Session, join_code: str, admin_password: str) -> Space:
    """Return the space whose admin password matches, or raise."""
    space = get_space_by_join_code(db, join_code)
    if not space or not verify_password(admin_password, space.admin_password_hash):
        raise AuthenticationError(INVALID_ADMIN_LOGIN)
    return space


def authenticate_user(db: Session, join_code: str, username: str, password: str) -> tuple[Space, User]:
    """Authenticate a member by join code, username and password."""
    space = get_space_by_join_code(db, join_code)
    if not space:
        raise AuthenticationError(INVALID_USER_LOGIN)

    user = get_user_in_space(db, space.id, username)
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError(INVALID_USER_LOGIN)

    return space, user
