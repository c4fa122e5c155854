import logging
from sqlmodel import Session, select

from ..exceptions import NotFoundError
from ..models.user import User

logger = logging.getLogger(__name__)


def set_user_score(db: Session, space_id: int, user_id: int, new_score: int) -> User:
    """
    Overwrite a member's overall total.

    Prediction rows are left untouched, so the total no longer equals the
    sum of the member's per-match points until the admin corrects it.
    """
    statement = select(User).where(User.id == user_id, User.space_id == space_id)
    user = db.exec(statement).first()
    if not user:
        raise NotFoundError("User not found in this space.")

    previous = user.overall_total_points
    user.overall_total_points = new_score
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("Admin override in space %s: user %s score %s -> %s", space_id, user_id, previous, new_score)
    return user
