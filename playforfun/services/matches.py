import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import delete
from sqlmodel import Session, select

from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models.match import Match
from ..models.prediction import Prediction
from .lifecycle import validate_schedule
from .scoring import revert_match_points

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "team1_name",
    "team2_name",
    "scheduled_at",
    "prediction_deadline",
    "week_number",
    "match_number",
)


def _validate_teams(team1_name: str, team2_name: str) -> None:
    if not team1_name or not team2_name:
        raise ValidationError("Both team names are required.")
    if team1_name == team2_name:
        raise ValidationError("A match needs two different teams.")


def create_match(
    db: Session,
    space_id: int,
    team1_name: str,
    team2_name: str,
    scheduled_at: datetime,
    prediction_deadline: datetime,
    week_number: Optional[int] = None,
    match_number: Optional[int] = None
) -> Match:
    """Add an Upcoming match to a space."""
    team1_name, team2_name = team1_name.strip(), team2_name.strip()
    _validate_teams(team1_name, team2_name)
    validate_schedule(scheduled_at, prediction_deadline)

    match = Match(
        space_id=space_id,
        team1_name=team1_name,
        team2_name=team2_name,
        scheduled_at=scheduled_at,
        prediction_deadline=prediction_deadline,
        week_number=week_number,
        match_number=match_number
    )
    db.add(match)
    db.commit()
    db.refresh(match)
    return match


def list_matches(db: Session, space_id: int) -> List[Match]:
    statement = (
        select(Match)
        .where(Match.space_id == space_id)
        .order_by(Match.scheduled_at, Match.id)
    )
    return db.exec(statement).all()


def get_match(db: Session, space_id: int, match_id: int) -> Match:
    statement = select(Match).where(Match.id == match_id, Match.space_id == space_id)
    match = db.exec(statement).first()
    if not match:
        raise NotFoundError("Match not found.")
    return match


def update_match(db: Session, space_id: int, match_id: int, changes: Dict[str, Any]) -> Match:
    """
    Apply a partial edit to a match.

    The merged schedule is re-validated. Team names of a resulted match are
    frozen because the stored winning team refers to them. The status is
    not editable here.
    """
    changes = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
    if not changes:
        raise ValidationError("No update data provided")

    match = get_match(db, space_id, match_id)

    for key in ("team1_name", "team2_name"):
        if key in changes:
            if changes[key] is None:
                raise ValidationError("Both team names are required.")
            changes[key] = changes[key].strip()

    team1_name = changes.get("team1_name", match.team1_name)
    team2_name = changes.get("team2_name", match.team2_name)
    if match.is_resulted and (team1_name, team2_name) != (match.team1_name, match.team2_name):
        raise ConflictError("Team names cannot change once a result has been entered.")
    _validate_teams(team1_name, team2_name)

    for key in ("scheduled_at", "prediction_deadline"):
        if key in changes and changes[key] is None:
            raise ValidationError("Match time and prediction deadline cannot be removed.")
    validate_schedule(
        changes.get("scheduled_at", match.scheduled_at),
        changes.get("prediction_deadline", match.prediction_deadline)
    )

    for key, value in changes.items():
        setattr(match, key, value)
    match.updated_at = datetime.now()

    db.add(match)
    db.commit()
    db.refresh(match)
    return match


def delete_match(db: Session, space_id: int, match_id: int) -> None:
    """
    Delete a match together with its predictions.

    Points awarded by a resulted match are taken back first, in the same
    transaction, so members' totals stay equal to their remaining rows.
    """
    match = get_match(db, space_id, match_id)

    try:
        if match.is_resulted:
            reverted = revert_match_points(db, match)
            logger.info("Reverted %d predictions before deleting match %s", reverted, match_id)
        db.exec(delete(Prediction).where(Prediction.match_id == match.id))
        db.delete(match)
        db.commit()
    except Exception:
        db.rollback()
        raise
