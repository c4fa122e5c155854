import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Optional
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlmodel import Session, select

from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models.match import Match
from ..models.prediction import Prediction
from ..models.user import User
from .lifecycle import close_if_deadline_passed, deadline_passed, ensure_accepting_predictions

logger = logging.getLogger(__name__)

UNIQUE_PREDICTION_COLUMNS = ["user_id", "match_id"]


def upsert_prediction(db: Session, values: Dict[str, Any], update_columns: Iterable[str]) -> None:
    """
    Insert a prediction row, or update ``update_columns`` of the existing row
    for the same (user_id, match_id) in a single statement.

    Does not commit.
    """
    table = Prediction.__table__
    update_columns = list(update_columns)
    dialect = db.get_bind().dialect.name

    if dialect == "mysql":
        statement = mysql.insert(table).values(**values)
        statement = statement.on_duplicate_key_update(
            {column: statement.inserted[column] for column in update_columns}
        )
    elif dialect in ("sqlite", "postgresql"):
        insert = sqlite.insert if dialect == "sqlite" else postgresql.insert
        statement = insert(table).values(**values)
        statement = statement.on_conflict_do_update(
            index_elements=UNIQUE_PREDICTION_COLUMNS,
            set_={column: statement.excluded[column] for column in update_columns}
        )
    else:
        raise RuntimeError(f"Upsert is not supported for the '{dialect}' dialect")

    db.exec(statement)


def get_match_in_space(db: Session, match_id: int, space_id: int) -> Match:
    statement = select(Match).where(Match.id == match_id, Match.space_id == space_id)
    match = db.exec(statement).first()
    if not match:
        raise NotFoundError("Match not found in your space.")
    return match


def get_prediction(db: Session, user_id: int, match_id: int) -> Optional[Prediction]:
    statement = select(Prediction).where(
        Prediction.user_id == user_id,
        Prediction.match_id == match_id
    )
    return db.exec(statement).first()


def submit_prediction(
    db: Session,
    match_id: int,
    space_id: int,
    user_id: int,
    predicted_winner: str,
    now: Optional[datetime] = None
) -> tuple[Prediction, bool]:
    """
    Create or replace a user's pick for a match.

    Returns the stored prediction and whether it was newly created. Any
    earlier points on the row are reset to 0 since the new pick is unscored.
    """
    now = now or datetime.now()
    predicted_winner = predicted_winner.strip()

    match = get_match_in_space(db, match_id, space_id)

    if not match.has_team(predicted_winner):
        raise ValidationError(
            f"Invalid prediction. Predicted team must be '{match.team1_name}' or '{match.team2_name}'."
        )

    if deadline_passed(match, now):
        if close_if_deadline_passed(match, now):
            db.add(match)
            db.commit()
            logger.info("Match %s closed for predictions: deadline passed on prediction attempt", match_id)
        raise ConflictError("Prediction deadline has passed for this match.")

    ensure_accepting_predictions(match)

    created = get_prediction(db, user_id, match_id) is None

    upsert_prediction(
        db,
        {
            "user_id": user_id,
            "match_id": match_id,
            "space_id": space_id,
            "predicted_winner": predicted_winner,
            "points_earned_for_this_match": 0,
            "predicted_at": now,
        },
        update_columns=["predicted_winner", "points_earned_for_this_match", "predicted_at"]
    )
    db.commit()

    return get_prediction(db, user_id, match_id), created


def get_my_prediction(db: Session, match_id: int, space_id: int, user_id: int) -> Optional[Prediction]:
    get_match_in_space(db, match_id, space_id)
    return get_prediction(db, user_id, match_id)


def get_prediction_summary(db: Session, match_id: int, space_id: int) -> Dict[str, Any]:
    """Who picked which team for a match, and who has not picked at all."""
    match = get_match_in_space(db, match_id, space_id)

    picks = db.exec(
        select(User.username, Prediction.predicted_winner)
        .join(Prediction, Prediction.user_id == User.id)
        .where(Prediction.match_id == match_id, Prediction.predicted_winner.is_not(None))
        .order_by(User.username)
    ).all()
    members = db.exec(
        select(User.username).where(User.space_id == space_id).order_by(User.username)
    ).all()

    team1_predictors = [username for username, pick in picks if pick == match.team1_name]
    team2_predictors = [username for username, pick in picks if pick == match.team2_name]
    predicted = {username for username, _ in picks}

    return {
        "match_id": match.id,
        "team1_name": match.team1_name,
        "team1_predictors": team1_predictors,
        "team2_name": match.team2_name,
        "team2_predictors": team2_predictors,
        "not_predicted": [username for username in members if username not in predicted]
    }
