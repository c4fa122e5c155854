import logging
from datetime import datetime
from typing import Dict, Optional
from sqlalchemy import update
from sqlmodel import Session, select

from ..exceptions import NotFoundError, ScoringError, ValidationError
from ..models.match import Match, ResultType
from ..models.prediction import Prediction
from ..models.user import User
from .lifecycle import (
    ensure_can_clear_result,
    ensure_can_enter_result,
    resulted_status,
    status_after_clear,
)
from .predictions import upsert_prediction

logger = logging.getLogger(__name__)

CORRECT_PICK_POINTS = 2
WRONG_PICK_POINTS = -1
NO_PICK_POINTS = -1


def calculate_points(
    result_type: ResultType,
    winning_team: Optional[str],
    predicted_winner: Optional[str]
) -> int:
    """
    Points a single member earns for a resulted match.

    Scoring:
    - Draw: 0 for everyone, pick or not
    - Winner: +2 for the winning team, -1 for the losing team, -1 for no pick
    """
    if result_type == ResultType.DRAW:
        return 0
    if predicted_winner is None:
        return NO_PICK_POINTS
    if predicted_winner == winning_team:
        return CORRECT_PICK_POINTS
    return WRONG_PICK_POINTS


def _lock_match(db: Session, match_id: int, space_id: int) -> Match:
    statement = (
        select(Match)
        .where(Match.id == match_id, Match.space_id == space_id)
        .with_for_update()
    )
    match = db.exec(statement).first()
    if not match:
        raise NotFoundError("Match not found.")
    return match


def _add_to_total(db: Session, user_id: int, delta: int) -> None:
    # Atomic increment; the loaded User row is not touched
    db.exec(
        update(User)
        .where(User.id == user_id)
        .values(overall_total_points=User.overall_total_points + delta)
        .execution_options(synchronize_session=False)
    )


def apply_match_points(db: Session, match: Match, now: datetime) -> Dict[str, int]:
    """
    Score every member of the match's space against its result.

    Members without a prediction row get one with no pick so the penalty is
    recorded. Runs inside the caller's transaction and does not commit.
    Returns how many members fell into each outcome.
    """
    member_ids = db.exec(select(User.id).where(User.space_id == match.space_id)).all()
    predictions = {
        prediction.user_id: prediction
        for prediction in db.exec(select(Prediction).where(Prediction.match_id == match.id)).all()
    }

    outcome = {"correct": 0, "incorrect": 0, "no_pick": 0, "draw": 0}

    for user_id in member_ids:
        prediction = predictions.get(user_id)
        predicted_winner = prediction.predicted_winner if prediction else None
        points = calculate_points(match.result_type, match.winning_team, predicted_winner)

        _add_to_total(db, user_id, points)

        if prediction:
            prediction.points_earned_for_this_match = points
            db.add(prediction)
        else:
            upsert_prediction(
                db,
                {
                    "user_id": user_id,
                    "match_id": match.id,
                    "space_id": match.space_id,
                    "predicted_winner": None,
                    "points_earned_for_this_match": points,
                    "predicted_at": now,
                },
                update_columns=["points_earned_for_this_match"]
            )

        if match.result_type == ResultType.DRAW:
            outcome["draw"] += 1
        elif predicted_winner is None:
            outcome["no_pick"] += 1
        elif points == CORRECT_PICK_POINTS:
            outcome["correct"] += 1
        else:
            outcome["incorrect"] += 1

    return outcome


def revert_match_points(db: Session, match: Match) -> int:
    """
    Undo ``apply_match_points``: subtract each row's points from its owner
    and zero the row. Does not commit. Returns the number of rows reverted.
    """
    predictions = db.exec(select(Prediction).where(Prediction.match_id == match.id)).all()

    for prediction in predictions:
        if prediction.points_earned_for_this_match:
            _add_to_total(db, prediction.user_id, -prediction.points_earned_for_this_match)
        prediction.points_earned_for_this_match = 0
        db.add(prediction)

    return len(predictions)


def record_match_result(
    db: Session,
    match_id: int,
    space_id: int,
    result_type: ResultType,
    winning_team: Optional[str] = None,
    now: Optional[datetime] = None
) -> Match:
    """
    Enter a match result and score the whole space in one transaction.

    Either the result and every member's points are committed together, or
    nothing is: any failure rolls back and raises ScoringError.
    """
    now = now or datetime.now()
    match = _lock_match(db, match_id, space_id)
    ensure_can_enter_result(match)

    if result_type == ResultType.WINNER:
        winning_team = (winning_team or "").strip()
        if not winning_team:
            raise ValidationError('Winning team is required when the result type is "Winner".')
        if not match.has_team(winning_team):
            raise ValidationError(
                f"Winning team must be '{match.team1_name}' or '{match.team2_name}'."
            )
    else:
        winning_team = None

    logger.info(
        "Scoring match %s in space %s: %s %s",
        match_id, space_id, result_type.value, winning_team or ""
    )

    try:
        match.result_type = result_type
        match.winning_team = winning_team
        match.status = resulted_status(result_type)
        match.result_entered_at = now
        match.updated_at = now
        db.add(match)

        outcome = apply_match_points(db, match, now)
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.exception("Scoring match %s failed, transaction rolled back", match_id)
        raise ScoringError("Server error entering match result. No points were changed; please try again.") from exc

    logger.info("Match %s scored: %s", match_id, outcome)
    db.refresh(match)
    return match


def clear_match_result(
    db: Session,
    match_id: int,
    space_id: int,
    now: Optional[datetime] = None
) -> Match:
    """Remove a match result and revert every point it awarded, in one transaction."""
    now = now or datetime.now()
    match = _lock_match(db, match_id, space_id)
    ensure_can_clear_result(match)

    try:
        reverted = revert_match_points(db, match)

        match.status = status_after_clear(match, now)
        match.result_type = None
        match.winning_team = None
        match.result_entered_at = None
        match.updated_at = now
        db.add(match)

        db.commit()
    except Exception as exc:
        db.rollback()
        logger.exception("Clearing result of match %s failed, transaction rolled back", match_id)
        raise ScoringError("Server error clearing result. No points were changed; please try again.") from exc

    logger.info("Cleared result of match %s, reverted %d predictions", match_id, reverted)
    db.refresh(match)
    return match
