"""
Match status state machine.

    Upcoming -> PredictionOpen -> PredictionClosed -> ResultAvailable | MatchDrawn
    ResultAvailable | MatchDrawn -> PredictionOpen | PredictionClosed  (clear result)

Deadline expiry is evaluated lazily when a prediction is attempted; there is
no background timer. Result entry and clearing are the only other ways a
status changes.
"""
from datetime import datetime

from ..exceptions import ConflictError, ValidationError
from ..models.match import Match, MatchStatus, ResultType, OPEN_STATUSES


def deadline_passed(match: Match, now: datetime) -> bool:
    return now > match.prediction_deadline


def validate_schedule(scheduled_at: datetime, prediction_deadline: datetime) -> None:
    """The prediction deadline must be strictly before kick-off."""
    if prediction_deadline >= scheduled_at:
        raise ValidationError("Prediction deadline must be before the match start time.")


def close_if_deadline_passed(match: Match, now: datetime) -> bool:
    """
    Move an open match to PredictionClosed once its deadline has passed.

    Returns True when the status changed; the caller persists it.
    """
    if match.status in OPEN_STATUSES and deadline_passed(match, now):
        match.status = MatchStatus.PREDICTION_CLOSED
        match.updated_at = now
        return True
    return False


def ensure_accepting_predictions(match: Match) -> None:
    if match.status not in OPEN_STATUSES:
        raise ConflictError(
            f"Predictions are currently closed for this match (Status: {MatchStatus(match.status).value})."
        )


def resulted_status(result_type: ResultType) -> MatchStatus:
    if result_type == ResultType.DRAW:
        return MatchStatus.MATCH_DRAWN
    return MatchStatus.RESULT_AVAILABLE


def ensure_can_enter_result(match: Match) -> None:
    if match.is_resulted:
        raise ConflictError(
            f"Match already has a result (Status: {MatchStatus(match.status).value}). Clear it before entering a new one."
        )


def ensure_can_clear_result(match: Match) -> None:
    if not match.is_resulted:
        raise ConflictError(
            f"Match does not have a clearable result (Status: {MatchStatus(match.status).value})."
        )


def status_after_clear(match: Match, now: datetime) -> MatchStatus:
    """Status a match returns to once its result is cleared."""
    if deadline_passed(match, now):
        return MatchStatus.PREDICTION_CLOSED
    return MatchStatus.PREDICTION_OPEN
