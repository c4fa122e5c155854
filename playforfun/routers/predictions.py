from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from ..database import get_session
from ..dependencies import Identity, require_identity, require_player
from ..services.predictions import get_my_prediction, get_prediction_summary, submit_prediction

router = APIRouter(prefix="/api/predictions", tags=["predictions"])


class PredictionCreate(BaseModel):
    predicted_winner: str


@router.post("/{match_id}/predict")
async def post_prediction(
    match_id: int,
    prediction_data: PredictionCreate,
    identity: Identity = Depends(require_player),
    db: Session = Depends(get_session)
):
    """Submit or change the caller's pick for a match."""
    prediction, created = submit_prediction(
        db,
        match_id,
        identity.space_id,
        identity.user_id,
        prediction_data.predicted_winner
    )

    return {
        "message": "Prediction submitted successfully." if created else "Prediction updated successfully.",
        "match_id": prediction.match_id,
        "user_id": prediction.user_id,
        "predicted_winner": prediction.predicted_winner,
        "prediction_timestamp": prediction.predicted_at.isoformat()
    }


@router.get("/{match_id}/my-prediction")
async def get_prediction(
    match_id: int,
    identity: Identity = Depends(require_player),
    db: Session = Depends(get_session)
):
    prediction = get_my_prediction(db, match_id, identity.space_id, identity.user_id)

    if not prediction or prediction.predicted_winner is None:
        return {
            "predicted_winner": None,
            "prediction_timestamp": None,
            "message": "No prediction found for this match."
        }

    return {
        "predicted_winner": prediction.predicted_winner,
        "prediction_timestamp": prediction.predicted_at.isoformat(),
        "points_earned_for_this_match": prediction.points_earned_for_this_match
    }


@router.get("/{match_id}/summary")
async def get_summary(
    match_id: int,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_session)
):
    """Who picked which team for a match."""
    return get_prediction_summary(db, match_id, identity.space_id)
