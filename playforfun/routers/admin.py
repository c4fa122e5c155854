from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlmodel import Session

from ..database import get_session
from ..dependencies import Identity, require_admin
from ..services.admin import set_user_score

router = APIRouter(prefix="/api/admin", tags=["admin"])


class ScoreOverride(BaseModel):
    new_score: int = Field(alias="newScore")


@router.put("/users/{user_id}/score")
async def put_user_score(
    user_id: int,
    payload: ScoreOverride,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_session)
):
    """Overwrite a member's overall points without touching their predictions."""
    user = set_user_score(db, identity.space_id, user_id, payload.new_score)

    return {
        "message": f"User ID {user.id}'s score updated to {user.overall_total_points} successfully.",
        "user_id": user.id,
        "username": user.username,
        "overall_total_points": user.overall_total_points
    }
