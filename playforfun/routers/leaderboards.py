from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..database import get_session
from ..dependencies import Identity, require_identity
from ..services.leaderboard import overall_leaderboard, weekly_leaderboard

router = APIRouter(prefix="/api/leaderboards", tags=["leaderboards"])


@router.get("/overall")
async def get_overall_leaderboard(
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_session)
):
    return overall_leaderboard(db, identity.space_id)


@router.get("/weekly")
async def get_weekly_leaderboard(
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_session)
):
    """Points from matches resulted since the most recent Wednesday."""
    return weekly_leaderboard(db, identity.space_id)
