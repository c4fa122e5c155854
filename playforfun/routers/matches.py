from datetime import date, datetime, time
from typing import Annotated, Any, Dict, Literal, Optional, Union
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlmodel import Session

from ..database import get_session
from ..dependencies import Identity, require_admin, require_identity
from ..models.match import Match, ResultType
from ..services import matches as match_service
from ..services.scoring import clear_match_result, record_match_result

router = APIRouter(prefix="/api/matches", tags=["matches"])


class MatchCreate(BaseModel):
    """Schema for adding a match."""
    match_date: date
    match_time: time
    team1_name: str
    team2_name: str
    prediction_deadline_date: date
    prediction_deadline_time: time
    week_number: Optional[int] = None
    match_number: Optional[int] = None


class MatchUpdate(BaseModel):
    """Schema for editing a match; only the fields sent are changed."""
    match_date: Optional[date] = None
    match_time: Optional[time] = None
    team1_name: Optional[str] = None
    team2_name: Optional[str] = None
    prediction_deadline_date: Optional[date] = None
    prediction_deadline_time: Optional[time] = None
    week_number: Optional[int] = None
    match_number: Optional[int] = None


class WinnerResult(BaseModel):
    result_type: Literal["Winner"]
    winning_team: str


class DrawResult(BaseModel):
    result_type: Literal["Draw"]


MatchResult = Annotated[Union[WinnerResult, DrawResult], Field(discriminator="result_type")]


def serialize_match(match: Match) -> Dict[str, Any]:
    return {
        "match_id": match.id,
        "space_id": match.space_id,
        "team1_name": match.team1_name,
        "team2_name": match.team2_name,
        "scheduled_at": match.scheduled_at.isoformat(),
        "match_date": match.scheduled_at.date().isoformat(),
        "match_time": match.scheduled_at.time().isoformat(timespec="seconds"),
        "prediction_deadline": match.prediction_deadline.isoformat(),
        "status": match.status,
        "result_type": match.result_type,
        "winning_team": match.winning_team,
        "result_entered_at": match.result_entered_at.isoformat() if match.result_entered_at else None,
        "week_number": match.week_number,
        "match_number": match.match_number
    }


def _merge(new_date: Optional[date], new_time: Optional[time], current: datetime) -> datetime:
    return datetime.combine(
        new_date if new_date is not None else current.date(),
        new_time if new_time is not None else current.time()
    )


# --- Admin only ---

@router.post("/admin/add", status_code=status.HTTP_201_CREATED)
async def add_match(
    payload: MatchCreate,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_session)
):
    match = match_service.create_match(
        db,
        identity.space_id,
        team1_name=payload.team1_name,
        team2_name=payload.team2_name,
        scheduled_at=datetime.combine(payload.match_date, payload.match_time),
        prediction_deadline=datetime.combine(payload.prediction_deadline_date, payload.prediction_deadline_time),
        week_number=payload.week_number,
        match_number=payload.match_number
    )
    return {"message": "Match added successfully", "match": serialize_match(match)}


@router.get("/admin/all")
async def get_all_matches_admin(
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_session)
):
    return [serialize_match(match) for match in match_service.list_matches(db, identity.space_id)]


@router.put("/admin/{match_id}/edit")
async def edit_match(
    match_id: int,
    payload: MatchUpdate,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_session)
):
    sent = payload.model_fields_set
    current = match_service.get_match(db, identity.space_id, match_id)

    changes: Dict[str, Any] = {}
    for key in ("team1_name", "team2_name", "week_number", "match_number"):
        if key in sent:
            changes[key] = getattr(payload, key)
    if sent & {"match_date", "match_time"}:
        changes["scheduled_at"] = _merge(payload.match_date, payload.match_time, current.scheduled_at)
    if sent & {"prediction_deadline_date", "prediction_deadline_time"}:
        changes["prediction_deadline"] = _merge(
            payload.prediction_deadline_date, payload.prediction_deadline_time, current.prediction_deadline
        )

    match = match_service.update_match(db, identity.space_id, match_id, changes)
    return {"message": "Match updated successfully", "match": serialize_match(match)}


@router.delete("/admin/{match_id}/delete")
async def delete_match(
    match_id: int,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_session)
):
    match_service.delete_match(db, identity.space_id, match_id)
    return {"message": "Match deleted successfully"}


@router.put("/admin/{match_id}/result")
async def enter_match_result(
    match_id: int,
    result: MatchResult,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_session)
):
    """Enter a result and score every member of the space."""
    match = record_match_result(
        db,
        match_id,
        identity.space_id,
        ResultType(result.result_type),
        winning_team=getattr(result, "winning_team", None)
    )
    return {
        "message": f"Match result entered successfully for match ID {match_id}. Points calculated.",
        "match": serialize_match(match)
    }


@router.post("/admin/{match_id}/clear-result")
async def clear_result(
    match_id: int,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_session)
):
    """Remove a result and revert the points it awarded."""
    match = clear_match_result(db, match_id, identity.space_id)
    return {
        "message": f"Result for match ID {match_id} cleared. Points reverted. Match status: {match.status.value}.",
        "match": serialize_match(match)
    }


# --- Any member of the space ---

@router.get("")
async def get_matches(
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_session)
):
    return [serialize_match(match) for match in match_service.list_matches(db, identity.space_id)]


@router.get("/{match_id}")
async def get_match(
    match_id: int,
    identity: Identity = Depends(require_identity),
    db: Session = Depends(get_session)
):
    return serialize_match(match_service.get_match(db, identity.space_id, match_id))
