from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
from sqlmodel import Session, select, func

from ..models.match import Match, RESULTED_STATUSES
from ..models.prediction import Prediction
from ..models.user import User

WEDNESDAY = 2  # datetime.weekday()


def week_window(now: datetime) -> Tuple[datetime, datetime]:
    """
    The scoring week containing ``now``.

    Weeks run from Wednesday 00:00:00 through the following Tuesday
    23:59:59.999999, in the same (local) time as the stored timestamps.
    """
    days_since_wednesday = (now.weekday() - WEDNESDAY) % 7
    start = (now - timedelta(days=days_since_wednesday)).replace(
        hour=0, minute=0, second=0, microsecond=0
    )
    end = start + timedelta(days=7) - timedelta(microseconds=1)
    return start, end


def assign_ranks(entries: List[Dict[str, Any]], points_key: str) -> List[Dict[str, Any]]:
    """
    Add a tie-aware ``rank`` to entries already sorted best first.

    Equal scores share a rank; the next score's rank is one more than the
    number of entries strictly ahead of it (1, 2, 2, 4).
    """
    previous_points = None
    rank = 0
    for position, entry in enumerate(entries, start=1):
        if entry[points_key] != previous_points:
            rank = position
            previous_points = entry[points_key]
        entry["rank"] = rank
    return entries


def overall_leaderboard(db: Session, space_id: int) -> List[Dict[str, Any]]:
    statement = (
        select(User.id, User.username, User.overall_total_points)
        .where(User.space_id == space_id)
        .order_by(User.overall_total_points.desc(), User.username.asc())
    )
    results = db.exec(statement).all()

    leaderboard = [
        {
            "user_id": row[0],
            "username": row[1],
            "overall_total_points": row[2]
        }
        for row in results
    ]
    return assign_ranks(leaderboard, "overall_total_points")


def weekly_leaderboard(db: Session, space_id: int, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Points from matches resulted in the current Wednesday-Tuesday week.

    Every member of the space is listed, with 0 when nothing of theirs was
    scored this week.
    """
    start, end = week_window(now or datetime.now())

    weekly_query = (
        select(
            Prediction.user_id,
            func.sum(Prediction.points_earned_for_this_match).label("weekly_points")
        )
        .join(Match, Match.id == Prediction.match_id)
        .where(
            Prediction.space_id == space_id,
            Match.space_id == space_id,
            Match.status.in_(RESULTED_STATUSES),
            Match.result_entered_at >= start,
            Match.result_entered_at <= end
        )
        .group_by(Prediction.user_id)
    )
    weekly_points = {row[0]: int(row[1] or 0) for row in db.exec(weekly_query).all()}

    members = db.exec(select(User.id, User.username).where(User.space_id == space_id)).all()

    leaderboard = [
        {
            "user_id": user_id,
            "username": username,
            "weekly_points": weekly_points.get(user_id, 0)
        }
        for user_id, username in members
    ]
    leaderboard.sort(key=lambda entry: (-entry["weekly_points"], entry["username"]))
    return assign_ranks(leaderboard, "weekly_points")
