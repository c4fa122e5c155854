from datetime import datetime
from enum import Enum
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class MatchStatus(str, Enum):
    UPCOMING = "Upcoming"
    PREDICTION_OPEN = "PredictionOpen"
    PREDICTION_CLOSED = "PredictionClosed"
    RESULT_AVAILABLE = "ResultAvailable"
    MATCH_DRAWN = "MatchDrawn"


class ResultType(str, Enum):
    WINNER = "Winner"
    DRAW = "Draw"


# Statuses in which predictions are still accepted
OPEN_STATUSES = (MatchStatus.UPCOMING, MatchStatus.PREDICTION_OPEN)
# Statuses reached only through result entry
RESULTED_STATUSES = (MatchStatus.RESULT_AVAILABLE, MatchStatus.MATCH_DRAWN)


class Match(SQLModel, table=True):
    __tablename__ = "matches"

    id: Optional[int] = Field(default=None, primary_key=True)
    space_id: int = Field(foreign_key="spaces.id", index=True)

    team1_name: str = Field(max_length=100)
    team2_name: str = Field(max_length=100)

    # Naive local times, like every other timestamp in the schema
    scheduled_at: datetime = Field(sa_type=DateTime, index=True)
    prediction_deadline: datetime = Field(sa_type=DateTime)

    status: MatchStatus = Field(default=MatchStatus.UPCOMING)

    # Actual result (filled by admin)
    result_type: Optional[ResultType] = Field(default=None)
    winning_team: Optional[str] = Field(default=None, max_length=100)
    result_entered_at: Optional[datetime] = Field(default=None, sa_type=DateTime, index=True)

    # Display only
    week_number: Optional[int] = Field(default=None)
    match_number: Optional[int] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
    updated_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)

    @property
    def is_resulted(self) -> bool:
        return self.status in RESULTED_STATUSES

    def has_team(self, team_name: str) -> bool:
        return team_name in (self.team1_name, self.team2_name)
