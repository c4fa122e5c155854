from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, UniqueConstraint


class Prediction(SQLModel, table=True):
    __tablename__ = "predictions"
    __table_args__ = (UniqueConstraint("user_id", "match_id", name="unique_user_match"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    match_id: int = Field(foreign_key="matches.id", index=True)
    space_id: int = Field(foreign_key="spaces.id", index=True)

    # None means no pick was made; such rows only record a penalty
    predicted_winner: Optional[str] = Field(default=None, max_length=100)

    # Points (calculated after the result is entered)
    points_earned_for_this_match: int = Field(default=0)

    predicted_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
