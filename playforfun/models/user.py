from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, UniqueConstraint


class User(SQLModel, table=True):
    __tablename__ = "users"
    # Usernames are unique per space, not globally
    __table_args__ = (UniqueConstraint("space_id", "username", name="unique_space_username"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    space_id: int = Field(foreign_key="spaces.id", index=True)
    username: str = Field(max_length=50)
    password_hash: str = Field(max_length=255)

    # Running total, maintained incrementally by the scoring engine
    overall_total_points: int = Field(default=0)

    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
