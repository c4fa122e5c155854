from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class AuthSession(SQLModel, table=True):
    __tablename__ = "auth_sessions"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_token: str = Field(unique=True, index=True, max_length=255)
    space_id: int = Field(foreign_key="spaces.id", index=True)
    # Admin sessions belong to the space, not to a user row
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    is_admin: bool = Field(default=False)
    expires_at: datetime = Field(sa_type=DateTime)
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
