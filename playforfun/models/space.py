from datetime import datetime
from typing import Optional
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


class Space(SQLModel, table=True):
    __tablename__ = "spaces"

    id: Optional[int] = Field(default=None, primary_key=True)
    space_name: str = Field(max_length=100)
    admin_password_hash: str = Field(max_length=255)
    join_code: str = Field(unique=True, index=True, max_length=20)
    created_at: datetime = Field(default_factory=datetime.now, sa_type=DateTime)
