"""User activity feed and skills."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String, UniqueConstraint
from sqlmodel import Field, SQLModel

from ctrlaltvibe.core.domain import ActivityType
from ctrlaltvibe.core.models.auth import generate_ulid, utc_now


class UserActivity(SQLModel, table=True):
    __tablename__ = "user_activity"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    type: ActivityType = Field(sa_type=String)
    # Project, comment or reply id depending on `type`
    target_id: str
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class UserSkill(SQLModel, table=True):
    __tablename__ = "user_skills"
    __table_args__ = (UniqueConstraint("user_id", "category", "skill"),)

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    category: str = Field(max_length=50)
    skill: str = Field(max_length=50)
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
