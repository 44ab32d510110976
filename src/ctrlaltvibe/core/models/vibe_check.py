"""Vibe check and project evaluation models.

Evaluation payloads are stored as JSON documents (JSONB on Postgres).
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from ctrlaltvibe.core.models.auth import generate_ulid, utc_now

JsonDocument = JSON().with_variant(JSONB(), "postgresql")


class VibeCheck(SQLModel, table=True):
    __tablename__ = "vibe_checks"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    user_id: str | None = Field(default=None, foreign_key="users.id")
    email: str | None = Field(default=None, max_length=255)
    website_url: str | None = Field(default=None, max_length=2048)
    project_description: str = Field(sa_column=Column(Text, nullable=False))
    evaluation: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JsonDocument)
    )
    share_id: str | None = Field(default=None, unique=True, index=True, max_length=24)
    is_public: bool = Field(default=False)
    converted_to_project: bool = Field(default=False)
    converted_project_id: str | None = Field(default=None, foreign_key="projects.id")
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )


class ProjectEvaluation(SQLModel, table=True):
    """Business evaluation attached to a project (one per project)."""

    __tablename__ = "project_evaluations"

    id: str = Field(default_factory=generate_ulid, primary_key=True)
    project_id: str = Field(foreign_key="projects.id", unique=True, index=True)
    fit_score: int | None = None
    value_proposition: str | None = Field(default=None, sa_column=Column(Text))
    evaluation: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JsonDocument, nullable=False)
    )
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True))
    )
