"""Tag and coding-tool API endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field

from ctrlaltvibe.app.api.v1.dependencies import AdminUser, DbSession
from ctrlaltvibe.services import project_feed, tag_service

router = APIRouter(tags=["tags"])


class PopularTag(BaseModel):
    id: str
    name: str
    count: int


class CodingToolResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: str
    name: str
    category: str
    is_popular: bool
    created_at: datetime


class CreateCodingToolRequest(BaseModel):
    name: str = Field(min_length=2, max_length=50)
    category: str | None = Field(default=None, max_length=50)
    is_popular: bool = False


@router.get("/tags/popular", response_model=list[PopularTag])
async def popular_tags(
    db: DbSession, limit: Annotated[int, Query()] = 5
) -> list[PopularTag]:
    tags = await tag_service.get_popular_tags(db, limit=project_feed.clamp_limit(limit))
    return [PopularTag(**tag) for tag in tags]


@router.get("/tags")
async def all_tags(db: DbSession) -> list[str]:
    return await tag_service.get_all_tags(db)


@router.get("/coding-tools", response_model=list[CodingToolResponse])
async def coding_tools(db: DbSession) -> list[CodingToolResponse]:
    tools = await tag_service.list_coding_tools(db)
    return [CodingToolResponse.model_validate(tool) for tool in tools]


@router.get("/coding-tools/popular", response_model=list[CodingToolResponse])
async def popular_coding_tools(
    db: DbSession, limit: Annotated[int, Query()] = 10
) -> list[CodingToolResponse]:
    tools = await tag_service.list_popular_coding_tools(
        db, limit=project_feed.clamp_limit(limit)
    )
    return [CodingToolResponse.model_validate(tool) for tool in tools]


@router.post("/coding-tools", response_model=CodingToolResponse, status_code=201)
async def create_coding_tool(
    body: CreateCodingToolRequest, db: DbSession, _admin: AdminUser
) -> CodingToolResponse:
    tool = await tag_service.create_coding_tool(
        db, body.name, category=body.category, is_popular=body.is_popular
    )
    return CodingToolResponse.model_validate(tool)
