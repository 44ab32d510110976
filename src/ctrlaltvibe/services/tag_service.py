"""Project tags and AI coding tools."""

from cachetools_async import cached
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.core.domain import proper_case_tag
from ctrlaltvibe.core.errors import ConflictError
from ctrlaltvibe.core.models import CodingTool, ProjectTag, Tag
from ctrlaltvibe.infra.cache import tags_cache


def _popular_key(_db: AsyncSession, limit: int = 5) -> tuple:
    return ("popular", limit)


def _all_key(_db: AsyncSession) -> tuple:
    return ("all",)


@cached(cache=tags_cache, key=_popular_key)
async def get_popular_tags(db: AsyncSession, limit: int = 5) -> list[dict]:
    """Tags attached to the most projects."""
    project_count = func.count(ProjectTag.project_id).label("project_count")
    result = await db.execute(
        select(Tag.id, Tag.name, project_count)
        .join(ProjectTag, col(ProjectTag.tag_id) == col(Tag.id))
        .group_by(col(Tag.id), col(Tag.name))
        .order_by(project_count.desc(), col(Tag.name))
        .limit(limit)
    )
    return [
        {"id": tag_id, "name": proper_case_tag(name), "count": count}
        for tag_id, name, count in result.all()
    ]


@cached(cache=tags_cache, key=_all_key)
async def get_all_tags(db: AsyncSession) -> list[str]:
    result = await db.execute(select(Tag.name).order_by(func.lower(Tag.name)))
    return [proper_case_tag(name) for name in result.scalars().all()]


async def list_coding_tools(db: AsyncSession) -> list[CodingTool]:
    result = await db.execute(select(CodingTool).order_by(func.lower(CodingTool.name)))
    return list(result.scalars().all())


async def list_popular_coding_tools(db: AsyncSession, limit: int = 10) -> list[CodingTool]:
    result = await db.execute(
        select(CodingTool)
        .where(col(CodingTool.is_popular).is_(True))
        .order_by(func.lower(CodingTool.name))
        .limit(limit)
    )
    return list(result.scalars().all())


async def create_coding_tool(
    db: AsyncSession,
    name: str,
    category: str | None = None,
    is_popular: bool = False,
) -> CodingTool:
    name = name.strip()
    result = await db.execute(
        select(CodingTool.id).where(func.lower(CodingTool.name) == name.lower())
    )
    if result.first() is not None:
        raise ConflictError("Coding tool already exists")

    tool = CodingTool(name=name, category=category or "Other", is_popular=is_popular)
    db.add(tool)
    await db.commit()
    await db.refresh(tool)
    return tool
