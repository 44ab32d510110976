"""Vibe check: AI business evaluation of a submitted idea or URL.

Evaluations are stored as returned by the evaluator, after default
sections have been filled in by `transform_evaluation`. Reads apply the
same transform so older rows gain sections added later.
"""

import copy
import logging
import secrets
from typing import Any, Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col

from ctrlaltvibe.app.metrics.collector import VIBE_CHECKS_CREATED_TOTAL
from ctrlaltvibe.core.domain import VIBE_CHECK_COVER_IMAGE
from ctrlaltvibe.core.errors import (
    BadRequestError,
    ForbiddenError,
    NotFoundError,
    ProjectNotFoundError,
    RecaptchaFailedError,
    VibeCheckNotFoundError,
)
from ctrlaltvibe.core.logging_schema import LogEvent
from ctrlaltvibe.core.models import (
    Project,
    ProjectEvaluation,
    User,
    VibeCheck,
    utc_now,
)
from ctrlaltvibe.infra.cache import TAGS, invalidate, invalidate_projects
from ctrlaltvibe.services import project_service

logger = logging.getLogger(__name__)

VIBE_CHECK_TAG = "Vibe Check"
VIBE_CHECK_TOOL = "OpenAI"
MIN_SHARE_ID_LENGTH = 5


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> bool: ...


class Evaluator(Protocol):
    async def evaluate(
        self, project_description: str, website_url: str | None = None
    ) -> dict[str, Any]: ...


def generate_share_id() -> str:
    """24 hex characters."""
    return secrets.token_hex(12)


# =============================================================================
# Evaluation defaults
# =============================================================================


def _default_bootstrapping_guide(evaluation: dict[str, Any]) -> dict[str, Any]:
    funding = evaluation.get("fundingGuidance") or {}
    diy = (
        funding.get("bootstrappingOptions") if isinstance(funding, dict) else None
    ) or (
        "Focus on using existing free and open-source tools to build your "
        "project efficiently."
    )
    return {
        "costMinimizationTips": [
            "Utilize free cloud service tiers for development",
            "Use open-source alternatives instead of paid tools",
            "Leverage AI coding assistants to accelerate development",
            "Start with minimal viable infrastructure and scale as needed",
            "Focus on core features first, add premium features later",
        ],
        "diySolutions": diy,
        "growthWithoutFunding": (
            "Focus on organic growth through community engagement and "
            "word-of-mouth marketing."
        ),
        "timeManagement": (
            "Prioritize features by impact and development complexity, focusing "
            "on the core value proposition first."
        ),
        "milestonesOnBudget": [
            "Launch MVP with essential features",
            "Achieve first 100 active users",
            "Add one revenue-generating feature",
            "Reach break-even on operational costs",
            "Scale to 1,000 active users",
        ],
    }


_DEFAULT_ADJACENT_IDEAS = {
    "complementaryProducts": [
        "Mobile companion app for on-the-go access",
        "Browser extension for quicker access to features",
        "Analytics dashboard for user insights",
        "API for integrations with other tools",
    ],
    "pivotPossibilities": [
        "Enterprise version with team collaboration features",
        "White-label solution for agencies",
        "Specialized version for specific industry verticals",
        "Education/training platform around the core functionality",
    ],
    "expansionOpportunities": [
        "Additional language support for international markets",
        "Premium templates or presets for specific use cases",
        "Managed service option for enterprises",
        "Community marketplace for user-generated content",
    ],
    "strategicRecommendations": (
        "Focus on building a strong core product first, then expand to adjacent "
        "markets through partnerships and integrations."
    ),
}

_DEFAULT_CUSTOMER_ACQUISITION = {
    "primaryChannels": [
        "Social media organic content",
        "Content marketing via blog/tutorials",
        "Word-of-mouth referrals",
        "Online communities and forums",
    ],
    "costPerAcquisition": "Low, focused on organic strategies rather than paid acquisition",
    "conversionStrategy": (
        "Provide immediate value through freemium model with clear upgrade path"
    ),
    "retentionTactics": [
        "Regular feature updates based on user feedback",
        "Community building through Discord or Slack channels",
        "Email newsletter with tips and case studies",
        "Exceptional customer support",
    ],
    "growthOpportunities": (
        "Encourage user-generated content and social sharing to amplify organic reach"
    ),
}

_DEFAULT_LAUNCH_STRATEGY = {
    "mvpFeatures": [
        "Core functionality focused on solving the primary user pain point",
        "Intuitive, user-friendly interface",
        "Basic account system",
        "Feedback mechanism",
    ],
    "timeToMarket": "3-4 months for initial MVP using AI-assisted development",
    "marketEntryApproach": (
        "Soft launch with limited features to early adopters for feedback before "
        "wider release"
    ),
    "criticalResources": [
        "Development environment with AI coding tools",
        "Simple landing page with clear value proposition",
        "Documentation and help guides",
        "Basic analytics setup",
    ],
    "launchChecklist": [
        "Functional and security testing complete",
        "Privacy policy and terms of service ready",
        "Analytics tracking configured",
        "Social media accounts created",
        "Launch announcement content prepared",
    ],
}

_DEFAULT_REVENUE_GENERATION = {
    "businessModels": [
        "Freemium with premium features",
        "Subscription tiers for enhanced functionality",
        "One-time purchases for specific tools",
    ],
    "pricingStrategy": (
        "Value-based pricing tied to concrete benefits, with affordable entry point"
    ),
    "revenueStreams": [
        "Premium subscriptions",
        "Add-on features or templates",
        "API access for integrations",
    ],
    "unitEconomics": (
        "Low marginal costs per user allows for profit once fixed development costs "
        "are covered"
    ),
    "scalingPotential": "Highly scalable with minimal increased costs as user base grows",
}


def transform_evaluation(evaluation: dict[str, Any]) -> dict[str, Any]:
    """Return a copy with missing sections filled by defaults.

    Sections already present (truthy) are never overwritten.
    """
    result = dict(evaluation)

    if not result.get("bootstrappingGuide"):
        result["bootstrappingGuide"] = _default_bootstrapping_guide(evaluation)
    if not result.get("adjacentIdeas"):
        result["adjacentIdeas"] = copy.deepcopy(_DEFAULT_ADJACENT_IDEAS)
    if not result.get("customerAcquisition"):
        result["customerAcquisition"] = copy.deepcopy(_DEFAULT_CUSTOMER_ACQUISITION)
    if not result.get("launchStrategy"):
        result["launchStrategy"] = copy.deepcopy(_DEFAULT_LAUNCH_STRATEGY)
    if not result.get("revenueGeneration"):
        result["revenueGeneration"] = copy.deepcopy(_DEFAULT_REVENUE_GENERATION)

    return result


# =============================================================================
# Vibe checks
# =============================================================================


def serialize_vibe_check(vibe_check: VibeCheck) -> dict[str, Any]:
    return {
        "id": vibe_check.id,
        "user_id": vibe_check.user_id,
        "email": vibe_check.email,
        "website_url": vibe_check.website_url,
        "project_description": vibe_check.project_description,
        "evaluation": (
            transform_evaluation(vibe_check.evaluation) if vibe_check.evaluation else None
        ),
        "share_id": vibe_check.share_id,
        "is_public": vibe_check.is_public,
        "converted_to_project": vibe_check.converted_to_project,
        "converted_project_id": vibe_check.converted_project_id,
        "created_at": vibe_check.created_at,
        "updated_at": vibe_check.updated_at,
    }


async def create_vibe_check(
    db: AsyncSession,
    verifier: TokenVerifier,
    evaluator: Evaluator,
    project_description: str,
    recaptcha_token: str,
    email: str | None = None,
    website_url: str | None = None,
    user: User | None = None,
) -> VibeCheck:
    """Verify the captcha, run the evaluator and store a public vibe check.

    Raises:
        RecaptchaFailedError: Token rejected.
        AIServiceUnavailableError: Evaluator failed (raised by the evaluator).
    """
    if not await verifier.verify(recaptcha_token):
        raise RecaptchaFailedError()

    evaluation = await evaluator.evaluate(project_description, website_url or None)

    vibe_check = VibeCheck(
        user_id=user.id if user else None,
        email=email or None,
        website_url=website_url or None,
        project_description=project_description,
        evaluation=transform_evaluation(evaluation),
        share_id=generate_share_id(),
        is_public=True,
    )
    db.add(vibe_check)
    await db.commit()
    await db.refresh(vibe_check)

    VIBE_CHECKS_CREATED_TOTAL.inc()
    logger.info(
        "Vibe check created",
        extra={"event": LogEvent.VIBE_CHECK_CREATED, "vibe_check_id": vibe_check.id},
    )
    return vibe_check


async def get_vibe_check(db: AsyncSession, vibe_check_id: str) -> VibeCheck:
    vibe_check = await db.get(VibeCheck, vibe_check_id)
    if vibe_check is None:
        raise VibeCheckNotFoundError()
    return vibe_check


async def ensure_share_id(db: AsyncSession, vibe_check_id: str) -> str:
    """Return the existing share id or create one (and make the check public)."""
    vibe_check = await get_vibe_check(db, vibe_check_id)
    if vibe_check.share_id:
        return vibe_check.share_id

    vibe_check.share_id = generate_share_id()
    vibe_check.is_public = True
    vibe_check.updated_at = utc_now()
    await db.commit()
    return vibe_check.share_id


async def get_shared_vibe_check(db: AsyncSession, share_id: str) -> dict[str, Any]:
    """Public fields of a shared vibe check.

    Raises:
        BadRequestError: share_id shorter than 5 characters.
        NotFoundError: Unknown share_id.
        ForbiddenError: Vibe check is not public.
    """
    if len(share_id) < MIN_SHARE_ID_LENGTH:
        raise BadRequestError("Invalid share ID")

    result = await db.execute(select(VibeCheck).where(col(VibeCheck.share_id) == share_id))
    vibe_check = result.scalar_one_or_none()
    if vibe_check is None:
        raise NotFoundError("Shared Vibe Check not found")
    if not vibe_check.is_public:
        raise ForbiddenError("This Vibe Check is not publicly shared")

    return {
        "id": vibe_check.id,
        "share_id": vibe_check.share_id,
        "project_description": vibe_check.project_description,
        "evaluation": (
            transform_evaluation(vibe_check.evaluation) if vibe_check.evaluation else None
        ),
        "created_at": vibe_check.created_at,
    }


async def count_vibe_checks(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(VibeCheck.id)))).scalar_one()


# =============================================================================
# Project evaluations
# =============================================================================


def _fit_score(evaluation: dict[str, Any]) -> int | None:
    score = evaluation.get("fitScore")
    try:
        return int(score) if score is not None else None
    except (TypeError, ValueError):
        return None


async def _replace_evaluation(
    db: AsyncSession, project_id: str, evaluation: dict[str, Any]
) -> None:
    await db.execute(
        delete(ProjectEvaluation).where(col(ProjectEvaluation.project_id) == project_id)
    )
    db.add(
        ProjectEvaluation(
            project_id=project_id,
            fit_score=_fit_score(evaluation),
            value_proposition=evaluation.get("valueProposition"),
            evaluation=evaluation,
        )
    )


def _project_title(vibe_check: VibeCheck, evaluation: dict[str, Any]) -> str:
    value_proposition = evaluation.get("valueProposition")
    if isinstance(value_proposition, str) and value_proposition.strip():
        return value_proposition.strip()[:100]
    return vibe_check.project_description.split(".")[0][:100]


def _project_description(description: str) -> str:
    if len(description) > 200:
        return description[:197] + "..."
    return description


async def convert_to_project(
    db: AsyncSession, vibe_check_id: str, user: User, is_private: bool = False
) -> str:
    """Create a project (with evaluation) from a vibe check. Returns its id.

    Raises:
        BadRequestError: Already converted, or no evaluation stored.
    """
    vibe_check = await get_vibe_check(db, vibe_check_id)
    if vibe_check.converted_to_project:
        raise BadRequestError("This vibe check has already been converted to a project")
    if not vibe_check.evaluation:
        raise BadRequestError("Vibe check does not have evaluation data")

    evaluation = transform_evaluation(vibe_check.evaluation)
    description = vibe_check.project_description

    project = Project(
        title=_project_title(vibe_check, evaluation),
        description=_project_description(description),
        long_description=description,
        project_url=vibe_check.website_url or "",
        image_url=VIBE_CHECK_COVER_IMAGE,
        vibe_coding_tool=VIBE_CHECK_TOOL,
        author_id=user.id,
        is_private=is_private,
        featured=False,
    )
    db.add(project)
    await db.flush()

    await project_service.replace_tags(db, project.id, [VIBE_CHECK_TAG])
    await _replace_evaluation(db, project.id, evaluation)

    vibe_check.converted_to_project = True
    vibe_check.converted_project_id = project.id
    vibe_check.updated_at = utc_now()
    await db.commit()
    invalidate_projects()
    invalidate(TAGS)

    logger.info(
        "Vibe check converted to project",
        extra={
            "event": LogEvent.VIBE_CHECK_CONVERTED,
            "vibe_check_id": vibe_check_id,
            "project_id": project.id,
        },
    )
    return project.id


async def convert_to_project_evaluation(
    db: AsyncSession, vibe_check_id: str, project_id: str, user: User
) -> None:
    """Replace a project's evaluation with this vibe check's.

    Raises:
        ForbiddenError: Caller is neither the project author nor an admin.
    """
    vibe_check = await get_vibe_check(db, vibe_check_id)
    if not vibe_check.evaluation:
        raise BadRequestError("Vibe check does not have evaluation data")

    project = await db.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError()
    if not project_service.can_manage(project, user):
        raise ForbiddenError("Not authorized to update this project")

    await _replace_evaluation(db, project_id, transform_evaluation(vibe_check.evaluation))
    vibe_check.updated_at = utc_now()
    await db.commit()

    logger.info(
        "Vibe check attached to project",
        extra={
            "event": LogEvent.VIBE_CHECK_CONVERTED,
            "vibe_check_id": vibe_check_id,
            "project_id": project_id,
        },
    )


async def get_project_evaluation(
    db: AsyncSession, project_id: str, user: User | None
) -> dict[str, Any]:
    await project_service.get_visible_project(db, project_id, user)

    result = await db.execute(
        select(ProjectEvaluation).where(col(ProjectEvaluation.project_id) == project_id)
    )
    stored = result.scalar_one_or_none()
    if stored is None:
        raise NotFoundError("Evaluation not found")

    return {
        "id": stored.id,
        "project_id": stored.project_id,
        "fit_score": stored.fit_score,
        "value_proposition": stored.value_proposition,
        "evaluation": stored.evaluation,
        "created_at": stored.created_at,
        "updated_at": stored.updated_at,
    }
