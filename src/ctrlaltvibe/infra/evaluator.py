"""Vibe check evaluator backed by an OpenAI-compatible chat completions API.

Only the JSON business evaluation call is wired; the model is asked for a
single JSON object and the parsed dict is returned as-is.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

import openai
from openai import AsyncOpenAI

from ctrlaltvibe.app.config import OpenAIConfig, get_settings
from ctrlaltvibe.app.metrics.collector import (
    AI_REQUEST_DURATION,
    EXTERNAL_CALL_ERRORS_TOTAL,
)
from ctrlaltvibe.core.errors import AIServiceUnavailableError
from ctrlaltvibe.core.logging_schema import LogEvent

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an experienced startup advisor evaluating early-stage \
software projects built with AI coding tools. Assess the idea below for business \
viability. Be specific, practical and actionable, and tailor every section to this \
project. Respond with a single JSON object with these keys:

{
  "marketFitAnalysis": {"strengths": [], "weaknesses": [], "demandPotential": ""},
  "targetAudience": {"demographic": "", "psychographic": ""},
  "fitScore": 0,
  "fitScoreExplanation": "",
  "businessPlan": {"revenueModel": "", "goToMarket": "", "milestones": []},
  "valueProposition": "One sentence value proposition",
  "riskAssessment": {"risks": [{"type": "", "description": "", "mitigation": ""}]},
  "technicalFeasibility": "",
  "regulatoryConsiderations": "",
  "partnershipOpportunities": {"partners": []},
  "competitiveLandscape": {"competitors": [{"name": "", "differentiation": ""}]},
  "implementationRoadmap": {"phases": [{"timeframe": "", "tasks": [], "resources": "", "metrics": []}]},
  "launchStrategy": {"mvpFeatures": [], "timeToMarket": "", "marketEntryApproach": "", "criticalResources": [], "launchChecklist": []},
  "customerAcquisition": {"primaryChannels": [], "costPerAcquisition": "", "conversionStrategy": "", "retentionTactics": [], "growthOpportunities": ""},
  "revenueGeneration": {"businessModels": [], "pricingStrategy": "", "revenueStreams": [], "unitEconomics": "", "scalingPotential": ""},
  "fundingGuidance": {"bootstrappingOptions": ""}
}

fitScore is an integer from 0 to 100."""


def build_user_prompt(project_description: str, website_url: str | None) -> str:
    lines = [f"Project Description: {project_description}"]
    if website_url:
        lines.append(f"Website URL: {website_url}")
    return "\n".join(lines)


class VibeEvaluator:
    """Chat completions client for vibe check evaluations."""

    def __init__(self, config: OpenAIConfig | None = None) -> None:
        self._config = config or get_settings().openai
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._config.api_key,
                base_url=self._config.base_url,
                timeout=self._config.timeout,
            )
        return self._client

    async def evaluate(
        self, project_description: str, website_url: str | None = None
    ) -> dict[str, Any]:
        """Generate a business evaluation.

        Raises:
            AIServiceUnavailableError: API key missing, API error, or the
                model did not return a JSON object.
        """
        if not self._config.api_key:
            raise AIServiceUnavailableError()

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_prompt(project_description, website_url)},
        ]

        client = self._get_client()
        start = time.monotonic()
        try:
            completion = await client.chat.completions.create(
                model=self._config.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
            )
            result = json.loads(completion.choices[0].message.content)
        except (openai.APIError, IndexError, TypeError, ValueError) as e:
            EXTERNAL_CALL_ERRORS_TOTAL.labels(service="openai").inc()
            logger.error(
                "Chat completion failed",
                extra={
                    "event": LogEvent.AI_REQUEST_FAILED,
                    "error_type": type(e).__name__,
                    "error": str(e),
                },
            )
            raise AIServiceUnavailableError() from e
        finally:
            AI_REQUEST_DURATION.observe(time.monotonic() - start)

        if not isinstance(result, dict):
            EXTERNAL_CALL_ERRORS_TOTAL.labels(service="openai").inc()
            raise AIServiceUnavailableError()
        return result

    async def close(self) -> None:
        """Close the API client."""
        if self._client is not None:
            await self._client.close()
            self._client = None


_evaluator: VibeEvaluator | None = None


def get_evaluator() -> VibeEvaluator:
    """Get or create the process-wide evaluator."""
    global _evaluator
    if _evaluator is None:
        _evaluator = VibeEvaluator()
    return _evaluator


async def close_evaluator() -> None:
    global _evaluator
    if _evaluator is not None:
        await _evaluator.close()
        _evaluator = None
