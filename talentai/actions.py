"""
Error-wrapped entry points for the AI flows.

Each action validates its input, runs the flow and returns either the
flow's result or an :class:`ActionError`.  Expected failures (bad
input, provider errors, malformed model output) never raise; the
caller shows ``ActionError.error`` to the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from .config import Settings
from .flows.job_description import generate_job_description
from .flows.score_resumes import describe_error, score_resumes
from .flows.screening import conduct_candidate_screening
from .llm.providers import AsyncLLMProvider, LLMProvider
from .schemas import (
    InputValidationError,
    JobDescriptionInput,
    JobDescriptionResult,
    ResumeScore,
    ScoreResumesInput,
    ScoringError,
    ScreeningInput,
    ScreeningResult,
)
from .timing import log_elapsed

logger = logging.getLogger(__name__)

ProviderArg = Union[LLMProvider, AsyncLLMProvider, None]


@dataclass
class ActionError:
    error: str


async def generate_job_description_action(
    input: JobDescriptionInput,
    provider: ProviderArg = None,
    settings: Optional[Settings] = None,
) -> Union[JobDescriptionResult, ActionError]:
    try:
        input.validate()
    except InputValidationError as exc:
        return ActionError(error=str(exc))
    try:
        return await generate_job_description(input, provider=provider, settings=settings)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error generating job description: %s", exc)
        return ActionError(error="Failed to generate job description. Please try again.")


async def score_resumes_action(
    input: ScoreResumesInput,
    provider: ProviderArg = None,
    settings: Optional[Settings] = None,
) -> Union[List[ResumeScore], ActionError]:
    """Validate and score résumés.

    A flow-level :class:`ScoringError` is passed through as an
    :class:`ActionError` with the same message.
    """
    logger.info("[score_resumes_action] Starting for %d resumes.", len(input.resume_data_uris))
    if not input.job_description or not input.resume_data_uris:
        logger.error("[score_resumes_action] Job description and at least one resume are required.")
        return ActionError(error="Job description and at least one resume are required.")
    try:
        input.validate(settings)
    except InputValidationError as exc:
        logger.error("[score_resumes_action] Invalid input: %s", exc)
        return ActionError(error=str(exc))
    try:
        with log_elapsed(logger, "[score_resumes_action] Total time for score_resumes"):
            result = await score_resumes(input, provider=provider, settings=settings)
    except Exception as exc:  # noqa: BLE001
        logger.exception("[score_resumes_action] Critical error scoring resumes: %s", exc)
        return ActionError(error=f"Failed to score resumes: {describe_error(exc)}")
    if isinstance(result, ScoringError):
        logger.error("[score_resumes_action] Error from score_resumes: %s", result.error)
        return ActionError(error=result.error)
    logger.info("[score_resumes_action] Successfully processed %d resumes.", len(result))
    return result


async def conduct_candidate_screening_action(
    input: ScreeningInput,
    provider: ProviderArg = None,
    settings: Optional[Settings] = None,
) -> Union[ScreeningResult, ActionError]:
    try:
        input.validate()
    except InputValidationError as exc:
        return ActionError(error=str(exc))
    try:
        return await conduct_candidate_screening(input, provider=provider, settings=settings)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error conducting candidate screening: %s", exc)
        return ActionError(error="Failed to conduct candidate screening. Please try again.")
