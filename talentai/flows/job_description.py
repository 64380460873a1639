"""Job description generation flow."""

from __future__ import annotations

import logging
from typing import Optional, Union

from ..config import Settings
from ..llm.json_repair import MalformedResponseError, extract_json, strip_code_fences
from ..llm.providers import AsyncLLMProvider, LLMProvider, as_async
from ..prompts import job_description_prompt
from ..schemas import JobDescriptionInput, JobDescriptionResult
from ..timing import log_elapsed

logger = logging.getLogger(__name__)


async def generate_job_description(
    input: JobDescriptionInput,
    provider: Union[LLMProvider, AsyncLLMProvider, None] = None,
    settings: Optional[Settings] = None,
) -> JobDescriptionResult:
    """Generate a job description from a role brief in English or Bengali.

    A response that is plain text rather than JSON is used as the
    description directly.

    Raises:
        MalformedResponseError: If the model returns no usable text.
    """
    client = as_async(provider, settings)
    with log_elapsed(logger, "[generate_job_description] LLM call"):
        raw = await client.complete(job_description_prompt(input.role_brief, input.language))
    try:
        output = extract_json(raw)
    except MalformedResponseError:
        if not raw or not raw.strip():
            raise
        logger.warning("[generate_job_description] Response was not JSON; using raw text")
        return JobDescriptionResult(job_description=strip_code_fences(raw).strip())
    description = None
    if isinstance(output, dict):
        description = output.get("jobDescription", output.get("job_description"))
    elif isinstance(output, str):
        description = output
    if not isinstance(description, str) or not description.strip():
        raise MalformedResponseError("Response did not contain a job description")
    return JobDescriptionResult(job_description=description.strip())
