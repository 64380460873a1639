"""
Candidate screening flow.

The model plays a virtual recruiter: it asks the screening questions,
answers them from the résumé and returns a pass/fail decision with a
reason and the simulated transcript.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from ..config import Settings
from ..llm.json_repair import MalformedResponseError, coerce_bool, extract_json
from ..llm.providers import AsyncLLMProvider, LLMProvider, as_async
from ..prompts import candidate_screening_prompt
from ..schemas import ScreeningInput, ScreeningResult
from ..timing import log_elapsed

logger = logging.getLogger(__name__)


def _transcript(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        lines = []
        for turn in value:
            if isinstance(turn, dict):
                speaker = turn.get("speaker") or turn.get("role") or "Speaker"
                lines.append(f"{speaker}: {turn.get('text') or turn.get('content') or ''}")
            else:
                lines.append(str(turn))
        return "\n".join(lines)
    return ""


async def conduct_candidate_screening(
    input: ScreeningInput,
    provider: Union[LLMProvider, AsyncLLMProvider, None] = None,
    settings: Optional[Settings] = None,
) -> ScreeningResult:
    """Run a simulated screening conversation and return the decision.

    Raises:
        MalformedResponseError: If the response lacks a usable ``pass``
            flag or ``reason``.
    """
    client = as_async(provider, settings)
    prompt = candidate_screening_prompt(input.resume_text, input.job_description, input.screening_questions)
    with log_elapsed(logger, "[conduct_candidate_screening] LLM call"):
        raw = await client.complete(prompt)
    output = extract_json(raw)
    if not isinstance(output, dict):
        raise MalformedResponseError("Screening response was not a JSON object")
    passed = coerce_bool(output.get("pass", output.get("passed")))
    reason = output.get("reason")
    if passed is None or not isinstance(reason, str):
        raise MalformedResponseError("Screening response is missing 'pass' or 'reason'")
    transcript = _transcript(output.get("chatTranscript", output.get("chat_transcript")))
    logger.info("[conduct_candidate_screening] Decision: %s", "pass" if passed else "fail")
    return ScreeningResult(passed=passed, reason=reason, chat_transcript=transcript)
