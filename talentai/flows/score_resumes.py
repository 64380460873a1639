"""
Résumé scoring flow.

:func:`score_resumes` decides how to call the model for a request:

* up to ``parallel_threshold`` résumés are scored individually, with
  all calls in flight at once, for faster individual feedback;
* larger requests are split into consecutive chunks of at most
  ``chunk_size`` résumés and each chunk is scored in one batch call.

Whatever the model returns is reconciled against the inputs.  Every
input résumé gets exactly one :class:`~talentai.schemas.ResumeScore`,
in input order, and missing or malformed fields are replaced by a zero
score and a fixed reason rather than raising.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

from ..config import Settings
from ..llm.json_repair import coerce_number, extract_json, find_array
from ..llm.providers import AsyncLLMProvider, LLMProvider, as_async
from ..media import parse_data_uri, shorten_uri
from ..prompts import resume_ids, score_resume_batch_prompt, score_single_resume_prompt
from ..schemas import ResumeScore, ScoreResumesInput, ScoringError
from ..timing import log_elapsed

logger = logging.getLogger(__name__)

SINGLE_INCOMPLETE_REASON = "AI response was incomplete or malformed."
BATCH_NOT_ARRAY_REASON = "AI response for batch was not a valid array or was empty."
BATCH_ENTRY_INVALID_REASON = (
    "AI response for this resume in batch was incomplete, malformed, or URI mismatch."
)

# Keys under which a batch response object may hold its result array.
RESULT_KEYS = ("results", "resumes", "scores", "items", "data")
_ID_KEYS = ("resumeId", "resume_id", "id")
_URI_KEYS = ("resumeDataUri", "resume_data_uri")


def describe_error(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


def clamp_score(value: float) -> int:
    """Round half up and clamp to the 0-100 range."""
    return int(max(0, min(100, math.floor(value + 0.5))))


def score_tier(score: int) -> str:
    """Return ``strong`` (80+), ``moderate`` (50-79) or ``weak`` (below 50)."""
    if score >= 80:
        return "strong"
    if score < 50:
        return "weak"
    return "moderate"


def chunked(items: Sequence[str], size: int) -> Iterator[List[str]]:
    """Yield consecutive slices of ``items`` holding at most ``size`` elements."""
    if size < 1:
        raise ValueError("size must be >= 1")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


async def score_single_resume(
    job_description: str,
    resume_data_uri: str,
    client: AsyncLLMProvider,
    resume_id: str = "R1",
) -> ResumeScore:
    """Score one résumé with its own model call.

    Never raises: transport errors and unparseable output become a zero
    score with an explanatory reason.
    """
    short_uri = shorten_uri(resume_data_uri)
    logger.info("[score_single_resume] Starting for resume: %s", short_uri)
    try:
        with log_elapsed(logger, f"[score_single_resume] LLM call for {short_uri}"):
            resume = parse_data_uri(resume_data_uri)
            raw = await client.complete(score_single_resume_prompt(job_description, resume_id, resume))
        output = extract_json(raw)
    except Exception as exc:  # noqa: BLE001
        logger.exception("[score_single_resume] Failed for URI %s: %s", short_uri, exc)
        return ResumeScore(
            resume_data_uri=resume_data_uri,
            score=0,
            reason=f"Error during single resume analysis: {describe_error(exc)}. Please review manually.",
        )

    # Some models wrap the object in a one-element array.
    if isinstance(output, list) and len(output) == 1:
        output = output[0]
    score = coerce_number(output.get("score")) if isinstance(output, dict) else None
    reason = output.get("reason") if isinstance(output, dict) else None
    if score is None or not isinstance(reason, str):
        logger.warning(
            "[score_single_resume] Invalid or incomplete AI response for %s. Output: %r",
            short_uri,
            output,
        )
        return ResumeScore(
            resume_data_uri=resume_data_uri,
            score=clamp_score(score) if score is not None else 0,
            reason=reason if isinstance(reason, str) else SINGLE_INCOMPLETE_REASON,
        )
    logger.info("[score_single_resume] Successfully processed resume: %s", short_uri)
    return ResumeScore(resume_data_uri=resume_data_uri, score=clamp_score(score), reason=reason)


def _match_entry(entries: List[Any], resume_id: str, resume_data_uri: str) -> Optional[Dict[str, Any]]:
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if any(entry.get(key) == resume_id for key in _ID_KEYS):
            return entry
        if any(entry.get(key) == resume_data_uri for key in _URI_KEYS):
            return entry
    return None


async def score_resume_batch(
    job_description: str,
    resume_data_uris: Sequence[str],
    client: AsyncLLMProvider,
) -> List[ResumeScore]:
    """Score a chunk of résumés with a single model call.

    Each input is matched to a response entry by exact identifier (or
    echoed data URI).  Inputs without a valid match score zero.
    """
    uris = list(resume_data_uris)
    first_uri = shorten_uri(uris[0], 50) if uris else "N/A"
    ids = resume_ids(len(uris))
    logger.info(
        "[score_resume_batch] Starting for a batch of %d resumes. First URI starts: %s",
        len(uris),
        first_uri,
    )
    try:
        with log_elapsed(logger, f"[score_resume_batch] LLM call for batch starting with {first_uri}"):
            resumes = [(resume_id, parse_data_uri(uri)) for resume_id, uri in zip(ids, uris)]
            raw = await client.complete(score_resume_batch_prompt(job_description, resumes))
        output = extract_json(raw)
    except Exception as exc:  # noqa: BLE001
        logger.exception("[score_resume_batch] Failed for batch starting with %s: %s", first_uri, exc)
        reason = (
            f"Error during batch resume analysis for this chunk: {describe_error(exc)}. "
            "Please review manually."
        )
        return [ResumeScore(resume_data_uri=uri, score=0, reason=reason) for uri in uris]

    entries = find_array(output, RESULT_KEYS)
    if entries is None:
        logger.warning(
            "[score_resume_batch] AI response for batch was not a valid array. Input count: %d. Output: %r",
            len(uris),
            output,
        )
        return [ResumeScore(resume_data_uri=uri, score=0, reason=BATCH_NOT_ARRAY_REASON) for uri in uris]

    validated: List[ResumeScore] = []
    for resume_id, uri in zip(ids, uris):
        entry = _match_entry(entries, resume_id, uri)
        score = coerce_number(entry.get("score")) if entry else None
        reason = entry.get("reason") if entry else None
        if score is not None and isinstance(reason, str):
            validated.append(ResumeScore(resume_data_uri=uri, score=clamp_score(score), reason=reason))
        else:
            logger.warning(
                "[score_resume_batch] Missing or invalid fields for resume %s (%s). AI result found: %r",
                resume_id,
                shorten_uri(uri, 50),
                entry,
            )
            validated.append(ResumeScore(resume_data_uri=uri, score=0, reason=BATCH_ENTRY_INVALID_REASON))

    if len(entries) != len(uris):
        logger.warning(
            "[score_resume_batch] AI returned %d items for a batch of %d resumes. Results were mapped to inputs.",
            len(entries),
            len(uris),
        )
    logger.info("[score_resume_batch] Processed batch. Validated results count: %d", len(validated))
    return validated


async def score_resumes(
    input: ScoreResumesInput,
    provider: Union[LLMProvider, AsyncLLMProvider, None] = None,
    settings: Optional[Settings] = None,
) -> Union[List[ResumeScore], ScoringError]:
    """Score every résumé in ``input`` against its job description.

    Args:
        input: Job description and résumé data URIs.
        provider: Provider to use; the configured default when omitted.
        settings: Chunking and concurrency settings.

    Returns:
        One :class:`ResumeScore` per résumé in input order, or a
        :class:`ScoringError` if the parallel fan-out itself fails.
    """
    settings = settings or Settings()
    client = as_async(provider, settings)
    uris = list(input.resume_data_uris)
    num_resumes = len(uris)
    logger.info("[score_resumes] Received request to score %d resumes.", num_resumes)

    with log_elapsed(logger, "[score_resumes] Total execution time"):
        if num_resumes == 0:
            logger.info("[score_resumes] No resumes provided, returning empty list.")
            return []

        if num_resumes <= settings.parallel_threshold:
            logger.info(
                "[score_resumes] Processing %d resumes individually in parallel (threshold: %d).",
                num_resumes,
                settings.parallel_threshold,
            )
            try:
                with log_elapsed(logger, "[score_resumes] Parallel individual processing time"):
                    results = await asyncio.gather(
                        *(score_single_resume(input.job_description, uri, client) for uri in uris)
                    )
            except Exception as exc:  # noqa: BLE001
                logger.exception("[score_resumes] Error processing resumes individually in parallel: %s", exc)
                return ScoringError(
                    error=f"Failed during parallel individual processing: {describe_error(exc)}"
                )
            logger.info("[score_resumes] Finished parallel processing. Results count: %d", len(results))
            return list(results)

        chunk_size = settings.chunk_size
        total_chunks = math.ceil(num_resumes / chunk_size)
        logger.info("[score_resumes] Processing %d resumes in chunks of up to %d.", num_resumes, chunk_size)
        all_results: List[ResumeScore] = []
        for chunk_number, chunk in enumerate(chunked(uris, chunk_size), start=1):
            logger.info(
                "[score_resumes] Processing chunk %d of %d, size: %d",
                chunk_number,
                total_chunks,
                len(chunk),
            )
            try:
                with log_elapsed(logger, f"[score_resumes] Chunk {chunk_number} processing time"):
                    chunk_results = await score_resume_batch(input.job_description, chunk, client)
                all_results.extend(chunk_results)
            except Exception as exc:  # noqa: BLE001
                logger.exception(
                    "[score_resumes] Critical error processing chunk %d (starting at index %d): %s",
                    chunk_number,
                    (chunk_number - 1) * chunk_size,
                    exc,
                )
                reason = (
                    f"Failed to process this resume in batch chunk {chunk_number} "
                    f"due to a system error: {describe_error(exc)}"
                )
                all_results.extend(ResumeScore(resume_data_uri=uri, score=0, reason=reason) for uri in chunk)
        logger.info(
            "[score_resumes] Finished processing all %d resumes. Total results: %d",
            num_resumes,
            len(all_results),
        )
        return all_results
