"""
LLM provider abstractions.

This module defines a common interface for the large language model
(LLM) providers that TalentAI sends its prompts to.  Concrete
implementations are provided for OpenAI and Gemini (Google Generative
AI).  A placeholder implementation answers every prompt offline with
simple keyword-overlap heuristics; it is used when no API keys are
configured.  Applications select the provider through settings (the
``LLM_PROVIDER`` environment variable) or pass an ``LLMProvider``
instance directly.

Providers are synchronous.  :class:`AsyncLLMProvider` runs them in a
thread pool behind a semaphore so flows can fan out calls with
``asyncio``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from abc import ABC, abstractmethod
from asyncio import Semaphore
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set, Union

from ..config import Settings
from ..media import DOCX_MIME, DataURI, extract_text

logger = logging.getLogger(__name__)

PromptPart = Union[str, DataURI]


@dataclass
class Prompt:
    """A rendered prompt.

    ``name`` identifies the task (``score_single_resume``,
    ``score_resume_batch``, ``candidate_screening`` or
    ``job_description``).  ``parts`` is the ordered mix of text and
    media sent to the model; ``variables`` keeps the raw inputs the
    prompt was rendered from.
    """

    name: str
    parts: List[PromptPart]
    variables: Dict[str, Any] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return "".join(p for p in self.parts if isinstance(p, str))


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @abstractmethod
    def complete(self, prompt: Prompt) -> str:
        """Send a prompt to the model and return its raw text output.

        Transport and API errors propagate to the caller.
        """
        raise NotImplementedError


_STOPWORDS: Set[str] = {
    "the", "and", "for", "with", "you", "your", "our", "are", "will", "who",
    "have", "has", "this", "that", "from", "able", "must", "role", "team",
    "work", "years", "year", "experience", "strong", "skills", "candidate",
    "job", "description", "about", "into", "their", "they", "can", "etc",
}


def _keywords(text: str) -> Set[str]:
    words = re.findall(r"[a-z][a-z0-9+#.]{2,}", text.lower())
    return {w.strip(".") for w in words if w.strip(".") not in _STOPWORDS}


def _overlap(job_text: str, candidate_text: str) -> tuple[int, int]:
    wanted = _keywords(job_text)
    found = wanted & _keywords(candidate_text)
    return len(found), len(wanted)


class PlaceholderProvider(LLMProvider):
    """Fallback provider that does not call any external API."""

    def complete(self, prompt: Prompt) -> str:
        handler = getattr(self, f"_answer_{prompt.name}", None)
        if handler is None:
            raise ValueError(f"PlaceholderProvider cannot answer prompt '{prompt.name}'")
        return json.dumps(handler(prompt.variables))

    def _score(self, job_description: str, resume: DataURI) -> Dict[str, Any]:
        try:
            resume_text = extract_text(resume)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Placeholder could not read resume: %s", exc)
            resume_text = ""
        found, wanted = _overlap(job_description, resume_text)
        score = round(100 * found / wanted) if wanted else 0
        return {
            "score": score,
            "reason": f"Offline estimate: {found} of {wanted} job description keywords appear in the resume.",
        }

    def _answer_score_single_resume(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        result = {"resumeId": variables["resume_id"]}
        result.update(self._score(variables["job_description"], variables["resume"]))
        return result

    def _answer_score_resume_batch(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        results = []
        for resume_id, resume in variables["resumes"]:
            entry = {"resumeId": resume_id}
            entry.update(self._score(variables["job_description"], resume))
            results.append(entry)
        return {"results": results}

    def _answer_candidate_screening(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        found, wanted = _overlap(variables["job_description"], variables["resume_text"])
        ratio = found / wanted if wanted else 0.0
        transcript = []
        for question in variables["questions"]:
            transcript.append(f"Recruiter: {question}")
            transcript.append("Candidate: (no live answer in offline mode)")
        return {
            "pass": ratio >= 0.5,
            "reason": f"Offline estimate: resume covers {found} of {wanted} job description keywords.",
            "chatTranscript": "\n".join(transcript),
        }

    def _answer_job_description(self, variables: Dict[str, Any]) -> Dict[str, Any]:
        brief = variables["role_brief"].strip()
        return {
            "jobDescription": (
                "About the Role\n"
                f"{brief}\n\n"
                "What You'll Do\n"
                "- Deliver on the responsibilities outlined above.\n\n"
                "What We're Looking For\n"
                "- Skills and experience matching the role brief.\n\n"
                f"(Draft generated offline; language: {variables['language']})"
            )
        }


class OpenAIProvider(LLMProvider):
    """Provider that uses the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        timeout: float = 60.0,
    ) -> None:
        try:
            import openai
        except ImportError as exc:
            raise RuntimeError(
                "openai package is required for OpenAIProvider. Install it via pip."
            ) from exc
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY not provided")
        self.model = model
        self.temperature = temperature
        self.client = openai.OpenAI(api_key=self.api_key, timeout=timeout)

    def _content(self, prompt: Prompt) -> List[Dict[str, Any]]:
        content: List[Dict[str, Any]] = []
        for part in prompt.parts:
            if isinstance(part, str):
                content.append({"type": "text", "text": part})
            elif part.is_image:
                content.append({"type": "image_url", "image_url": {"url": part.raw}})
            else:
                content.append({"type": "text", "text": extract_text(part)})
        return content

    def complete(self, prompt: Prompt) -> str:
        logger.debug("Sending prompt %s to OpenAI: %s", prompt.name, prompt.text[:200])
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": self._content(prompt)}],
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""


class GeminiProvider(LLMProvider):
    """Provider that uses Google Generative AI (Gemini) via google-generativeai."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gemini-2.0-flash",
        temperature: float = 0.2,
        timeout: float = 60.0,
    ) -> None:
        try:
            import google.generativeai as genai  # type: ignore
        except ImportError as exc:
            raise RuntimeError(
                "google-generativeai package is required for GeminiProvider. Install it via pip."
            ) from exc
        self.genai = genai
        self.api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY/GOOGLE_API_KEY not provided")
        self.model_name = model
        self.timeout = timeout
        self.genai.configure(api_key=self.api_key)
        try:
            self.model = self.genai.GenerativeModel(
                self.model_name,
                generation_config={
                    "response_mime_type": "application/json",
                    "temperature": temperature,
                },
            )
        except Exception as exc:
            raise RuntimeError(f"Failed to load Gemini model {self.model_name}: {exc}") from exc

    def _contents(self, prompt: Prompt) -> List[Any]:
        contents: List[Any] = []
        for part in prompt.parts:
            if isinstance(part, str):
                contents.append(part)
            elif part.mime_type == DOCX_MIME:
                # Gemini does not accept Word documents inline.
                contents.append(extract_text(part))
            else:
                contents.append({"mime_type": part.mime_type, "data": part.data})
        return contents

    def complete(self, prompt: Prompt) -> str:
        logger.debug("Sending prompt %s to Gemini: %s", prompt.name, prompt.text[:200])
        response = self.model.generate_content(
            self._contents(prompt),
            request_options={"timeout": self.timeout},
        )
        return response.text


class AsyncLLMProvider:
    """Async wrapper for LLM providers to enable concurrent processing."""

    def __init__(self, provider: LLMProvider, max_concurrency: Optional[int] = None):
        self.provider = provider
        self._semaphore = Semaphore(max_concurrency) if max_concurrency else None

    @property
    def name(self) -> str:
        return self.provider.__class__.__name__

    async def complete(self, prompt: Prompt) -> str:
        """Run ``provider.complete`` in the default executor, bounded by the semaphore."""
        loop = asyncio.get_running_loop()
        if self._semaphore:
            async with self._semaphore:
                return await loop.run_in_executor(None, self.provider.complete, prompt)
        return await loop.run_in_executor(None, self.provider.complete, prompt)


def _build(name: str, settings: Settings) -> LLMProvider:
    if name == "openai":
        return OpenAIProvider(
            os.getenv("OPENAI_API_KEY"),
            model=settings.openai_model,
            temperature=settings.temperature,
            timeout=settings.request_timeout,
        )
    if name == "gemini":
        return GeminiProvider(
            os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            model=settings.gemini_model,
            temperature=settings.temperature,
            timeout=settings.request_timeout,
        )
    return PlaceholderProvider()


def get_default_provider(settings: Optional[Settings] = None) -> LLMProvider:
    """Return an LLMProvider instance based on configuration and API keys.

    The resolution order is:

    1. If ``settings.provider`` (``LLM_PROVIDER``) is ``"openai"``,
       ``"gemini"`` or ``"placeholder"``, the corresponding provider is
       selected.  If it cannot be initialised (e.g. missing API key or
       package), a warning is logged and automatic detection is used.
    2. If ``OPENAI_API_KEY`` is present, return :class:`OpenAIProvider`.
    3. If ``GEMINI_API_KEY`` or ``GOOGLE_API_KEY`` is present, return
       :class:`GeminiProvider`.
    4. Otherwise, return :class:`PlaceholderProvider`.
    """
    settings = settings or Settings()
    preferred = settings.provider
    if preferred:
        if preferred == "placeholder":
            logger.info("LLM_PROVIDER=placeholder; using placeholder provider")
            return PlaceholderProvider()
        if preferred in ("openai", "gemini"):
            try:
                return _build(preferred, settings)
            except Exception as exc:  # noqa: BLE001
                logger.warning("LLM_PROVIDER=%s but failed to initialise provider: %s", preferred, exc)
        else:
            logger.warning("Unknown LLM_PROVIDER value '%s'; falling back to automatic detection", preferred)
    detected: Sequence[tuple[str, Optional[str]]] = (
        ("openai", os.getenv("OPENAI_API_KEY")),
        ("gemini", os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")),
    )
    for name, key in detected:
        if not key:
            continue
        try:
            return _build(name, settings)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to initialise %s provider: %s", name, exc)
    logger.info("No LLM API keys found; using placeholder provider")
    return PlaceholderProvider()


def as_async(
    provider: Union[LLMProvider, AsyncLLMProvider, None],
    settings: Optional[Settings] = None,
) -> AsyncLLMProvider:
    """Wrap ``provider`` (or the default provider) for use from async flows."""
    if isinstance(provider, AsyncLLMProvider):
        return provider
    settings = settings or Settings()
    if provider is None:
        provider = get_default_provider(settings)
    return AsyncLLMProvider(provider, max_concurrency=settings.max_concurrency)
