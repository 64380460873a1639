"""Shared fixtures: scripted providers and résumé data URIs.

No test talks to a real LLM.  Flows receive a ``ScriptedProvider``
whose answers are computed from the rendered prompt.
"""

from __future__ import annotations

import json
from typing import Callable, List, Union

import pytest  # type: ignore

from talentai.llm.providers import LLMProvider, Prompt
from talentai.media import encode_data_uri

JOB_DESCRIPTION = (
    "We are hiring a backend engineer with Python, Django, PostgreSQL and AWS "
    "experience to build APIs for our hiring platform."
)

Answer = Union[str, BaseException]


class ScriptedProvider(LLMProvider):
    """Provider whose answer is computed by ``responder(prompt)``.

    A returned exception instance is raised instead of returned.
    """

    def __init__(self, responder: Callable[[Prompt], Answer]):
        self.responder = responder
        self.prompts: List[Prompt] = []

    def complete(self, prompt: Prompt) -> str:
        self.prompts.append(prompt)
        answer = self.responder(prompt)
        if isinstance(answer, BaseException):
            raise answer
        return answer


def resume_text(prompt_resume) -> str:
    return prompt_resume.data.decode("utf-8")


def score_from_text(prompt: Prompt) -> str:
    """Answer scoring prompts with the number found in each résumé body.

    A résumé whose text is ``score:42`` scores 42.
    """
    def score_of(resume) -> float:
        return float(resume_text(resume).split("score:")[1])

    if prompt.name == "score_single_resume":
        resume = prompt.variables["resume"]
        return json.dumps({"resumeId": prompt.variables["resume_id"], "score": score_of(resume), "reason": "ok"})
    results = [
        {"resumeId": resume_id, "score": score_of(resume), "reason": f"batch {resume_id}"}
        for resume_id, resume in prompt.variables["resumes"]
    ]
    return json.dumps({"results": results})


@pytest.fixture
def job_description() -> str:
    return JOB_DESCRIPTION


@pytest.fixture
def make_uri() -> Callable[[str], str]:
    def _make(text: str) -> str:
        return encode_data_uri(text.encode("utf-8"), "text/plain")
    return _make


@pytest.fixture
def make_provider() -> Callable[[Callable[[Prompt], Answer]], ScriptedProvider]:
    return ScriptedProvider


@pytest.fixture
def scoring_provider() -> ScriptedProvider:
    return ScriptedProvider(score_from_text)


@pytest.fixture(autouse=True)
def _no_llm_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real API keys and overrides out of every test."""
    for name in (
        "OPENAI_API_KEY",
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "LLM_PROVIDER",
        "OPENAI_MODEL",
        "GEMINI_MODEL",
        "GOOGLE_MODEL",
        "TALENTAI_CONFIG",
        "TALENTAI_CHUNK_SIZE",
        "TALENTAI_PARALLEL_THRESHOLD",
        "TALENTAI_MAX_CONCURRENCY",
        "TALENTAI_MAX_FILES",
        "TALENTAI_MAX_FILE_SIZE",
        "TALENTAI_TEMPERATURE",
        "TALENTAI_REQUEST_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    # A developer's .env must not leak into the suite.
    monkeypatch.setattr("talentai.config.load_dotenv", lambda *args, **kwargs: False)
