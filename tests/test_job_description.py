"""Tests for job description generation."""

from __future__ import annotations

import asyncio

import pytest  # type: ignore

from talentai.flows.job_description import generate_job_description
from talentai.llm.json_repair import MalformedResponseError
from talentai.schemas import JobDescriptionInput

BRIEF = "Senior data engineer to own batch and streaming pipelines on GCP, 5+ years."


def test_generates_from_json(make_provider) -> None:
    provider = make_provider(lambda prompt: '{"jobDescription": "  About the role...  "}')
    result = asyncio.run(generate_job_description(JobDescriptionInput(BRIEF, "bn"), provider=provider))
    assert result.job_description == "About the role..."
    assert "Language: Bengali" in provider.prompts[0].text
    assert BRIEF in provider.prompts[0].text


def test_plain_text_response_is_used(make_provider) -> None:
    provider = make_provider(lambda prompt: "About the Role\nWe are looking for a data engineer.")
    result = asyncio.run(generate_job_description(JobDescriptionInput(BRIEF), provider=provider))
    assert result.job_description == "About the Role\nWe are looking for a data engineer."


@pytest.mark.parametrize("answer", ["", '{"jobDescription": ""}', '{"title": "x"}'])
def test_empty_description_raises(make_provider, answer) -> None:
    with pytest.raises(MalformedResponseError):
        asyncio.run(generate_job_description(JobDescriptionInput(BRIEF), provider=make_provider(lambda p: answer)))
