"""End-to-end CLI tests using the offline placeholder provider."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest  # type: ignore

from talentai.cli import build_parser, main

JD = (
    "Backend engineer with Python, Django, PostgreSQL and AWS experience "
    "to build hiring APIs."
)


@pytest.fixture(autouse=True)
def _offline(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "placeholder")


def _resumes(tmp_path: Path) -> list:
    strong = tmp_path / "strong.txt"
    strong.write_text("Senior backend engineer. Python, Django, PostgreSQL, AWS, hiring APIs.", encoding="utf-8")
    weak = tmp_path / "weak.txt"
    weak.write_text("Pastry chef with ten years in French kitchens.", encoding="utf-8")
    return [str(weak), str(strong)]


def test_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_score_prints_ranked_report(tmp_path: Path, capsys) -> None:
    out = tmp_path / "scores.csv"
    code = main(["score", "--jd", JD, "--resume", *_resumes(tmp_path), "--out", str(out)])
    assert code == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("01. strong.txt - ")
    assert lines[1].startswith("   Reason: ")
    assert lines[2].startswith("02. weak.txt - 0% (weak)")

    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [row["file_name"] for row in rows] == ["strong.txt", "weak.txt"]
    assert set(rows[0]) == {"file_name", "score", "tier", "reason"}


def test_score_json_output_and_jd_file(tmp_path: Path) -> None:
    jd_file = tmp_path / "jd.txt"
    jd_file.write_text(JD, encoding="utf-8")
    out = tmp_path / "scores.json"
    assert main(["score", "--jd-file", str(jd_file), "--resume", *_resumes(tmp_path), "--out", str(out)]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert len(data) == 2
    assert data[0]["score"] >= data[1]["score"]


def test_score_rejects_bad_input(tmp_path: Path) -> None:
    image = tmp_path / "photo.png"
    image.write_bytes(b"\x89PNG")
    assert main(["score", "--jd", JD, "--resume", str(image)]) == 1
    assert main(["score", "--jd", "too short", "--resume", *_resumes(tmp_path)]) == 1
    assert main(["score", "--jd", JD, "--resume", str(tmp_path / "missing.txt")]) == 1


def test_score_respects_max_files(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TALENTAI_MAX_FILES", "1")
    assert main(["score", "--jd", JD, "--resume", *_resumes(tmp_path)]) == 1


def test_screen_command(tmp_path: Path, capsys) -> None:
    resume = tmp_path / "resume.txt"
    resume.write_text(
        "Backend engineer with six years of Python and Django, PostgreSQL tuning "
        "and AWS deployments for hiring APIs.",
        encoding="utf-8",
    )
    code = main(["screen", "--resume-file", str(resume), "--jd", JD, "--questions", "Why us?, Notice period?"])
    assert code == 0
    out = capsys.readouterr().out
    assert out.splitlines()[0] in ("PASS", "FAIL")
    assert "Recruiter: Why us?" in out


def test_screen_rejects_trailing_comma(tmp_path: Path) -> None:
    resume = "x" * 120
    assert main(["screen", "--resume", resume, "--jd", JD, "--questions", "Why us?, Salary?,"]) == 1


def test_jd_command(tmp_path: Path, capsys) -> None:
    brief = "Data engineer to own our batch and streaming pipelines on GCP."
    assert main(["jd", "--brief", brief, "--language", "bn"]) == 0
    assert brief in capsys.readouterr().out

    out = tmp_path / "jd.md"
    assert main(["jd", "--brief", brief, "--out", str(out)]) == 0
    assert "About the Role" in out.read_text(encoding="utf-8")


def test_invalid_config(tmp_path: Path) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text("chunk_size: 0\n", encoding="utf-8")
    assert main(["--config", str(config), "jd", "--brief", "x" * 60]) == 1
