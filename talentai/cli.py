"""
Command line interface for TalentAI.

This module exposes one subcommand per AI flow: scoring résumé files
against a job description, running a simulated candidate screening and
generating a job description from a role brief.  The CLI is
intentionally lightweight and delegates all of the work to the error
wrapped functions in :mod:`talentai.actions`.
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import json
import logging
import os
import sys
from typing import Dict, List, Optional

from .actions import (
    ActionError,
    conduct_candidate_screening_action,
    generate_job_description_action,
    score_resumes_action,
)
from .config import Settings, load_settings
from .flows.score_resumes import score_tier
from .media import UnsupportedFileError, file_to_data_uri
from .schemas import JobDescriptionInput, ScoreResumesInput, ScreeningInput

logger = logging.getLogger("talentai.cli")


def _read_text(text: Optional[str], path: Optional[str]) -> str:
    if path:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    return text or ""


def _write_rows(rows: List[Dict[str, object]], out_path: str) -> None:
    if out_path.lower().endswith(".csv"):
        with open(out_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=["file_name", "score", "tier", "reason"])
            writer.writeheader()
            writer.writerows(rows)
    else:
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(rows, f, indent=2, ensure_ascii=False)


def cmd_score(args: argparse.Namespace, settings: Settings) -> int:
    """Score résumé files and print a ranked report."""
    if len(args.resume) > settings.max_files:
        logger.error("You can upload a maximum of %d files.", settings.max_files)
        return 1
    try:
        job_description = _read_text(args.jd, args.jd_file)
        uris = [file_to_data_uri(path, max_size=settings.max_file_size) for path in args.resume]
    except (OSError, UnsupportedFileError) as exc:
        logger.error("%s", exc)
        return 1
    result = asyncio.run(
        score_resumes_action(ScoreResumesInput(job_description, uris), settings=settings)
    )
    if isinstance(result, ActionError):
        logger.error("Error scoring resumes: %s", result.error)
        return 1
    # Results come back in input order, so position ties them to file names.
    rows: List[Dict[str, object]] = [
        {
            "file_name": os.path.basename(path),
            "score": item.score,
            "tier": score_tier(item.score),
            "reason": item.reason,
        }
        for path, item in zip(args.resume, result)
    ]
    rows.sort(key=lambda row: row["score"], reverse=True)
    for i, row in enumerate(rows):
        print(f"{i+1:02d}. {row['file_name']} - {row['score']}% ({row['tier']})")
        print(f"   Reason: {row['reason']}")
    if args.out:
        _write_rows(rows, args.out)
        logger.info("Wrote %d scores to %s", len(rows), args.out)
    return 0


def cmd_screen(args: argparse.Namespace, settings: Settings) -> int:
    """Run a simulated screening and print the decision and transcript."""
    try:
        resume_text = _read_text(args.resume, args.resume_file)
        job_description = _read_text(args.jd, args.jd_file)
    except OSError as exc:
        logger.error("%s", exc)
        return 1
    result = asyncio.run(
        conduct_candidate_screening_action(
            ScreeningInput(resume_text, job_description, args.questions),
            settings=settings,
        )
    )
    if isinstance(result, ActionError):
        logger.error("Error conducting screening: %s", result.error)
        return 1
    print("PASS" if result.passed else "FAIL")
    print(f"Reason: {result.reason}")
    print()
    print(result.chat_transcript)
    return 0


def cmd_jd(args: argparse.Namespace, settings: Settings) -> int:
    """Generate a job description from a role brief."""
    try:
        brief = _read_text(args.brief, args.brief_file)
    except OSError as exc:
        logger.error("%s", exc)
        return 1
    result = asyncio.run(
        generate_job_description_action(JobDescriptionInput(brief, args.language), settings=settings)
    )
    if isinstance(result, ActionError):
        logger.error("Error generating job description: %s", result.error)
        return 1
    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(result.job_description + "\n")
        logger.info("Job description written to %s", args.out)
    else:
        print(result.job_description)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="talentai", description="TalentAI hiring assistant CLI")
    parser.add_argument("--config", help="YAML settings file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Score
    score_cmd = subparsers.add_parser("score", help="Score resumes against a job description")
    jd_group = score_cmd.add_mutually_exclusive_group(required=True)
    jd_group.add_argument("--jd", help="Job description text")
    jd_group.add_argument("--jd-file", dest="jd_file", help="Path to a job description text file")
    score_cmd.add_argument("--resume", nargs="+", required=True, help="Resume files (pdf, docx, txt)")
    score_cmd.add_argument("--out", help="Write scores to a .json or .csv file")
    score_cmd.set_defaults(func=cmd_score)

    # Screen
    screen_cmd = subparsers.add_parser("screen", help="Conduct an initial candidate screening")
    resume_group = screen_cmd.add_mutually_exclusive_group(required=True)
    resume_group.add_argument("--resume", help="Resume text")
    resume_group.add_argument("--resume-file", dest="resume_file", help="Path to a resume text file")
    screen_jd_group = screen_cmd.add_mutually_exclusive_group(required=True)
    screen_jd_group.add_argument("--jd", help="Job description text")
    screen_jd_group.add_argument("--jd-file", dest="jd_file", help="Path to a job description text file")
    screen_cmd.add_argument("--questions", required=True, help="Comma separated screening questions")
    screen_cmd.set_defaults(func=cmd_screen)

    # Job description
    jd_cmd = subparsers.add_parser("jd", help="Generate a job description")
    brief_group = jd_cmd.add_mutually_exclusive_group(required=True)
    brief_group.add_argument("--brief", help="Role brief text")
    brief_group.add_argument("--brief-file", dest="brief_file", help="Path to a role brief text file")
    jd_cmd.add_argument("--language", choices=["en", "bn"], default="en", help="Output language")
    jd_cmd.add_argument("--out", help="Write the description to a file instead of stdout")
    jd_cmd.set_defaults(func=cmd_jd)
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1
    return args.func(args, settings)


if __name__ == "__main__":
    sys.exit(main())
