"""
Input and output types for the AI flows.

Inputs are dataclasses with a ``validate`` method mirroring the rules
of the original hiring-assistant forms.  Outputs provide ``to_dict``
for JSON/CSV serialisation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from .config import Settings
from .media import ALLOWED_RESUME_TYPES, InvalidDataURIError, parse_data_uri

MIN_JOB_DESCRIPTION_CHARS = 50
MIN_RESUME_TEXT_CHARS = 100
MIN_QUESTIONS_CHARS = 10
MIN_ROLE_BRIEF_CHARS = 50
LANGUAGES = ("en", "bn")


class InputValidationError(ValueError):
    """Raised when flow input fails validation.

    ``errors`` holds one human readable message per failed rule.
    """

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def _too_short(value: Optional[str], minimum: int) -> bool:
    return not isinstance(value, str) or len(value) < minimum


@dataclass
class ScoreResumesInput:
    """A job description and the résumés (as data URIs) to score against it."""

    job_description: str
    resume_data_uris: List[str] = field(default_factory=list)

    def validate(self, settings: Optional[Settings] = None) -> None:
        settings = settings or Settings()
        errors: List[str] = []
        if _too_short(self.job_description, MIN_JOB_DESCRIPTION_CHARS):
            errors.append(f"Job description must be at least {MIN_JOB_DESCRIPTION_CHARS} characters.")
        if not self.resume_data_uris:
            errors.append("At least one resume file is required.")
        elif len(self.resume_data_uris) > settings.max_files:
            errors.append(f"You can upload a maximum of {settings.max_files} files.")
        max_mb = settings.max_file_size / (1024 * 1024)
        for index, uri in enumerate(self.resume_data_uris, start=1):
            try:
                media = parse_data_uri(uri)
            except InvalidDataURIError as exc:
                errors.append(f"Resume {index}: {exc}")
                continue
            if media.mime_type not in ALLOWED_RESUME_TYPES:
                errors.append(f"Resume {index}: only PDF, DOCX, and TXT files are allowed.")
            if media.size > settings.max_file_size:
                errors.append(f"Resume {index}: each file must be less than {max_mb:g}MB.")
        if errors:
            raise InputValidationError(errors)


@dataclass
class ResumeScore:
    """Score for one résumé, from 0 to 100, with a short reason."""

    resume_data_uri: str
    score: int
    reason: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class ScoringError:
    """Flow-level failure of :func:`~talentai.flows.score_resumes.score_resumes`."""

    error: str


@dataclass
class ScreeningInput:
    resume_text: str
    job_description: str
    screening_questions: str

    def validate(self) -> None:
        errors: List[str] = []
        if _too_short(self.resume_text, MIN_RESUME_TEXT_CHARS):
            errors.append(f"Resume text must be at least {MIN_RESUME_TEXT_CHARS} characters.")
        if _too_short(self.job_description, MIN_JOB_DESCRIPTION_CHARS):
            errors.append(f"Job description must be at least {MIN_JOB_DESCRIPTION_CHARS} characters.")
        if _too_short(self.screening_questions, MIN_QUESTIONS_CHARS):
            errors.append("Please provide at least one screening question.")
        elif self.screening_questions.rstrip().endswith(","):
            errors.append("Questions should be comma-separated and not end with a comma.")
        if errors:
            raise InputValidationError(errors)


@dataclass
class ScreeningResult:
    passed: bool
    reason: str
    chat_transcript: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class JobDescriptionInput:
    role_brief: str
    language: str = "en"

    def validate(self) -> None:
        errors: List[str] = []
        if _too_short(self.role_brief, MIN_ROLE_BRIEF_CHARS):
            errors.append(f"Role brief must be at least {MIN_ROLE_BRIEF_CHARS} characters.")
        if self.language not in LANGUAGES:
            errors.append("Please select a language.")
        if errors:
            raise InputValidationError(errors)


@dataclass
class JobDescriptionResult:
    job_description: str

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)
