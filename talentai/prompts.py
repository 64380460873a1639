"""
Prompt templates.

Each function renders one task into a :class:`~talentai.llm.providers.Prompt`.
Résumés are referred to by short identifiers (``R1``, ``R2`` ...) in
the prompt text and attached as media, so base64 payloads are never
repeated inline.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .llm.providers import Prompt, PromptPart
from .media import DataURI

LANGUAGE_NAMES = {"en": "English", "bn": "Bengali"}


def resume_ids(count: int) -> List[str]:
    """Return the identifiers used for ``count`` résumés in one call."""
    return [f"R{i}" for i in range(1, count + 1)]


def score_single_resume_prompt(job_description: str, resume_id: str, resume: DataURI) -> Prompt:
    head = (
        "You are an expert resume screener. Your task is to score the provided resume "
        "against the given job description.\n"
        "Return a valid JSON object that MUST contain these three fields:\n"
        f'1. "resumeId": (string) Exactly "{resume_id}".\n'
        '2. "score": (number) A score from 0 to 100. This field is MANDATORY and MUST be a number.\n'
        '3. "reason": (string) A brief explanation for the score, max 150 characters.\n\n'
        f"Job Description:\n{job_description}\n\n"
        f"Resume to evaluate ({resume_id}):\n"
    )
    tail = (
        "\n\nCRITICAL: Ensure your output is a single, valid JSON object. The object MUST have "
        '"resumeId", "score", and "reason".\n'
        'The "score" MUST be a number between 0 and 100.\n'
        f'Example output: {{"resumeId": "{resume_id}", "score": 75, "reason": "Good fit based on relevant experience."}}\n'
        "Return only the JSON object, no other text."
    )
    return Prompt(
        name="score_single_resume",
        parts=[head, resume, tail],
        variables={"job_description": job_description, "resume_id": resume_id, "resume": resume},
    )


def score_resume_batch_prompt(job_description: str, resumes: Sequence[Tuple[str, DataURI]]) -> Prompt:
    parts: List[PromptPart] = [
        "You are an expert resume screener. Your task is to score EACH of the provided resumes "
        "against the given job description.\n"
        "For EACH resume, you MUST determine a score and a reason.\n"
        'Return a valid JSON object of the form {"results": [...]}, where EACH object in the '
        "array corresponds to one resume and MUST contain these three fields, in this exact order:\n"
        '1. "resumeId": (string) The exact identifier of the resume as given in the input.\n'
        '2. "score": (number) A numerical score from 0 to 100. This field is ABSOLUTELY MANDATORY for every resume.\n'
        '3. "reason": (string) A brief explanation for the score, maximum 150 characters.\n\n'
        f"Job Description:\n{job_description}\n\n"
        "Resumes to evaluate (process each one):\n"
    ]
    for resume_id, resume in resumes:
        parts.append(f"Resume (Input ID: {resume_id}):\n")
        parts.append(resume)
        parts.append("\n---\n")
    parts.append(
        'CRITICAL: Your output MUST be a single, valid JSON object with a "results" array. '
        'Each object in the array MUST represent one resume and MUST contain "resumeId", "score", and "reason".\n'
        'The "score" field is MANDATORY for every object. The "resumeId" in your output MUST EXACTLY '
        "MATCH the corresponding input ID for each resume.\n"
        'Example: {"results": [{"resumeId": "R1", "score": 80, "reason": "..."}, '
        '{"resumeId": "R2", "score": 65, "reason": "..."}]}\n'
        "Return ONLY the JSON object, with no other text or explanations outside the JSON structure."
    )
    return Prompt(
        name="score_resume_batch",
        parts=parts,
        variables={"job_description": job_description, "resumes": list(resumes)},
    )


def split_questions(screening_questions: str) -> List[str]:
    """Split a comma separated question list, dropping blanks."""
    return [q.strip() for q in screening_questions.split(",") if q.strip()]


def candidate_screening_prompt(resume_text: str, job_description: str, screening_questions: str) -> Prompt:
    questions = split_questions(screening_questions)
    numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(questions, start=1))
    text = (
        "You are a virtual recruiter tasked with conducting initial screenings of job candidates.\n\n"
        "You will be provided with the candidate's resume text, the job description, and a list "
        "of screening questions.\n\n"
        "Your task is to simulate a text-based conversation with the candidate, asking the screening "
        "questions and evaluating their responses based on the job description and the content of "
        "their resume.\n\n"
        "After the conversation, you will make a pass/fail decision and provide a reason for your decision.\n\n"
        f"Here's the candidate's resume:\n{resume_text}\n\n"
        f"Here's the job description:\n{job_description}\n\n"
        f"Here are the screening questions:\n{numbered}\n\n"
        "Please conduct the screening and provide your decision. Keep your responses short, "
        "a sentence or two at most.\n\n"
        "Make sure the chatTranscript is complete.\n"
        "Output in JSON format:\n"
        '{"pass": <boolean>, "reason": "<string>", "chatTranscript": "<string>"}'
    )
    return Prompt(
        name="candidate_screening",
        parts=[text],
        variables={
            "resume_text": resume_text,
            "job_description": job_description,
            "questions": questions,
        },
    )


def job_description_prompt(role_brief: str, language: str) -> Prompt:
    language_name = LANGUAGE_NAMES.get(language, language)
    text = (
        "You are an expert HR specialist, skilled at writing compelling job descriptions.\n\n"
        "You will be given a brief description of the role, and you will generate a job "
        "description in the specified language.\n\n"
        f"Role Brief: {role_brief}\n"
        f"Language: {language_name}\n\n"
        'Return a JSON object of the form {"jobDescription": "<the full job description>"}.'
    )
    return Prompt(
        name="job_description",
        parts=[text],
        variables={"role_brief": role_brief, "language": language},
    )
