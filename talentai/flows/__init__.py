"""
AI flows.

* `score_resumes` – Scores résumés against a job description, one call
  per résumé for small requests and chunked batch calls otherwise.
* `screening` – Simulated text screening with a pass/fail decision.
* `job_description` – Writes a job description from a role brief.
"""

from .job_description import generate_job_description  # noqa: F401
from .score_resumes import score_tier  # noqa: F401
from .screening import conduct_candidate_screening  # noqa: F401
