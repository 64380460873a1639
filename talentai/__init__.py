"""
TalentAI hiring assistant toolkit.

This package contains the server-side operations behind the TalentAI
hiring assistant.  Each operation formats a prompt, sends it to a
hosted large language model and validates (and where possible repairs)
the JSON the model returns.  The package is organised as follows:

1. **config** – Layered settings from defaults, an optional YAML file
   and environment variables (``.env`` files are honoured).
2. **media** – Résumé files travel as base64 data URIs.  This module
   converts files to data URIs, parses them back and extracts plain
   text for providers that cannot read documents natively.
3. **llm** – Provider abstraction (OpenAI, Gemini or an offline
   placeholder) plus JSON repair helpers for model output.
4. **flows** – The three AI flows: batch résumé scoring, candidate
   screening and job description generation.
5. **actions** – Error-wrapped entry points that validate input and
   never raise on expected failures.
6. **cli** – Command line entry point wiring together the above.
"""

__version__ = "0.1.0"
