"""
LLM access layer.

* `providers` – Provider interface plus OpenAI, Gemini and offline
  placeholder implementations, and an async wrapper that bounds
  concurrent calls.
* `json_repair` – Recovers JSON values from imperfect model output.
"""

from .json_repair import MalformedResponseError, extract_json  # noqa: F401
from .providers import (  # noqa: F401
    AsyncLLMProvider,
    GeminiProvider,
    LLMProvider,
    OpenAIProvider,
    PlaceholderProvider,
    Prompt,
    as_async,
    get_default_provider,
)
