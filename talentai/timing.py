"""Elapsed-time logging for flows and actions."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator


@contextmanager
def log_elapsed(logger: logging.Logger, label: str) -> Iterator[None]:
    """Log how long the wrapped block took, whether or not it raised."""
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.info("%s: %.0f ms", label, (time.perf_counter() - start) * 1000)
