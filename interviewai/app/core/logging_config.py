"""
Logging for the API server and the rehearsal client.

Both share one pipe-separated format under the ``interviewai`` logger
namespace. The server logs to stdout; the terminal client passes
``stream=sys.stderr`` so log lines never interleave with the transcript.
"""
import logging
import sys
from typing import TextIO

from interviewai.app.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Per-request chatter from the HTTP and LLM client libraries
NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def setup_logging(level: str | None = None, stream: TextIO | None = None) -> logging.Logger:
    """Configure the root handler once and return the ``interviewai`` logger."""
    level_val = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(
        level=level_val,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(stream or sys.stdout)],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level_val, logging.WARNING))
    return logging.getLogger("interviewai")


def get_logger(name: str) -> logging.Logger:
    """``get_logger("client.api")`` -> the ``interviewai.client.api`` logger."""
    return logging.getLogger(f"interviewai.{name}")
