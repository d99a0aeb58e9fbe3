"""
Artifact: paper_analyzer/core/logging.py
Purpose: Provides centralized logging configuration and named logger accessors.
Author: Paper Analyzer Team
Created: 2026-10-16
Revised:
- 2026-10-16: Added configurable log level and quieter provider SDK loggers. (Paper Analyzer Team)
Preconditions:
- Python logging module is available.
Inputs:
- Acceptable: Logger names as non-empty strings; level names such as DEBUG or INFO.
- Unacceptable: Invalid logger names that are not string-compatible.
Postconditions:
- Root logging is configured once and loggers can be retrieved by name.
Returns:
- `configure_logging` returns None; `get_logger` returns `logging.Logger`.
Errors/Exceptions:
- No custom exceptions; unknown level names fall back to INFO.
"""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Apply process-wide logging configuration for the service."""
    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logging.getLogger("paper_analyzer").setLevel(resolved)

    # Provider SDKs log every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a named logger instance."""
    return logging.getLogger(name)
