"""
Logging configuration for Aegis AI.

Provides rich-formatted terminal logging and a helper that redacts
credentials before they reach a log record.
"""

import logging
import re
from typing import Iterable, Optional

from rich.console import Console
from rich.logging import RichHandler

# userinfo section of an authenticated clone URL: https://<token>@host/...
_URL_CREDENTIAL_RE = re.compile(r"(https?://)[^/@\s]+@")

# Per-request chatter from the HTTP stack; only shown with --verbose
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging with rich handler for colored output.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to write logs to

    Returns:
        Configured logger instance for aegis_ai
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    console = Console(stderr=True)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)

    logger = logging.getLogger("aegis_ai")
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'aegis_ai.pipeline')
              If None, returns the root aegis_ai logger

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger("aegis_ai")

    if not name.startswith("aegis_ai"):
        name = f"aegis_ai.{name}"

    return logging.getLogger(name)


def redact(text: str, secrets: Iterable[Optional[str]] = ()) -> str:
    """Mask credentials embedded in URLs and any explicitly known secret values."""
    out = _URL_CREDENTIAL_RE.sub(r"\1***@", text or "")
    for secret in secrets:
        if secret:
            out = out.replace(secret, "***")
    return out
