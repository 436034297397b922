"""Loguru setup for disfork.

Console lines name the fork (or account) being worked on when that context
is bound, so interleaved output from concurrent analyses stays readable.
Stdlib loggers (the pacing modules, httpx, httpcore) are routed through
loguru as well.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _console_format(record: Record) -> str:
    """Render one console line, tagged with the fork or account in scope."""
    source = "{extra[name]}" if "name" in record["extra"] else "{name}"
    if "repo" in record["extra"]:
        scope = " <magenta>[{extra[repo]}]</magenta>"
    elif "account" in record["extra"]:
        scope = " <magenta>[{extra[account]}]</magenta>"
    else:
        scope = ""
    return (
        "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
        f"<cyan>{source}</cyan>{scope} - <level>{{message}}</level>\n{{exception}}"
    )


def setup_logging(
    level: LogLevel = "WARNING",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Configure loguru for a CLI run.

    Args:
        level: Base log level from settings
        verbose: Log at DEBUG, including httpx requests
        quiet: Only log errors
        log_file: Optional file that receives every record at DEBUG
        rotation: When to rotate the log file (e.g. "10 MB", "1 day")
        retention: How long to keep rotated logs
        serialize: Write the log file as JSON lines

    Returns:
        The configured logger

    Note:
        verbose takes precedence over quiet if both are True.
    """
    effective_level: LogLevel
    if verbose:
        effective_level = "DEBUG"
    elif quiet:
        effective_level = "ERROR"
    else:
        effective_level = level

    logger.remove()
    logger.add(
        sys.stderr,
        level=effective_level,
        format=_console_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        logger.add(
            log_file,
            level="DEBUG",
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
                "{name}:{function}:{line} | {extra} | {message}"
            ),
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # httpx logs every request at INFO
    http_level = logging.DEBUG if effective_level in ("TRACE", "DEBUG") else logging.WARNING
    logging.getLogger("httpx").setLevel(http_level)
    logging.getLogger("httpcore").setLevel(http_level)

    return logger


def get_logger(name: str) -> Logger:
    """Get a logger with ``name`` bound, e.g. ``get_logger(__name__)``."""
    return logger.bind(name=name)


def bind_repo(owner: str, repo: str) -> Logger:
    """Logger tagged with the fork being classified."""
    return logger.bind(name="triage", repo=f"{owner}/{repo}")


def bind_account(account: str) -> Logger:
    """Logger tagged with the account being scanned."""
    return logger.bind(name="triage", account=account)


class LogContext:
    """Tag every record logged inside the block, from any logger.

    Usage:
        with LogContext(account="octocat"):
            await coordinator.analyze(repos)
    """

    def __init__(self, **context: Any) -> None:
        self._context = context
        self._token: Any = None

    def __enter__(self) -> Logger:
        self._token = logger.contextualize(**self._context)
        self._token.__enter__()
        return logger

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._token:
            self._token.__exit__(exc_type, exc_val, exc_tb)


def reset_logging() -> None:
    """Remove every handler (used between tests)."""
    logger.remove()
