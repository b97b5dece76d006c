"""
Structured logging for the study service.

Every process run writes JSON (or colored console output in debug mode) to
stdout and to its own file under settings.log_dir. Request-scoped values
bound with bind_context() (request_id, user_id, task_id) are merged into
each event.

Participant prompts and model responses are study data. Unless
settings.log_conversation_text is set, any event field carrying that text
is replaced by its length before rendering.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, List, MutableMapping, Optional

import structlog
from structlog.typing import Processor

from src.core.config import settings

LOG_FILE_PREFIX = "study_"

CONVERSATION_TEXT_FIELDS = frozenset(
    {"prompt", "prompt_text", "response", "response_text", "history"}
)


def mask_conversation_text(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Replace conversation text fields with a length marker."""
    if settings.log_conversation_text:
        return event_dict

    for key in CONVERSATION_TEXT_FIELDS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, str):
            event_dict[key] = f"<{len(value)} chars>"
        elif isinstance(value, (list, tuple)):
            event_dict[key] = f"<{len(value)} items>"
    return event_dict


def _next_run_file(logs_dir: Path, keep: int) -> Path:
    """Make room for a new run file and return its path.

    The oldest run files beyond keep - 1 are removed first.
    """
    logs_dir.mkdir(parents=True, exist_ok=True)

    previous = sorted(
        logs_dir.glob(f"{LOG_FILE_PREFIX}*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    for stale in previous[max(keep - 1, 0):]:
        try:
            os.remove(stale)
        except OSError:
            pass  # still open in another process

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return logs_dir / f"{LOG_FILE_PREFIX}{timestamp}.log"


def _renderer(debug: bool) -> List[Processor]:
    if debug:
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]


def _install_handlers(log_file: Path, level: int) -> None:
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    root_logger.setLevel(level)
    formatter = logging.Formatter("%(message)s")

    for handler in (logging.StreamHandler(), logging.FileHandler(log_file, mode="w")):
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


def configure_logging(
    log_runs_to_keep: Optional[int] = None, logs_dir: Optional[Path] = None
) -> Path:
    """Configure structlog and the stdlib root logger.

    Call once at startup. Safe to call again (tests, reloads): existing
    root handlers are closed and replaced.

    Args:
        log_runs_to_keep: Run files to retain (default: settings.log_runs_to_keep)
        logs_dir: Directory for run files (default: settings.log_dir)

    Returns:
        Path of this run's log file
    """
    keep = log_runs_to_keep or settings.log_runs_to_keep
    log_file = _next_run_file(Path(logs_dir or settings.log_dir), keep)
    level = logging.getLevelName(settings.log_level)

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        mask_conversation_text,
    ] + _renderer(settings.debug)

    _install_handlers(log_file, level)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return log_file


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger for a module, usually get_logger(__name__)."""
    return structlog.get_logger(name)


def bind_context(**kwargs) -> None:
    """Bind request-scoped values to every subsequent event."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Drop values bound with bind_context(); called when a request ends."""
    structlog.contextvars.clear_contextvars()
