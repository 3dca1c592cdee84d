"""Logging for competition engines and the services hosting them.

Engine modules log game transitions through ``structlog.get_logger()``.
``setup_logging`` wires those events, together with the plain stdlib records
of uvicorn and streamlit, into one stdout stream and optionally a per-run
file. ``LOG_FORMAT`` picks ``json`` or ``console`` rendering and
``LOG_LEVEL`` the threshold.
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, List, MutableMapping, Optional, Union

import structlog

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Per-request chatter from the server stack and streamlit's file watcher.
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "watchdog")

# uvicorn installs its own handlers on these; they are re-routed to the root.
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error")


def _serialize_enums(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Log GameMode, FinishReason and friends by their value."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def _is_test() -> bool:
    return "pytest" in sys.modules


def _json_output() -> bool:
    value = os.environ.get("LOG_FORMAT", "console").lower() or "console"
    if value not in ("json", "console"):
        raise ValueError(f"LOG_FORMAT must be 'json' or 'console', got {value!r}.")
    return value == "json"


def _level_from_env() -> int:
    value = os.environ.get("LOG_LEVEL", "INFO").upper()
    if value not in LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {value!r}.")
    return getattr(logging, value)


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _serialize_enums,
    ]


def _handler_formatter(*, json_output: bool, colors: bool) -> logging.Formatter:
    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        # Records that did not come through structlog (uvicorn, streamlit).
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def _tune_library_loggers() -> None:
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name in ROUTED_LOGGERS:
        library_logger = logging.getLogger(name)
        library_logger.handlers.clear()
        library_logger.propagate = True


@contextmanager
def session_context(session_id: str, **extra: Any) -> Iterator[None]:
    """Tag every event logged inside the block with the competition session."""
    with structlog.contextvars.bound_contextvars(session_id=session_id, **extra):
        yield


def setup_logging(
    log_dir: Union[Path, str, None] = None,
    level: Optional[int] = None,
    *,
    name: str = "competition",
) -> Optional[Path]:
    """Configure structlog and the stdlib root logger.

    With ``log_dir`` a ``<name>_<utc timestamp>.log`` file is opened there
    and its path returned. Test runs never write log files.
    """
    json_output = _json_output()
    if level is None:
        level = _level_from_env()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    _tune_library_loggers()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(_handler_formatter(json_output=json_output, colors=sys.stdout.isatty()))
    root_logger.addHandler(stdout_handler)

    if log_dir is None or _is_test():
        return None

    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(tz=timezone.utc).strftime(LOG_FILE_TIMESTAMP_FORMAT)
    file_path = dir_path / f"{name}_{timestamp}.log"
    file_handler = logging.FileHandler(file_path, encoding="utf-8")
    file_handler.setFormatter(_handler_formatter(json_output=json_output, colors=False))
    root_logger.addHandler(file_handler)
    return file_path
