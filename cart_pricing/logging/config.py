"""
Structured logging for the cart pricing engine.

Log lines go to stderr so they never interleave with notifications printed
by StdoutNotifier. Enum members (edit fields, statuses, severities) are
rendered by value, and every event carries a UTC timestamp.
"""
import logging
import sys
from enum import Enum
from typing import Any, Optional, TextIO

import structlog
from structlog.types import EventDict, FilteringBoundLogger, WrappedLogger


def render_enum_values(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace Enum members in the event with their values."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    stream: Optional[TextIO] = None
) -> None:
    """
    Configure structlog over stdlib logging for the package.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        format_json: Emit one JSON object per line instead of console output
        stream: Destination stream, stderr by default
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=stream or sys.stderr,
        format="%(message)s",
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if format_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            render_enum_values,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Logger for ``name``, usually the calling module's ``__name__``."""
    return structlog.get_logger(name)


def get_edit_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for edit intake and commit decisions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound with the edits subsystem context
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="edits",
        audit_trail=True
    )


def log_edit_decision(
    logger: FilteringBoundLogger,
    item_id: str,
    field: str,
    status: str,
    raw_value: Any,
    reason: Optional[str] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the intake decision for a single user edit.

    Args:
        logger: Structlog logger instance
        item_id: Line item the edit targets
        field: Edited field ("price" or "margin")
        status: Intake outcome (scheduled, forbidden, rejected, not_found)
        raw_value: Value as typed by the user
        reason: Why the edit was not scheduled, if it was not
        context: Additional context data
    """
    bound_logger = logger.bind(
        item_id=item_id,
        field=field,
        edit_status=status,
        raw_value=raw_value,
    )

    if reason:
        bound_logger = bound_logger.bind(reason=reason)
    if context:
        bound_logger = bound_logger.bind(context=context)

    if status == "scheduled":
        bound_logger.debug("Edit scheduled")
    else:
        bound_logger.warning("Edit not scheduled")


def log_commit_outcome(
    logger: FilteringBoundLogger,
    requested: int,
    succeeded: int,
    failed_ids: list[str],
    message: Optional[str] = None
) -> None:
    """
    Log the aggregate outcome of a batch price commit.

    Args:
        logger: Structlog logger instance
        requested: Number of write requests issued
        succeeded: Number of writes that resolved
        failed_ids: Ids whose write was rejected
        message: Surfaced error message, if any write failed
    """
    bound_logger = logger.bind(
        requested=requested,
        succeeded=succeeded,
        failed=len(failed_ids),
    )

    if failed_ids:
        bound_logger.error(
            "Batch commit finished with failures",
            failed_ids=failed_ids,
            error=message
        )
    else:
        bound_logger.info("Batch commit succeeded")
