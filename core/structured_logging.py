"""Structured logging helpers.

Every record emitted through the root handlers carries three context
fields: the run id, the pipeline stage (``parse``, ``merge``, ``select``,
``generate``) and the translation unit currently being processed. Fields
that are not set render as ``-``.
"""

from __future__ import annotations

import contextvars
import logging
import uuid
from contextlib import contextmanager
from typing import ContextManager, Iterator

PIPELINE_STAGES = ("parse", "merge", "select", "generate")

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | run_id=%(run_id)s | stage=%(stage)s | "
    "unit=%(unit)s | %(name)s | %(message)s"
)

_CONTEXT_VARS: dict[str, contextvars.ContextVar[str]] = {
    field: contextvars.ContextVar(field, default="-")
    for field in ("run_id", "stage", "unit")
}


class _RunContextFilter(logging.Filter):
    """Copy the current context fields onto each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for field, var in _CONTEXT_VARS.items():
            setattr(record, field, var.get())
        return True


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Install ``LOG_FORMAT`` and the context filter on the root handlers.

    Safe to call more than once: existing handlers are re-formatted and
    receive at most one context filter each.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT)

    for handler in root_logger.handlers:
        if not any(isinstance(f, _RunContextFilter) for f in handler.filters):
            handler.addFilter(_RunContextFilter())


def set_run_id(run_id: str | None = None) -> str:
    """Set the run id, generating a short random one when none is given."""
    value = run_id or uuid.uuid4().hex[:12]
    _CONTEXT_VARS["run_id"].set(value)
    return value


def get_run_id() -> str:
    return _CONTEXT_VARS["run_id"].get()


def get_current_stage() -> str:
    return _CONTEXT_VARS["stage"].get()


def get_current_unit() -> str:
    """Translation unit currently being processed, or ``-``."""
    return _CONTEXT_VARS["unit"].get()


@contextmanager
def _field_scope(field: str, value: str) -> Iterator[None]:
    var = _CONTEXT_VARS[field]
    token = var.set(value)
    try:
        yield
    finally:
        var.reset(token)


def stage_scope(stage: str) -> ContextManager[None]:
    """Tag records emitted inside the block with a pipeline stage.

    Raises:
        ValueError: If ``stage`` is not one of ``PIPELINE_STAGES``.
    """
    if stage not in PIPELINE_STAGES:
        raise ValueError(f"unknown pipeline stage: {stage!r}")
    return _field_scope("stage", stage)


def unit_scope(unit: str) -> ContextManager[None]:
    """Tag every log record emitted inside the block with ``unit``."""
    return _field_scope("unit", unit)
