"""Structured logging for schema loading.

Purpose
    Report how each field of a structure was resolved (read, parsed by a
    custom parser, defaulted, absent, or nested) without ever writing the
    values themselves: environment variables routinely carry secrets.

Contents
    - ``TRACE_ID``: identifier of the caller's trace, if any.
    - ``CURRENT_SCHEMA``: name of the structure being loaded right now.
    - ``get_logger`` / ``bind_trace_id``: host-application hooks.
    - ``schema_scope``: binds ``CURRENT_SCHEMA`` for the duration of one load.
    - ``log_debug`` / ``log_info`` / ``log_error``: structured emitters.
    - ``make_event``: per-field payload builder.

System Integration
    The population engine emits one ``field_resolved`` debug record per field,
    :mod:`lib_env_struct.core` wraps every call in :func:`schema_scope` and
    reports ``struct_loaded`` or ``load_failed``. Records carry their payload
    under ``record.context`` so formatters can render it as JSON.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Final, Iterator, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_env_struct_trace_id", default=None)
"""Trace identifier attached to every record while bound."""

CURRENT_SCHEMA: ContextVar[str | None] = ContextVar("lib_env_struct_schema", default=None)
"""Name of the schema whose fields are being populated, if a load is running."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_env_struct")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the package logger; it stays silent until the host adds a handler."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the trace identifier copied into every record.

    Why
        Lets a service correlate its startup configuration events with the
        request or deployment trace that triggered them.
    Side Effects
        Mutates :data:`TRACE_ID` for the current context.

    Examples
    --------
    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


@contextmanager
def schema_scope(name: str) -> Iterator[None]:
    """Tag records emitted inside the block with the schema *name*.

    Scopes nest; leaving one restores the enclosing schema name.

    Examples
    --------
    >>> with schema_scope("ServiceConfig"):
    ...     CURRENT_SCHEMA.get()
    'ServiceConfig'
    >>> CURRENT_SCHEMA.get() is None
    True
    """

    token = CURRENT_SCHEMA.set(name)
    try:
        yield
    finally:
        CURRENT_SCHEMA.reset(token)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug record."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info record."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error record."""

    _emit(logging.ERROR, message, fields)


def make_event(
    field: str,
    key: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the payload describing how one field was resolved.

    Inputs
        field: Dotted path of the field, e.g. ``database.port``.
        key: Environment key consulted, ``None`` for nested or skipped fields.
        payload: Extra entries such as ``outcome``.

    Examples
    --------
    >>> make_event('database.port', 'DB_PORT', {'outcome': 'source'})
    {'field': 'database.port', 'key': 'DB_PORT', 'outcome': 'source'}
    """

    event: dict[str, Any] = {"field": field, "key": key}
    if payload:
        event.update(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    if not _LOGGER.isEnabledFor(level):
        return
    context: dict[str, Any] = {"trace_id": TRACE_ID.get()}
    schema = CURRENT_SCHEMA.get()
    if schema is not None:
        context["schema"] = schema
    context.update(fields)
    _LOGGER.log(level, message, extra={"context": context})
