"""Composition root for ``lib_env_struct``.

Purpose
-------
Provide the entry points that wire schema introspection, environment sources,
and the population engine together while emitting structured observability
signals. Only stable, consumer-ready APIs are exported from here.

Contents
--------
* :func:`load` – populate a structure from a snapshot of the process
  environment.
* :func:`load_from` – populate a structure from a caller-supplied source.
* :func:`parse_value` / :func:`validator` – re-exported built-in parser
  helpers for composing custom parsers.

System Role
-----------
This module connects adapters (process environment, caller mappings) with the
application layer. It is the canonical location for adjusting how sources are
materialised or how load failures are reported.
"""

from __future__ import annotations

from typing import Any, Mapping, TypeVar, overload

from .adapters.env.default import ProcessEnvSource, as_env_source, default_env_prefix
from .application.introspection import env_field, schema_of
from .application.parsers import parse_value, validator
from .application.populate import populate
from .application.ports import EnvSource
from .domain.errors import (
    ConfigError,
    CustomParserError,
    InvalidEnumValue,
    InvalidFloat,
    InvalidFormat,
    InvalidInteger,
    MissingRequiredField,
    UnsupportedSchemaType,
    ValidationError,
)
from .domain.schema import Schema
from .observability import log_error, log_info, schema_scope

T = TypeVar("T")


@overload
def load(target: type[T], *, prefix: str | None = None) -> T: ...


@overload
def load(target: Schema, *, prefix: str | None = None) -> Any: ...


def load(target: Any, *, prefix: str | None = None) -> Any:
    """Populate *target* from the process environment.

    Why
    ----
    Applications usually want their settings straight from ``os.environ``
    without wiring a source themselves.

    What
    ----
    Takes a private snapshot of the environment for the duration of the call
    and delegates to :func:`load_from`.

    Parameters
    ----------
    target:
        Dataclass type (or a prebuilt :class:`Schema`) describing the result.
    prefix:
        Optional namespace prepended to every key (``"APP"`` turns ``port``
        into ``APP_port``); see :func:`default_env_prefix`.

    Returns
    -------
    T
        Fully populated instance; partial results are never returned.

    Examples
    --------
    >>> import os
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Demo:
    ...     greeting: str = "hello"
    >>> previous = os.environ.pop("greeting", None)
    >>> load(Demo).greeting
    'hello'
    >>> if previous is not None:
    ...     os.environ["greeting"] = previous
    """

    return load_from(target, ProcessEnvSource.snapshot(), prefix=prefix)


@overload
def load_from(target: type[T], source: EnvSource | Mapping[str, str], *, prefix: str | None = None) -> T: ...


@overload
def load_from(target: Schema, source: EnvSource | Mapping[str, str], *, prefix: str | None = None) -> Any: ...


def load_from(target: Any, source: Any, *, prefix: str | None = None) -> Any:
    """Populate *target* from *source*, a mapping or any object with ``get(key)``.

    The source is neither copied nor mutated, so concurrent calls against the
    same source are safe.

    Raises
    ------
    MissingRequiredField
        A required field has no present key and no default.
    InvalidFormat
        Raw text is malformed for the declared type.
    UnsupportedSchemaType
        The target cannot be described as a schema.
    Exception
        Whatever a custom parser or validator raised, unchanged.

    Side Effects
    ------------
    Emits ``field_resolved`` debug events, a ``struct_loaded`` info event on
    success, and a ``load_failed`` error event naming the exception type on
    failure.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Demo:
    ...     name: str
    ...     debug: bool = False
    >>> load_from(Demo, {"name": "svc", "debug": "yes"})
    Demo(name='svc', debug=True)
    """

    schema = schema_of(target)
    env = as_env_source(source)
    with schema_scope(schema.name):
        try:
            instance = populate(schema, env, prefix=prefix)
        except Exception as exc:
            log_error("load_failed", error=type(exc).__name__)
            raise
        log_info("struct_loaded", fields=len(schema.fields), prefix=prefix)
    return instance


__all__ = [
    "ConfigError",
    "CustomParserError",
    "InvalidEnumValue",
    "InvalidFloat",
    "InvalidFormat",
    "InvalidInteger",
    "MissingRequiredField",
    "Schema",
    "UnsupportedSchemaType",
    "ValidationError",
    "default_env_prefix",
    "env_field",
    "load",
    "load_from",
    "parse_value",
    "schema_of",
    "validator",
]
