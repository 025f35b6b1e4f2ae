"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contracts the population engine depends on so it can
run against the real process environment, a test fixture mapping, or any
other key/value store without depending on concrete implementations.

Contents
--------
* :class:`EnvSource` – read-only lookup of raw environment values.
* :class:`Parser` – capability interface for custom field parsers.

System Role
-----------
These protocols enforce Dependency Inversion (DIP). Adapters in
:mod:`lib_env_struct.adapters.env.default` implement :class:`EnvSource`;
callers implement :class:`Parser` as plain functions or callable objects.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..domain.schema import ParseContext


@runtime_checkable
class EnvSource(Protocol):
    """Read-only, case-sensitive lookup of raw environment values.

    Why
    ----
    The engine must distinguish absence (``None``) from presence of an empty
    string and must never mutate its input. Any ``Mapping[str, str]`` already
    satisfies this protocol.
    """

    def get(self, key: str) -> str | None:
        """Return the raw value stored under *key* or ``None`` when absent."""


@runtime_checkable
class Parser(Protocol):
    """Convert the raw text of one field into its final value.

    Why
    ----
    A declared parser fully replaces built-in parsing for its field, so one
    uniform signature lets closures, functions, and callable objects plug into
    the same resolution path. Errors raised here propagate to the caller
    unchanged.
    """

    def __call__(self, raw: str, context: ParseContext) -> Any:
        """Return the parsed value for *raw* or raise."""
