"""Environment source adapters.

Purpose
-------
Provide the two realisations of the :class:`~lib_env_struct.application.ports.EnvSource`
port: a private snapshot of the process environment and a thin wrapper over a
caller-supplied mapping.

Key behaviours
--------------
* :meth:`ProcessEnvSource.snapshot` copies :data:`os.environ` once, so a single
  ``load`` call observes a consistent view even if the environment changes.
* :class:`MappingEnvSource` neither copies nor mutates the wrapped mapping.
* ``None`` values inside caller mappings are treated as absent keys.
* :func:`default_env_prefix` derives the canonical key prefix for an
  application slug.
"""

from __future__ import annotations

import os
from typing import Mapping

from ...application.ports import EnvSource
from ...observability import log_debug


def default_env_prefix(slug: str) -> str:
    """Return the canonical environment prefix for *slug*.

    Why
    ----
    Namespacing prevents unrelated environment variables from leaking into the
    populated structure.

    Parameters
    ----------
    slug:
        Package/application slug (typically ``kebab-case``).

    Returns
    -------
    str
        Upper-case prefix with dashes converted to underscores.

    Examples
    --------
    >>> default_env_prefix('lib-env-struct')
    'LIB_ENV_STRUCT'
    """

    return slug.replace("-", "_").upper()


class MappingEnvSource:
    """Expose a caller-supplied mapping through the ``EnvSource`` port.

    Examples
    --------
    >>> source = MappingEnvSource({"PORT": "8080", "EMPTY": ""})
    >>> source.get("PORT"), source.get("EMPTY"), source.get("MISSING")
    ('8080', '', None)
    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str | None]) -> None:
        self._mapping = mapping

    def get(self, key: str) -> str | None:
        return self._mapping.get(key)

    def __len__(self) -> int:
        return sum(1 for value in self._mapping.values() if value is not None)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={len(self)})"


class ProcessEnvSource(MappingEnvSource):
    """Snapshot of the process environment owned by a single ``load`` call."""

    __slots__ = ()

    @classmethod
    def snapshot(cls, *, environ: Mapping[str, str] | None = None) -> ProcessEnvSource:
        """Copy *environ* (defaults to :data:`os.environ`) into a private mapping.

        Parameters
        ----------
        environ:
            Mapping to copy instead of :data:`os.environ`; exists for
            testability.

        Side Effects
        ------------
        Emits an ``env_snapshot_taken`` debug event with the number of keys.
        """

        copied = dict(os.environ if environ is None else environ)
        log_debug("env_snapshot_taken", keys=len(copied))
        return cls(copied)


def as_env_source(source: object) -> EnvSource:
    """Return *source* unchanged when it already provides ``get``; wrap mappings otherwise.

    Examples
    --------
    >>> wrapped = as_env_source({"A": "1"})
    >>> wrapped.get("A")
    '1'
    """

    if isinstance(source, MappingEnvSource):
        return source
    if isinstance(source, Mapping):
        return MappingEnvSource(source)
    if callable(getattr(source, "get", None)):
        return source
    raise TypeError(f"expected a mapping or an object with get(key), got {type(source).__name__}")
