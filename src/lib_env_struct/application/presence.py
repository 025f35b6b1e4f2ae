"""Recursive presence detection for optional nested structures.

An optional nested structure is populated only when the caller supplied at
least one of its settings. This module answers that question without
touching the populator: it only reads the source.
"""

from __future__ import annotations

from ..domain.schema import Schema, nested_schema
from .keys import resolve_key
from .ports import EnvSource


def has_any_present(schema: Schema, source: EnvSource, *, prefix: str | None = None) -> bool:
    """Return ``True`` when any leaf key of *schema* (transitively) exists in *source*.

    Presence ignores the value itself: an empty string counts as present.

    Examples
    --------
    >>> from lib_env_struct.domain.schema import FieldDescriptor, LiteralKey, StringType
    >>> schema = Schema("Db", dict, (FieldDescriptor("host", StringType(), mapping=LiteralKey("DB_HOST")),))
    >>> has_any_present(schema, {"DB_HOST": ""})
    True
    >>> has_any_present(schema, {"host": "ignored"})
    False
    """

    for field in schema.fields:
        key = resolve_key(field, prefix)
        if key is not None and source.get(key) is not None:
            return True
        sub_schema = nested_schema(field.type_tag)
        if sub_schema is not None and has_any_present(sub_schema, source, prefix=prefix):
            return True
    return False
