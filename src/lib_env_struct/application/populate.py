"""Schema walker and field populator.

Purpose
-------
Turn a :class:`~lib_env_struct.domain.schema.Schema` and an environment source
into a populated instance. For every field exactly one outcome happens: the
value is read and parsed (built-in or custom parser), the default is used, the
field is absent (``None``), a nested structure is populated recursively, or
the whole call fails.

Decision table
--------------
* Nested, required – always recurse; required leaves inside must resolve.
* Optional nested – recurse only when :func:`has_any_present` finds a leaf
  key; otherwise default or ``None``.
* Optional scalar – parse when the key is present, otherwise default or
  ``None``.
* Required scalar – parse when the key is present, otherwise default or
  :class:`MissingRequiredField`. Skipped fields behave as if the key were
  never set.

System Role
-----------
Fields are visited in declaration order, which only decides which error is
reported first. The walker keeps no state between calls and never mutates
the source.
"""

from __future__ import annotations

from typing import Any

from ..domain.errors import MissingRequiredField
from ..domain.schema import FieldDescriptor, NestedType, OptionalType, ParseContext, Schema, TypeTag
from ..observability import log_debug, make_event
from .keys import resolve_key
from .parsers import parse_builtin
from .ports import EnvSource
from .presence import has_any_present


def populate(
    schema: Schema,
    source: EnvSource,
    *,
    prefix: str | None = None,
    path: tuple[str, ...] = (),
) -> Any:
    """Populate every field of *schema* from *source* and build the instance.

    Parameters
    ----------
    schema:
        Schema to walk.
    source:
        Read-only environment lookup.
    prefix:
        Optional key prefix applied to every resolved key.
    path:
        Field names leading to *schema*; used for error messages and logs.

    Examples
    --------
    >>> from lib_env_struct.domain.schema import FieldDescriptor, IntType, StringType
    >>> schema = Schema(
    ...     "Service",
    ...     dict,
    ...     (FieldDescriptor("name", StringType()), FieldDescriptor("port", IntType(), default=80)),
    ... )
    >>> populate(schema, {"name": "svc"})
    {'name': 'svc', 'port': 80}
    """

    values = {field.name: populate_field(field, source, prefix=prefix, path=path) for field in schema.fields}
    return schema.build(values)


def populate_field(
    field: FieldDescriptor,
    source: EnvSource,
    *,
    prefix: str | None = None,
    path: tuple[str, ...] = (),
) -> Any:
    """Resolve the value of a single field."""

    field_path = (*path, field.name)
    tag = field.type_tag
    if isinstance(tag, NestedType):
        return _populate_nested(field, tag, source, prefix, field_path)
    if isinstance(tag, OptionalType):
        inner = tag.inner
        if isinstance(inner, NestedType):
            if has_any_present(inner.schema, source, prefix=prefix):
                return _populate_nested(field, inner, source, prefix, field_path)
            return _fallback(field, ".".join(field_path), None, required=False)
        return _populate_leaf(field, inner, source, prefix, field_path, required=False)
    return _populate_leaf(field, tag, source, prefix, field_path, required=True)


def _populate_nested(
    field: FieldDescriptor,
    tag: NestedType,
    source: EnvSource,
    prefix: str | None,
    field_path: tuple[str, ...],
) -> Any:
    value = populate(tag.schema, source, prefix=prefix, path=field_path)
    log_debug("field_resolved", **make_event(".".join(field_path), None, {"outcome": "nested"}))
    return value


def _populate_leaf(
    field: FieldDescriptor,
    tag: TypeTag,
    source: EnvSource,
    prefix: str | None,
    field_path: tuple[str, ...],
    *,
    required: bool,
) -> Any:
    dotted = ".".join(field_path)
    key = resolve_key(field, prefix)
    raw = None if key is None else source.get(key)
    if raw is None:
        return _fallback(field, dotted, key, required=required)

    context = ParseContext(field=dotted, key=key, annotation=field.annotation)
    parser = field.parser
    if parser is not None:
        value = parser(raw, context)
        outcome = "parser"
    else:
        value = parse_builtin(tag, raw, context)
        outcome = "source"
    log_debug("field_resolved", **make_event(dotted, key, {"outcome": outcome}))
    return value


def _fallback(field: FieldDescriptor, dotted: str, key: str | None, *, required: bool) -> Any:
    if field.has_default:
        log_debug("field_resolved", **make_event(dotted, key, {"outcome": "default"}))
        return field.make_default()
    if required:
        raise MissingRequiredField(dotted, key)
    log_debug("field_resolved", **make_event(dotted, key, {"outcome": "absent"}))
    return None
