"""Environment key resolution for a single field.

The resolver is a pure function of the field descriptor (plus an optional
prefix) and is shared by the presence detector and the populator so both
always agree on which key belongs to which field.
"""

from __future__ import annotations

from ..domain.schema import SKIP_MARKER, FieldDescriptor, Keyed, LiteralKey, Unspecified, nested_schema


def resolve_key(field: FieldDescriptor, prefix: str | None = None) -> str | None:
    """Return the environment key for *field*, or ``None`` when it is never looked up.

    Nested structures have no key of their own; only their leaves do.

    Examples
    --------
    >>> from lib_env_struct.domain.schema import IntType, SKIP
    >>> resolve_key(FieldDescriptor("port", IntType()))
    'port'
    >>> resolve_key(FieldDescriptor("port", IntType(), mapping=LiteralKey("PORT")), prefix="APP")
    'APP_PORT'
    >>> resolve_key(FieldDescriptor("port", IntType(), mapping=Keyed(key="-"))) is None
    True
    >>> resolve_key(FieldDescriptor("port", IntType(), mapping=SKIP)) is None
    True
    """

    if nested_schema(field.type_tag) is not None:
        return None
    key = _mapped_key(field)
    if key is None or not prefix:
        return key
    return normalize_prefix(prefix) + key


def normalize_prefix(prefix: str) -> str:
    """Append the ``_`` separator to *prefix* unless it is already present.

    >>> normalize_prefix("APP"), normalize_prefix("APP_")
    ('APP_', 'APP_')
    """

    return prefix if prefix.endswith("_") else f"{prefix}_"


def _mapped_key(field: FieldDescriptor) -> str | None:
    mapping = field.mapping
    if isinstance(mapping, Unspecified):
        return field.name
    if isinstance(mapping, LiteralKey):
        return None if mapping.key == SKIP_MARKER else mapping.key
    if isinstance(mapping, Keyed):
        if mapping.key is None:
            return field.name
        return None if mapping.key == SKIP_MARKER else mapping.key
    return None
