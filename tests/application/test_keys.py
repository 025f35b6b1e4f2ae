from __future__ import annotations

import pytest

from lib_env_struct.application.keys import normalize_prefix, resolve_key
from lib_env_struct.domain.schema import (
    SKIP,
    FieldDescriptor,
    IntType,
    Keyed,
    LiteralKey,
    NestedType,
    OptionalType,
    Schema,
    StringType,
    Unspecified,
)

INNER = Schema("Inner", dict, (FieldDescriptor("host", StringType()),))


@pytest.mark.parametrize(
    ("mapping", "expected"),
    [
        (Unspecified(), "port"),
        (LiteralKey("PORT"), "PORT"),
        (LiteralKey("-"), None),
        (Keyed(), "port"),
        (Keyed(key="APP_PORT"), "APP_PORT"),
        (Keyed(key="-"), None),
        (Keyed(parser=lambda raw, context: raw), "port"),
        (SKIP, None),
    ],
)
def test_resolution_rules(mapping, expected) -> None:
    """Each mapping variant resolves to the documented key."""

    assert resolve_key(FieldDescriptor("port", IntType(), mapping=mapping)) == expected


def test_nested_fields_have_no_key_of_their_own() -> None:
    """Nested structures are never looked up under their own name."""

    assert resolve_key(FieldDescriptor("db", NestedType(INNER))) is None
    assert resolve_key(FieldDescriptor("db", OptionalType(NestedType(INNER)), mapping=LiteralKey("DB"))) is None


def test_optional_scalar_keeps_its_key() -> None:
    """Optional scalars resolve like their inner type."""

    assert resolve_key(FieldDescriptor("token", OptionalType(StringType()))) == "token"


def test_prefix_applies_to_every_resolved_key() -> None:
    """The prefix is prepended to default and literal keys alike."""

    assert resolve_key(FieldDescriptor("port", IntType()), "APP") == "APP_port"
    assert resolve_key(FieldDescriptor("port", IntType(), mapping=LiteralKey("PORT")), "APP_") == "APP_PORT"
    assert resolve_key(FieldDescriptor("port", IntType(), mapping=SKIP), "APP") is None
    assert resolve_key(FieldDescriptor("port", IntType()), "") == "port"


def test_normalize_prefix() -> None:
    """The ``_`` separator is appended only when missing."""

    assert normalize_prefix("SVC") == "SVC_"
    assert normalize_prefix("SVC_") == "SVC_"
