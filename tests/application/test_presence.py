"""Presence detection tests for optional nested structures."""

from __future__ import annotations

from lib_env_struct.application.presence import has_any_present
from lib_env_struct.domain.schema import (
    SKIP,
    FieldDescriptor,
    IntType,
    LiteralKey,
    NestedType,
    OptionalType,
    Schema,
    StringType,
)

LEAF = Schema(
    "Credentials",
    dict,
    (
        FieldDescriptor("user", StringType(), mapping=LiteralKey("DB_USER")),
        FieldDescriptor("password", OptionalType(StringType()), mapping=LiteralKey("DB_PASSWORD")),
    ),
)
MIDDLE = Schema(
    "Database",
    dict,
    (
        FieldDescriptor("host", StringType(), mapping=LiteralKey("DB_HOST")),
        FieldDescriptor("credentials", OptionalType(NestedType(LEAF))),
    ),
)
ROOT = Schema(
    "Root",
    dict,
    (
        FieldDescriptor("secret", StringType(), default="x", mapping=SKIP),
        FieldDescriptor("database", NestedType(MIDDLE)),
    ),
)


def test_absent_when_no_leaf_key_is_set() -> None:
    """Without any leaf key the structure counts as absent."""

    assert has_any_present(ROOT, {}) is False
    assert has_any_present(ROOT, {"UNRELATED": "1"}) is False


def test_direct_leaf_counts() -> None:
    """A directly declared leaf key makes the structure present."""

    assert has_any_present(MIDDLE, {"DB_HOST": "db"}) is True


def test_transitive_optional_leaf_counts() -> None:
    """Leaf keys inside nested optionals count for the outer structure."""

    assert has_any_present(ROOT, {"DB_PASSWORD": "hunter2"}) is True


def test_empty_string_is_present() -> None:
    """Presence ignores the value, so empty strings count."""

    assert has_any_present(LEAF, {"DB_USER": ""}) is True


def test_skipped_and_nested_names_are_not_keys() -> None:
    """Skipped fields and nested field names never signal presence."""

    assert has_any_present(ROOT, {"secret": "1", "database": "1", "credentials": "1"}) is False


def test_presence_respects_prefix() -> None:
    """Presence checks use the same prefixed keys as population."""

    assert has_any_present(MIDDLE, {"DB_HOST": "db"}, prefix="APP") is False
    assert has_any_present(MIDDLE, {"APP_DB_HOST": "db"}, prefix="APP") is True


def test_source_is_not_mutated() -> None:
    """Presence detection only reads the source."""

    source = {"DB_HOST": "db"}
    has_any_present(ROOT, source)
    assert source == {"DB_HOST": "db"}


def test_unkeyed_integer_leaf() -> None:
    """Leaves without a declared key are detected by field name."""

    schema = Schema("Only", dict, (FieldDescriptor("retries", IntType()),))
    assert has_any_present(schema, {"retries": "3"}) is True
