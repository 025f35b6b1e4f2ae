"""Population engine tests.

Each test narrates one row of the field decision table (read, parse with a
custom parser, default, absent, nested, fail) using in-memory sources.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import ClassVar, Optional

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_env_struct import (
    U32,
    InvalidEnumValue,
    InvalidInteger,
    MissingRequiredField,
    ParseContext,
    ValidationError,
    env_field,
    load_from,
    validator,
)
from lib_env_struct.application.populate import populate, populate_field
from lib_env_struct.domain.schema import FieldDescriptor, IntType, Keyed, Schema, StringType


class Level(enum.Enum):
    debug = 10
    info = 20


def reject_large_ports(port: int) -> int:
    if port > 65535:
        raise ValidationError(f"port {port} out of range")
    return port


@dataclass
class Basic:
    name: str
    port: U32
    debug: bool = False


@dataclass
class ValidatedPort:
    port: U32 = env_field(parser=validator(U32, reject_large_ports))


@dataclass
class Database:
    host: str
    port: U32 = 5432


@dataclass
class WithOptionalDatabase:
    database: Optional[Database]


@dataclass
class WithDefaultDatabase:
    database: Optional[Database] = field(default_factory=lambda: Database(host="fallback"))


@dataclass
class WithRequiredDatabase:
    database: Database


@dataclass
class SkippedRequired:
    secret: str

    __env__: ClassVar[dict[str, object]] = {"secret": "-"}


@dataclass
class SkippedWithFallbacks:
    optional: Optional[str] = env_field("-")
    with_default: str = env_field(skip=True, default="kept")


@dataclass
class Optionals:
    present: Optional[int]
    missing: Optional[int]
    with_default: Optional[int] = 100


@dataclass
class Tagged:
    level: Level = Level.info
    tags: list[str] = env_field("TAGS", parser=lambda raw, context: raw.split(","), default_factory=list)


@dataclass
class Credentials:
    user: str
    password: str

    __env__: ClassVar[dict[str, object]] = {"user": "CRED_USER", "password": "CRED_PASSWORD"}


@dataclass
class Connection:
    url: str = "postgres://localhost"
    credentials: Optional[Credentials] = None

    __env__: ClassVar[dict[str, object]] = {"url": "CONN_URL"}


@dataclass
class Outer:
    connection: Optional[Connection]


@dataclass
class ContextEcho:
    seen: str = env_field("SEEN", parser=lambda raw, context: f"{context.field}|{context.key}|{raw}")


@dataclass
class TwoBadFields:
    first: int
    second: int


def test_scenario_required_fields_with_default() -> None:
    """Present keys are parsed and missing ones fall back to their defaults."""

    config = load_from(Basic, {"name": "svc", "port": "8080"})
    assert config == Basic(name="svc", port=8080, debug=False)


def test_scenario_validator_error_surfaces_instead_of_parse_error() -> None:
    """A failing validator reports its own error for well-formed text."""

    with pytest.raises(ValidationError, match="99999"):
        load_from(ValidatedPort, {"port": "99999"})


def test_validator_still_reports_malformed_text() -> None:
    """Malformed text fails in the built-in step before the validator runs."""

    with pytest.raises(InvalidInteger):
        load_from(ValidatedPort, {"port": "http"})


def test_scenario_optional_nested_absent_resolves_to_none() -> None:
    """An optional nested structure with no keys set becomes ``None``."""

    assert load_from(WithOptionalDatabase, {}).database is None


def test_scenario_skipped_required_field_fails_regardless_of_source() -> None:
    """A skipped field without default fails whatever the source holds."""

    for source in ({}, {"secret": "x"}, {"-": "x"}):
        with pytest.raises(MissingRequiredField) as info:
            load_from(SkippedRequired, source)
        assert info.value.field == "secret"
        assert info.value.key is None


def test_skipped_fields_fall_back_and_are_never_looked_up() -> None:
    """Skipped fields use their default or ``None`` and ignore the source."""

    config = load_from(SkippedWithFallbacks, {"with_default": "ignored", "optional": "ignored", "-": "ignored"})
    assert config.with_default == "kept"
    assert config.optional is None


def test_optional_nested_with_any_leaf_is_fully_populated() -> None:
    """One present leaf is enough to populate an optional nested structure."""

    config = load_from(WithOptionalDatabase, {"port": "6543", "host": "db"})
    assert config.database == Database(host="db", port=6543)


def test_optional_nested_with_partial_leaves_reports_missing_required() -> None:
    """Once populated, an optional nested structure needs all its required leaves."""

    with pytest.raises(MissingRequiredField) as info:
        load_from(WithOptionalDatabase, {"port": "6543"})
    assert info.value.field == "database.host"
    assert info.value.key == "host"


def test_optional_nested_absent_uses_default() -> None:
    """An absent optional nested structure falls back to its default."""

    assert load_from(WithDefaultDatabase, {}).database == Database(host="fallback")


def test_required_nested_always_recurses() -> None:
    """Required nested structures are populated even when no key is set."""

    with pytest.raises(MissingRequiredField):
        load_from(WithRequiredDatabase, {})
    assert load_from(WithRequiredDatabase, {"host": "db"}).database == Database(host="db")


def test_optional_scalars() -> None:
    """Optional scalars parse when present and fall back to default or ``None``."""

    config = load_from(Optionals, {"present": "42"})
    assert config == Optionals(present=42, missing=None, with_default=100)


def test_empty_string_counts_as_present() -> None:
    """An empty value is parsed rather than treated as missing."""

    with pytest.raises(InvalidInteger):
        load_from(Optionals, {"present": ""})


def test_enum_fields_and_custom_parsers() -> None:
    """Enum fields match member names and custom parsers replace built-in parsing."""

    config = load_from(Tagged, {"level": "debug", "TAGS": "a,b"})
    assert config.level is Level.debug
    assert config.tags == ["a", "b"]
    with pytest.raises(InvalidEnumValue):
        load_from(Tagged, {"level": "Debug"})


def test_default_factories_produce_fresh_values() -> None:
    """Each load calls the default factory again."""

    first, second = load_from(Tagged, {}), load_from(Tagged, {})
    assert first.tags == [] and first.tags is not second.tags


def test_transitive_presence_through_nested_optionals() -> None:
    """Keys of deeply nested leaves make every enclosing optional present."""

    config = load_from(Outer, {"CRED_USER": "app", "CRED_PASSWORD": "pw"})
    assert config.connection == Connection(credentials=Credentials(user="app", password="pw"))
    assert load_from(Outer, {}).connection is None


def test_transitive_presence_requires_every_required_leaf() -> None:
    """Transitive presence still demands all required leaves on the way down."""

    with pytest.raises(MissingRequiredField) as info:
        load_from(Outer, {"CRED_USER": "app"})
    assert info.value.field == "connection.credentials.password"


def test_custom_parser_receives_field_context() -> None:
    """Custom parsers see the dotted field path and the resolved key."""

    assert load_from(ContextEcho, {"SEEN": "raw"}).seen == "seen|SEEN|raw"


def test_custom_parser_errors_propagate_unchanged() -> None:
    """Exceptions from custom parsers reach the caller without wrapping."""

    class Boom(Exception):
        pass

    def explode(raw: str, context: ParseContext) -> str:
        raise Boom(raw)

    schema = Schema("Exploding", dict, (FieldDescriptor("value", StringType(), mapping=Keyed(parser=explode)),))
    with pytest.raises(Boom):
        populate(schema, {"value": "x"})


def test_first_failing_field_in_declaration_order_wins() -> None:
    """The first bad field in declaration order decides the error."""

    with pytest.raises(InvalidInteger) as info:
        load_from(TwoBadFields, {"first": "x", "second": "y"})
    assert info.value.field == "first"


def test_errors_carry_nested_field_paths() -> None:
    """Errors name the dotted path and key of the failing nested field."""

    with pytest.raises(InvalidInteger) as info:
        load_from(WithRequiredDatabase, {"host": "db", "port": "-1"})
    assert info.value.field == "database.port"
    assert info.value.key == "port"


def test_prefix_applies_to_all_keys() -> None:
    """Prefixed loads read only prefixed keys, nested leaves included."""

    config = load_from(WithOptionalDatabase, {"APP_host": "db", "host": "ignored"}, prefix="APP")
    assert config.database == Database(host="db")


def test_source_is_not_mutated() -> None:
    """Loading must leave the caller's source untouched."""

    source = {"name": "svc", "port": "1"}
    load_from(Basic, source)
    assert source == {"name": "svc", "port": "1"}


def test_populate_field_for_hand_built_descriptor() -> None:
    """Single descriptors can be populated without a dataclass."""

    descriptor = FieldDescriptor("retries", IntType(), default=3)
    assert populate_field(descriptor, {}) == 3
    assert populate_field(descriptor, {"retries": "5"}) == 5


def test_field_outcomes_are_logged_without_values(caplog: pytest.LogCaptureFixture) -> None:
    """Each field logs its outcome and never its raw value."""

    caplog.set_level(logging.DEBUG, logger="lib_env_struct")
    load_from(Basic, {"name": "top-secret", "port": "8080"})
    contexts = [getattr(record, "context") for record in caplog.records if record.getMessage() == "field_resolved"]
    outcomes = {context["field"]: context["outcome"] for context in contexts}
    assert outcomes == {"name": "source", "port": "source", "debug": "default"}
    assert all("top-secret" not in repr(context) for context in contexts)


def test_failures_are_logged_with_error_type(caplog: pytest.LogCaptureFixture) -> None:
    """Failed loads log the exception type and the schema name."""

    caplog.set_level(logging.ERROR, logger="lib_env_struct")
    with pytest.raises(MissingRequiredField):
        load_from(Basic, {})
    record = caplog.records[-1]
    assert record.getMessage() == "load_failed"
    assert getattr(record, "context")["error"] == "MissingRequiredField"
    assert getattr(record, "context")["schema"] == "Basic"


@given(st.dictionaries(st.sampled_from(["optional", "with_default", "-"]), st.text(max_size=6)))
def test_skip_marker_never_consulted(entries) -> None:
    """Whatever the source holds, skipped fields keep their fallbacks."""

    config = load_from(SkippedWithFallbacks, entries)
    assert config == SkippedWithFallbacks(optional=None)


@given(st.dictionaries(st.sampled_from(["x", "y", "z"]), st.just("1")))
def test_optional_nested_is_none_without_its_keys(entries) -> None:
    """Unrelated keys never make an optional nested structure present."""

    assert load_from(WithOptionalDatabase, entries).database is None

