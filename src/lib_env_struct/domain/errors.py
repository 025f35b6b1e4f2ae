"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by the population engine, the
built-in parsers, schema introspection, and consuming applications. The
hierarchy lives in the domain layer so outer layers may depend on it without
creating import cycles.

Contents
--------
* :class:`ConfigError` – umbrella base class for all library failures.
* :class:`MissingRequiredField` – a required field has no present key and no
  default.
* :class:`InvalidFormat` – raw text could not be converted; specialised by
  :class:`InvalidInteger`, :class:`InvalidFloat`, and
  :class:`InvalidEnumValue`.
* :class:`CustomParserError` / :class:`ValidationError` – convenience bases
  for errors raised from caller-supplied parsers and validators.
* :class:`UnsupportedSchemaType` – a declared type has neither a built-in nor
  a custom parser.

System Role
-----------
The engine performs no local recovery: the first failing field aborts the
whole ``load`` call with one of these exceptions (or, for custom parsers, the
caller's own exception unchanged). Callers catch :class:`ConfigError` to
handle all library failures uniformly.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_env_struct``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class MissingRequiredField(ConfigError):
    """Raised when a required field cannot be resolved from the source.

    Why
    ----
    A field without a default that is not optional must be supplied by the
    environment; silently producing a partially populated instance would hide
    deployment mistakes.

    Attributes
    ----------
    field:
        Dotted path of the field inside the target structure
        (``"database.host"``).
    key:
        Environment key that was looked up, or ``None`` when the field is
        mapped to the skip marker.

    Examples
    --------
    >>> str(MissingRequiredField("database.host", "DB_HOST"))
    "missing required field 'database.host' (environment key 'DB_HOST' is not set)"
    >>> str(MissingRequiredField("token", None))
    "missing required field 'token' (field is skipped and declares no default)"
    """

    def __init__(self, field: str, key: str | None) -> None:
        self.field = field
        self.key = key
        if key is None:
            detail = "field is skipped and declares no default"
        else:
            detail = f"environment key {key!r} is not set"
        super().__init__(f"missing required field {field!r} ({detail})")


class InvalidFormat(ConfigError):
    """Raised when raw environment text cannot be converted to the declared type.

    Why
    ----
    Distinguish malformed content from missing keys.

    Attributes
    ----------
    raw:
        Offending text exactly as read from the source.
    field / key:
        Field path and environment key when the failure happened during
        population; ``None`` when :func:`lib_env_struct.parse_value` was called
        directly.
    """

    kind = "value"

    def __init__(self, raw: str, expected: str, *, field: str | None = None, key: str | None = None) -> None:
        self.raw = raw
        self.expected = expected
        self.field = field
        self.key = key
        location = f" for field {field!r}" if field is not None else ""
        if key is not None:
            location += f" (environment key {key!r})"
        super().__init__(f"invalid {self.kind} {raw!r}{location}: expected {expected}")


class InvalidInteger(InvalidFormat):
    """Malformed or out-of-range integer text for the declared width."""

    kind = "integer"


class InvalidFloat(InvalidFormat):
    """Malformed floating point text, or a finite value that overflows the width."""

    kind = "float"


class InvalidEnumValue(InvalidFormat):
    """Raw text that does not exactly match any declared variant name."""

    kind = "enum value"


class CustomParserError(ConfigError):
    """Convenience base for errors raised from caller-supplied parsers.

    The engine never wraps exceptions coming out of a custom parser; raising a
    subclass of this type merely lets callers catch them with
    :class:`ConfigError` as well.
    """


class ValidationError(CustomParserError):
    """Signifies that a syntactically valid value failed a semantic check.

    Typical Sources
    ---------------
    Functions passed to :func:`lib_env_struct.validator`.
    """


class UnsupportedSchemaType(ConfigError):
    """Raised while building a schema for a type the engine cannot populate.

    Why
    ----
    Fields whose declared type has no built-in parser (lists, unions, arbitrary
    classes) must declare a custom parser. Detecting this when the schema is
    built means the error surfaces on the first ``load`` regardless of which
    keys happen to be present.
    """
