"""Built-in parsers and the validator adapter.

Purpose
-------
Convert raw environment text into primitive and enum values, and let custom
parsers compose with that conversion.

Contents
--------
* :func:`parse_value` – public entry point accepting an annotation or a type tag.
* :func:`parse_builtin` – tag-directed dispatch used by the populator.
* :func:`parse_bool`, :func:`parse_int`, :func:`parse_float`,
  :func:`parse_enum` – individual conversions.
* :func:`validator` – chain built-in parsing with a post-validation function.

Parsing rules
-------------
* Strings are returned unchanged and never fail.
* Integers accept ``[+-]?[0-9]+``; whitespace, underscores and values outside
  the width (including any negative value for unsigned widths, though ``-0``
  is zero) raise :class:`InvalidInteger`.
* Floats accept signed decimals with optional fraction and exponent plus
  ``inf``/``infinity``/``nan``; a well-formed literal overflowing the declared
  width yields signed infinity. ``F32`` values are rounded to single precision.
* Booleans are ``True`` only for ``true``, ``1`` or ``yes`` (ASCII
  case-insensitive). Every other input, malformed or not, is ``False``;
  boolean parsing has no error path.
* Enums match variant names exactly (case-sensitive).
"""

from __future__ import annotations

import math
import re
import struct
from typing import Any, Callable, Final, TypeVar

from ..domain.errors import InvalidEnumValue, InvalidFloat, InvalidInteger, UnsupportedSchemaType
from ..domain.schema import (
    BoolType,
    EnumType,
    FloatType,
    IntType,
    NestedType,
    OpaqueType,
    OptionalType,
    ParseContext,
    StringType,
    TypeTag,
)
from .introspection import type_tag_of
from .ports import Parser

T = TypeVar("T")

TRUTHY: Final[frozenset[str]] = frozenset({"true", "1", "yes"})

_DECIMAL_INT: Final = re.compile(r"[+-]?[0-9]+")
_DECIMAL_FLOAT: Final = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SPECIAL_FLOAT: Final = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)
_TAG_TYPES: Final = (StringType, IntType, FloatType, BoolType, EnumType, NestedType, OptionalType, OpaqueType)


def parse_value(annotation: Any, raw: str) -> Any:
    """Parse *raw* with the built-in parser for *annotation*.

    Why
    ----
    Custom parsers frequently want the default conversion plus one extra
    check; exposing the built-in parser lets them compose with it.

    Parameters
    ----------
    annotation:
        A Python annotation (``int``, ``U16``, ``bool``, an ``Enum`` subclass,
        ``Literal[...]``) or a type tag.
    raw:
        Raw environment text.

    Raises
    ------
    InvalidInteger / InvalidFloat / InvalidEnumValue
        When *raw* is malformed for the declared type.
    UnsupportedSchemaType
        For nested, optional, or other types without a built-in parser.

    Examples
    --------
    >>> from lib_env_struct.domain.schema import U8
    >>> parse_value(U8, "255")
    255
    >>> parse_value(float, "3.5e2")
    350.0
    >>> parse_value(bool, "YES"), parse_value(bool, "nope")
    (True, False)
    >>> parse_value(U8, "256")
    Traceback (most recent call last):
    ...
    lib_env_struct.domain.errors.InvalidInteger: invalid integer '256': expected unsigned 8-bit integer
    """

    tag = annotation if isinstance(annotation, _TAG_TYPES) else type_tag_of(annotation)
    return parse_builtin(tag, raw, ParseContext(annotation=annotation))


def parse_builtin(tag: TypeTag, raw: str, context: ParseContext) -> Any:
    """Dispatch *raw* to the built-in conversion for *tag*."""

    if isinstance(tag, StringType):
        return raw
    if isinstance(tag, BoolType):
        return parse_bool(raw)
    if isinstance(tag, IntType):
        return parse_int(tag, raw, context)
    if isinstance(tag, FloatType):
        return parse_float(tag, raw, context)
    if isinstance(tag, EnumType):
        return parse_enum(tag, raw, context)
    where = f" for field {context.field!r}" if context.field else ""
    raise UnsupportedSchemaType(f"no built-in parser for {type(tag).__name__}{where}")


def parse_bool(raw: str) -> bool:
    """Return ``True`` for ``true``/``1``/``yes`` in any ASCII case, else ``False``.

    >>> [parse_bool(value) for value in ("True", "1", "yes", "0", "off", "")]
    [True, True, True, False, False, False]
    """

    return raw.isascii() and raw.lower() in TRUTHY


def parse_int(tag: IntType, raw: str, context: ParseContext | None = None) -> int:
    """Parse decimal integer text honouring the width and signedness of *tag*."""

    if _DECIMAL_INT.fullmatch(raw) is None:
        raise InvalidInteger(raw, _describe_int(tag), **_location(context))
    try:
        value = int(raw)
    except ValueError as exc:
        # digit strings beyond the interpreter's int conversion limit
        raise InvalidInteger(raw, _describe_int(tag), **_location(context)) from exc
    if tag.width is not None:
        low, high = tag.width.bounds()
        if not low <= value <= high:
            raise InvalidInteger(raw, _describe_int(tag), **_location(context))
    return value


def parse_float(tag: FloatType, raw: str, context: ParseContext | None = None) -> float:
    """Parse decimal float text; magnitudes beyond the width become signed infinity.

    >>> parse_float(FloatType(32), "0.1")
    0.10000000149011612
    >>> parse_float(FloatType(32), "-3.5e38")
    -inf
    >>> parse_float(FloatType(), "-inf")
    -inf
    """

    if _DECIMAL_FLOAT.fullmatch(raw) is None and _SPECIAL_FLOAT.fullmatch(raw) is None:
        raise InvalidFloat(raw, _describe_float(tag), **_location(context))
    value = float(raw)
    if tag.bits == 32:
        try:
            (value,) = struct.unpack("<f", struct.pack("<f", value))
        except OverflowError:
            # beyond the single-precision range
            value = math.copysign(math.inf, value)
    return value


def parse_enum(tag: EnumType, raw: str, context: ParseContext | None = None) -> Any:
    """Return the variant named exactly *raw*.

    >>> parse_enum(EnumType(("debug", "info")), "info")
    'info'
    """

    if raw not in tag.variants:
        raise InvalidEnumValue(raw, f"one of {', '.join(tag.variants)}", **_location(context))
    return tag.convert(raw)


def validator(annotation: Any, validate: Callable[[Any], T]) -> Parser:
    """Build a parser running built-in parsing for *annotation*, then *validate*.

    The value returned by *validate* becomes the field value; anything it
    raises reaches the caller unchanged. The annotation is resolved eagerly,
    so an unsupported type fails where the validator is declared.

    Examples
    --------
    >>> from lib_env_struct.domain.schema import U32
    >>> def check_port(port):
    ...     if port > 65535:
    ...         raise ValueError("port out of range")
    ...     return port
    >>> parse_port = validator(U32, check_port)
    >>> parse_port("8080", ParseContext())
    8080
    >>> parse_port("99999", ParseContext())
    Traceback (most recent call last):
    ...
    ValueError: port out of range
    """

    tag = annotation if isinstance(annotation, _TAG_TYPES) else type_tag_of(annotation)

    def parse(raw: str, context: ParseContext) -> T:
        return validate(parse_builtin(tag, raw, context))

    parse.__name__ = f"validate_{getattr(validate, '__name__', 'value')}"
    parse.__qualname__ = parse.__name__
    return parse


def _location(context: ParseContext | None) -> dict[str, Any]:
    if context is None or not context.field:
        return {"field": None, "key": None}
    return {"field": context.field, "key": context.key}


def _describe_int(tag: IntType) -> str:
    if tag.width is None:
        return "integer"
    return f"{'signed' if tag.width.signed else 'unsigned'} {tag.width.bits}-bit integer"


def _describe_float(tag: FloatType) -> str:
    return f"{tag.bits}-bit float"
