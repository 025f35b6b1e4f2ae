"""Schema value objects describing a target structure.

Purpose
-------
Model the shape the population engine walks: ordered field descriptors, the
type tag of every field, its default, and how it maps onto environment keys.
The module belongs to the domain layer and performs no I/O and no reflection;
:mod:`lib_env_struct.application.introspection` builds these objects from
dataclasses, while callers may also assemble them by hand.

Contents
--------
* Type tags – :class:`StringType`, :class:`IntType`, :class:`FloatType`,
  :class:`BoolType`, :class:`EnumType`, :class:`NestedType`,
  :class:`OptionalType`, :class:`OpaqueType`.
* Width markers – :class:`IntWidth`, :class:`FloatWidth` used inside
  ``typing.Annotated`` aliases such as ``U16``.
* Field mappings – :class:`Unspecified`, :class:`LiteralKey`,
  :class:`Skipped`, :class:`Keyed` plus the declaration records
  :class:`EnvField` and :data:`SKIP`.
* :class:`FieldDescriptor` / :class:`Schema` – the schema itself.
* :class:`ParseContext` – per-field information handed to custom parsers.
* Width aliases – ``I8`` … ``U128``, ``F32`` and ``F64`` for declaring
  fixed-width numeric fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Any, Callable, Final, Union

if TYPE_CHECKING:
    from ..application.ports import Parser

SKIP_MARKER: Final[str] = "-"
"""Reserved key meaning "never look up an environment key for this field"."""


class _NoDefault:
    """Sentinel type for fields that declare no default."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_DEFAULT"


NO_DEFAULT: Final = _NoDefault()


@dataclass(frozen=True, slots=True)
class IntWidth:
    """Declare the bit width and signedness of an integer field.

    Examples
    --------
    >>> IntWidth(8, signed=False).bounds()
    (0, 255)
    >>> IntWidth(8, signed=True).bounds()
    (-128, 127)
    """

    bits: int
    signed: bool = True

    def bounds(self) -> tuple[int, int]:
        if self.signed:
            return -(1 << (self.bits - 1)), (1 << (self.bits - 1)) - 1
        return 0, (1 << self.bits) - 1


@dataclass(frozen=True, slots=True)
class FloatWidth:
    """Declare the precision of a float field (32 or 64 bits)."""

    bits: int = 64


@dataclass(frozen=True, slots=True)
class StringType:
    pass


@dataclass(frozen=True, slots=True)
class IntType:
    """Integer tag; ``width=None`` means an unbounded Python ``int``."""

    width: IntWidth | None = None

    @property
    def signed(self) -> bool:
        return self.width is None or self.width.signed


@dataclass(frozen=True, slots=True)
class FloatType:
    bits: int = 64


@dataclass(frozen=True, slots=True)
class BoolType:
    pass


@dataclass(frozen=True, slots=True)
class EnumType:
    """Enumeration tag.

    ``variants`` lists the accepted names in declaration order and ``convert``
    maps a matched name onto the value stored in the instance (the member of
    an :class:`enum.Enum`, or the string itself for ``typing.Literal``).
    """

    variants: tuple[str, ...]
    convert: Callable[[str], Any] = str


@dataclass(frozen=True, slots=True)
class NestedType:
    schema: Schema


@dataclass(frozen=True, slots=True)
class OptionalType:
    inner: TypeTag


@dataclass(frozen=True, slots=True)
class OpaqueType:
    """A declared type without a built-in parser; valid only with a custom parser."""

    annotation: Any


TypeTag = Union[StringType, IntType, FloatType, BoolType, EnumType, NestedType, OptionalType, OpaqueType]


@dataclass(frozen=True, slots=True)
class Unspecified:
    """No mapping declared: the field name is the environment key."""


@dataclass(frozen=True, slots=True)
class LiteralKey:
    """A bare string mapping: a custom key, or ``"-"`` to skip the field."""

    key: str


@dataclass(frozen=True, slots=True)
class Skipped:
    """Explicit skip: the field is never looked up."""


@dataclass(frozen=True, slots=True)
class Keyed:
    """Structured mapping with an optional key override and an optional parser."""

    key: str | None = None
    parser: Parser | None = None


FieldMapping = Union[Unspecified, LiteralKey, Skipped, Keyed]


@dataclass(frozen=True, slots=True)
class EnvField:
    """Declaration record accepted in ``__env__`` and :func:`env_field`.

    Examples
    --------
    >>> EnvField(key="DB_PORT").key
    'DB_PORT'
    """

    key: str | None = None
    parser: Parser | None = None


SKIP = Skipped()
"""Declaration value that excludes a field from environment lookups."""


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Everything the engine needs to know about one field.

    Attributes
    ----------
    name:
        Identifier, unique within its schema; passed to the schema factory as
        keyword argument.
    type_tag:
        Declared type, see the module docstring.
    default / default_factory:
        Fallback value, or a zero-argument callable producing a fresh one.
        Both are :data:`NO_DEFAULT` when the field has no default.
    mapping:
        How the field maps onto environment keys.
    annotation:
        Original Python annotation, forwarded to custom parsers through
        :class:`ParseContext`.
    """

    name: str
    type_tag: TypeTag
    default: Any = NO_DEFAULT
    default_factory: Any = NO_DEFAULT
    mapping: FieldMapping = Unspecified()
    annotation: Any = None

    @property
    def has_default(self) -> bool:
        return self.default is not NO_DEFAULT or self.default_factory is not NO_DEFAULT

    def make_default(self) -> Any:
        """Return the declared default, calling ``default_factory`` when set.

        Examples
        --------
        >>> FieldDescriptor("port", IntType(), default=8080).make_default()
        8080
        >>> FieldDescriptor("tags", StringType(), default_factory=list).make_default()
        []
        """

        if self.default_factory is not NO_DEFAULT:
            return self.default_factory()
        if self.default is NO_DEFAULT:
            raise LookupError(f"field {self.name!r} declares no default")
        return self.default

    @property
    def parser(self) -> Parser | None:
        if isinstance(self.mapping, Keyed):
            return self.mapping.parser
        return None


@dataclass(frozen=True, slots=True)
class Schema:
    """Ordered field descriptors plus the factory assembling the instance.

    Examples
    --------
    >>> schema = Schema("Point", dict, (FieldDescriptor("x", IntType()),))
    >>> schema.field_names
    ('x',)
    >>> schema.build({"x": 1})
    {'x': 1}
    """

    name: str
    factory: Callable[..., Any]
    fields: tuple[FieldDescriptor, ...]

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(field.name for field in self.fields)

    def build(self, values: dict[str, Any]) -> Any:
        return self.factory(**values)


@dataclass(frozen=True, slots=True)
class ParseContext:
    """Per-field information handed to custom parsers.

    Attributes
    ----------
    field:
        Dotted path of the field (``"database.port"``); empty when parsing
        outside of a population run.
    key:
        Environment key the raw value was read from, if any.
    annotation:
        Declared Python annotation of the field, when known.
    """

    field: str = ""
    key: str | None = None
    annotation: Any = None


def nested_schema(tag: TypeTag) -> Schema | None:
    """Return the sub-schema of a nested or optional-nested tag, else ``None``.

    Examples
    --------
    >>> inner = Schema("Inner", dict, ())
    >>> nested_schema(OptionalType(NestedType(inner))) is inner
    True
    >>> nested_schema(OptionalType(StringType())) is None
    True
    """

    if isinstance(tag, OptionalType):
        tag = tag.inner
    if isinstance(tag, NestedType):
        return tag.schema
    return None


I8 = Annotated[int, IntWidth(8)]
I16 = Annotated[int, IntWidth(16)]
I32 = Annotated[int, IntWidth(32)]
I64 = Annotated[int, IntWidth(64)]
I128 = Annotated[int, IntWidth(128)]
U8 = Annotated[int, IntWidth(8, signed=False)]
U16 = Annotated[int, IntWidth(16, signed=False)]
U32 = Annotated[int, IntWidth(32, signed=False)]
U64 = Annotated[int, IntWidth(64, signed=False)]
U128 = Annotated[int, IntWidth(128, signed=False)]
F32 = Annotated[float, FloatWidth(32)]
F64 = Annotated[float, FloatWidth(64)]
