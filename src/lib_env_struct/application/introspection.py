"""Schema introspection over dataclasses.

Purpose
-------
Derive an explicit :class:`~lib_env_struct.domain.schema.Schema` from a
dataclass so the population engine can walk a plain description instead of
reflecting on classes while it reads the environment.

Contents
--------
* :data:`ENV_METADATA_KEY` – ``dataclasses.field`` metadata key holding a
  per-field declaration.
* :func:`env_field` – ``dataclasses.field`` wrapper recording a declaration.
* :func:`schema_of` – build (or pass through) a schema.
* :func:`type_tag_of` – map a single annotation onto a type tag.
* :func:`resolve_mapping` – turn a declaration into a field mapping variant.

System Role
-----------
Declarations are resolved exactly once, here, so the engine never re-inspects
strings, records, or dictionaries while looking keys up. Unsupported field
types surface as :class:`UnsupportedSchemaType` before any key is read.
"""

from __future__ import annotations

import dataclasses
import enum
import types
from typing import Annotated, Any, Literal, Mapping, Union, get_args, get_origin, get_type_hints

from ..domain.errors import UnsupportedSchemaType
from ..domain.schema import (
    NO_DEFAULT,
    BoolType,
    EnumType,
    EnvField,
    FieldDescriptor,
    FieldMapping,
    FloatType,
    FloatWidth,
    IntType,
    IntWidth,
    Keyed,
    LiteralKey,
    NestedType,
    OpaqueType,
    OptionalType,
    Schema,
    Skipped,
    StringType,
    TypeTag,
    Unspecified,
)

ENV_METADATA_KEY = "env"
"""Key under which :func:`env_field` stores a declaration in field metadata."""

CLASS_DECLARATIONS_ATTR = "__env__"
"""Class attribute holding a ``{field_name: declaration}`` mapping."""

_DECLARATION_KEYS = frozenset({"key", "parser"})


def env_field(
    key: str | None = None,
    *,
    parser: Any = None,
    skip: bool = False,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    **kwargs: Any,
) -> Any:
    """Return a ``dataclasses.field`` carrying an environment declaration.

    Parameters
    ----------
    key:
        Environment key override; ``"-"`` skips the field like ``skip=True``.
    parser:
        Custom parser replacing built-in parsing for this field.
    skip:
        Never look the field up; it must then be optional or have a default.
    default / default_factory / kwargs:
        Forwarded to :func:`dataclasses.field`.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Demo:
    ...     port: int = env_field("DEMO_PORT", default=8080)
    >>> schema_of(Demo).fields[0].mapping
    LiteralKey(key='DEMO_PORT')
    """

    if skip:
        declaration: Any = Skipped()
    elif parser is not None:
        declaration = EnvField(key=key, parser=parser)
    else:
        declaration = key
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[ENV_METADATA_KEY] = declaration
    return dataclasses.field(default=default, default_factory=default_factory, metadata=metadata, **kwargs)


def schema_of(target: Any) -> Schema:
    """Return the schema for *target* (a dataclass type or a ready :class:`Schema`).

    Raises
    ------
    UnsupportedSchemaType
        When *target* is not a dataclass, a field type has no built-in parser
        and declares no custom parser, a declaration is malformed, or the
        dataclass nests itself.
    """

    if isinstance(target, Schema):
        return target
    if not (isinstance(target, type) and dataclasses.is_dataclass(target)):
        raise UnsupportedSchemaType(f"expected a dataclass type or Schema, got {target!r}")
    return _build_schema(target, ())


def type_tag_of(annotation: Any, *, has_parser: bool = False) -> TypeTag:
    """Map *annotation* onto a type tag.

    Examples
    --------
    >>> from typing import Optional
    >>> type_tag_of(Optional[int])
    OptionalType(inner=IntType(width=None))
    >>> type_tag_of(Literal["a", "b"]).variants
    ('a', 'b')
    """

    return _tag_for(annotation, has_parser, (), where=_describe(annotation))


def resolve_mapping(declaration: Any, *, where: str = "field") -> FieldMapping:
    """Turn a declaration value into one of the field mapping variants.

    Examples
    --------
    >>> resolve_mapping(None)
    Unspecified()
    >>> resolve_mapping("DB_HOST")
    LiteralKey(key='DB_HOST')
    >>> resolve_mapping({"key": "-"})
    Keyed(key='-', parser=None)
    """

    if declaration is None:
        return Unspecified()
    if isinstance(declaration, (Unspecified, LiteralKey, Skipped, Keyed)):
        return declaration
    if isinstance(declaration, str):
        return LiteralKey(declaration)
    if isinstance(declaration, EnvField):
        return _keyed(declaration.key, declaration.parser, where)
    if isinstance(declaration, Mapping):
        unknown = set(declaration) - _DECLARATION_KEYS
        if unknown:
            raise UnsupportedSchemaType(f"{where}: unknown declaration entries {sorted(unknown)}")
        return _keyed(declaration.get("key"), declaration.get("parser"), where)
    raise UnsupportedSchemaType(f"{where}: unsupported environment declaration {declaration!r}")


def _keyed(key: Any, parser: Any, where: str) -> Keyed:
    if key is not None and not isinstance(key, str):
        raise UnsupportedSchemaType(f"{where}: environment key must be a string, got {key!r}")
    if parser is not None and not callable(parser):
        raise UnsupportedSchemaType(f"{where}: parser must be callable, got {parser!r}")
    return Keyed(key=key, parser=parser)


def _build_schema(cls: type, active: tuple[type, ...]) -> Schema:
    if cls in active:
        chain = " -> ".join(item.__qualname__ for item in (*active, cls))
        raise UnsupportedSchemaType(f"recursive structure {chain} cannot be populated")
    try:
        hints = get_type_hints(cls, include_extras=True)
    except NameError as exc:
        raise UnsupportedSchemaType(f"cannot resolve annotations of {cls.__qualname__}: {exc}") from exc

    fields = [item for item in dataclasses.fields(cls) if item.init]
    declarations = _class_declarations(cls, {item.name for item in fields})
    descriptors: list[FieldDescriptor] = []
    for item in fields:
        where = f"{cls.__qualname__}.{item.name}"
        if ENV_METADATA_KEY in item.metadata:
            mapping = resolve_mapping(item.metadata[ENV_METADATA_KEY], where=where)
        else:
            mapping = resolve_mapping(declarations.get(item.name), where=where)
        has_parser = isinstance(mapping, Keyed) and mapping.parser is not None
        annotation = hints[item.name]
        descriptors.append(
            FieldDescriptor(
                name=item.name,
                type_tag=_tag_for(annotation, has_parser, (*active, cls), where=where),
                default=NO_DEFAULT if item.default is dataclasses.MISSING else item.default,
                default_factory=NO_DEFAULT if item.default_factory is dataclasses.MISSING else item.default_factory,
                mapping=mapping,
                annotation=annotation,
            )
        )
    return Schema(cls.__qualname__, cls, tuple(descriptors))


def _class_declarations(cls: type, field_names: set[str]) -> Mapping[str, Any]:
    declarations = getattr(cls, CLASS_DECLARATIONS_ATTR, None)
    if declarations is None:
        return {}
    if not isinstance(declarations, Mapping):
        raise UnsupportedSchemaType(f"{cls.__qualname__}.{CLASS_DECLARATIONS_ATTR} must be a mapping")
    unknown = set(declarations) - field_names
    if unknown:
        raise UnsupportedSchemaType(
            f"{cls.__qualname__}.{CLASS_DECLARATIONS_ATTR} names unknown fields {sorted(unknown)}"
        )
    return declarations


def _tag_for(annotation: Any, has_parser: bool, active: tuple[type, ...], *, where: str) -> TypeTag:
    origin = get_origin(annotation)
    if origin is Annotated:
        base, *extras = get_args(annotation)
        for extra in extras:
            if isinstance(extra, IntWidth) and base is int:
                return IntType(extra)
            if isinstance(extra, FloatWidth) and base is float:
                if extra.bits not in (32, 64):
                    raise UnsupportedSchemaType(f"{where}: float width must be 32 or 64, got {extra.bits}")
                return FloatType(extra.bits)
        return _tag_for(base, has_parser, active, where=where)
    if origin is Union or origin is types.UnionType:
        return _union_tag(annotation, has_parser, active, where=where)
    if origin is Literal:
        variants = get_args(annotation)
        if all(isinstance(variant, str) for variant in variants):
            return EnumType(tuple(variants))
    elif annotation is str:
        return StringType()
    elif annotation is bool:
        return BoolType()
    elif annotation is int:
        return IntType()
    elif annotation is float:
        return FloatType()
    elif isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return EnumType(tuple(annotation.__members__), annotation.__getitem__)
    elif isinstance(annotation, type) and dataclasses.is_dataclass(annotation) and not has_parser:
        return NestedType(_build_schema(annotation, active))
    if has_parser:
        return OpaqueType(annotation)
    raise UnsupportedSchemaType(f"{where}: no built-in parser for {_describe(annotation)}; declare a custom parser")


def _union_tag(annotation: Any, has_parser: bool, active: tuple[type, ...], *, where: str) -> TypeTag:
    members = get_args(annotation)
    present = tuple(member for member in members if member is not type(None))
    if len(present) == len(members):
        if has_parser:
            return OpaqueType(annotation)
        raise UnsupportedSchemaType(f"{where}: no built-in parser for {_describe(annotation)}; declare a custom parser")
    if len(present) == 1:
        return OptionalType(_tag_for(present[0], has_parser, active, where=where))
    if has_parser:
        return OptionalType(OpaqueType(Union[present]))
    raise UnsupportedSchemaType(f"{where}: no built-in parser for {_describe(annotation)}; declare a custom parser")


def _describe(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__qualname__
    return repr(annotation)
