"""Populate typed dataclasses from environment variables.

The public surface is re-exported from :mod:`lib_env_struct.core` and the
domain layer so ``import lib_env_struct`` is all consumers need: ``load`` and
``load_from`` populate a dataclass, ``parse_value`` and ``validator`` compose
custom parsers with the built-in ones, and the width aliases declare
fixed-size numeric fields.
"""

from __future__ import annotations

from .core import (
    ConfigError,
    CustomParserError,
    InvalidEnumValue,
    InvalidFloat,
    InvalidFormat,
    InvalidInteger,
    MissingRequiredField,
    Schema,
    UnsupportedSchemaType,
    ValidationError,
    default_env_prefix,
    env_field,
    load,
    load_from,
    parse_value,
    schema_of,
    validator,
)
from .adapters.env.default import MappingEnvSource, ProcessEnvSource
from .application.ports import EnvSource, Parser
from .domain.schema import (
    F32,
    F64,
    I8,
    I16,
    I32,
    I64,
    I128,
    SKIP,
    U8,
    U16,
    U32,
    U64,
    U128,
    EnvField,
    FieldDescriptor,
    ParseContext,
)
from .observability import bind_trace_id, get_logger

__all__ = [
    "ConfigError",
    "CustomParserError",
    "EnvField",
    "EnvSource",
    "F32",
    "F64",
    "FieldDescriptor",
    "I8",
    "I16",
    "I32",
    "I64",
    "I128",
    "InvalidEnumValue",
    "InvalidFloat",
    "InvalidFormat",
    "InvalidInteger",
    "MappingEnvSource",
    "MissingRequiredField",
    "ParseContext",
    "Parser",
    "ProcessEnvSource",
    "SKIP",
    "Schema",
    "U8",
    "U16",
    "U32",
    "U64",
    "U128",
    "UnsupportedSchemaType",
    "ValidationError",
    "bind_trace_id",
    "default_env_prefix",
    "env_field",
    "get_logger",
    "load",
    "load_from",
    "parse_value",
    "schema_of",
    "validator",
]
