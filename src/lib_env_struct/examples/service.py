"""Example service configuration exercising every declaration style.

Purpose
-------
Give documentation, the CLI, and the end-to-end tests one realistic schema:
a required nested database block, an optional redis block, an enum log level,
a validated port, and a comma-separated feature list parsed by a custom
parser.

Environment
-----------
``APP_NAME`` (required), ``DEBUG``, ``LOG_LEVEL``, ``PORT``, ``FEATURES``,
``DB_HOST`` (required), ``DB_PORT``, ``DB_SSL``, ``REDIS_HOST``,
``REDIS_PORT``, ``REDIS_PASSWORD``. ``build_id`` is never read from the
environment.

Examples
--------
>>> from lib_env_struct import load_from
>>> config = load_from(ServiceConfig, {"APP_NAME": "shop", "DB_HOST": "db.local", "FEATURES": "auth, search"})
>>> config.database.port, config.redis, config.features
(5432, None, ['auth', 'search'])
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Optional

from ..application.introspection import env_field
from ..application.parsers import validator
from ..domain.errors import ValidationError
from ..domain.schema import U16, U32, EnvField, ParseContext


class LogLevel(enum.Enum):
    debug = "debug"
    info = "info"
    warn = "warn"
    err = "err"


def check_port(port: int) -> int:
    """Reject ports outside the TCP range.

    >>> check_port(8080)
    8080
    """

    if not 0 < port <= 65535:
        raise ValidationError(f"port {port} is outside 1-65535")
    return port


def parse_csv(raw: str, context: ParseContext) -> list[str]:
    """Split comma-separated text, trimming blanks and dropping empty items.

    >>> parse_csv(" api, web ,, ", ParseContext())
    ['api', 'web']
    """

    return [item.strip(" \t") for item in raw.split(",") if item.strip(" \t")]


@dataclass(frozen=True)
class DatabaseConfig:
    host: str
    port: U32 = 5432
    ssl: bool = False

    __env__: ClassVar[dict[str, object]] = {
        "host": "DB_HOST",
        "port": EnvField(key="DB_PORT", parser=validator(U32, check_port)),
        "ssl": "DB_SSL",
    }


@dataclass(frozen=True)
class RedisConfig:
    host: str = "localhost"
    port: U16 = 6379
    password: Optional[str] = None

    __env__: ClassVar[dict[str, object]] = {
        "host": "REDIS_HOST",
        "port": "REDIS_PORT",
        "password": "REDIS_PASSWORD",
    }


@dataclass(frozen=True)
class ServiceConfig:
    app_name: str = env_field("APP_NAME")
    database: DatabaseConfig = env_field()
    debug: bool = env_field("DEBUG", default=False)
    log_level: LogLevel = env_field("LOG_LEVEL", default=LogLevel.info)
    port: U32 = env_field("PORT", parser=validator(U32, check_port), default=8000)
    features: list[str] = env_field("FEATURES", parser=parse_csv, default_factory=list)
    redis: Optional[RedisConfig] = None
    build_id: Optional[str] = env_field(skip=True, default=None)


__all__ = ["DatabaseConfig", "LogLevel", "RedisConfig", "ServiceConfig", "check_port", "parse_csv"]
