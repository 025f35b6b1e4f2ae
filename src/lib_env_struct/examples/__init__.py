"""Example schemas and parser helpers for ``lib_env_struct``."""

from .service import DatabaseConfig, LogLevel, RedisConfig, ServiceConfig, check_port, parse_csv

__all__ = [
    "DatabaseConfig",
    "LogLevel",
    "RedisConfig",
    "ServiceConfig",
    "check_port",
    "parse_csv",
]
