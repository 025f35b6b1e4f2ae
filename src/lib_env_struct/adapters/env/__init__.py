"""Environment source adapters."""

from .default import MappingEnvSource, ProcessEnvSource, default_env_prefix

__all__ = ["MappingEnvSource", "ProcessEnvSource", "default_env_prefix"]
