"""
PairPool Configuration

Loads all sections of pairpool.toml at startup.
Environment variables override TOML values.
"""

from .loader import (
    PairPoolConfig,
    PoolSectionConfig,
    StorageConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "PairPoolConfig",
    "PoolSectionConfig",
    "StorageConfig",
    "LoggingConfig",
    "load_config",
]
