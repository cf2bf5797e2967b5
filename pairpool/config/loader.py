"""
PairPool TOML Configuration Loader

Loads every section of pairpool.toml with environment variable overrides.

Environment variable mapping:
    [pool] owner_id                 → PAIRPOOL_OWNER_ID
    [pool] account_id               → PAIRPOOL_ACCOUNT_ID
    [pool] registration_deposit     → PAIRPOOL_REGISTRATION_DEPOSIT
    [storage] min_storage_balance   → PAIRPOOL_MIN_STORAGE_BALANCE
    [logging] level                 → PAIRPOOL_LOG_LEVEL
    [logging] file                  → PAIRPOOL_LOG_FILE

Native amounts exceed TOML's 64-bit integers, so they may be written as
decimal strings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..accounts.storage import is_valid_account_id
from ..constants import (
    ACCOUNT_MIN_STORAGE_BALANCE,
    PAIRPOOL_ACCOUNT_ID,
    PAIRPOOL_CONFIG,
    WALLET_REGISTRATION_DEPOSIT,
)
from ..logger import get_logger

logger = get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _amount(value: Any, name: str) -> int:
    """Parse a native amount given as an int or a decimal string."""
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer amount, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{name} must be an integer amount, got {value!r}") from e


# ---------------------------------------------------------------------------
# Sections, one per [section] of config.example.toml
# ---------------------------------------------------------------------------

@dataclass
class PoolSectionConfig:
    """[pool] section."""
    owner_id: str = ""
    account_id: str = str(PAIRPOOL_ACCOUNT_ID)
    registration_deposit: int = WALLET_REGISTRATION_DEPOSIT
    tokens: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolSectionConfig":
        return cls(
            owner_id=data.get("owner_id", ""),
            account_id=data.get("account_id", str(PAIRPOOL_ACCOUNT_ID)),
            registration_deposit=_amount(
                data.get("registration_deposit", WALLET_REGISTRATION_DEPOSIT), "registration_deposit"
            ),
            tokens=list(data.get("tokens", [])),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("PAIRPOOL_OWNER_ID"):
            self.owner_id = v
        if v := os.environ.get("PAIRPOOL_ACCOUNT_ID"):
            self.account_id = v
        if v := os.environ.get("PAIRPOOL_REGISTRATION_DEPOSIT"):
            self.registration_deposit = _amount(v, "PAIRPOOL_REGISTRATION_DEPOSIT")

    @property
    def token_pair(self) -> Optional[Tuple[str, str]]:
        return (self.tokens[0], self.tokens[1]) if self.tokens else None

    def validate(self) -> None:
        if not is_valid_account_id(self.owner_id):
            raise ValueError(f"Invalid pool owner_id: {self.owner_id!r}")
        if not is_valid_account_id(self.account_id):
            raise ValueError(f"Invalid pool account_id: {self.account_id!r}")
        if self.registration_deposit <= 0:
            raise ValueError("registration_deposit must be > 0")
        if self.tokens:
            if len(self.tokens) != 2:
                raise ValueError(f"tokens must list exactly 2 asset ids, got {len(self.tokens)}")
            if self.tokens[0] == self.tokens[1]:
                raise ValueError("tokens must be two different asset ids")
            for token in self.tokens:
                if not is_valid_account_id(token):
                    raise ValueError(f"Invalid asset id in tokens: {token!r}")


@dataclass
class StorageConfig:
    """[storage] section."""
    min_storage_balance: int = ACCOUNT_MIN_STORAGE_BALANCE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageConfig":
        return cls(
            min_storage_balance=_amount(
                data.get("min_storage_balance", ACCOUNT_MIN_STORAGE_BALANCE), "min_storage_balance"
            ),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("PAIRPOOL_MIN_STORAGE_BALANCE"):
            self.min_storage_balance = _amount(v, "PAIRPOOL_MIN_STORAGE_BALANCE")

    def validate(self) -> None:
        if self.min_storage_balance < 0:
            raise ValueError("min_storage_balance must be >= 0")


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = "INFO"
    file_output: bool = False
    file: str = "logs/pairpool.log"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(
            level=str(data.get("level", "INFO")).upper(),
            file_output=data.get("file_output", False),
            file=data.get("file", "logs/pairpool.log"),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("PAIRPOOL_LOG_LEVEL"):
            self.level = v.upper()
        if v := os.environ.get("PAIRPOOL_LOG_FILE"):
            self.file = v
            self.file_output = True

    def validate(self) -> None:
        if self.level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.level}")


# -----------------------------------------------------------------------
# Top-level config
# -----------------------------------------------------------------------

@dataclass
class PairPoolConfig:
    """
    Unified pool configuration.

    Loads every section of pairpool.toml and applies environment variable
    overrides.
    """
    pool: PoolSectionConfig = field(default_factory=PoolSectionConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PairPoolConfig":
        """Create PairPoolConfig from a parsed TOML dict."""
        return cls(
            pool=PoolSectionConfig.from_dict(data.get("pool", {})),
            storage=StorageConfig.from_dict(data.get("storage", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "PairPoolConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults (with env overrides).
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s. Using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            raw = tomli.load(f)

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.pool.apply_env()
        self.storage.apply_env()
        self.logging.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ValueError: on invalid config
        """
        self.pool.validate()
        self.storage.validate()
        self.logging.validate()
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "pool": {
                "owner_id": self.pool.owner_id,
                "account_id": self.pool.account_id,
                "registration_deposit": str(self.pool.registration_deposit),
                "tokens": list(self.pool.tokens),
            },
            "storage": {
                "min_storage_balance": str(self.storage.min_storage_balance),
            },
            "logging": {
                "level": self.logging.level,
                "file_output": self.logging.file_output,
                "file": self.logging.file,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> PairPoolConfig:
    """
    Load pool configuration.

    Resolution order:
        1. Explicit *path* argument
        2. PAIRPOOL_CONFIG env var
        3. ./pairpool.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("PAIRPOOL_CONFIG") or str(PAIRPOOL_CONFIG)

    return PairPoolConfig.from_file(path)
