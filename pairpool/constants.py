"""
PairPool Constants

This module consolidates the global constants and the environment
configuration used throughout the codebase. Constants are organized by
category for easy reference and maintenance.
"""
import re
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_env = dotenv_values(".env")


def _setting(key: str, default: str) -> str:
    value = _env.get(key)
    return default if value is None else value


def _flag(key: str, default: bool) -> bool:
    return _setting(key, str(default)).strip().casefold() == "true"


DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
DEFAULT_LOG_DATE_FORMAT = '%Y-%m-%dT%H:%M:%S'

PAIRPOOL_CONFIG = _setting('PAIRPOOL_CONFIG', 'pairpool.toml')
PAIRPOOL_ACCOUNT_ID = _setting('PAIRPOOL_ACCOUNT_ID', 'pool.pairpool')

LOG_LEVEL = _setting('LOG_LEVEL', 'INFO')
LOG_FORMAT = _setting('LOG_FORMAT', DEFAULT_LOG_FORMAT)
LOG_DATE_FORMAT = _setting('LOG_DATE_FORMAT', DEFAULT_LOG_DATE_FORMAT)
LOG_CONSOLE_HIGHLIGHTING = _flag('LOG_CONSOLE_HIGHLIGHTING', True)
LOG_FILE_OUTPUT = _flag('LOG_FILE_OUTPUT', False)

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# INTEGER DOMAINS
# ==================================================================================
# Balances are unsigned 128-bit; the invariant is computed at double width.
U128_MAX = 2**128 - 1
U256_MAX = 2**256 - 1


# ==================================================================================
# COLLATERAL (smallest native unit, 10^24 per whole coin)
# ==================================================================================
ONE_COIN = 10**24
ONE_YOCTO = 1

# Attached to every receiver registration issued while provisioning a wallet
WALLET_REGISTRATION_DEPOSIT = ONE_COIN

# Minimum storage balance required to register an account with the pool
ACCOUNT_MIN_STORAGE_BALANCE = 1_250_000_000_000_000_000_000  # 0.00125 coin


# ==================================================================================
# TRANSFER COMMANDS
# ==================================================================================
SWAP_COMMAND_TYPE = 'swap'


# ==================================================================================
# VALIDATION PATTERNS
# ==================================================================================
ACCOUNT_ID_MIN_LENGTH = 2
ACCOUNT_ID_MAX_LENGTH = 64

# Lowercase alphanumeric parts joined by '-' or '_', dot-separated sub-accounts
VALID_ACCOUNT_ID_PATTERN = re.compile(r'^(([a-z\d]+[-_])*[a-z\d]+\.)*([a-z\d]+[-_])*[a-z\d]+$')
