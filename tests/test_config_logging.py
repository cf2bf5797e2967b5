"""
Test suite for configuration loading and the logging system

Covers:
  - TOML sections, string amounts, defaults
  - PAIRPOOL_* environment overrides
  - load_config resolution order
  - Validation
  - LogManager singleton, format validation, terminal-safe formatting
"""

import logging

import pytest

from pairpool import constants
from pairpool.config import PairPoolConfig, load_config
from pairpool.constants import ACCOUNT_MIN_STORAGE_BALANCE, WALLET_REGISTRATION_DEPOSIT
from pairpool.logger import LogManager, PoolLogHighlighter, TerminalSafeFormatter, get_logger
from pairpool.pool import PoolContract
from pairpool.tokens import AssetRegistry, FungibleToken


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

SAMPLE_TOML = """
[pool]
owner_id = "owner.pairpool"
account_id = "amm.pairpool"
registration_deposit = "2000000000000000000000000"
tokens = ["usdt.tokens", "usdc.tokens"]

[storage]
min_storage_balance = 5

[logging]
level = "debug"
"""

ENV_KEYS = [
    "PAIRPOOL_CONFIG",
    "PAIRPOOL_OWNER_ID",
    "PAIRPOOL_ACCOUNT_ID",
    "PAIRPOOL_REGISTRATION_DEPOSIT",
    "PAIRPOOL_MIN_STORAGE_BALANCE",
    "PAIRPOOL_LOG_LEVEL",
    "PAIRPOOL_LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "pairpool.toml"
    path.write_text(SAMPLE_TOML)
    return path


# ══════════════════════════════════════════════════════════════════════
#  CONFIG
# ══════════════════════════════════════════════════════════════════════


class TestConfigDefaults:

    def test_defaults(self):
        cfg = PairPoolConfig()
        assert cfg.pool.owner_id == ""
        assert cfg.pool.account_id == "pool.pairpool"
        assert cfg.pool.registration_deposit == WALLET_REGISTRATION_DEPOSIT
        assert cfg.pool.token_pair is None
        assert cfg.storage.min_storage_balance == ACCOUNT_MIN_STORAGE_BALANCE
        assert cfg.logging.level == "INFO"

    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = PairPoolConfig.from_file(str(tmp_path / "absent.toml"))
        assert cfg.pool.account_id == "pool.pairpool"

    def test_defaults_do_not_validate_without_owner(self):
        with pytest.raises(ValueError, match="owner_id"):
            PairPoolConfig().validate()


class TestConfigFile:

    def test_from_file(self, config_file):
        cfg = PairPoolConfig.from_file(str(config_file))
        assert cfg.pool.owner_id == "owner.pairpool"
        assert cfg.pool.account_id == "amm.pairpool"
        assert cfg.pool.registration_deposit == 2 * 10**24
        assert cfg.pool.token_pair == ("usdt.tokens", "usdc.tokens")
        assert cfg.storage.min_storage_balance == 5
        assert cfg.logging.level == "DEBUG"
        assert cfg.validate()

    def test_to_dict(self, config_file):
        data = PairPoolConfig.from_file(str(config_file)).to_dict()
        assert data["pool"]["registration_deposit"] == "2000000000000000000000000"
        assert data["storage"]["min_storage_balance"] == "5"

    def test_bad_amount(self):
        with pytest.raises(ValueError, match="registration_deposit"):
            PairPoolConfig.from_dict({"pool": {"registration_deposit": "lots"}})

    @pytest.mark.asyncio
    async def test_contract_from_config(self, config_file):
        cfg = PairPoolConfig.from_file(str(config_file))
        assets = AssetRegistry()
        assets.register(FungibleToken("usdt.tokens", "USDT", decimals=6))
        assets.register(FungibleToken("usdc.tokens", "USDC", decimals=6))

        contract = await PoolContract.from_config(cfg, assets)
        assert contract.owner_id == "owner.pairpool"
        assert contract.account_id == "amm.pairpool"
        assert contract.registration_deposit == 2 * 10**24
        assert contract.accounts.min_storage_balance == 5
        assert contract.get_pool().asset_ids == ("usdt.tokens", "usdc.tokens")

    @pytest.mark.asyncio
    async def test_contract_from_config_without_tokens(self):
        cfg = PairPoolConfig.from_dict({"pool": {"owner_id": "owner.pairpool"}})
        contract = await PoolContract.from_config(cfg, AssetRegistry())
        assert not contract.state.is_active

    @pytest.mark.asyncio
    async def test_contract_from_config_requires_owner(self):
        with pytest.raises(ValueError, match="owner_id"):
            await PoolContract.from_config(PairPoolConfig(), AssetRegistry())


class TestConfigEnv:

    def test_env_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("PAIRPOOL_OWNER_ID", "boss.pairpool")
        monkeypatch.setenv("PAIRPOOL_REGISTRATION_DEPOSIT", "7")
        monkeypatch.setenv("PAIRPOOL_MIN_STORAGE_BALANCE", "9")
        monkeypatch.setenv("PAIRPOOL_LOG_LEVEL", "warning")

        cfg = PairPoolConfig.from_file(str(config_file))
        assert cfg.pool.owner_id == "boss.pairpool"
        assert cfg.pool.registration_deposit == 7
        assert cfg.storage.min_storage_balance == 9
        assert cfg.logging.level == "WARNING"

    def test_log_file_env_enables_file_output(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PAIRPOOL_LOG_FILE", str(tmp_path / "pool.log"))
        cfg = PairPoolConfig.from_file(str(tmp_path / "absent.toml"))
        assert cfg.logging.file_output is True
        assert cfg.logging.file.endswith("pool.log")

    def test_load_config_uses_env_path(self, config_file, monkeypatch):
        monkeypatch.setenv("PAIRPOOL_CONFIG", str(config_file))
        assert load_config().pool.account_id == "amm.pairpool"

    def test_explicit_path_wins(self, config_file, monkeypatch, tmp_path):
        monkeypatch.setenv("PAIRPOOL_CONFIG", str(tmp_path / "other.toml"))
        assert load_config(str(config_file)).pool.account_id == "amm.pairpool"

    def test_load_config_defaults_to_cwd_file(self, config_file, monkeypatch):
        monkeypatch.chdir(config_file.parent)
        assert load_config().pool.owner_id == "owner.pairpool"


class TestConfigValidation:

    def make(self, **pool):
        data = {"pool": {"owner_id": "owner.pairpool", **pool}}
        return PairPoolConfig.from_dict(data)

    def test_valid(self):
        assert self.make().validate()

    @pytest.mark.parametrize("pool,match", [
        ({"owner_id": "Owner"}, "owner_id"),
        ({"account_id": "bad id"}, "account_id"),
        ({"registration_deposit": 0}, "registration_deposit"),
        ({"tokens": ["a.tokens"]}, "exactly 2"),
        ({"tokens": ["a.tokens", "a.tokens"]}, "different"),
        ({"tokens": ["a.tokens", "B"]}, "Invalid asset id"),
    ])
    def test_invalid_pool(self, pool, match):
        with pytest.raises(ValueError, match=match):
            self.make(**pool).validate()

    def test_invalid_log_level(self):
        cfg = self.make()
        cfg.logging.level = "LOUD"
        with pytest.raises(ValueError, match="log level"):
            cfg.validate()

    def test_negative_storage(self):
        cfg = self.make()
        cfg.storage.min_storage_balance = -1
        with pytest.raises(ValueError, match="min_storage_balance"):
            cfg.validate()


# ══════════════════════════════════════════════════════════════════════
#  LOGGING
# ══════════════════════════════════════════════════════════════════════


class TestLogging:

    def test_manager_is_singleton(self):
        assert LogManager() is LogManager()
        assert LogManager().is_configured

    def test_get_logger(self):
        logger = get_logger("pairpool.tests")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "pairpool.tests"

    def test_sanitize_strips_escape_sequences(self):
        assert TerminalSafeFormatter.sanitize("\x1b[31mred\x1b[0m") == "red"
        assert TerminalSafeFormatter.sanitize("a\rb\x00c\td") == "abc\td"
        assert TerminalSafeFormatter.sanitize("") == ""

    def test_formatter_sanitizes_record(self):
        formatter = TerminalSafeFormatter(fmt="%(message)s")
        record = logging.LogRecord("x", logging.INFO, "", 0, "from `%s`", ("evil\x1b[2J.pairpool",), None)
        assert formatter.format(record) == "from `evil.pairpool`"

    def test_validate_log_format(self):
        assert LogManager.validate_log_format("%(levelname)s %(message)s") == "%(levelname)s %(message)s"
        default = LogManager.validate_log_format("")
        assert "%(message)s" in default
        assert LogManager.validate_log_format("(levelname)s broken") == default

    def test_highlighter_marks_accounts_and_amounts(self):
        text = PoolLogHighlighter()("Swap 100 USDT → 98 USDC for `alice.pairpool`")
        styles = {span.style for span in text.spans}
        assert "pairpool.account" in styles
        assert "pairpool.amount" in styles
        assert "pairpool.arrow" in styles

    def test_env_settings(self, monkeypatch):
        monkeypatch.setattr(constants, "_env", {"LOG_FILE_OUTPUT": " TRUE ", "LOG_LEVEL": "debug", "EMPTY": None})
        assert constants._flag("LOG_FILE_OUTPUT", False) is True
        assert constants._flag("LOG_CONSOLE_HIGHLIGHTING", True) is True
        assert constants._flag("LOG_CONSOLE_HIGHLIGHTING", False) is False
        assert constants._setting("LOG_LEVEL", "INFO") == "debug"
        assert constants._setting("EMPTY", "INFO") == "INFO"

    def test_default_log_format_is_valid(self):
        assert constants.DEFAULT_LOG_FORMAT == LogManager.validate_log_format(constants.DEFAULT_LOG_FORMAT)
