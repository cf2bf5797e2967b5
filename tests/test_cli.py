"""
Test suite for the pairpool command-line interface
"""

import json

import pytest
from click.testing import CliRunner

from pairpool.cli.pool import cli, run_simulation
from pairpool.config import PairPoolConfig


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

CONFIG_TOML = """
[pool]
owner_id = "owner.pairpool"
account_id = "pool.pairpool"

[logging]
level = "ERROR"
"""


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "pairpool.toml"
    path.write_text(CONFIG_TOML)
    return str(path)


def invoke(config_path, *args):
    return CliRunner().invoke(cli, ["--config", config_path, "--log-level", "ERROR", *args])


def json_output(result):
    return json.loads(result.output[result.output.index("{"):])


# ══════════════════════════════════════════════════════════════════════
#  COMMANDS
# ══════════════════════════════════════════════════════════════════════


class TestQuoteCommand:

    def test_quote(self, config_path):
        result = invoke(config_path, "quote", "50000000000", "50000000000", "1000000000")
        assert result.exit_code == 0, result.output
        assert "980392157" in result.output
        assert "51000000000 / 49019607843" in result.output

    def test_quote_slot2_input(self, config_path):
        result = invoke(config_path, "quote", "50000000000", "50000000000", "1000000000", "--input-slot", "2")
        assert result.exit_code == 0, result.output
        assert "980392156" in result.output
        assert "51000000000 / 49019607844" in result.output

    def test_quote_empty_pool_fails(self, config_path):
        result = invoke(config_path, "quote", "0", "1000", "5")
        assert result.exit_code != 0
        assert "InsufficientLiquidity" in result.output


class TestSimulateCommand:

    def test_simulate_json(self, config_path):
        result = invoke(config_path, "simulate", "--json")
        assert result.exit_code == 0, result.output
        data = json_output(result)
        assert data["pool"]["liquidity_amounts"] == ["51000000000", "49019607843"]
        assert data["swap"]["amount_out"] == 980392157
        assert data["swap"]["refund"] == 0

    def test_simulate_reverse_direction(self, config_path):
        result = invoke(config_path, "simulate", "--input-slot", "2", "--swap", "10", "--liquidity", "1000", "1000", "--json")
        assert result.exit_code == 0, result.output
        data = json_output(result)
        assert data["swap"]["asset_in"] == "usdc.tokens"
        assert data["swap"]["amount_out"] == 9
        assert data["pool"]["liquidity_amounts"] == ["991", "1010"]

    def test_simulate_dust_swap_is_refunded(self, config_path):
        result = invoke(config_path, "simulate", "--input-slot", "2", "--swap", "1", "--liquidity", "1000", "1000", "--json")
        assert result.exit_code == 0, result.output
        data = json_output(result)
        assert data["swap"]["refund"] == 1
        assert data["swap"]["amount_out"] == 0

    def test_simulate_text(self, config_path):
        result = invoke(config_path, "simulate")
        assert result.exit_code == 0, result.output
        assert "PairPool Simulation" in result.output
        assert "980392157" in result.output


class TestShowConfigCommand:

    def test_show_config(self, config_path):
        result = invoke(config_path, "show-config")
        assert result.exit_code == 0, result.output
        assert json_output(result)["pool"]["owner_id"] == "owner.pairpool"

    def test_validate_fails_without_owner(self, tmp_path):
        empty = tmp_path / "empty.toml"
        empty.write_text("")
        result = invoke(str(empty), "show-config", "--validate")
        assert result.exit_code != 0
        assert "owner_id" in result.output


class TestRunSimulation:

    @pytest.mark.asyncio
    async def test_state_root_is_reported(self):
        result = await run_simulation(PairPoolConfig(), (1000, 1000), 10)
        assert len(result["state_root"]) == 64
        assert result["swap"]["amount_out"] == 10
        assert result["pool"]["asset_ids"] == ["usdt.tokens", "usdc.tokens"]

    @pytest.mark.asyncio
    async def test_configured_tokens_are_traded(self):
        config = PairPoolConfig.from_dict({"pool": {"tokens": ["dai.tokens", "usdt.tokens"]}})
        result = await run_simulation(config, (1000, 1000), 10, input_slot=2)
        assert result["pool"]["asset_ids"] == ["dai.tokens", "usdt.tokens"]
        assert result["swap"]["asset_in"] == "usdt.tokens"
        assert result["swap"]["asset_out"] == "dai.tokens"
        assert result["swap"]["amount_out"] == 9
        assert config.pool.owner_id == ""
