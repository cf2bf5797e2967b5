"""
Owner liquidity management.

Moves amounts between each wallet's deposit and liquidity balances. Both
assets are checked before either is written, so every operation commits
all-or-nothing.
"""

from typing import Sequence, Tuple

from ..exceptions import (
    Busy,
    CallAborted,
    DepositOverflow,
    InsufficientDeposit,
    InsufficientLiquidity,
    LiquidityOverflow,
    PermissionDenied,
)
from ..logger import get_logger
from .ratio import checked_add, checked_sub, is_u128
from .swap import SwapEngine
from .wallets import PoolState, Slot

logger = get_logger(__name__)


def _parse_amounts(amounts: Sequence[int]) -> Tuple[int, int]:
    if len(amounts) != 2 or not all(is_u128(a) for a in amounts):
        raise CallAborted(f"Expected two u128 amounts, got {amounts!r}")
    return amounts[0], amounts[1]


class LiquidityManager:
    """Owner-gated, synchronous balance moves inside the pool."""

    def __init__(self, state: PoolState, swap_engine: SwapEngine, owner_id: str):
        self.state = state
        self._swap_engine = swap_engine
        self._owner_id = owner_id

    def _require_owner(self, caller: str) -> None:
        if caller != self._owner_id:
            raise PermissionDenied(f"`{caller}` is not the pool owner")

    def _require_idle(self) -> None:
        # A pending swap commit replaces both wallets wholesale
        if self._swap_engine.in_flight:
            raise Busy("A swap is in flight; retry after it resolves")

    def add_liquidity(self, caller: str, amounts: Sequence[int]) -> None:
        """Move *amounts* from the owner's deposits into pool liquidity."""
        self._require_owner(caller)
        amount1, amount2 = _parse_amounts(amounts)
        self._require_idle()
        wallet1, wallet2 = self.state.require_wallets()

        deposit1 = checked_sub(wallet1.deposit, amount1, InsufficientDeposit, f"{wallet1.metadata.symbol} deposit")
        deposit2 = checked_sub(wallet2.deposit, amount2, InsufficientDeposit, f"{wallet2.metadata.symbol} deposit")
        liquidity1 = checked_add(wallet1.liquidity, amount1, LiquidityOverflow, f"{wallet1.metadata.symbol} liquidity")
        liquidity2 = checked_add(wallet2.liquidity, amount2, LiquidityOverflow, f"{wallet2.metadata.symbol} liquidity")

        self.state.apply_wallets({
            Slot.FIRST: wallet1.with_balances(deposit=deposit1, liquidity=liquidity1),
            Slot.SECOND: wallet2.with_balances(deposit=deposit2, liquidity=liquidity2),
        })
        logger.info(
            "Liquidity added: %d %s, %d %s",
            amount1, wallet1.metadata.symbol, amount2, wallet2.metadata.symbol,
        )

    def remove_liquidity(self, caller: str, amounts: Sequence[int]) -> None:
        """Move *amounts* from pool liquidity back to the owner's deposits."""
        self._require_owner(caller)
        amount1, amount2 = _parse_amounts(amounts)
        self._require_idle()
        wallet1, wallet2 = self.state.require_wallets()

        liquidity1 = checked_sub(wallet1.liquidity, amount1, InsufficientLiquidity, f"{wallet1.metadata.symbol} liquidity")
        liquidity2 = checked_sub(wallet2.liquidity, amount2, InsufficientLiquidity, f"{wallet2.metadata.symbol} liquidity")
        deposit1 = checked_add(wallet1.deposit, amount1, DepositOverflow, f"{wallet1.metadata.symbol} deposit")
        deposit2 = checked_add(wallet2.deposit, amount2, DepositOverflow, f"{wallet2.metadata.symbol} deposit")

        self.state.apply_wallets({
            Slot.FIRST: wallet1.with_balances(deposit=deposit1, liquidity=liquidity1),
            Slot.SECOND: wallet2.with_balances(deposit=deposit2, liquidity=liquidity2),
        })
        logger.info(
            "Liquidity removed: %d %s, %d %s",
            amount1, wallet1.metadata.symbol, amount2, wallet2.metadata.symbol,
        )

    def credit_deposit(self, caller: str, asset_id: str, amount: int) -> None:
        """Deposit path of an inbound transfer: credit the owner's deposit."""
        if caller != self._owner_id:
            raise PermissionDenied("Deposit can be added only by the pool owner")
        self._require_idle()
        slot = self.state.slot_of(asset_id)
        wallet = self.state.wallet(slot)

        deposit = checked_add(wallet.deposit, amount, DepositOverflow, f"{wallet.metadata.symbol} deposit")
        self.state.apply_wallets({slot: wallet.with_balances(deposit=deposit)})
        logger.info("Deposit of %d %s credited", amount, wallet.metadata.symbol)
