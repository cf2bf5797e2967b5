"""
Constant-product swap engine.

A swap runs in two phases inside one coroutine:

  1. Synchronous quote: compute the output amount from the invariant and
     stage new snapshots of both wallets. Every check runs here, before
     any external call.
  2. Awaited transfer of the output asset to the sender. The staged
     snapshots replace the pool's wallets only if the transfer succeeds;
     on failure they are dropped and the input amount is refunded.

At most one swap is in flight at a time (single-flight). A second swap
arriving during the suspension window is rejected with ``Busy``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ..exceptions import (
    Busy,
    ComputationOverflow,
    ExternalCallFailed,
    InsufficientLiquidity,
    UnsupportedAsset,
)
from ..logger import get_logger
from ..tokens.base import TransferError
from ..tokens.registry import AssetRegistry
from .ratio import ceil_div, checked_add, checked_sub, invariant, require_u128
from .wallets import PoolState, Slot, TokenWallet

logger = get_logger(__name__)


def swap_amount_out(
    liquidity_in: int,
    liquidity_out: int,
    amount_in: int,
    input_slot: Slot = Slot.FIRST,
) -> int:
    """
    Output of the constant-product relation for an exact input.

        K        = L_in * L_out
        new_in   = L_in + amount_in

    Slot-1 input truncates the new output reserve:

        out      = L_out - K // new_in

    Slot-2 input rounds the new output reserve up, so ``out`` is rounded
    down and the product of the reserves never decreases:

        out      = L_out - ceil(K / new_in)

    Raises:
        ComputationOverflow: an input is not u128 or ``L_in + amount_in`` overflows
        InsufficientLiquidity: a reserve is empty, or the output exceeds ``L_out``
    """
    require_u128(amount_in, what="amount_in")
    k = invariant(liquidity_in, liquidity_out)
    if amount_in == 0:
        return 0
    if liquidity_in == 0 or liquidity_out == 0:
        raise InsufficientLiquidity("Pool has no liquidity to swap against")

    new_in = checked_add(liquidity_in, amount_in, ComputationOverflow, "input liquidity")
    if input_slot == Slot.FIRST:
        return checked_sub(liquidity_out, k // new_in, InsufficientLiquidity, "output liquidity")

    new_out = ceil_div(k, new_in)
    amount_out = checked_sub(liquidity_out, new_out, InsufficientLiquidity, "output liquidity")
    if invariant(new_in, new_out) < k:
        raise ComputationOverflow(f"Invariant violation: {new_in} * {new_out} < {k}")
    return amount_out


@dataclass(frozen=True)
class StagedSwap:
    """
    Computed but uncommitted wallet pair of a swap.

    Owned by the pending swap until its transfer resolves.
    """
    input_slot: Slot
    wallet_in: TokenWallet
    wallet_out: TokenWallet
    amount_in: int
    amount_out: int

    @property
    def asset_in(self) -> str:
        return self.wallet_in.asset_id

    @property
    def asset_out(self) -> str:
        return self.wallet_out.asset_id


class SwapEngine:
    """
    Quotes and executes swaps against a PoolState.

    Implements:
      - compute_swap: pure quote + staged snapshots
      - execute: single-flight swap with commit-only-on-success
    """

    def __init__(self, state: PoolState, assets: AssetRegistry, pool_account_id: str):
        self.state = state
        self._assets = assets
        self._pool_account_id = pool_account_id
        self._in_flight: bool = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    # -- Quote --------------------------------------------------------------

    def compute_swap(self, asset_in: str, amount_in: int) -> Tuple[int, StagedSwap]:
        """
        Compute the output of swapping *amount_in* of *asset_in*.

        Returns:
            (amount_out, staged) where ``staged`` holds both wallets with
            ``liquidity_in += amount_in`` and ``liquidity_out -= amount_out``
        """
        wallet1, wallet2 = self.state.require_wallets()
        if asset_in == wallet1.asset_id:
            input_slot, wallet_in, wallet_out = Slot.FIRST, wallet1, wallet2
        elif asset_in == wallet2.asset_id:
            input_slot, wallet_in, wallet_out = Slot.SECOND, wallet2, wallet1
        else:
            raise UnsupportedAsset(f"Asset `{asset_in}` is not supported by this pool")

        amount_out = swap_amount_out(wallet_in.liquidity, wallet_out.liquidity, amount_in, input_slot)

        staged = StagedSwap(
            input_slot=input_slot,
            wallet_in=wallet_in.with_balances(liquidity=wallet_in.liquidity + amount_in),
            wallet_out=wallet_out.with_balances(liquidity=wallet_out.liquidity - amount_out),
            amount_in=amount_in,
            amount_out=amount_out,
        )
        return amount_out, staged

    def quote(self, asset_in: str, amount_in: int) -> int:
        """Output amount for a swap, without staging or side effects."""
        amount_out, _ = self.compute_swap(asset_in, amount_in)
        return amount_out

    # -- Execute ------------------------------------------------------------

    async def execute(self, sender: str, asset_in: str, amount_in: int) -> int:
        """
        Swap *amount_in* of *asset_in* for the other asset, paid to *sender*.

        Returns:
            The amount of *asset_in* to refund: 0 when the swap committed,
            ``amount_in`` when the output transfer failed.

        Raises:
            Busy: another swap is in flight
            PoolError: the quote failed; nothing was consumed
            ExternalCallFailed: the output transfer raised something other
                than a TransferError; the stage is dropped
        """
        if self._in_flight:
            raise Busy("A swap is already in flight")

        amount_out, staged = self.compute_swap(asset_in, amount_in)
        if amount_in == 0:
            return 0
        if amount_out == 0:
            raise InsufficientLiquidity(f"Swapping {amount_in} `{asset_in}` yields nothing")

        try:
            component = self._assets.get_or_raise(staged.asset_out)
        except TransferError as e:
            raise ExternalCallFailed(str(e)) from e

        logger.info(
            "Swap %d %s → %d %s for `%s`",
            amount_in, staged.wallet_in.metadata.symbol,
            amount_out, staged.wallet_out.metadata.symbol,
            sender,
        )

        self._in_flight = True
        try:
            await component.transfer(self._pool_account_id, sender, amount_out)
        except TransferError as e:
            logger.warning(
                "Swap %d %s for %s failed: %s. Refunding `%s`",
                amount_in, staged.wallet_in.metadata.symbol,
                staged.wallet_out.metadata.symbol, e, sender,
            )
            return staged.amount_in
        except Exception as e:
            raise ExternalCallFailed(
                f"Transfer of {amount_out} `{staged.asset_out}` to `{sender}` failed: {e!r}"
            ) from e
        else:
            self.state.commit_swap(staged)
            return 0
        finally:
            self._in_flight = False
