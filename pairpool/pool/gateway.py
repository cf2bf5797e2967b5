"""
Inbound transfer gateway.

Every transfer-and-notify aimed at the pool lands here. The attached message
decides the route:

    {"type": "swap"}   swap the received amount for the other asset
    anything else      credit the owner's deposit

Any pool error in the routed handler refunds the whole transferred amount.
A refund is never partial.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..accounts.storage import AccountRegistry, require_valid_account_id
from ..constants import SWAP_COMMAND_TYPE
from ..exceptions import CallAborted, PoolError
from ..logger import get_logger
from .liquidity import LiquidityManager
from .ratio import is_u128
from .swap import SwapEngine

logger = get_logger(__name__)


class TransferType(str, Enum):
    SWAP = SWAP_COMMAND_TYPE
    DEPOSIT = "deposit"


@dataclass(frozen=True)
class TransferCommand:
    type: TransferType

    @classmethod
    def parse(cls, message: Optional[str]) -> "TransferCommand":
        """Classify a transfer message. Anything that is not a swap command is a deposit."""
        try:
            payload: Any = json.loads(message) if message else None
        except (TypeError, ValueError):
            payload = None

        if isinstance(payload, dict) and payload.get("type") == SWAP_COMMAND_TYPE:
            return cls(TransferType.SWAP)
        return cls(TransferType.DEPOSIT)

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type.value}


class TransferGateway:
    """Routes inbound transfers to the swap engine or the deposit path."""

    def __init__(self, swap_engine: SwapEngine, liquidity: LiquidityManager, accounts: AccountRegistry):
        self._swap_engine = swap_engine
        self._liquidity = liquidity
        self._accounts = accounts

    async def on_incoming_transfer(self, sender: str, asset_id: str, amount: int, message: str) -> int:
        """
        Handle *amount* of *asset_id* received from *sender*.

        Returns:
            The amount to refund to *sender*: 0 on success, ``amount`` on any
            pool error

        Raises:
            CallAborted: malformed sender or amount; the transfer is not accepted
        """
        require_valid_account_id(sender)
        if not is_u128(amount):
            raise CallAborted(f"Transfer amount {amount!r} is not a u128 value")

        command = TransferCommand.parse(message)
        logger.info(
            "Incoming %s: %d `%s` from `%s`",
            command.type.value, amount, asset_id, sender,
        )

        try:
            self._accounts.require_running()
            if command.type is TransferType.SWAP:
                refund = await self._swap_engine.execute(sender, asset_id, amount)
            else:
                self._liquidity.credit_deposit(sender, asset_id, amount)
                refund = 0
        except PoolError as e:
            logger.warning("Transfer failed (%s): %s. Refunding %d to `%s`", e.kind.value, e, amount, sender)
            return amount

        return refund
