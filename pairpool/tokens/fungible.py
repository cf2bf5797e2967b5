"""
In-memory fungible token.

Reference implementation of ``AssetTransferComponent`` used by the test
suite and the ``pairpool simulate`` command:
  - metadata lookup
  - receiver registration
  - plain transfer between registered accounts
  - transfer-and-notify with resolution of the receiver's refund
  - freeze switch that makes every transfer fail
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol

from ..logger import get_logger
from .base import (
    AssetTransferComponent,
    InsufficientBalanceError,
    ReceiverNotRegisteredError,
    TransferError,
)

logger = get_logger(__name__)


class TokenFrozenError(TransferError):
    """Raised when the token is frozen."""


class TransferReceiver(Protocol):
    """Account able to react to transfer-and-notify."""

    async def ft_on_transfer(self, sender: str, asset_id: str, amount: int, message: str) -> int: ...


@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every successful balance movement."""
    asset_id: str
    sender: str
    receiver: str
    amount: int
    memo: str = ""
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ft_transfer",
            "token": self.asset_id,
            "old_owner_id": self.sender,
            "new_owner_id": self.receiver,
            "amount": str(self.amount),
            "memo": self.memo,
            "timestamp": self.timestamp,
        }


class FungibleToken(AssetTransferComponent):
    """
    Fungible token ledger kept in memory.

    Only registered accounts may hold or receive the token. Balances are
    plain integers in the token's smallest unit.
    """

    def __init__(
        self,
        asset_id: str,
        symbol: str,
        decimals: int = 6,
        name: str = "",
        *,
        metadata_override: Optional[Mapping[str, Any]] = None,
    ):
        if not asset_id:
            raise TransferError("Asset id cannot be empty")
        if not symbol:
            raise TransferError("Token symbol cannot be empty")

        self._asset_id = asset_id
        self.symbol = symbol
        self.decimals = decimals
        self.name = name or symbol
        self._metadata_override = metadata_override
        self._frozen = False

        self._balances: Dict[str, int] = {}
        self._receivers: Dict[str, TransferReceiver] = {}
        self._events: List[TransferEvent] = []
        self._total_supply = 0

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def asset_id(self) -> str:
        return self._asset_id

    @property
    def total_supply(self) -> int:
        return self._total_supply

    @property
    def events(self) -> List[TransferEvent]:
        return list(self._events)

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def is_registered(self, account_id: str) -> bool:
        return account_id in self._balances

    def balance_of(self, account_id: str) -> int:
        return self._balances.get(account_id, 0)

    # ── AssetTransferComponent ────────────────────────────────────────

    async def fetch_metadata(self) -> Mapping[str, Any]:
        if self._metadata_override is not None:
            return self._metadata_override
        return {
            "spec": "ft-1.0.0",
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
        }

    async def register_receiver(self, account_id: str) -> None:
        if account_id not in self._balances:
            self._balances[account_id] = 0
            logger.debug("%s: registered `%s`", self.symbol, account_id)

    async def transfer(self, sender: str, receiver: str, amount: int) -> None:
        self._move(sender, receiver, amount)

    async def transfer_and_notify(self, sender: str, receiver: str, amount: int, message: str) -> int:
        hook = self._receivers.get(receiver)
        if hook is None:
            raise TransferError(f"`{receiver}` cannot handle transfer notifications")

        self._move(sender, receiver, amount, memo=message)
        try:
            unused = await hook.ft_on_transfer(sender, self._asset_id, amount, message)
        except Exception:
            # A failing receiver keeps nothing
            self._resolve_transfer(sender, receiver, amount, amount)
            raise
        return self._resolve_transfer(sender, receiver, amount, unused)

    # ── Administration ────────────────────────────────────────────────

    def attach_receiver(self, account_id: str, receiver: TransferReceiver) -> None:
        """Route transfer notifications for *account_id* to *receiver*."""
        self._receivers[account_id] = receiver

    def mint(self, account_id: str, amount: int) -> None:
        if amount <= 0:
            raise TransferError("Mint amount must be positive")
        if account_id not in self._balances:
            raise ReceiverNotRegisteredError(f"`{account_id}` is not registered with {self.symbol}")
        self._balances[account_id] += amount
        self._total_supply += amount

    def freeze(self) -> None:
        self._frozen = True
        logger.warning("Token %s FROZEN", self.symbol)

    def unfreeze(self) -> None:
        self._frozen = False
        logger.info("Token %s unfrozen", self.symbol)

    # ── Internal ──────────────────────────────────────────────────────

    def _move(self, sender: str, receiver: str, amount: int, memo: str = "") -> None:
        if self._frozen:
            raise TokenFrozenError(f"Token {self.symbol} is frozen")
        if amount <= 0:
            raise TransferError("Transfer amount must be positive")
        if sender == receiver:
            raise TransferError("Cannot transfer to self")
        if sender not in self._balances:
            raise ReceiverNotRegisteredError(f"`{sender}` is not registered with {self.symbol}")
        if receiver not in self._balances:
            raise ReceiverNotRegisteredError(f"`{receiver}` is not registered with {self.symbol}")

        balance = self._balances[sender]
        if balance < amount:
            raise InsufficientBalanceError(f"`{sender}` balance {balance} < transfer amount {amount}")

        self._balances[sender] = balance - amount
        self._balances[receiver] += amount
        self._events.append(TransferEvent(self._asset_id, sender, receiver, amount, memo))
        logger.debug("%s: `%s` → `%s` %d", self.symbol, sender, receiver, amount)

    def _resolve_transfer(self, sender: str, receiver: str, amount: int, unused: int) -> int:
        """Return the receiver's unused amount to the sender; report what was kept."""
        unused = max(0, min(unused, amount))
        if unused:
            refund = min(unused, self._balances[receiver])
            if refund:
                self._balances[receiver] -= refund
                self._balances[sender] += refund
                self._events.append(TransferEvent(self._asset_id, receiver, sender, refund, "refund"))
                logger.debug("%s: refunded %d to `%s`", self.symbol, refund, sender)
            unused = refund
        return amount - unused

    def __repr__(self) -> str:
        return f"<FungibleToken {self.symbol} supply={self._total_supply}>"
