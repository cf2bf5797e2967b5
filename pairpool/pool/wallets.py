"""
Pool state: the two asset wallets and their lifecycle.

Wallets are immutable values. Every balance change builds a new wallet with
``dataclasses.replace`` and installs it through one of the PoolState commit
methods, so a staged snapshot can never alias committed state.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional, Tuple, TYPE_CHECKING

from ..exceptions import ExternalCallFailed, UnsupportedAsset, WalletNotProvisioned
from .ratio import invariant, is_u128

if TYPE_CHECKING:
    from .swap import StagedSwap


class Slot(IntEnum):
    """Fixed wallet positions. Assigned at provisioning, never reordered."""
    FIRST = 1
    SECOND = 2

    @property
    def other(self) -> "Slot":
        return Slot.SECOND if self is Slot.FIRST else Slot.FIRST


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AssetMetadata:
    """Fixed-shape metadata of an external asset."""
    symbol: str
    decimals: int

    @classmethod
    def from_external(cls, raw: Any) -> "AssetMetadata":
        """
        Validate loosely-typed metadata returned by an asset component.

        Accepts a mapping or an object exposing ``symbol`` and ``decimals``.

        Raises:
            ExternalCallFailed: the value does not have the expected shape
        """
        if isinstance(raw, Mapping):
            symbol = raw.get("symbol")
            decimals = raw.get("decimals")
        else:
            symbol = getattr(raw, "symbol", None)
            decimals = getattr(raw, "decimals", None)

        if not isinstance(symbol, str) or not symbol:
            raise ExternalCallFailed(f"Malformed asset metadata: symbol={symbol!r}")
        if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= 255:
            raise ExternalCallFailed(f"Malformed asset metadata: decimals={decimals!r}")
        return cls(symbol=symbol, decimals=decimals)

    def to_dict(self) -> Dict[str, Any]:
        return {"symbol": self.symbol, "decimals": self.decimals}


@dataclass(frozen=True)
class TokenWallet:
    """
    Bookkeeping record for one external asset inside the pool.

    Attributes:
        asset_id: Account id of the asset's transfer component
        metadata: Validated asset metadata
        deposit: Owner-deposited balance not committed to the pool
        liquidity: Balance committed to the constant-product invariant
    """
    asset_id: str
    metadata: AssetMetadata
    deposit: int = 0
    liquidity: int = 0

    def __post_init__(self):
        if not is_u128(self.deposit):
            raise ValueError(f"Deposit {self.deposit!r} is not a u128 value")
        if not is_u128(self.liquidity):
            raise ValueError(f"Liquidity {self.liquidity!r} is not a u128 value")

    def with_balances(self, *, deposit: Optional[int] = None, liquidity: Optional[int] = None) -> "TokenWallet":
        return replace(
            self,
            deposit=self.deposit if deposit is None else deposit,
            liquidity=self.liquidity if liquidity is None else liquidity,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "metadata": self.metadata.to_dict(),
            "deposit": str(self.deposit),
            "liquidity": str(self.liquidity),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TokenWallet":
        return cls(
            asset_id=data["asset_id"],
            metadata=AssetMetadata(**data["metadata"]),
            deposit=int(data.get("deposit", 0)),
            liquidity=int(data.get("liquidity", 0)),
        )


@dataclass(frozen=True)
class PoolView:
    """Read-only snapshot returned by ``get_pool``."""
    asset_ids: Tuple[str, str]
    decimals: Tuple[int, int]
    liquidity_amounts: Tuple[int, int]
    ratio: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_ids": list(self.asset_ids),
            "decimals": list(self.decimals),
            "liquidity_amounts": [str(a) for a in self.liquidity_amounts],
            "ratio": self.ratio,
        }


# ---------------------------------------------------------------------------
# Pool state (aggregate root)
# ---------------------------------------------------------------------------

@dataclass
class PoolState:
    """
    The pool's two wallet slots.

    The pool is active (queryable, swappable) only when both slots are
    populated. Writes happen only through ``install_wallet``,
    ``apply_wallets`` and ``commit_swap``.
    """
    slot1: Optional[TokenWallet] = None
    slot2: Optional[TokenWallet] = None

    @property
    def is_active(self) -> bool:
        return self.slot1 is not None and self.slot2 is not None

    def wallet(self, slot: Slot) -> Optional[TokenWallet]:
        return self.slot1 if slot is Slot.FIRST else self.slot2

    def require_wallets(self) -> Tuple[TokenWallet, TokenWallet]:
        if self.slot1 is None:
            raise WalletNotProvisioned("Wallet for slot 1 is not created")
        if self.slot2 is None:
            raise WalletNotProvisioned("Wallet for slot 2 is not created")
        return self.slot1, self.slot2

    def slot_of(self, asset_id: str) -> Slot:
        """Slot holding *asset_id* among the installed wallets."""
        for slot in Slot:
            wallet = self.wallet(slot)
            if wallet is not None and wallet.asset_id == asset_id:
                return slot
        raise UnsupportedAsset(f"Asset `{asset_id}` is not supported by this pool")

    # -- Commit points ------------------------------------------------------

    def install_wallet(self, slot: Slot, wallet: TokenWallet) -> None:
        """Wallet-provisioning commit."""
        other = self.wallet(slot.other)
        if other is not None and other.asset_id == wallet.asset_id:
            raise UnsupportedAsset(f"Asset `{wallet.asset_id}` already occupies slot {int(slot.other)}")
        self._set(slot, wallet)

    def apply_wallets(self, updates: Mapping[Slot, TokenWallet]) -> None:
        """Liquidity / deposit commit. All wallets in *updates* land together."""
        for slot, wallet in updates.items():
            current = self.wallet(slot)
            if current is None or current.asset_id != wallet.asset_id:
                raise WalletNotProvisioned(f"Slot {int(slot)} does not hold `{wallet.asset_id}`")
        for slot, wallet in updates.items():
            self._set(slot, wallet)

    def commit_swap(self, staged: "StagedSwap") -> None:
        """Swap-resolution commit: both staged snapshots replace the wallets."""
        self.apply_wallets({
            staged.input_slot: staged.wallet_in,
            staged.input_slot.other: staged.wallet_out,
        })

    def _set(self, slot: Slot, wallet: TokenWallet) -> None:
        if slot is Slot.FIRST:
            self.slot1 = wallet
        else:
            self.slot2 = wallet

    # -- Views --------------------------------------------------------------

    def view(self) -> PoolView:
        w1, w2 = self.require_wallets()
        return PoolView(
            asset_ids=(w1.asset_id, w2.asset_id),
            decimals=(w1.metadata.decimals, w2.metadata.decimals),
            liquidity_amounts=(w1.liquidity, w2.liquidity),
            ratio=str(invariant(w1.liquidity, w2.liquidity)),
        )

    # -- Serialization --------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slot1": self.slot1.to_dict() if self.slot1 else None,
            "slot2": self.slot2.to_dict() if self.slot2 else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoolState":
        return cls(
            slot1=TokenWallet.from_dict(data["slot1"]) if data.get("slot1") else None,
            slot2=TokenWallet.from_dict(data["slot2"]) if data.get("slot2") else None,
        )

    def state_root(self) -> str:
        """blake2b digest of the canonical state encoding."""
        raw = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":")).encode()
        return hashlib.blake2b(raw, digest_size=32).hexdigest()
