"""
Two-asset constant-product pool.

Provides:
  - PoolState / TokenWallet : the two asset wallets
  - SwapEngine              : quote and single-flight swap execution
  - LiquidityManager        : owner deposit <-> liquidity moves
  - WalletProvisioner       : metadata fetch + receiver registration
  - TransferGateway         : inbound transfer routing and refunds
  - PoolContract            : gated public entry points
"""

from .ratio import invariant, checked_add, checked_sub, ceil_div
from .wallets import (
    AssetMetadata,
    PoolState,
    PoolView,
    Slot,
    TokenWallet,
)
from .swap import StagedSwap, SwapEngine, swap_amount_out
from .liquidity import LiquidityManager
from .provisioner import (
    ProvisioningReport,
    ProvisionStatus,
    SlotOutcome,
    WalletProvisioner,
)
from .gateway import TransferCommand, TransferGateway, TransferType
from .contract import PoolContract

__all__ = [
    "invariant",
    "checked_add",
    "checked_sub",
    "ceil_div",
    "AssetMetadata",
    "PoolState",
    "PoolView",
    "Slot",
    "TokenWallet",
    "StagedSwap",
    "SwapEngine",
    "swap_amount_out",
    "LiquidityManager",
    "ProvisioningReport",
    "ProvisionStatus",
    "SlotOutcome",
    "WalletProvisioner",
    "TransferCommand",
    "TransferGateway",
    "TransferType",
    "PoolContract",
]
