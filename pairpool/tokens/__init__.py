"""
Asset transfer components.

Provides:
  - AssetTransferComponent : interface the pool uses to reach an external asset
  - FungibleToken          : in-memory reference token with transfer-and-notify
  - AssetRegistry          : lookup of components by asset id
"""

from .base import (
    AssetTransferComponent,
    TransferError,
    ReceiverNotRegisteredError,
    InsufficientBalanceError,
)
from .fungible import (
    FungibleToken,
    TokenFrozenError,
    TransferEvent,
    TransferReceiver,
)
from .registry import AssetRegistry

__all__ = [
    "AssetTransferComponent",
    "TransferError",
    "ReceiverNotRegisteredError",
    "InsufficientBalanceError",
    "FungibleToken",
    "TokenFrozenError",
    "TransferEvent",
    "TransferReceiver",
    "AssetRegistry",
]
