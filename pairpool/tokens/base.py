"""
Asset transfer component interface.

The pool never moves value itself; each external asset is reached through a
component implementing this interface. All calls are coroutines: the pool
suspends on them and resumes when the outcome is known. A failed call raises
``TransferError`` (or a subclass).
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping


class TransferError(Exception):
    """Base exception for asset component failures."""


class ReceiverNotRegisteredError(TransferError):
    """Raised when the receiving account is not registered with the asset."""


class InsufficientBalanceError(TransferError):
    """Raised when the sending account balance is too low."""


class AssetTransferComponent(ABC):
    """
    Abstract interface to one external fungible asset.

    Concrete components wrap a real token ledger or, in tests and
    simulations, the in-memory ``FungibleToken``.
    """

    @property
    @abstractmethod
    def asset_id(self) -> str:
        """Account id of the asset."""
        ...

    @abstractmethod
    async def fetch_metadata(self) -> Mapping[str, Any]:
        """Return loosely-typed metadata, at least ``symbol`` and ``decimals``."""
        ...

    @abstractmethod
    async def register_receiver(self, account_id: str) -> None:
        """Register *account_id* so that it can receive the asset."""
        ...

    @abstractmethod
    async def transfer(self, sender: str, receiver: str, amount: int) -> None:
        """Move *amount* from *sender* to *receiver*."""
        ...

    @abstractmethod
    async def transfer_and_notify(self, sender: str, receiver: str, amount: int, message: str) -> int:
        """
        Move *amount* to *receiver* and notify it with *message*.

        Returns:
            The amount the receiver kept; the rest is returned to *sender*.
        """
        ...
