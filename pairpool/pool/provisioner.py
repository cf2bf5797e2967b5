"""
Wallet provisioning.

Creating a wallet for an asset takes two external calls, issued together:
fetch the asset's metadata and register the pool as a receiver. The wallet
is installed only when both succeed. The two slots are provisioned
independently: one may install while the other fails, and a failed slot is
neither retried nor allowed to undo the other slot's install.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from ..exceptions import ExternalCallFailed, PoolError, UnsupportedAsset
from ..logger import get_logger
from ..tokens.base import TransferError
from ..tokens.registry import AssetRegistry
from .wallets import AssetMetadata, PoolState, Slot, TokenWallet

logger = get_logger(__name__)


class ProvisionStatus(str, Enum):
    INSTALLED = "installed"
    ALREADY_PROVISIONED = "already_provisioned"
    SLOT_OCCUPIED = "slot_occupied"
    FAILED = "failed"


@dataclass(frozen=True)
class SlotOutcome:
    """Result of provisioning one wallet slot."""
    slot: Slot
    asset_id: str
    status: ProvisionStatus
    error: Optional[PoolError] = None

    @property
    def ok(self) -> bool:
        return self.status in (ProvisionStatus.INSTALLED, ProvisionStatus.ALREADY_PROVISIONED)


@dataclass(frozen=True)
class ProvisioningReport:
    """Per-slot outcomes of one ``create_wallets`` call."""
    outcomes: Tuple[SlotOutcome, ...]

    @property
    def complete(self) -> bool:
        return all(o.ok for o in self.outcomes)

    @property
    def failed(self) -> Tuple[SlotOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.ok)

    def outcome(self, slot: Slot) -> Optional[SlotOutcome]:
        for o in self.outcomes:
            if o.slot is slot:
                return o
        return None


class WalletProvisioner:
    """Creates the pool's wallets through the asset components."""

    def __init__(self, state: PoolState, assets: AssetRegistry, pool_account_id: str):
        self.state = state
        self._assets = assets
        self._pool_account_id = pool_account_id

    async def create_wallets(self, asset1: str, asset2: str) -> ProvisioningReport:
        """Provision both slots concurrently."""
        if asset1 == asset2:
            raise UnsupportedAsset(f"Both wallets cannot hold the same asset `{asset1}`")

        outcomes = await asyncio.gather(
            self.create_wallet(Slot.FIRST, asset1),
            self.create_wallet(Slot.SECOND, asset2),
        )
        return ProvisioningReport(tuple(outcomes))

    async def create_wallet(self, slot: Slot, asset_id: str) -> SlotOutcome:
        """
        Provision one slot.

        An installed slot is never overwritten. It is reported as
        ``ALREADY_PROVISIONED`` when it holds *asset_id* and as
        ``SLOT_OCCUPIED`` when it holds another asset, without calling the
        asset component.
        """
        existing = self._existing(slot, asset_id)
        if existing is not None:
            return existing

        try:
            metadata = await self._fetch_and_register(asset_id)
            # The slot may have been filled while this call was suspended
            existing = self._existing(slot, asset_id)
            if existing is not None:
                return existing
            self.state.install_wallet(slot, TokenWallet(asset_id=asset_id, metadata=metadata))
        except PoolError as e:
            logger.warning("Wallet for `%s` (slot %d) was not created: %s", asset_id, int(slot), e)
            return SlotOutcome(slot, asset_id, ProvisionStatus.FAILED, e)

        logger.info("Wallet created for %s `%s` in slot %d", metadata.symbol, asset_id, int(slot))
        return SlotOutcome(slot, asset_id, ProvisionStatus.INSTALLED)

    def _existing(self, slot: Slot, asset_id: str) -> Optional[SlotOutcome]:
        wallet = self.state.wallet(slot)
        if wallet is None:
            return None
        if wallet.asset_id == asset_id:
            return SlotOutcome(slot, asset_id, ProvisionStatus.ALREADY_PROVISIONED)

        logger.warning(
            "Slot %d already holds `%s`; request for `%s` rejected",
            int(slot), wallet.asset_id, asset_id,
        )
        error = UnsupportedAsset(f"Slot {int(slot)} already holds `{wallet.asset_id}`")
        return SlotOutcome(slot, asset_id, ProvisionStatus.SLOT_OCCUPIED, error)

    async def _fetch_and_register(self, asset_id: str) -> AssetMetadata:
        try:
            component = self._assets.get_or_raise(asset_id)
        except TransferError as e:
            raise ExternalCallFailed(str(e)) from e

        metadata, registration = await asyncio.gather(
            component.fetch_metadata(),
            component.register_receiver(self._pool_account_id),
            return_exceptions=True,
        )
        for result, what in ((registration, "receiver registration"), (metadata, "metadata fetch")):
            if isinstance(result, TransferError):
                raise ExternalCallFailed(f"`{asset_id}` {what} failed: {result}") from result
            if isinstance(result, BaseException):
                raise result
        return AssetMetadata.from_external(metadata)
