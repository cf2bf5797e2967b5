"""
Asset component registry.

Maps asset account ids to the components that reach them. A lookup for an
unknown id fails the same way a call to a missing account would.
"""

from typing import Dict, List, Optional

from ..logger import get_logger
from .base import AssetTransferComponent, TransferError

logger = get_logger(__name__)


class AssetRegistry:
    """Lookup of asset transfer components by asset id."""

    def __init__(self) -> None:
        self._components: Dict[str, AssetTransferComponent] = {}

    def register(self, component: AssetTransferComponent) -> AssetTransferComponent:
        """
        Add *component* under its asset id.

        Raises TransferError if the id is already taken.
        """
        if component.asset_id in self._components:
            raise TransferError(f"Asset `{component.asset_id}` already registered")
        self._components[component.asset_id] = component
        logger.debug("Asset component registered: `%s`", component.asset_id)
        return component

    def get(self, asset_id: str) -> Optional[AssetTransferComponent]:
        return self._components.get(asset_id)

    def get_or_raise(self, asset_id: str) -> AssetTransferComponent:
        component = self.get(asset_id)
        if component is None:
            raise TransferError(f"Asset `{asset_id}` does not exist")
        return component

    def list_assets(self) -> List[str]:
        return list(self._components.keys())

    def __contains__(self, asset_id: str) -> bool:
        return asset_id in self._components

    def __len__(self) -> int:
        return len(self._components)

    def __repr__(self) -> str:
        return f"<AssetRegistry assets={len(self._components)}>"
