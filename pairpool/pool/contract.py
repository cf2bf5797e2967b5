"""
PairPool contract facade.

Wires the pool components together and exposes the public entry points
with their owner and running-state gates. Host-level precondition
violations (wrong attached collateral, malformed arguments) raise
``CallAborted``; everything else raises a ``PoolError``.
"""

from typing import Any, Dict, Optional, Sequence, Tuple, TYPE_CHECKING

from ..accounts.storage import AccountRegistry, StorageBalance, StorageBalanceBounds
from ..constants import PAIRPOOL_ACCOUNT_ID, WALLET_REGISTRATION_DEPOSIT
from ..exceptions import CallAborted, PermissionDenied
from ..logger import get_logger
from ..tokens.registry import AssetRegistry
from .gateway import TransferGateway
from .liquidity import LiquidityManager
from .provisioner import ProvisioningReport, SlotOutcome, WalletProvisioner
from .swap import SwapEngine
from .wallets import PoolState, PoolView, Slot

if TYPE_CHECKING:
    from ..config.loader import PairPoolConfig

logger = get_logger(__name__)


class PoolContract:
    """
    Two-asset constant-product pool.

    Example:
        contract = await PoolContract.init("owner.pairpool", assets, tokens=("usdt.tokens", "usdc.tokens"))
        contract.add_liquidity("owner.pairpool", [1000, 1000])
        refund = await contract.ft_on_transfer("alice.pairpool", "usdt.tokens", 10, '{"type": "swap"}')
    """

    def __init__(
        self,
        owner_id: str,
        assets: AssetRegistry,
        *,
        account_id: str = str(PAIRPOOL_ACCOUNT_ID),
        accounts: Optional[AccountRegistry] = None,
        registration_deposit: int = WALLET_REGISTRATION_DEPOSIT,
        state: Optional[PoolState] = None,
    ):
        self.owner_id = owner_id
        self.account_id = account_id
        self.registration_deposit = registration_deposit
        self.assets = assets
        self.accounts = accounts if accounts is not None else AccountRegistry()
        self.state = state if state is not None else PoolState()

        self.swap_engine = SwapEngine(self.state, assets, account_id)
        self.liquidity = LiquidityManager(self.state, self.swap_engine, owner_id)
        self.provisioner = WalletProvisioner(self.state, assets, account_id)
        self.gateway = TransferGateway(self.swap_engine, self.liquidity, self.accounts)

    @classmethod
    async def init(
        cls,
        owner_id: str,
        assets: AssetRegistry,
        tokens: Optional[Tuple[str, str]] = None,
        **kwargs: Any,
    ) -> "PoolContract":
        """Create a running pool, provisioning both wallets when *tokens* is given."""
        contract = cls(owner_id, assets, **kwargs)
        if tokens is not None:
            await contract.provisioner.create_wallets(*tokens)
        logger.info("Pool `%s` initialized for owner `%s`", contract.account_id, owner_id)
        return contract

    @classmethod
    async def from_config(cls, config: "PairPoolConfig", assets: AssetRegistry) -> "PoolContract":
        """
        Create a pool from validated settings.

        ``[pool] tokens``, when set, is provisioned slot 1 then slot 2.

        Raises:
            ValueError: the configuration does not validate (e.g. no owner_id)
        """
        config.validate()
        return await cls.init(
            config.pool.owner_id,
            assets,
            tokens=config.pool.token_pair,
            account_id=config.pool.account_id,
            accounts=AccountRegistry(config.storage.min_storage_balance),
            registration_deposit=config.pool.registration_deposit,
        )

    # ── Gates ─────────────────────────────────────────────────────────

    def is_owner(self, account_id: str) -> bool:
        return account_id == self.owner_id

    def _assert_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise PermissionDenied("Not allowed")

    def _assert_collateral(self, attached_deposit: int, wallets: int) -> None:
        required = wallets * self.registration_deposit
        if attached_deposit != required:
            raise CallAborted(f"Requires exactly {required} attached to create {wallets} wallet(s)")

    # ── Wallet provisioning ───────────────────────────────────────────

    async def owner_create_wallets(
        self, caller: str, asset1: str, asset2: str, attached_deposit: int
    ) -> ProvisioningReport:
        """Provision both wallets. One registration deposit is attached per wallet."""
        self._assert_collateral(attached_deposit, 2)
        self._assert_owner(caller)
        self.accounts.require_running()
        return await self.provisioner.create_wallets(asset1, asset2)

    async def owner_create_wallet(self, caller: str, slot: int, asset_id: str, attached_deposit: int) -> SlotOutcome:
        """Provision one slot, e.g. the one a partial ``owner_create_wallets`` left empty."""
        self._assert_collateral(attached_deposit, 1)
        try:
            slot = Slot(slot)
        except ValueError as e:
            raise CallAborted(f"Unknown wallet slot {slot!r}") from e
        self._assert_owner(caller)
        self.accounts.require_running()
        return await self.provisioner.create_wallet(slot, asset_id)

    # ── Liquidity ─────────────────────────────────────────────────────

    def add_liquidity(self, caller: str, amounts: Sequence[int]) -> None:
        self._assert_owner(caller)
        self.accounts.require_running()
        self.liquidity.add_liquidity(caller, amounts)

    def remove_liquidity(self, caller: str, amounts: Sequence[int]) -> None:
        self._assert_owner(caller)
        self.accounts.require_running()
        self.liquidity.remove_liquidity(caller, amounts)

    # ── Transfers ─────────────────────────────────────────────────────

    async def ft_on_transfer(self, sender: str, asset_id: str, amount: int, msg: str) -> int:
        """Receiver hook of transfer-and-notify. Returns the amount to refund."""
        return await self.gateway.on_incoming_transfer(sender, asset_id, amount, msg)

    # ── Views ─────────────────────────────────────────────────────────

    def get_pool(self) -> PoolView:
        return self.state.view()

    def quote(self, asset_in: str, amount_in: int) -> int:
        return self.swap_engine.quote(asset_in, amount_in)

    def state_root(self) -> str:
        return self.state.state_root()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "owner_id": self.owner_id,
            "running_state": self.accounts.running_state.value,
            "pool": self.state.to_dict(),
        }

    # ── Running state ─────────────────────────────────────────────────

    def pause(self, caller: str) -> None:
        self._assert_owner(caller)
        self.accounts.pause()

    def resume(self, caller: str) -> None:
        self._assert_owner(caller)
        self.accounts.resume()

    # ── Storage management ────────────────────────────────────────────

    def storage_deposit(
        self,
        caller: str,
        attached_deposit: int,
        account_id: Optional[str] = None,
        registration_only: bool = False,
    ) -> StorageBalance:
        return self.accounts.storage_deposit(caller, attached_deposit, account_id, registration_only)

    def storage_withdraw(self, caller: str, attached_deposit: int, amount: Optional[int] = None) -> StorageBalance:
        return self.accounts.storage_withdraw(caller, attached_deposit, amount)

    def storage_unregister(self, caller: str, attached_deposit: int, force: bool = False) -> bool:
        return self.accounts.storage_unregister(caller, attached_deposit, force)

    def storage_balance_bounds(self) -> StorageBalanceBounds:
        return self.accounts.storage_balance_bounds()

    def storage_balance_of(self, account_id: str) -> Optional[StorageBalance]:
        return self.accounts.storage_balance_of(account_id)

    def __repr__(self) -> str:
        return f"<PoolContract {self.account_id} active={self.state.is_active}>"
