"""
Account storage registry.

Accounts register with the pool by attaching native collateral that pays for
their storage. The registry keeps each account's storage balance, answers the
bounds/balance queries and carries the pool's running state: while paused,
every entry point here (and every mutating pool operation) is closed.

Native coin leaving the pool (refunds of over-attached collateral and
withdrawals) is recorded as a ``Payout``; moving it is the host's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ..constants import (
    ACCOUNT_ID_MAX_LENGTH,
    ACCOUNT_ID_MIN_LENGTH,
    ACCOUNT_MIN_STORAGE_BALANCE,
    ONE_YOCTO,
    VALID_ACCOUNT_ID_PATTERN,
)
from ..exceptions import CallAborted, ContractPaused, NotRegistered
from ..logger import get_logger

logger = get_logger(__name__)


def is_valid_account_id(account_id: str) -> bool:
    return (
        isinstance(account_id, str)
        and ACCOUNT_ID_MIN_LENGTH <= len(account_id) <= ACCOUNT_ID_MAX_LENGTH
        and VALID_ACCOUNT_ID_PATTERN.match(account_id) is not None
    )


def require_valid_account_id(account_id: str) -> str:
    if not is_valid_account_id(account_id):
        raise CallAborted(f"Invalid account id: {account_id!r}")
    return account_id


class RunningState(str, Enum):
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class StorageBalance:
    total: int
    available: int

    def to_dict(self) -> Dict[str, str]:
        return {"total": str(self.total), "available": str(self.available)}


@dataclass(frozen=True)
class StorageBalanceBounds:
    min: int
    max: Optional[int] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"min": str(self.min), "max": None if self.max is None else str(self.max)}


@dataclass(frozen=True)
class Payout:
    """Native collateral owed back to an account."""
    account_id: str
    amount: int


@dataclass
class Account:
    account_id: str
    storage_balance: int = 0


class AccountRegistry:
    """
    Storage-collateral bookkeeping and the pool's running flag.

    Every attached amount is in the smallest native unit.
    """

    def __init__(self, min_storage_balance: int = ACCOUNT_MIN_STORAGE_BALANCE):
        if min_storage_balance < 0:
            raise ValueError("Minimum storage balance cannot be negative")
        self.min_storage_balance = min_storage_balance
        self.running_state = RunningState.RUNNING
        self.payouts: List[Payout] = []
        self._accounts: Dict[str, Account] = {}

    # -- Running state ------------------------------------------------------

    def is_running(self) -> bool:
        return self.running_state is RunningState.RUNNING

    def require_running(self) -> None:
        if not self.is_running():
            raise ContractPaused("Contract paused")

    def pause(self) -> None:
        self.running_state = RunningState.PAUSED
        logger.warning("Pool PAUSED")

    def resume(self) -> None:
        self.running_state = RunningState.RUNNING
        logger.info("Pool resumed")

    # -- Accounts -----------------------------------------------------------

    def get_account(self, account_id: str) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise NotRegistered(f"Account `{account_id}` is not registered")
        return account

    def is_registered(self, account_id: str) -> bool:
        return account_id in self._accounts

    def _balance(self, account: Account) -> StorageBalance:
        return StorageBalance(
            total=account.storage_balance,
            available=max(0, account.storage_balance - self.min_storage_balance),
        )

    def _pay(self, account_id: str, amount: int) -> None:
        if amount > 0:
            self.payouts.append(Payout(account_id, amount))
            logger.debug("Payout of %d to `%s`", amount, account_id)

    # -- Storage management ---------------------------------------------------

    def storage_deposit(
        self,
        caller: str,
        attached_deposit: int,
        account_id: Optional[str] = None,
        registration_only: bool = False,
    ) -> StorageBalance:
        """
        Add *attached_deposit* to the storage balance of *account_id*
        (the caller by default).

        With ``registration_only`` an already registered account gets the
        whole deposit back, and a new one is registered with exactly the
        minimum balance and refunded the rest.
        """
        self.require_running()
        require_valid_account_id(caller)
        if attached_deposit <= 0:
            raise CallAborted("No deposit provided")
        account_id = require_valid_account_id(account_id or caller)

        account = self._accounts.get(account_id)
        if account is not None and registration_only:
            self._pay(caller, attached_deposit)
        elif account is not None:
            account.storage_balance += attached_deposit
        elif registration_only:
            if attached_deposit < self.min_storage_balance:
                raise CallAborted("Not enough minimum deposit to register account")
            account = Account(account_id, self.min_storage_balance)
            self._pay(caller, attached_deposit - self.min_storage_balance)
        else:
            if attached_deposit < self.min_storage_balance:
                raise CallAborted("Not enough minimum deposit to register account")
            account = Account(account_id, attached_deposit)

        if account_id not in self._accounts:
            logger.info("Account `%s` registered", account_id)
        self._accounts[account_id] = account
        return self._balance(account)

    def storage_withdraw(self, caller: str, attached_deposit: int, amount: Optional[int] = None) -> StorageBalance:
        """Withdraw *amount* (all available by default) of the caller's storage balance."""
        if attached_deposit != ONE_YOCTO:
            raise CallAborted("Requires attached deposit of exactly 1 yocto")
        self.require_running()

        try:
            account = self.get_account(caller)
        except NotRegistered as e:
            raise CallAborted(str(e)) from e

        available = self._balance(account).available
        amount = available if amount is None else amount
        if amount < 0 or amount > available:
            raise CallAborted("Not enough available storage to withdraw")

        account.storage_balance -= amount
        self._pay(caller, amount)
        return self._balance(account)

    def storage_unregister(self, caller: str, attached_deposit: int, force: bool = False) -> bool:
        """
        Remove the caller's registration and pay out its storage balance.

        Returns False if the caller was not registered.
        """
        if attached_deposit != ONE_YOCTO:
            raise CallAborted("Requires attached deposit of exactly 1 yocto")
        self.require_running()

        account = self._accounts.get(caller)
        if account is None:
            return False
        if account.storage_balance > 0 and not force:
            raise CallAborted("Unable to unregister a positive balance account without `force` set to `true`")

        del self._accounts[caller]
        self._pay(caller, account.storage_balance)
        logger.info("Account `%s` unregistered", caller)
        return True

    def storage_balance_bounds(self) -> StorageBalanceBounds:
        return StorageBalanceBounds(min=self.min_storage_balance)

    def storage_balance_of(self, account_id: str) -> Optional[StorageBalance]:
        self.require_running()
        account = self._accounts.get(account_id)
        return None if account is None else self._balance(account)

    def __len__(self) -> int:
        return len(self._accounts)
