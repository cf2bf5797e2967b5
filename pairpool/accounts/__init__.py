"""
Account storage registry and running state.
"""

from .storage import (
    Account,
    AccountRegistry,
    Payout,
    RunningState,
    StorageBalance,
    StorageBalanceBounds,
    is_valid_account_id,
    require_valid_account_id,
)

__all__ = [
    "Account",
    "AccountRegistry",
    "Payout",
    "RunningState",
    "StorageBalance",
    "StorageBalanceBounds",
    "is_valid_account_id",
    "require_valid_account_id",
]
