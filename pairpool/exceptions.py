"""
PairPool Exceptions

Closed error taxonomy for the two-asset pool. Callers match on the
exception type or on ``error.kind``, never on message text.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Every recoverable failure a pool entry point can surface."""
    PERMISSION_DENIED = "PermissionDenied"
    CONTRACT_PAUSED = "ContractPaused"
    NOT_REGISTERED = "NotRegistered"
    UNSUPPORTED_ASSET = "UnsupportedAsset"
    COMPUTATION_OVERFLOW = "ComputationOverflow"
    INSUFFICIENT_LIQUIDITY = "InsufficientLiquidity"
    INSUFFICIENT_DEPOSIT = "InsufficientDeposit"
    LIQUIDITY_OVERFLOW = "LiquidityOverflow"
    DEPOSIT_OVERFLOW = "DepositOverflow"
    WALLET_NOT_PROVISIONED = "WalletNotProvisioned"
    EXTERNAL_CALL_FAILED = "ExternalCallFailed"
    BUSY = "Busy"


class PoolError(Exception):
    """Base exception for recoverable pool failures."""
    kind: ErrorKind

    def __init__(self, message: str = ""):
        super().__init__(message or self.kind.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


class PermissionDenied(PoolError):
    """Caller is not allowed to run the operation."""
    kind = ErrorKind.PERMISSION_DENIED


class ContractPaused(PoolError):
    """Pool is paused; mutating entry points are closed."""
    kind = ErrorKind.CONTRACT_PAUSED


class NotRegistered(PoolError):
    """Account has no storage registration."""
    kind = ErrorKind.NOT_REGISTERED


class UnsupportedAsset(PoolError):
    """Asset is not one of the pool's wallets."""
    kind = ErrorKind.UNSUPPORTED_ASSET


class ComputationOverflow(PoolError):
    """Arithmetic left the representable integer domain."""
    kind = ErrorKind.COMPUTATION_OVERFLOW


class InsufficientLiquidity(PoolError):
    """Not enough committed liquidity for the operation."""
    kind = ErrorKind.INSUFFICIENT_LIQUIDITY


class InsufficientDeposit(PoolError):
    """Not enough owner deposit for the operation."""
    kind = ErrorKind.INSUFFICIENT_DEPOSIT


class LiquidityOverflow(PoolError):
    """Liquidity balance would exceed u128."""
    kind = ErrorKind.LIQUIDITY_OVERFLOW


class DepositOverflow(PoolError):
    """Deposit balance would exceed u128."""
    kind = ErrorKind.DEPOSIT_OVERFLOW


class WalletNotProvisioned(PoolError):
    """One or both wallet slots are empty."""
    kind = ErrorKind.WALLET_NOT_PROVISIONED


class ExternalCallFailed(PoolError):
    """An asset component call failed or returned a malformed value."""
    kind = ErrorKind.EXTERNAL_CALL_FAILED


class Busy(PoolError):
    """A swap is in flight; the request was rejected."""
    kind = ErrorKind.BUSY


class CallAborted(Exception):
    """
    Host-level precondition violation (wrong attached collateral, malformed
    caller identity). The call is aborted with no state change and is never
    converted into a refund.
    """
    pass
