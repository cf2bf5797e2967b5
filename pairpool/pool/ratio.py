"""
Pool ratio arithmetic.

Balances live in the unsigned 128-bit domain; the constant-product
invariant is computed at double width (256 bits). Python integers never
overflow on their own, so every domain bound is checked explicitly here.
"""

from typing import Type

from ..constants import U128_MAX, U256_MAX
from ..exceptions import ComputationOverflow, PoolError


def is_u128(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= U128_MAX


def require_u128(value: int, error: Type[PoolError] = ComputationOverflow, what: str = "value") -> int:
    """Return *value* if it fits u128, else raise *error*."""
    if not is_u128(value):
        raise error(f"{what} {value!r} is outside the u128 domain")
    return value


def invariant(a: int, b: int) -> int:
    """
    Constant-product invariant ``a * b`` in the 256-bit domain.

    Raises:
        ComputationOverflow: an input is not u128 or the product exceeds u256
    """
    require_u128(a, what="liquidity")
    require_u128(b, what="liquidity")
    product = a * b
    if product > U256_MAX:
        raise ComputationOverflow(f"Product {a} * {b} exceeds the u256 domain")
    return product


def checked_add(a: int, b: int, error: Type[PoolError], what: str = "balance") -> int:
    """u128 addition; raises *error* on overflow."""
    total = a + b
    if total > U128_MAX:
        raise error(f"{what} overflow: {a} + {b}")
    return total


def checked_sub(a: int, b: int, error: Type[PoolError], what: str = "balance") -> int:
    """u128 subtraction; raises *error* on underflow."""
    if b > a:
        raise error(f"{what} underflow: {a} - {b}")
    return a - b


def ceil_div(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        raise ComputationOverflow("Division by a non-positive denominator")
    return -(-numerator // denominator)
