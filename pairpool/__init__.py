"""
PairPool Package

Core imports are lazily loaded so that importing the package does not
configure logging or read .env until something is used.
For direct module access, import from submodules:

    from pairpool.pool import PoolContract, SwapEngine
    from pairpool.tokens import FungibleToken, AssetRegistry
    from pairpool.exceptions import InsufficientLiquidity
"""

__version__ = "0.1.0"


# Lazy imports to avoid loading everything at package import
def __getattr__(name):
    """Lazy module loading."""
    if name == 'PoolContract':
        from .pool import PoolContract
        return PoolContract
    elif name == 'load_config':
        from .config import load_config
        return load_config
    elif name == 'PoolError':
        from .exceptions import PoolError
        return PoolError
    raise AttributeError(f"module 'pairpool' has no attribute {name!r}")

__all__ = ['PoolContract', 'load_config', 'PoolError']
