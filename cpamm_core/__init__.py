"""
cpamm - deterministic core of a constant-product automated market maker.

Key features:
- Exact integer arithmetic (64-bit amounts, 128-bit intermediates)
- Fees rounded up, outputs rounded down
- Canonical asset pairs and deterministic pool identifiers
- Deposit, withdrawal and swap engines returning transfer plans
- Admin-gated protocol configuration record
"""

from .errors import AMMError
from .liquidity import add_liquidity, quote_deposit
from .manager import PoolManager
from .pairs import canonicalize, derive_identifiers
from .pool import PoolRecord, PoolState, create_pool
from .protocol_config import ProtocolConfig, initialize_config, update_config
from .swap import SwapDirection, quote_swap, swap
from .withdrawal import quote_withdrawal, remove_liquidity

__version__ = "0.3.0"
__all__ = [
    "AMMError",
    "PoolManager",
    "PoolRecord",
    "PoolState",
    "ProtocolConfig",
    "SwapDirection",
    "add_liquidity",
    "canonicalize",
    "create_pool",
    "derive_identifiers",
    "initialize_config",
    "quote_deposit",
    "quote_swap",
    "quote_withdrawal",
    "remove_liquidity",
    "swap",
    "update_config",
]
