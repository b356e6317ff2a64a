"""
Constant-product swap engine.

For an exact input of one asset:

    fee       = ceil(amount_in * fee_bp / 10000)            (pool-favouring)
    net_in    = amount_in - fee
    amount_out = floor(net_in * reserve_out / (reserve_in + net_in))

The full ``amount_in`` (fee included) is added to ``reserve_in``, so fees
accrue to every claim holder; there is no separate fee vault.  After the
update the product of the reserves may not decrease.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction

from .errors import (
    EmptyPool,
    InsufficientLiquidity,
    InvariantViolation,
    SlippageExceeded,
    ZeroOutput,
)
from .fixed_point import (
    BP_DENOMINATOR,
    apply_rate_ceil,
    check_amount,
    checked_add,
    checked_sub,
    mul_div_floor,
)
from .pool import PoolRecord
from .slippage import DEFAULT_SLIPPAGE_BP, minimum_after_slippage
from .transfers import Transfer, TransferKind

logger = logging.getLogger("cpamm.swap")


class SwapDirection(str, Enum):
    GREATER_TO_LESSER = "greater_to_lesser"
    LESSER_TO_GREATER = "lesser_to_greater"

    @property
    def input_is_greater(self) -> bool:
        return self is SwapDirection.GREATER_TO_LESSER


@dataclass(frozen=True)
class SwapResult:
    amount_in: int
    amount_out: int
    fee_amount: int
    direction: SwapDirection
    pool: PoolRecord
    transfers: tuple[Transfer, ...]


@dataclass(frozen=True)
class SwapQuote:
    amount_out: int
    fee_amount: int
    minimum_amount_out: int
    price_impact: Fraction

    @property
    def price_impact_bp(self) -> int:
        return int(self.price_impact * BP_DENOMINATOR)


def compute_amount_out(amount_in: int, reserve_in: int, reserve_out: int,
                       fee_rate_bp: int) -> tuple[int, int]:
    """Return ``(amount_out, fee_amount)`` for an exact-in trade."""
    fee_amount = apply_rate_ceil(amount_in, fee_rate_bp)
    net_in = amount_in - fee_amount
    amount_out = mul_div_floor(net_in, reserve_out, checked_add(reserve_in, net_in))
    return amount_out, fee_amount


def price_impact(reserve_in: int, reserve_out: int,
                 amount_in: int, amount_out: int) -> Fraction:
    """
    Relative move of the spot price ``reserve_out / reserve_in`` caused by
    a trade, as an exact fraction.  Informational only.

    >>> price_impact(100, 100, 0, 0)
    Fraction(0, 1)
    """
    if reserve_in == 0 or reserve_out == 0:
        raise EmptyPool("price is undefined for an empty pool")
    before = Fraction(reserve_out, reserve_in)
    after = Fraction(reserve_out - amount_out, reserve_in + amount_in)
    return abs(before - after) / before


def _reserves(pool: PoolRecord, direction: SwapDirection) -> tuple[int, int]:
    if pool.is_empty:
        raise EmptyPool("pool has no liquidity")
    return pool.reserves_for(direction.input_is_greater)


def swap(pool: PoolRecord, amount_in: int, minimum_amount_out: int,
         direction: SwapDirection) -> SwapResult:
    """
    Compute an exact-in swap against *pool*.

    Raises :class:`SlippageExceeded` when the output is below
    *minimum_amount_out*, and :class:`ZeroOutput` for trades too small to
    pay anything when no minimum was asked for.
    """
    direction = SwapDirection(direction)
    check_amount(amount_in, "amount_in", positive=True)
    check_amount(minimum_amount_out, "minimum_amount_out")
    reserve_in, reserve_out = _reserves(pool, direction)

    amount_out, fee_amount = compute_amount_out(
        amount_in, reserve_in, reserve_out, pool.fee_rate_bp
    )

    if amount_out < minimum_amount_out:
        raise SlippageExceeded("amount_out", amount_out, minimum_amount_out)
    if amount_out == 0:
        raise ZeroOutput(f"swap of {amount_in} yields nothing")
    if amount_out >= reserve_out:
        raise InsufficientLiquidity(
            f"amount out {amount_out} would drain reserve {reserve_out}"
        )

    new_in = checked_add(reserve_in, amount_in)
    new_out = checked_sub(reserve_out, amount_out)
    if new_in * new_out < reserve_in * reserve_out:
        raise InvariantViolation(
            f"product decreased: {new_in * new_out} < {reserve_in * reserve_out}"
        )

    if direction.input_is_greater:
        updated = pool.with_balances(new_in, new_out, pool.claim_supply)
        vault_in, vault_out = pool.ids.vault_greater_id, pool.ids.vault_lesser_id
    else:
        updated = pool.with_balances(new_out, new_in, pool.claim_supply)
        vault_in, vault_out = pool.ids.vault_lesser_id, pool.ids.vault_greater_id

    logger.debug(
        f"Swap {direction.value} in={amount_in} fee={fee_amount} out={amount_out}"
    )

    transfers = (
        Transfer(TransferKind.DEPOSIT, vault_in, amount_in),
        Transfer(TransferKind.RELEASE, vault_out, amount_out),
    )
    return SwapResult(amount_in, amount_out, fee_amount, direction, updated, transfers)


def quote_swap(pool: PoolRecord, amount_in: int, direction: SwapDirection,
               slippage_bp: int = DEFAULT_SLIPPAGE_BP) -> SwapQuote:
    """Expected output, fee, slippage-adjusted minimum and price impact."""
    direction = SwapDirection(direction)
    check_amount(amount_in, "amount_in", positive=True)
    reserve_in, reserve_out = _reserves(pool, direction)
    amount_out, fee_amount = compute_amount_out(
        amount_in, reserve_in, reserve_out, pool.fee_rate_bp
    )
    return SwapQuote(
        amount_out=amount_out,
        fee_amount=fee_amount,
        minimum_amount_out=minimum_after_slippage(amount_out, slippage_bp),
        price_impact=price_impact(reserve_in, reserve_out, amount_in, amount_out),
    )
