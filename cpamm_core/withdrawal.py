"""
Withdrawal: burn claim tokens, release a proportional share of reserves.

    amount_out = floor(claim_amount * reserve / claim_supply)   (each side)

Burning the entire supply releases the reserves exactly, leaving an empty
pool with no dust.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import InsufficientSupply, InvariantViolation, SlippageExceeded, ZeroOutput
from .fixed_point import check_amount, checked_sub, mul_div_floor
from .pool import PoolRecord
from .slippage import DEFAULT_SLIPPAGE_BP, minimum_after_slippage
from .transfers import Transfer, TransferKind

logger = logging.getLogger("cpamm.withdrawal")


@dataclass(frozen=True)
class WithdrawalResult:
    amount_greater: int
    amount_lesser: int
    claim_burned: int
    pool: PoolRecord
    transfers: tuple[Transfer, ...]


@dataclass(frozen=True)
class WithdrawalQuote:
    amount_greater: int
    amount_lesser: int
    amount_greater_min: int
    amount_lesser_min: int


def withdrawal_amounts(pool: PoolRecord, claim_amount: int) -> tuple[int, int]:
    if pool.claim_supply == 0:
        raise InsufficientSupply("pool has no outstanding claim tokens")
    check_amount(claim_amount, "claim_amount", positive=True)
    if claim_amount > pool.claim_supply:
        raise InsufficientSupply(
            f"claim amount {claim_amount} exceeds supply {pool.claim_supply}"
        )
    return (
        mul_div_floor(claim_amount, pool.reserve_greater, pool.claim_supply),
        mul_div_floor(claim_amount, pool.reserve_lesser, pool.claim_supply),
    )


def remove_liquidity(pool: PoolRecord, claim_amount: int,
                     amount_greater_min: int = 0,
                     amount_lesser_min: int = 0) -> WithdrawalResult:
    """Compute a withdrawal of *claim_amount* claim tokens from *pool*."""
    check_amount(amount_greater_min, "amount_greater_min")
    check_amount(amount_lesser_min, "amount_lesser_min")

    out_greater, out_lesser = withdrawal_amounts(pool, claim_amount)

    if out_greater < amount_greater_min:
        raise SlippageExceeded("amount_greater", out_greater, amount_greater_min)
    if out_lesser < amount_lesser_min:
        raise SlippageExceeded("amount_lesser", out_lesser, amount_lesser_min)
    if out_greater == 0 and out_lesser == 0:
        raise ZeroOutput("withdrawal would release nothing")

    new_supply = checked_sub(pool.claim_supply, claim_amount)
    new_greater = checked_sub(pool.reserve_greater, out_greater)
    new_lesser = checked_sub(pool.reserve_lesser, out_lesser)
    if new_supply == 0 and (new_greater or new_lesser):
        raise InvariantViolation(
            f"final withdrawal left dust ({new_greater}, {new_lesser})"
        )

    updated = pool.with_balances(new_greater, new_lesser, new_supply)

    logger.debug(
        f"Withdraw burned={claim_amount} greater={out_greater} lesser={out_lesser} "
        f"remaining_supply={new_supply}"
    )

    transfers = (
        Transfer(TransferKind.BURN, pool.ids.claim_mint_id, claim_amount),
        Transfer(TransferKind.RELEASE, pool.ids.vault_greater_id, out_greater),
        Transfer(TransferKind.RELEASE, pool.ids.vault_lesser_id, out_lesser),
    )
    return WithdrawalResult(out_greater, out_lesser, claim_amount, updated, transfers)


def quote_withdrawal(pool: PoolRecord, claim_amount: int,
                     slippage_bp: int = DEFAULT_SLIPPAGE_BP) -> WithdrawalQuote:
    """Expected release for *claim_amount* and slippage-adjusted minimums."""
    greater, lesser = withdrawal_amounts(pool, claim_amount)
    return WithdrawalQuote(
        amount_greater=greater,
        amount_lesser=lesser,
        amount_greater_min=minimum_after_slippage(greater, slippage_bp),
        amount_lesser_min=minimum_after_slippage(lesser, slippage_bp),
    )
