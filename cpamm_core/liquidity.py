"""
Liquidity provision: deposit both assets, receive claim tokens.

First deposit into an empty pool
────────────────────────────────
Both desired amounts are taken in full and

    minted = isqrt(amount_greater * amount_lesser)

This fixes the claim-token unit scale for as long as the pool stays funded.

Deposit into a funded pool
──────────────────────────
Amounts are trimmed to the current reserve ratio, using whichever desired
amount is the binding constraint:

    lesser_optimal = floor(greater_desired * R_l / R_g)
    if lesser_optimal <= lesser_desired:  use (greater_desired, lesser_optimal)
    else:                                 use (floor(lesser_desired * R_g / R_l), lesser_desired)

and the caller is credited the smaller of the two proportional estimates:

    minted = min(floor(used_g * S / R_g), floor(used_l * S / R_l))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import SlippageExceeded, ZeroOutput
from .fixed_point import check_amount, checked_add, integer_sqrt, mul_div_floor
from .pool import PoolRecord
from .slippage import DEFAULT_SLIPPAGE_BP, minimum_after_slippage
from .transfers import Transfer, TransferKind

logger = logging.getLogger("cpamm.liquidity")


@dataclass(frozen=True)
class DepositResult:
    amount_greater: int
    amount_lesser: int
    claim_minted: int
    pool: PoolRecord
    transfers: tuple[Transfer, ...]


@dataclass(frozen=True)
class DepositQuote:
    amount_greater: int
    amount_lesser: int
    amount_greater_min: int
    amount_lesser_min: int


def optimal_amounts(pool: PoolRecord, amount_greater_desired: int,
                    amount_lesser_desired: int) -> tuple[int, int]:
    """Deposit amounts that keep the pool's reserve ratio."""
    if pool.is_empty:
        return amount_greater_desired, amount_lesser_desired

    lesser_optimal = mul_div_floor(
        amount_greater_desired, pool.reserve_lesser, pool.reserve_greater
    )
    if lesser_optimal <= amount_lesser_desired:
        return amount_greater_desired, lesser_optimal

    greater_optimal = mul_div_floor(
        amount_lesser_desired, pool.reserve_greater, pool.reserve_lesser
    )
    return greater_optimal, amount_lesser_desired


def claim_tokens_for(pool: PoolRecord, amount_greater: int, amount_lesser: int) -> int:
    """Claim tokens a deposit of exactly these amounts is worth."""
    if pool.is_empty:
        return integer_sqrt(amount_greater * amount_lesser)
    by_greater = mul_div_floor(amount_greater, pool.claim_supply, pool.reserve_greater)
    by_lesser = mul_div_floor(amount_lesser, pool.claim_supply, pool.reserve_lesser)
    return min(by_greater, by_lesser)


def add_liquidity(pool: PoolRecord,
                  amount_greater_desired: int,
                  amount_lesser_desired: int,
                  amount_greater_min: int = 0,
                  amount_lesser_min: int = 0) -> DepositResult:
    """
    Compute a deposit against *pool*.

    Returns the amounts actually taken, the claim tokens to mint, the
    updated pool record and the transfer plan.  Raises
    :class:`SlippageExceeded` if either amount taken is below its minimum.
    """
    check_amount(amount_greater_desired, "amount_greater_desired", positive=True)
    check_amount(amount_lesser_desired, "amount_lesser_desired", positive=True)
    check_amount(amount_greater_min, "amount_greater_min")
    check_amount(amount_lesser_min, "amount_lesser_min")

    used_greater, used_lesser = optimal_amounts(
        pool, amount_greater_desired, amount_lesser_desired
    )

    if used_greater < amount_greater_min:
        raise SlippageExceeded("amount_greater", used_greater, amount_greater_min)
    if used_lesser < amount_lesser_min:
        raise SlippageExceeded("amount_lesser", used_lesser, amount_lesser_min)

    minted = claim_tokens_for(pool, used_greater, used_lesser)
    if minted == 0:
        raise ZeroOutput("deposit would mint zero claim tokens")

    updated = pool.with_balances(
        reserve_greater=checked_add(pool.reserve_greater, used_greater),
        reserve_lesser=checked_add(pool.reserve_lesser, used_lesser),
        claim_supply=checked_add(pool.claim_supply, minted),
    )

    logger.debug(
        f"Deposit greater={used_greater} lesser={used_lesser} minted={minted} "
        f"(first={pool.is_empty})"
    )

    transfers = (
        Transfer(TransferKind.DEPOSIT, pool.ids.vault_greater_id, used_greater),
        Transfer(TransferKind.DEPOSIT, pool.ids.vault_lesser_id, used_lesser),
        Transfer(TransferKind.MINT, pool.ids.claim_mint_id, minted),
    )
    return DepositResult(used_greater, used_lesser, minted, updated, transfers)


def quote_deposit(pool: PoolRecord, amount_greater_desired: int,
                  amount_lesser_desired: int,
                  slippage_bp: int = DEFAULT_SLIPPAGE_BP) -> DepositQuote:
    """
    Amounts a deposit would take now, plus minimums that tolerate
    *slippage_bp* of reserve movement before the request lands.

    A first deposit is not ratio-bound, so its minimums equal the amounts.
    """
    check_amount(amount_greater_desired, "amount_greater_desired", positive=True)
    check_amount(amount_lesser_desired, "amount_lesser_desired", positive=True)
    greater, lesser = optimal_amounts(pool, amount_greater_desired, amount_lesser_desired)
    if pool.is_empty:
        return DepositQuote(greater, lesser, greater, lesser)
    return DepositQuote(
        amount_greater=greater,
        amount_lesser=lesser,
        amount_greater_min=minimum_after_slippage(greater, slippage_bp),
        amount_lesser_min=minimum_after_slippage(lesser, slippage_bp),
    )
