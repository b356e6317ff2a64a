"""
Slippage tolerance presets and minimum-amount helpers.

Clients turn an expected amount into the minimum they will accept before
submitting a request.  Minimums round down, never in the caller's favour.
"""

from __future__ import annotations

from enum import IntEnum

from .fixed_point import BP_DENOMINATOR, check_rate_bp, mul_div_floor


class SlippageToleranceBP(IntEnum):
    NONE = 0        # 0 %
    LOW = 50        # 0.5 %
    MEDIUM = 100    # 1 %
    HIGH = 200      # 2 %
    EXTREME = 500   # 5 %


DEFAULT_SLIPPAGE_BP: int = SlippageToleranceBP.LOW


def minimum_after_slippage(amount: int, slippage_bp: int) -> int:
    """
    ``floor(amount * (10000 - slippage_bp) / 10000)``.

    >>> minimum_after_slippage(10_000, 50)
    9950
    >>> minimum_after_slippage(199, SlippageToleranceBP.LOW)
    198
    """
    keep = BP_DENOMINATOR - check_rate_bp(int(slippage_bp), "slippage_bp")
    return mul_div_floor(amount, keep, BP_DENOMINATOR)
