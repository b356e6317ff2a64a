"""
Fixed-point integer arithmetic for the pool engine.

All amounts are unsigned integers.  Stored values (reserves, supply,
transfer amounts) fit in 64 bits; products formed inside a
multiply-then-divide may use up to 128 bits:

    U64_MAX  = 2**64  - 1
    U128_MAX = 2**128 - 1

Rounding policy
───────────────
Fees are rounded **up** so the pool never under-collects.  Outputs,
minted claim tokens and minimum amounts are rounded **down** so a caller
never receives more than the reserves justify.  The asymmetry is part of
the pool's safety argument; keep it.

No function here touches floating point.
"""

from __future__ import annotations

from .errors import (
    ArithmeticOverflow,
    ArithmeticUnderflow,
    DivisionByZero,
    DomainError,
    InvalidAmount,
    InvalidFeeRate,
)

# Basis-point denominator: 10 000 BP = 100 %.
BP_DENOMINATOR: int = 10_000
MAX_RATE_BP: int = BP_DENOMINATOR

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1


def _require_int(value, name: str) -> None:
    # bool is an int subclass; True/False as amounts is always a bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")


def check_amount(value: int, name: str = "amount", *, positive: bool = False) -> int:
    """Validate an unsigned 64-bit amount and return it unchanged.

    >>> check_amount(5)
    5
    """
    _require_int(value, name)
    if value < 0:
        raise InvalidAmount(f"{name} cannot be negative: {value}")
    if positive and value == 0:
        raise InvalidAmount(f"{name} must be greater than 0")
    if value > U64_MAX:
        raise ArithmeticOverflow(f"{name} {value} exceeds 64-bit range")
    return value


def check_rate_bp(rate_bp: int, name: str = "rate_bp") -> int:
    """Validate a basis-point rate in ``0..10000``."""
    _require_int(rate_bp, name)
    if rate_bp < 0 or rate_bp > MAX_RATE_BP:
        raise InvalidFeeRate(f"{name} must be 0-{MAX_RATE_BP} basis points, got {rate_bp}")
    return rate_bp


def checked_add(a: int, b: int) -> int:
    """``a + b`` within 64 bits."""
    total = a + b
    if total > U64_MAX:
        raise ArithmeticOverflow(f"{a} + {b} exceeds 64-bit range")
    return total


def checked_sub(a: int, b: int) -> int:
    """``a - b``, refusing to go below zero."""
    if b > a:
        raise ArithmeticUnderflow(f"{a} - {b} would be negative")
    return a - b


def integer_sqrt(x: int) -> int:
    """
    Largest ``r`` with ``r * r <= x``.

    Binary digit-by-digit (base 4) method: walk the highest power of four
    not above ``x`` down to one, deciding one result bit per step.  Works on
    ints of any width and never uses floating point.

    >>> integer_sqrt(0)
    0
    >>> integer_sqrt(40_000_000_000)
    200000
    >>> integer_sqrt(15)
    3
    """
    _require_int(x, "x")
    if x < 0:
        raise DomainError(f"square root of negative value {x}")
    if x == 0:
        return 0

    n = x
    result = 0
    # largest power of four <= x
    bit = 1 << ((x.bit_length() - 1) & ~1)

    while bit:
        if n >= result + bit:
            n -= result + bit
            result = (result >> 1) + bit
        else:
            result >>= 1
        bit >>= 2

    return result


def _product(a: int, b: int, d: int) -> int:
    _require_int(a, "a")
    _require_int(b, "b")
    _require_int(d, "d")
    if a < 0 or b < 0 or d < 0:
        raise DomainError(f"mul_div operands must be unsigned: {a}, {b}, {d}")
    if d == 0:
        raise DivisionByZero(f"mul_div({a}, {b}, 0)")
    product = a * b
    if product > U128_MAX:
        raise ArithmeticOverflow(f"{a} * {b} exceeds 128-bit range")
    return product


def mul_div_floor(a: int, b: int, d: int) -> int:
    """``a * b / d`` truncated toward zero.

    >>> mul_div_floor(7, 3, 2)
    10
    """
    return _product(a, b, d) // d


def mul_div_ceil(a: int, b: int, d: int) -> int:
    """``a * b / d`` rounded up: ``floor((a*b + d - 1) / d)``.

    >>> mul_div_ceil(7, 3, 2)
    11
    """
    product = _product(a, b, d)
    rounded = product + d - 1
    if rounded > U128_MAX:
        raise ArithmeticOverflow(f"{a} * {b} + {d - 1} exceeds 128-bit range")
    return rounded // d


def apply_rate_floor(amount: int, rate_bp: int) -> int:
    """``amount * rate_bp / 10000``, rounded down (outputs, minimums)."""
    return mul_div_floor(amount, check_rate_bp(rate_bp), BP_DENOMINATOR)


def apply_rate_ceil(amount: int, rate_bp: int) -> int:
    """``amount * rate_bp / 10000``, rounded up (fees).

    >>> apply_rate_ceil(10_000, 100)
    100
    >>> apply_rate_ceil(1, 30)
    1
    """
    return mul_div_ceil(amount, check_rate_bp(rate_bp), BP_DENOMINATOR)
