"""
Exception types for the pool engine.

Every failure raised by the core derives from :class:`AMMError`, so a
caller can reject a request with a single ``except`` clause.  Nothing in
the core retries; an error aborts the request before any state is
committed.
"""

from __future__ import annotations

__all__ = [
    "AMMError",
    "IdenticalAssets",
    "InvalidTokenOrder",
    "SeedMismatch",
    "InvalidIdentifier",
    "ArithmeticOverflow",
    "ArithmeticUnderflow",
    "DivisionByZero",
    "DomainError",
    "InvalidAmount",
    "InvalidFeeRate",
    "SlippageExceeded",
    "ZeroOutput",
    "InsufficientSupply",
    "InsufficientLiquidity",
    "EmptyPool",
    "InvariantViolation",
    "AlreadyInitialized",
    "NotInitialized",
    "InvalidAuthority",
    "PoolNotFound",
    "PoolAlreadyExists",
]


class AMMError(Exception):
    """Base class for every error raised by the pool engine."""


# ── identifiers ─────────────────────────────────────────────────

class IdenticalAssets(AMMError):
    """Both sides of a pair name the same asset."""


class InvalidTokenOrder(AMMError):
    """The supplied pair is not in canonical (greater, lesser) order."""


class SeedMismatch(AMMError):
    """A supplied identifier does not match its deterministic derivation."""


class InvalidIdentifier(AMMError, ValueError):
    """An identifier is not a byte string of the expected width."""


# ── arithmetic ──────────────────────────────────────────────────

class ArithmeticOverflow(AMMError, OverflowError):
    """A value or intermediate product exceeds its integer width."""


class ArithmeticUnderflow(AMMError, ArithmeticError):
    """A subtraction would go below zero."""


class DivisionByZero(AMMError, ZeroDivisionError):
    """A multiply-then-divide was given a zero denominator."""


class DomainError(AMMError, ValueError):
    """Input outside a function's mathematical domain (e.g. sqrt of < 0)."""


# ── request validation ──────────────────────────────────────────

class InvalidAmount(AMMError, ValueError):
    """An amount is zero where a positive value is required, or negative."""


class InvalidFeeRate(AMMError, ValueError):
    """A basis-point rate lies outside 0..10000."""


class SlippageExceeded(AMMError):
    """A computed amount fell below the caller's minimum.

    Attributes
    ----------
    expected : int
        The amount the engine computed.
    minimum : int
        The minimum the caller was willing to accept.
    """

    def __init__(self, what: str, expected: int, minimum: int):
        super().__init__(
            f"{what}: computed {expected} is below minimum {minimum}"
        )
        self.expected = expected
        self.minimum = minimum


class ZeroOutput(AMMError):
    """The operation would pay out nothing."""


class InsufficientSupply(AMMError):
    """Burn amount exceeds the outstanding claim supply (or supply is 0)."""


class InsufficientLiquidity(AMMError):
    """The requested output would drain a reserve."""


class EmptyPool(AMMError):
    """The pool holds no reserves."""


class InvariantViolation(AMMError):
    """A post-condition on the pool record does not hold."""


# ── protocol configuration ──────────────────────────────────────

class AlreadyInitialized(AMMError):
    """The protocol configuration record already exists."""


class NotInitialized(AMMError):
    """The protocol configuration record does not exist yet."""


class InvalidAuthority(AMMError):
    """The caller is not the configuration admin."""


# ── pool registry ───────────────────────────────────────────────

class PoolNotFound(AMMError, KeyError):
    """No pool is registered under the given identifier."""


class PoolAlreadyExists(AMMError):
    """A pool with the derived identifier is already registered."""
