"""
The pool invariant record.

One record exists per (canonical pair, fee tier).  It is the single source
of truth for the pool's two reserves and its outstanding claim-token
supply.  Records are immutable snapshots: every engine takes one and
returns a new one, leaving the input untouched.

Lifecycle::

    (absent) --create--> EMPTY --deposit--> FUNDED --full withdrawal--> EMPTY ...

A pool is never deleted.  An empty pool can take a fresh first deposit,
which resets the claim-token unit scale.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from .errors import InvariantViolation
from .fixed_point import check_amount, check_rate_bp
from .pairs import (
    DEFAULT_NAMESPACE,
    PoolIdentifiers,
    derive_identifiers,
    pool_seeds,
    require_canonical,
    to_hex,
    verify_identifiers,
)

logger = logging.getLogger("cpamm.pool")


class PoolState(str, Enum):
    EMPTY = "empty"
    FUNDED = "funded"


@dataclass(frozen=True)
class PoolRecord:
    """Snapshot of a single constant-product pool."""
    asset_greater: bytes
    asset_lesser: bytes
    fee_rate_bp: int
    ids: PoolIdentifiers
    reserve_greater: int = 0
    reserve_lesser: int = 0
    claim_supply: int = 0
    namespace: str = DEFAULT_NAMESPACE

    @property
    def pool_id(self) -> bytes:
        return self.ids.pool_id

    @property
    def state(self) -> PoolState:
        if self.reserve_greater == 0 and self.reserve_lesser == 0:
            return PoolState.EMPTY
        return PoolState.FUNDED

    @property
    def is_empty(self) -> bool:
        return self.state is PoolState.EMPTY

    @property
    def invariant(self) -> int:
        """The constant product k = reserve_greater * reserve_lesser."""
        return self.reserve_greater * self.reserve_lesser

    def seeds(self) -> tuple[bytes, ...]:
        """Seed data the pool id is re-derived from."""
        return pool_seeds(self.asset_greater, self.asset_lesser, self.fee_rate_bp)

    def reserves_for(self, asset_in_is_greater: bool) -> tuple[int, int]:
        """``(reserve_in, reserve_out)`` for a trade in the given direction."""
        if asset_in_is_greater:
            return self.reserve_greater, self.reserve_lesser
        return self.reserve_lesser, self.reserve_greater

    def check(self) -> None:
        """
        Raise :class:`InvariantViolation` unless the record is consistent:
        reserves are both zero or both positive, and claim supply is zero
        exactly when the reserves are.
        """
        for name in ("reserve_greater", "reserve_lesser", "claim_supply"):
            check_amount(getattr(self, name), name)
        if (self.reserve_greater == 0) != (self.reserve_lesser == 0):
            raise InvariantViolation(
                f"one-sided reserves ({self.reserve_greater}, {self.reserve_lesser})"
            )
        if (self.claim_supply == 0) != self.is_empty:
            raise InvariantViolation(
                f"claim supply {self.claim_supply} inconsistent with reserves "
                f"({self.reserve_greater}, {self.reserve_lesser})"
            )

    def with_balances(self, reserve_greater: int, reserve_lesser: int,
                      claim_supply: int) -> "PoolRecord":
        updated = replace(
            self,
            reserve_greater=reserve_greater,
            reserve_lesser=reserve_lesser,
            claim_supply=claim_supply,
        )
        updated.check()
        return updated

    def to_dict(self) -> dict:
        d = {
            "pool_id": to_hex(self.pool_id),
            "asset_greater": to_hex(self.asset_greater),
            "asset_lesser": to_hex(self.asset_lesser),
            "fee_rate_bp": self.fee_rate_bp,
            "reserve_greater": self.reserve_greater,
            "reserve_lesser": self.reserve_lesser,
            "claim_supply": self.claim_supply,
            "state": self.state.value,
        }
        d.update(self.ids.to_dict())
        return d


def create_pool(asset_greater: bytes, asset_lesser: bytes, fee_rate_bp: int,
                supplied_ids: Optional[PoolIdentifiers] = None,
                namespace: str = DEFAULT_NAMESPACE) -> PoolRecord:
    """
    Build a new, empty pool record.

    The pair must already be canonical: a reversed pair raises
    :class:`InvalidTokenOrder` rather than being silently reordered.  When
    the caller supplies identifiers they must match the derivation
    (:class:`SeedMismatch` otherwise).
    """
    check_rate_bp(fee_rate_bp, "fee_rate_bp")
    require_canonical(asset_greater, asset_lesser)
    if supplied_ids is None:
        ids = derive_identifiers(asset_greater, asset_lesser, fee_rate_bp, namespace)
    else:
        ids = verify_identifiers(supplied_ids, asset_greater, asset_lesser,
                                 fee_rate_bp, namespace)

    pool = PoolRecord(
        asset_greater=bytes(asset_greater),
        asset_lesser=bytes(asset_lesser),
        fee_rate_bp=fee_rate_bp,
        ids=ids,
        namespace=namespace,
    )
    logger.debug(f"Derived pool {to_hex(ids.pool_id)[:16]} (fee {fee_rate_bp} bp)")
    return pool
