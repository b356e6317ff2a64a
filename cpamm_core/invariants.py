"""
Post-operation invariant checks for pool records.

Run by the pool manager after an engine computes a new record and before
it is committed:

  - Identity fields (assets, fee tier, identifiers) never change
  - Reserves are both zero or both positive
  - Claim supply is zero exactly when the pool is empty
  - Deposits only grow reserves and supply; withdrawals only shrink them
  - Swaps leave supply untouched and never decrease the reserve product

If any check fails the new record is discarded and the request rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import AMMError
from .pool import PoolRecord


class Operation(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    SWAP = "swap"


@dataclass(frozen=True)
class PoolSnapshot:
    """Key fields of a pool before an operation."""
    pool_id: bytes
    asset_greater: bytes
    asset_lesser: bytes
    fee_rate_bp: int
    reserve_greater: int
    reserve_lesser: int
    claim_supply: int

    @property
    def invariant(self) -> int:
        return self.reserve_greater * self.reserve_lesser


class PoolInvariantChecker:
    """
    Captures a snapshot of a pool before an operation and validates the
    record the operation produced.
    """

    def __init__(self):
        self._snapshot: PoolSnapshot | None = None

    def capture(self, pool: PoolRecord) -> None:
        self._snapshot = PoolSnapshot(
            pool_id=pool.pool_id,
            asset_greater=pool.asset_greater,
            asset_lesser=pool.asset_lesser,
            fee_rate_bp=pool.fee_rate_bp,
            reserve_greater=pool.reserve_greater,
            reserve_lesser=pool.reserve_lesser,
            claim_supply=pool.claim_supply,
        )

    def verify(self, pool: PoolRecord, operation: Operation) -> tuple[bool, str]:
        """Returns (passed, error_message)."""
        try:
            pool.check()
        except AMMError as exc:
            return False, str(exc)

        snap = self._snapshot
        if snap is None:
            return True, ""

        if (pool.pool_id, pool.asset_greater, pool.asset_lesser, pool.fee_rate_bp) != (
            snap.pool_id, snap.asset_greater, snap.asset_lesser, snap.fee_rate_bp
        ):
            return False, "pool identity changed"

        if operation is Operation.DEPOSIT:
            if (pool.reserve_greater < snap.reserve_greater
                    or pool.reserve_lesser < snap.reserve_lesser
                    or pool.claim_supply <= snap.claim_supply):
                return False, "deposit must grow reserves and supply"
        elif operation is Operation.WITHDRAW:
            if (pool.reserve_greater > snap.reserve_greater
                    or pool.reserve_lesser > snap.reserve_lesser
                    or pool.claim_supply >= snap.claim_supply):
                return False, "withdrawal must shrink reserves and supply"
        elif operation is Operation.SWAP:
            if pool.claim_supply != snap.claim_supply:
                return False, "swap changed claim supply"
            if pool.invariant < snap.invariant:
                return False, (
                    f"reserve product decreased: {pool.invariant} < {snap.invariant}"
                )

        return True, ""
