"""
In-memory pool registry and request router.

``PoolManager`` plays the part of the runtime around the engines: it keeps
the current record of every pool, routes each request to its engine,
checks the resulting record and only then commits it.  A request that
raises leaves every stored record exactly as it was.

Requests against one manager must be serialised by the caller; records of
different pools are independent.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from .errors import (
    AMMError,
    InvalidFeeRate,
    InvariantViolation,
    NotInitialized,
    PoolAlreadyExists,
    PoolNotFound,
)
from .fixed_point import MAX_RATE_BP, check_rate_bp
from .invariants import Operation, PoolInvariantChecker
from .liquidity import DepositResult, add_liquidity
from .pairs import DEFAULT_NAMESPACE, PoolIdentifiers, canonicalize, derive_pool_id, to_hex
from .pool import PoolRecord, create_pool
from .protocol_config import ProtocolConfig, initialize_config, update_config
from .swap import SwapDirection, SwapResult, swap
from .withdrawal import WithdrawalResult, remove_liquidity

logger = logging.getLogger("cpamm.manager")

R = TypeVar("R", DepositResult, WithdrawalResult, SwapResult)


class PoolManager:
    """Manages all pools and the protocol configuration."""

    def __init__(self, namespace: str = DEFAULT_NAMESPACE,
                 protocol_config: Optional[ProtocolConfig] = None,
                 max_fee_bp: int = MAX_RATE_BP):
        self.namespace = namespace
        self.max_fee_bp = check_rate_bp(max_fee_bp, "max_fee_bp")
        self.protocol_config = protocol_config
        self.pools: dict[bytes, PoolRecord] = {}

    @classmethod
    def from_config(cls, cfg) -> "PoolManager":
        """Build a manager from a loaded :class:`~cpamm_core.config.CpammConfig`."""
        mgr = cls(namespace=cfg.identifiers.namespace, max_fee_bp=cfg.pools.max_fee_bp)
        if cfg.protocol.is_set():
            mgr.initialize_config(
                cfg.protocol.admin_id(),
                cfg.protocol.fee_recipient_id(),
                cfg.protocol.protocol_fee_bp,
            )
        return mgr

    # ── lookups ──────────────────────────────────────────────────

    def get_pool(self, pool_id: bytes) -> PoolRecord:
        pool = self.pools.get(pool_id)
        if pool is None:
            raise PoolNotFound(f"no pool {to_hex(pool_id)}")
        return pool

    def find_pool(self, asset_x: bytes, asset_y: bytes,
                  fee_rate_bp: int) -> PoolRecord | None:
        """Look a pool up by an unordered pair and fee tier."""
        greater, lesser = canonicalize(asset_x, asset_y)
        return self.pools.get(derive_pool_id(greater, lesser, fee_rate_bp, self.namespace))

    # ── pool lifecycle ───────────────────────────────────────────

    def create_pool(self, asset_greater: bytes, asset_lesser: bytes,
                    fee_rate_bp: int,
                    supplied_ids: PoolIdentifiers | None = None) -> PoolRecord:
        try:
            check_rate_bp(fee_rate_bp, "fee_rate_bp")
            if fee_rate_bp > self.max_fee_bp:
                raise InvalidFeeRate(
                    f"fee tier {fee_rate_bp}bp above the {self.max_fee_bp}bp limit"
                )
            pool = create_pool(asset_greater, asset_lesser, fee_rate_bp,
                               supplied_ids=supplied_ids, namespace=self.namespace)
            if pool.pool_id in self.pools:
                raise PoolAlreadyExists(f"pool {to_hex(pool.pool_id)} already exists")
        except AMMError as exc:
            logger.warning(f"CreatePool rejected: {type(exc).__name__}: {exc}")
            raise
        self.pools[pool.pool_id] = pool
        logger.info(f"Pool created {to_hex(pool.pool_id)[:16]} fee={fee_rate_bp}bp")
        return pool

    def add_liquidity(self, pool_id: bytes, amount_greater_desired: int,
                      amount_lesser_desired: int, amount_greater_min: int = 0,
                      amount_lesser_min: int = 0) -> DepositResult:
        return self._apply(
            pool_id, Operation.DEPOSIT,
            lambda pool: add_liquidity(pool, amount_greater_desired, amount_lesser_desired,
                                       amount_greater_min, amount_lesser_min),
        )

    def remove_liquidity(self, pool_id: bytes, claim_amount: int,
                         amount_greater_min: int = 0,
                         amount_lesser_min: int = 0) -> WithdrawalResult:
        return self._apply(
            pool_id, Operation.WITHDRAW,
            lambda pool: remove_liquidity(pool, claim_amount,
                                          amount_greater_min, amount_lesser_min),
        )

    def swap(self, pool_id: bytes, amount_in: int, minimum_amount_out: int,
             direction: SwapDirection) -> SwapResult:
        return self._apply(
            pool_id, Operation.SWAP,
            lambda pool: swap(pool, amount_in, minimum_amount_out, direction),
        )

    def _apply(self, pool_id: bytes, operation: Operation,
               engine: Callable[[PoolRecord], R]) -> R:
        pool = self.get_pool(pool_id)
        context = {"pool": to_hex(pool_id)[:16], "operation": operation.value}
        checker = PoolInvariantChecker()
        checker.capture(pool)
        try:
            result = engine(pool)
            passed, msg = checker.verify(result.pool, operation)
            if not passed:
                raise InvariantViolation(msg)
        except AMMError as exc:
            logger.warning(
                f"{operation.value} on {to_hex(pool_id)[:16]} rejected: "
                f"{type(exc).__name__}: {exc}",
                extra=context,
            )
            raise
        self.pools[pool_id] = result.pool
        logger.info(
            f"{operation.value} on {to_hex(pool_id)[:16]} applied: "
            f"reserves=({result.pool.reserve_greater}, {result.pool.reserve_lesser}) "
            f"supply={result.pool.claim_supply}",
            extra=context,
        )
        return result

    # ── protocol configuration ───────────────────────────────────

    def initialize_config(self, admin: bytes, fee_recipient: bytes,
                          protocol_fee_bp: int) -> ProtocolConfig:
        self.protocol_config = initialize_config(
            self.protocol_config, admin, fee_recipient, protocol_fee_bp
        )
        return self.protocol_config

    def update_config(self, caller: bytes, new_fee_recipient: bytes | None = None,
                      new_protocol_fee_bp: int | None = None) -> ProtocolConfig:
        if self.protocol_config is None:
            raise NotInitialized("protocol configuration is not initialised")
        try:
            self.protocol_config = update_config(
                self.protocol_config, caller, new_fee_recipient, new_protocol_fee_bp
            )
        except AMMError as exc:
            logger.warning(f"UpdateConfig rejected: {type(exc).__name__}: {exc}")
            raise
        return self.protocol_config

    # ── reporting ────────────────────────────────────────────────

    def get_all_pools(self) -> list[dict]:
        return [p.to_dict() for p in self.pools.values()]
