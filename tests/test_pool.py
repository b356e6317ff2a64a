"""Tests for the pool record and pool creation."""

import hashlib
from dataclasses import FrozenInstanceError, replace

import pytest

from conftest import ASSET_HI, ASSET_LO
from cpamm_core.errors import (
    IdenticalAssets,
    InvalidFeeRate,
    InvalidTokenOrder,
    InvariantViolation,
    SeedMismatch,
)
from cpamm_core.pairs import derive_identifiers
from cpamm_core.pool import PoolState, create_pool


class TestCreatePool:
    def test_starts_empty(self, empty_pool):
        assert empty_pool.reserve_greater == 0
        assert empty_pool.reserve_lesser == 0
        assert empty_pool.claim_supply == 0
        assert empty_pool.state is PoolState.EMPTY
        assert empty_pool.fee_rate_bp == 100

    def test_ids_match_derivation(self, empty_pool):
        assert empty_pool.ids == derive_identifiers(ASSET_HI, ASSET_LO, 100)

    def test_reversed_order_fails(self):
        with pytest.raises(InvalidTokenOrder):
            create_pool(ASSET_LO, ASSET_HI, 100)

    def test_identical_assets_fail(self):
        with pytest.raises(IdenticalAssets):
            create_pool(ASSET_HI, ASSET_HI, 100)

    @pytest.mark.parametrize("fee", [-1, 10_001])
    def test_fee_out_of_range(self, fee):
        with pytest.raises(InvalidFeeRate):
            create_pool(ASSET_HI, ASSET_LO, fee)

    def test_fee_bounds_accepted(self):
        assert create_pool(ASSET_HI, ASSET_LO, 0).fee_rate_bp == 0
        assert create_pool(ASSET_HI, ASSET_LO, 10_000).fee_rate_bp == 10_000

    def test_supplied_ids_verified(self):
        ids = derive_identifiers(ASSET_HI, ASSET_LO, 30)
        pool = create_pool(ASSET_HI, ASSET_LO, 30, supplied_ids=ids)
        assert pool.pool_id == ids.pool_id

    def test_supplied_ids_mismatch(self):
        ids = derive_identifiers(ASSET_HI, ASSET_LO, 30)
        with pytest.raises(SeedMismatch):
            create_pool(ASSET_HI, ASSET_LO, 100, supplied_ids=ids)

    def test_namespace_is_recorded(self):
        pool = create_pool(ASSET_HI, ASSET_LO, 30, namespace="testnet")
        assert pool.namespace == "testnet"
        assert pool.ids == derive_identifiers(ASSET_HI, ASSET_LO, 30, namespace="testnet")


class TestPoolRecord:
    def test_seeds_rederive_pool_id(self, empty_pool):
        h = hashlib.sha256(empty_pool.namespace.encode())
        for part in empty_pool.seeds():
            h.update(part)
        assert h.digest() == empty_pool.pool_id

    def test_is_frozen(self, empty_pool):
        with pytest.raises(FrozenInstanceError):
            empty_pool.reserve_greater = 5

    def test_funded_state(self, funded_pool):
        assert funded_pool.state is PoolState.FUNDED
        assert not funded_pool.is_empty

    def test_invariant_product(self, funded_pool):
        assert funded_pool.invariant == 1_000_000 * 2_000_000

    def test_reserves_for(self, funded_pool):
        assert funded_pool.reserves_for(True) == (1_000_000, 2_000_000)
        assert funded_pool.reserves_for(False) == (2_000_000, 1_000_000)

    def test_one_sided_reserves_rejected(self, empty_pool):
        with pytest.raises(InvariantViolation):
            empty_pool.with_balances(10, 0, 3)

    def test_supply_without_reserves_rejected(self, empty_pool):
        with pytest.raises(InvariantViolation):
            empty_pool.with_balances(0, 0, 1)

    def test_reserves_without_supply_rejected(self, empty_pool):
        with pytest.raises(InvariantViolation):
            empty_pool.with_balances(10, 10, 0)

    def test_check_catches_tampered_record(self, funded_pool):
        bad = replace(funded_pool, reserve_lesser=0)
        with pytest.raises(InvariantViolation):
            bad.check()

    def test_to_dict(self, funded_pool):
        d = funded_pool.to_dict()
        assert d["reserve_greater"] == 1_000_000
        assert d["reserve_lesser"] == 2_000_000
        assert d["state"] == "funded"
        assert d["asset_greater"] == "aa" * 32
        assert "vault_lesser_id" in d
