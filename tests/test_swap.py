"""Tests for the constant-product swap engine."""

from fractions import Fraction

import pytest

from conftest import ASSET_HI, ASSET_LO
from cpamm_core.errors import EmptyPool, InvalidAmount, SlippageExceeded, ZeroOutput
from cpamm_core.liquidity import add_liquidity
from cpamm_core.pool import create_pool
from cpamm_core.swap import SwapDirection, compute_amount_out, price_impact, quote_swap, swap
from cpamm_core.transfers import TransferKind


class TestSwapExample:
    def test_reference_trade(self, funded_pool):
        res = swap(funded_pool, 10_000, 0, SwapDirection.GREATER_TO_LESSER)
        assert res.fee_amount == 100
        # floor(9900 * 2_000_000 / 1_009_900)
        assert res.amount_out == 19_605
        assert res.amount_out == (9_900 * 2_000_000) // (1_000_000 + 9_900)

    def test_reference_trade_reserves(self, funded_pool):
        res = swap(funded_pool, 10_000, 0, SwapDirection.GREATER_TO_LESSER)
        assert res.pool.reserve_greater == 1_010_000   # fee stays in the pool
        assert res.pool.reserve_lesser == 2_000_000 - 19_605
        assert res.pool.claim_supply == funded_pool.claim_supply

    def test_reverse_direction(self, funded_pool):
        res = swap(funded_pool, 10_000, 0, SwapDirection.LESSER_TO_GREATER)
        assert res.fee_amount == 100
        assert res.amount_out == 4_925
        assert res.pool.reserve_greater == 1_000_000 - 4_925
        assert res.pool.reserve_lesser == 2_010_000

    def test_direction_from_string(self, funded_pool):
        res = swap(funded_pool, 10_000, 0, "greater_to_lesser")
        assert res.direction is SwapDirection.GREATER_TO_LESSER

    def test_zero_fee_pool(self):
        pool = add_liquidity(create_pool(ASSET_HI, ASSET_LO, 0), 1_000_000, 2_000_000).pool
        res = swap(pool, 10_000, 0, SwapDirection.GREATER_TO_LESSER)
        assert res.fee_amount == 0
        assert res.amount_out == 19_801

    def test_transfer_plan(self, funded_pool):
        res = swap(funded_pool, 10_000, 0, SwapDirection.LESSER_TO_GREATER)
        assert res.transfers[0].kind is TransferKind.DEPOSIT
        assert res.transfers[0].account == funded_pool.ids.vault_lesser_id
        assert res.transfers[0].amount == 10_000
        assert res.transfers[1].kind is TransferKind.RELEASE
        assert res.transfers[1].account == funded_pool.ids.vault_greater_id
        assert res.transfers[1].amount == 4_925


class TestSwapInvariants:
    def test_product_never_decreases(self, funded_pool):
        pool = funded_pool
        for amount in (1_000, 77_777, 5, 250_000, 3):
            for direction in SwapDirection:
                try:
                    res = swap(pool, amount, 0, direction)
                except ZeroOutput:
                    continue
                assert res.pool.invariant >= pool.invariant
                pool = res.pool

    def test_output_monotonic_in_input(self):
        last = 0
        for amount in (1, 2, 10, 100, 101, 1_000, 10_000, 10**6, 10**9, 10**12, 10**15):
            out, _ = compute_amount_out(amount, 1_000_000, 2_000_000, 100)
            assert out >= last
            assert out < 2_000_000
            last = out

    def test_huge_input_cannot_drain(self):
        pool = add_liquidity(create_pool(ASSET_HI, ASSET_LO, 30), 1_000, 1_000).pool
        res = swap(pool, 10**18, 0, SwapDirection.GREATER_TO_LESSER)
        assert res.amount_out == 999
        assert res.pool.reserve_lesser == 1


class TestSwapFailures:
    def test_slippage(self, funded_pool):
        with pytest.raises(SlippageExceeded) as exc_info:
            swap(funded_pool, 10_000, 19_606, SwapDirection.GREATER_TO_LESSER)
        assert exc_info.value.expected == 19_605

    def test_exact_minimum_passes(self, funded_pool):
        res = swap(funded_pool, 10_000, 19_605, SwapDirection.GREATER_TO_LESSER)
        assert res.amount_out == 19_605

    def test_dust_swap_yields_nothing(self, funded_pool):
        # fee ceil(1 * 100 / 10000) = 1 eats the whole input
        with pytest.raises(ZeroOutput):
            swap(funded_pool, 1, 0, SwapDirection.GREATER_TO_LESSER)

    def test_dust_swap_with_minimum_is_slippage(self, funded_pool):
        with pytest.raises(SlippageExceeded) as exc_info:
            swap(funded_pool, 1, 1, SwapDirection.GREATER_TO_LESSER)
        assert exc_info.value.expected == 0
        assert exc_info.value.minimum == 1

    def test_full_fee_tier_yields_nothing(self):
        pool = add_liquidity(create_pool(ASSET_HI, ASSET_LO, 10_000), 1_000, 1_000).pool
        with pytest.raises(ZeroOutput):
            swap(pool, 500, 0, SwapDirection.GREATER_TO_LESSER)

    def test_empty_pool(self, empty_pool):
        with pytest.raises(EmptyPool):
            swap(empty_pool, 10_000, 0, SwapDirection.GREATER_TO_LESSER)

    def test_zero_input(self, funded_pool):
        with pytest.raises(InvalidAmount):
            swap(funded_pool, 0, 0, SwapDirection.GREATER_TO_LESSER)

    def test_failed_swap_leaves_snapshot(self, funded_pool):
        before = funded_pool.to_dict()
        with pytest.raises(SlippageExceeded):
            swap(funded_pool, 10_000, 10**9, SwapDirection.GREATER_TO_LESSER)
        assert funded_pool.to_dict() == before


class TestQuoteSwap:
    def test_quote_matches_swap(self, funded_pool):
        q = quote_swap(funded_pool, 10_000, SwapDirection.GREATER_TO_LESSER, slippage_bp=50)
        assert q.amount_out == 19_605
        assert q.fee_amount == 100
        assert q.minimum_amount_out == 19_506

    def test_price_impact(self, funded_pool):
        q = quote_swap(funded_pool, 10_000, SwapDirection.GREATER_TO_LESSER)
        assert q.price_impact == Fraction(39_605, 2_020_000)
        assert q.price_impact_bp == 196

    def test_price_impact_zero_trade(self):
        assert price_impact(100, 200, 0, 0) == 0

    def test_price_impact_empty(self):
        with pytest.raises(EmptyPool):
            price_impact(0, 0, 10, 0)
