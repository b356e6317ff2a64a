#!/usr/bin/env python3
"""
Pool quoting tool: computes what a request would do against given
reserves, without touching any state.

Usage:
    python run_pool.py derive --asset-x <hex> --asset-y <hex> --fee 30
    python run_pool.py swap --reserve-in 1000000 --reserve-out 2000000 \\
                            --fee 100 --amount-in 10000
    python run_pool.py deposit --reserve-greater 100 --reserve-lesser 400 \\
                               --supply 200 --greater 10 --lesser 50
    python run_pool.py withdraw --reserve-greater 100 --reserve-lesser 400 \\
                                --supply 200 --claim 50

All commands print JSON on stdout.  ``--config`` points at a cpamm.toml
whose namespace, default slippage and logging settings are used.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from cpamm_core.config import load_config
from cpamm_core.errors import AMMError
from cpamm_core.liquidity import quote_deposit
from cpamm_core.logging_config import setup_logging
from cpamm_core.pairs import asset_id_from_hex, canonicalize, derive_identifiers, to_hex
from cpamm_core.pool import PoolRecord, create_pool
from cpamm_core.swap import SwapDirection, quote_swap
from cpamm_core.withdrawal import quote_withdrawal

logger = logging.getLogger("cpamm.cli")

# Placeholder pair for quotes that only depend on reserves.
_QUOTE_GREATER = b"\x02" * 32
_QUOTE_LESSER = b"\x01" * 32


def _snapshot(fee: int, reserve_greater: int, reserve_lesser: int,
              supply: int, namespace: str) -> PoolRecord:
    pool = create_pool(_QUOTE_GREATER, _QUOTE_LESSER, fee, namespace=namespace)
    return pool.with_balances(reserve_greater, reserve_lesser, supply)


def _cmd_derive(args, cfg) -> dict:
    greater, lesser = canonicalize(asset_id_from_hex(args.asset_x),
                                   asset_id_from_hex(args.asset_y))
    ids = derive_identifiers(greater, lesser, args.fee, cfg.identifiers.namespace)
    out = {"asset_greater": to_hex(greater), "asset_lesser": to_hex(lesser),
           "fee_rate_bp": args.fee}
    out.update(ids.to_dict())
    return out


def _cmd_swap(args, cfg) -> dict:
    # supply only has to be consistent with the reserves here
    supply = 1 if args.reserve_in and args.reserve_out else 0
    pool = _snapshot(args.fee, args.reserve_in, args.reserve_out, supply,
                     cfg.identifiers.namespace)
    q = quote_swap(pool, args.amount_in, SwapDirection.GREATER_TO_LESSER,
                   _slippage(args, cfg))
    return {
        "amount_out": q.amount_out,
        "fee_amount": q.fee_amount,
        "minimum_amount_out": q.minimum_amount_out,
        "price_impact_bp": q.price_impact_bp,
    }


def _cmd_deposit(args, cfg) -> dict:
    pool = _snapshot(0, args.reserve_greater, args.reserve_lesser, args.supply,
                     cfg.identifiers.namespace)
    q = quote_deposit(pool, args.greater, args.lesser, _slippage(args, cfg))
    return vars(q).copy()


def _cmd_withdraw(args, cfg) -> dict:
    pool = _snapshot(0, args.reserve_greater, args.reserve_lesser, args.supply,
                     cfg.identifiers.namespace)
    q = quote_withdrawal(pool, args.claim, _slippage(args, cfg))
    return vars(q).copy()


def _slippage(args, cfg) -> int:
    if args.slippage is not None:
        return args.slippage
    return cfg.pools.default_slippage_bp


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Constant-product pool quotes")
    p.add_argument("--config", default=None, help="Path to cpamm.toml config file")
    sub = p.add_subparsers(dest="command", required=True)

    d = sub.add_parser("derive", help="Canonical pair and pool identifiers")
    d.add_argument("--asset-x", required=True, help="32-byte asset id (hex)")
    d.add_argument("--asset-y", required=True, help="32-byte asset id (hex)")
    d.add_argument("--fee", type=int, required=True, help="Fee tier in basis points")
    d.set_defaults(handler=_cmd_derive)

    s = sub.add_parser("swap", help="Quote an exact-in swap")
    s.add_argument("--reserve-in", type=int, required=True)
    s.add_argument("--reserve-out", type=int, required=True)
    s.add_argument("--fee", type=int, required=True)
    s.add_argument("--amount-in", type=int, required=True)
    s.add_argument("--slippage", type=int, default=None, help="Tolerance in basis points")
    s.set_defaults(handler=_cmd_swap)

    for name, handler, extra in (
        ("deposit", _cmd_deposit, ("--greater", "--lesser")),
        ("withdraw", _cmd_withdraw, ("--claim",)),
    ):
        c = sub.add_parser(name, help=f"Quote a {name}")
        c.add_argument("--reserve-greater", type=int, required=True)
        c.add_argument("--reserve-lesser", type=int, required=True)
        c.add_argument("--supply", type=int, required=True)
        for flag in extra:
            c.add_argument(flag, type=int, required=True)
        c.add_argument("--slippage", type=int, default=None)
        c.set_defaults(handler=handler)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_config(args.config)
    setup_logging(cfg.logging.level, cfg.logging.format, cfg.logging.file)

    try:
        result = args.handler(args, cfg)
    except AMMError as exc:
        logger.error(f"{args.command} failed: {type(exc).__name__}: {exc}")
        print(json.dumps({"error": type(exc).__name__, "message": str(exc)}))
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
