"""
Pair canonicalization and deterministic identifier derivation.

A pool is keyed by its canonical pair ``(asset_greater, asset_lesser)``
and its fee tier.  Asset identifiers are opaque 32-byte strings compared
byte-wise, so the same two assets always land on the same pool for a given
fee rate regardless of the order a caller names them in.

Identifiers for the pool record, its two reserve vaults and its claim
mint are SHA-256 digests over a namespace plus seed data:

    pool_id        = H(ns || "pool"  || greater || lesser || fee_le16)
    claim_mint_id  = H(ns || "mint"  || greater || lesser || fee_le16)
    vault_*_id     = H(ns || "vault" || pool_id || asset)

The namespace plays the role of a program id: two deployments with
different namespaces never share identifiers.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from .errors import IdenticalAssets, InvalidIdentifier, InvalidTokenOrder, SeedMismatch
from .fixed_point import check_rate_bp

ASSET_ID_BYTES: int = 32
DEFAULT_NAMESPACE: str = "cpamm"

POOL_SEED: bytes = b"pool"
MINT_SEED: bytes = b"mint"
VAULT_SEED: bytes = b"vault"


def check_asset_id(asset_id: bytes, name: str = "asset") -> bytes:
    """Ensure *asset_id* is a 32-byte identifier."""
    if not isinstance(asset_id, (bytes, bytearray)):
        raise InvalidIdentifier(f"{name} must be bytes, got {type(asset_id).__name__}")
    if len(asset_id) != ASSET_ID_BYTES:
        raise InvalidIdentifier(
            f"{name} must be {ASSET_ID_BYTES} bytes, got {len(asset_id)}"
        )
    return bytes(asset_id)


def asset_id_from_hex(value: str) -> bytes:
    """Parse a 64-character hex string into an asset identifier."""
    try:
        raw = bytes.fromhex(value.strip().removeprefix("0x"))
    except ValueError as exc:
        raise InvalidIdentifier(f"not a hex identifier: {value!r}") from exc
    return check_asset_id(raw)


def to_hex(identifier: bytes) -> str:
    return identifier.hex()


def fee_seed(fee_rate_bp: int) -> bytes:
    """Fee tier as seed bytes (u16 little-endian)."""
    return check_rate_bp(fee_rate_bp, "fee_rate_bp").to_bytes(2, "little")


def canonicalize(asset_x: bytes, asset_y: bytes) -> tuple[bytes, bytes]:
    """
    Order two assets as ``(greater, lesser)``.

    >>> a, b = b"\\x01" * 32, b"\\x02" * 32
    >>> canonicalize(a, b) == (b, a)
    True
    """
    asset_x = check_asset_id(asset_x, "asset_x")
    asset_y = check_asset_id(asset_y, "asset_y")
    if asset_x == asset_y:
        raise IdenticalAssets("a pool needs two distinct assets")
    if asset_x > asset_y:
        return asset_x, asset_y
    return asset_y, asset_x


def require_canonical(asset_greater: bytes, asset_lesser: bytes) -> None:
    """Fail unless the pair is already in canonical order; never reorders."""
    asset_greater = check_asset_id(asset_greater, "asset_greater")
    asset_lesser = check_asset_id(asset_lesser, "asset_lesser")
    if asset_greater == asset_lesser:
        raise IdenticalAssets("a pool needs two distinct assets")
    if asset_greater < asset_lesser:
        raise InvalidTokenOrder(
            "asset_greater must be byte-wise greater than asset_lesser"
        )


def _digest(namespace: str, *parts: bytes) -> bytes:
    h = hashlib.sha256(namespace.encode())
    for part in parts:
        h.update(part)
    return h.digest()


@dataclass(frozen=True)
class PoolIdentifiers:
    """Deterministic identifiers of one pool."""
    pool_id: bytes
    vault_greater_id: bytes
    vault_lesser_id: bytes
    claim_mint_id: bytes

    def to_dict(self) -> dict:
        return {
            "pool_id": to_hex(self.pool_id),
            "vault_greater_id": to_hex(self.vault_greater_id),
            "vault_lesser_id": to_hex(self.vault_lesser_id),
            "claim_mint_id": to_hex(self.claim_mint_id),
        }


def pool_seeds(asset_greater: bytes, asset_lesser: bytes,
               fee_rate_bp: int) -> tuple[bytes, bytes, bytes, bytes]:
    """Seed tuple the pool id is derived from."""
    return POOL_SEED, asset_greater, asset_lesser, fee_seed(fee_rate_bp)


def derive_pool_id(asset_greater: bytes, asset_lesser: bytes, fee_rate_bp: int,
                   namespace: str = DEFAULT_NAMESPACE) -> bytes:
    require_canonical(asset_greater, asset_lesser)
    return _digest(namespace, *pool_seeds(asset_greater, asset_lesser, fee_rate_bp))


def derive_identifiers(asset_greater: bytes, asset_lesser: bytes, fee_rate_bp: int,
                       namespace: str = DEFAULT_NAMESPACE) -> PoolIdentifiers:
    """
    Derive every identifier of the pool for a canonical pair and fee tier.

    Pure: the same inputs always give the same identifiers.
    """
    pool_id = derive_pool_id(asset_greater, asset_lesser, fee_rate_bp, namespace)
    fee = fee_seed(fee_rate_bp)
    return PoolIdentifiers(
        pool_id=pool_id,
        vault_greater_id=_digest(namespace, VAULT_SEED, pool_id, asset_greater),
        vault_lesser_id=_digest(namespace, VAULT_SEED, pool_id, asset_lesser),
        claim_mint_id=_digest(namespace, MINT_SEED, asset_greater, asset_lesser, fee),
    )


def verify_identifiers(supplied: PoolIdentifiers, asset_greater: bytes,
                       asset_lesser: bytes, fee_rate_bp: int,
                       namespace: str = DEFAULT_NAMESPACE) -> PoolIdentifiers:
    """Check caller-supplied identifiers against the derivation."""
    expected = derive_identifiers(asset_greater, asset_lesser, fee_rate_bp, namespace)
    for field_name in ("pool_id", "vault_greater_id", "vault_lesser_id", "claim_mint_id"):
        if getattr(supplied, field_name) != getattr(expected, field_name):
            raise SeedMismatch(f"{field_name} does not match its derivation")
    return expected
