"""
TOML-based configuration for the pool engine.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from cpamm_core.config import load_config
    cfg = load_config("cpamm.toml")
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib  # type: ignore[import]
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[import,no-redef]

from .fixed_point import MAX_RATE_BP
from .pairs import DEFAULT_NAMESPACE, asset_id_from_hex
from .slippage import DEFAULT_SLIPPAGE_BP


@dataclass
class ProtocolSection:
    """Initial protocol configuration record (hex identifiers)."""
    admin: str = ""
    fee_recipient: str = ""
    protocol_fee_bp: int = 0

    def is_set(self) -> bool:
        return bool(self.admin and self.fee_recipient)

    def admin_id(self) -> bytes:
        return asset_id_from_hex(self.admin)

    def fee_recipient_id(self) -> bytes:
        return asset_id_from_hex(self.fee_recipient)


@dataclass
class PoolsConfig:
    """Defaults used when quoting and creating pools."""
    default_slippage_bp: int = int(DEFAULT_SLIPPAGE_BP)
    max_fee_bp: int = MAX_RATE_BP


@dataclass
class IdentifiersConfig:
    """Identifier derivation settings.

    Every deployment that must agree on pool identifiers has to use the
    same ``namespace``.
    """
    namespace: str = DEFAULT_NAMESPACE


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None


@dataclass
class CpammConfig:
    """Top-level configuration container."""
    protocol: ProtocolSection = field(default_factory=ProtocolSection)
    pools: PoolsConfig = field(default_factory=PoolsConfig)
    identifiers: IdentifiersConfig = field(default_factory=IdentifiersConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _merge(dc: Any, raw: dict[str, Any]) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def load_config(path: str | None = None) -> CpammConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        CPAMM_ADMIN            -> protocol.admin
        CPAMM_FEE_RECIPIENT    -> protocol.fee_recipient
        CPAMM_PROTOCOL_FEE_BP  -> protocol.protocol_fee_bp
        CPAMM_SLIPPAGE_BP      -> pools.default_slippage_bp
        CPAMM_NAMESPACE        -> identifiers.namespace
        CPAMM_LOG_LEVEL        -> logging.level
        CPAMM_LOG_FMT          -> logging.format
    """
    cfg = CpammConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            for section_name, section_dc in [
                ("protocol", cfg.protocol),
                ("pools", cfg.pools),
                ("identifiers", cfg.identifiers),
                ("logging", cfg.logging),
            ]:
                if section_name in data:
                    _merge(section_dc, data[section_name])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("CPAMM_ADMIN"):
        cfg.protocol.admin = v
    if v := os.environ.get("CPAMM_FEE_RECIPIENT"):
        cfg.protocol.fee_recipient = v
    if v := os.environ.get("CPAMM_PROTOCOL_FEE_BP"):
        cfg.protocol.protocol_fee_bp = int(v)
    if v := os.environ.get("CPAMM_SLIPPAGE_BP"):
        cfg.pools.default_slippage_bp = int(v)
    if v := os.environ.get("CPAMM_NAMESPACE"):
        cfg.identifiers.namespace = v
    if v := os.environ.get("CPAMM_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("CPAMM_LOG_FMT"):
        cfg.logging.format = v

    return cfg
