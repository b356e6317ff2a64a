"""
Protocol configuration record.

A singleton holding the admin identity, the protocol fee recipient and the
protocol fee rate.  The engines only read it; it is passed explicitly
wherever it is needed rather than living in module state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from .errors import AlreadyInitialized, InvalidAuthority
from .fixed_point import check_rate_bp
from .pairs import check_asset_id, to_hex

logger = logging.getLogger("cpamm.protocol_config")


@dataclass(frozen=True)
class ProtocolConfig:
    admin: bytes
    fee_recipient: bytes
    protocol_fee_bp: int

    def to_dict(self) -> dict:
        return {
            "admin": to_hex(self.admin),
            "fee_recipient": to_hex(self.fee_recipient),
            "protocol_fee_bp": self.protocol_fee_bp,
        }


def initialize_config(existing: Optional[ProtocolConfig], admin: bytes,
                      fee_recipient: bytes, protocol_fee_bp: int) -> ProtocolConfig:
    """Create the record; fails if one already exists."""
    if existing is not None:
        raise AlreadyInitialized("protocol configuration already exists")
    cfg = ProtocolConfig(
        admin=check_asset_id(admin, "admin"),
        fee_recipient=check_asset_id(fee_recipient, "fee_recipient"),
        protocol_fee_bp=check_rate_bp(protocol_fee_bp, "protocol_fee_bp"),
    )
    logger.info(f"Protocol config initialised (admin {to_hex(cfg.admin)[:16]})")
    return cfg


def update_config(config: ProtocolConfig, caller: bytes,
                  new_fee_recipient: Optional[bytes] = None,
                  new_protocol_fee_bp: Optional[int] = None) -> ProtocolConfig:
    """
    Return an updated copy of *config*.  Only ``config.admin`` may update;
    a field left as ``None`` keeps its current value.
    """
    if caller != config.admin:
        raise InvalidAuthority("only the configuration admin may update it")

    changes = {}
    if new_fee_recipient is not None:
        changes["fee_recipient"] = check_asset_id(new_fee_recipient, "fee_recipient")
    if new_protocol_fee_bp is not None:
        changes["protocol_fee_bp"] = check_rate_bp(new_protocol_fee_bp, "protocol_fee_bp")

    updated = replace(config, **changes)
    logger.info(f"Protocol config updated: {sorted(changes) or 'no changes'}")
    return updated
