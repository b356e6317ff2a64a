"""
Transfer plans handed to the token-transfer subsystem.

The engines never move balances themselves.  Each successful operation
returns a tuple of :class:`Transfer` entries describing what the caller's
runtime must do, and the whole tuple is applied atomically or not at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .pairs import to_hex


class TransferKind(str, Enum):
    DEPOSIT = "deposit"   # caller -> pool vault
    RELEASE = "release"   # pool vault -> caller
    MINT = "mint"         # new claim tokens -> caller
    BURN = "burn"         # caller's claim tokens destroyed


@dataclass(frozen=True)
class Transfer:
    """One balance movement: *amount* of whatever *account* holds."""
    kind: TransferKind
    account: bytes   # vault id for DEPOSIT/RELEASE, claim mint id for MINT/BURN
    amount: int

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "account": to_hex(self.account), "amount": self.amount}


def plan_to_dicts(plan: tuple[Transfer, ...]) -> list[dict]:
    return [t.to_dict() for t in plan]
