"""JoeCoin – Vault (CDP) types."""

from __future__ import annotations

from dataclasses import dataclass

from joecoin.core.fixed_point import FixedPoint
from joecoin.core.types import Account, AssetId


@dataclass(frozen=True)
class VaultPosition:
    """Collateral locked and debt issued for one owner.

    Attributes:
        owner: Account that exclusively owns the position.
        collateral_asset: Asset held as collateral.
        collateral_amount: Collateral in vault custody (fixed point).
        debt_amount: Outstanding debt in the stabilized token.
        opened_at: Clock time of the first deposit.
        updated_at: Clock time of the last accepted mutation.
    """

    owner: Account
    collateral_asset: AssetId
    collateral_amount: FixedPoint
    debt_amount: FixedPoint
    opened_at: int
    updated_at: int

    @property
    def is_empty(self) -> bool:
        return self.collateral_amount == 0 and self.debt_amount == 0
