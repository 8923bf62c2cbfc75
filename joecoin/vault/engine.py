"""JoeCoin – Vault (CDP ledger).

The vault lets an account lock an allow-listed collateral asset and
mint the stabilized token as debt against it, subject to::

    collateral_amount * price(collateral_asset) >= debt_amount * min_collateral_ratio

Every operation reads the oracle price at the instant of the call. The
price is never cached here, so collateral is always valued at the most
recently accepted sample. An asset without any accepted sample cannot
back debt: the views value it at zero and operations that depend on its
value fail with :class:`PriceUnavailable`.

Each operation validates all of its steps (solvency, collateral
transfer, debt mint or burn) before mutating any ledger, so a rejected
call leaves tokens and positions exactly as they were.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Set

from joecoin.core import fixed_point as fp
from joecoin.core.access import AccessControl
from joecoin.core.clock import Clock
from joecoin.core.errors import (
    CollateralAssetMismatch,
    InsufficientCollateral,
    InsufficientDebt,
    InvalidAmount,
    PositionNotFound,
    PriceUnavailable,
    UnsupportedCollateral,
)
from joecoin.core.fixed_point import FixedPoint
from joecoin.core.logging import get_logger
from joecoin.core.status import SystemStatus
from joecoin.core.types import Account, AssetId
from joecoin.events.log import EventLog
from joecoin.events.types import EventKind
from joecoin.ledger.token import TokenLedger
from joecoin.oracle.engine import PriceOracle
from joecoin.vault.types import VaultPosition


logger = get_logger(__name__)


def is_collateralized(
    collateral_amount: FixedPoint,
    debt_amount: FixedPoint,
    price: FixedPoint,
    min_collateral_ratio: FixedPoint,
) -> bool:
    """Return True when the collateral value covers the debt at the ratio.

    Both sides carry one factor of ``SCALE`` and are compared exactly.
    """

    return collateral_amount * price >= debt_amount * min_collateral_ratio


def _require_amount(amount: FixedPoint, name: str) -> FixedPoint:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidAmount(f"{name} must be a non-negative int, got {amount!r}")
    if amount > fp.MAX_VALUE:
        raise InvalidAmount(f"{name} exceeds 2**256-1")
    return amount


class Vault:
    """Per-account collateral/debt positions.

    Args:
        address: Account the vault uses as custodian and minter.
        clock: Time source for position and event timestamps.
        status: Shared pause flag and serialization lock.
        access: Principals; the collateral allow-list is governor-only.
        events: Event log receiving vault events.
        oracle: Price source for collateral valuation.
        debt_token: Ledger of the stabilized token minted as debt. The
            vault must be a minter on it.
        min_collateral_ratio: Minimum collateral value per unit of debt.
    """

    def __init__(
        self,
        address: Account,
        clock: Clock,
        status: SystemStatus,
        access: AccessControl,
        events: EventLog,
        oracle: PriceOracle,
        debt_token: TokenLedger,
        *,
        min_collateral_ratio: FixedPoint = fp.to_fixed("1.5"),
    ) -> None:
        if min_collateral_ratio <= 0:
            raise ValueError("min_collateral_ratio must be > 0")
        self._address = address
        self._clock = clock
        self._status = status
        self._access = access
        self._events = events
        self._oracle = oracle
        self._debt_token = debt_token
        self._min_collateral_ratio = min_collateral_ratio

        self._tokens: Dict[AssetId, TokenLedger] = {}
        self._supported: Set[AssetId] = set()
        self._positions: Dict[Account, VaultPosition] = {}

        logger.info(
            "Vault initialised: address=%s debt_asset=%s min_collateral_ratio=%s",
            address,
            debt_token.asset_id,
            fp.format_fixed(min_collateral_ratio),
        )

    # ======================================================================
    # Views
    # ======================================================================

    @property
    def address(self) -> Account:
        return self._address

    @property
    def min_collateral_ratio(self) -> FixedPoint:
        return self._min_collateral_ratio

    @property
    def debt_token(self) -> TokenLedger:
        return self._debt_token

    def is_supported(self, asset: AssetId) -> bool:
        return asset in self._supported

    def supported_assets(self) -> List[AssetId]:
        return sorted(self._supported)

    def position(self, owner: Account) -> Optional[VaultPosition]:
        return self._positions.get(owner)

    def positions(self) -> List[VaultPosition]:
        return [self._positions[owner] for owner in sorted(self._positions)]

    def total_debt(self) -> FixedPoint:
        return sum((p.debt_amount for p in self._positions.values()), 0)

    def total_collateral(self, asset: AssetId) -> FixedPoint:
        return sum(
            (p.collateral_amount for p in self._positions.values() if p.collateral_asset == asset),
            0,
        )

    def collateral_value(self, owner: Account) -> FixedPoint:
        """Value of ``owner``'s collateral at the current oracle price."""

        position = self._require_position(owner)
        price = self._sampled_price(position.collateral_asset)
        if price is None:
            return 0
        return fp.mul(position.collateral_amount, price)

    def collateral_ratio(self, owner: Account) -> Optional[FixedPoint]:
        """Collateral value divided by debt, or None for a debt-free position."""

        position = self._require_position(owner)
        if position.debt_amount == 0:
            return None
        return fp.div(self.collateral_value(owner), position.debt_amount)

    def max_mintable(self, owner: Account) -> FixedPoint:
        """Additional debt ``owner`` could mint at the current price."""

        position = self._require_position(owner)
        price = self._sampled_price(position.collateral_asset)
        if price is None:
            return 0
        capacity = (position.collateral_amount * price) // self._min_collateral_ratio
        return max(capacity - position.debt_amount, 0)

    # ======================================================================
    # Administration
    # ======================================================================

    def set_collateral_support(self, caller: Account, token: TokenLedger, supported: bool) -> None:
        """Add or remove ``token`` from the collateral allow-list (governor only).

        Removing an asset only blocks new deposits; existing positions
        can still be repaid and withdrawn.
        """

        with self._status.serialized("set_collateral_support"):
            self._access.require_governor(caller)
            asset = token.asset_id
            self._tokens[asset] = token
            if supported:
                self._supported.add(asset)
            else:
                self._supported.discard(asset)
            self._events.emit(
                EventKind.COLLATERAL_SUPPORT_CHANGED,
                actor=caller,
                timestamp=self._clock.now(),
                payload={"asset": asset, "supported": bool(supported)},
            )
            logger.info("Vault.set_collateral_support: asset=%s supported=%s", asset, supported)

    # ======================================================================
    # Positions
    # ======================================================================

    def create_vault(
        self,
        caller: Account,
        collateral_asset: AssetId,
        collateral_amount: FixedPoint,
        debt_amount: FixedPoint,
    ) -> VaultPosition:
        """Deposit collateral and mint debt against it.

        Opens a position on first deposit and tops it up afterwards; the
        collateralization check covers the resulting position.

        Raises:
            SystemPaused: While paused.
            InvalidAmount: If an amount is negative or both are zero.
            UnsupportedCollateral: If the asset is not allow-listed.
            CollateralAssetMismatch: If the caller's position holds a
                different asset.
            PriceUnavailable: If the oracle has no sample for the asset.
            InsufficientCollateral: If the resulting position would be
                under-collateralized at the current price.
            InsufficientBalance / InsufficientAllowance: If the collateral
                cannot be pulled from the caller.
            Unauthorized: If the vault is not a minter of the debt token.
            StabilizationBlocked: If the debt token's gate is closed.
        """

        with self._status.serialized("create_vault"):
            _require_amount(collateral_amount, "collateral_amount")
            _require_amount(debt_amount, "debt_amount")
            if collateral_amount == 0 and debt_amount == 0:
                raise InvalidAmount("create_vault needs a collateral deposit or a debt amount")
            if collateral_asset not in self._supported:
                raise UnsupportedCollateral(f"{collateral_asset} is not accepted as collateral")

            existing = self._positions.get(caller)
            if existing is not None and existing.collateral_asset != collateral_asset:
                raise CollateralAssetMismatch(
                    f"{caller} already holds a position in {existing.collateral_asset}"
                )

            new_collateral = (existing.collateral_amount if existing else 0) + collateral_amount
            new_debt = (existing.debt_amount if existing else 0) + debt_amount
            price = self._require_price(collateral_asset)
            if not is_collateralized(new_collateral, new_debt, price, self._min_collateral_ratio):
                logger.warning(
                    "Vault.create_vault rejected: owner=%s collateral=%s debt=%s price=%s",
                    caller,
                    fp.format_fixed(new_collateral),
                    fp.format_fixed(new_debt),
                    fp.format_fixed(price),
                )
                raise InsufficientCollateral(
                    f"collateral {fp.format_fixed(new_collateral)} {collateral_asset} at price "
                    f"{fp.format_fixed(price)} cannot back debt {fp.format_fixed(new_debt)} at ratio "
                    f"{fp.format_fixed(self._min_collateral_ratio)}"
                )

            collateral_token = self._tokens[collateral_asset]
            if collateral_amount > 0:
                collateral_token.check_transfer_from(self._address, caller, collateral_amount)
            if debt_amount > 0:
                self._debt_token.check_mint(self._address, debt_amount)

            # Validation complete; commit.
            if collateral_amount > 0:
                collateral_token.transfer_from(self._address, caller, self._address, collateral_amount)
            if debt_amount > 0:
                self._debt_token.mint(self._address, caller, debt_amount)

            now = self._clock.now()
            if existing is None:
                position = VaultPosition(
                    owner=caller,
                    collateral_asset=collateral_asset,
                    collateral_amount=new_collateral,
                    debt_amount=new_debt,
                    opened_at=now,
                    updated_at=now,
                )
                kind = EventKind.VAULT_CREATED
            else:
                position = replace(
                    existing,
                    collateral_amount=new_collateral,
                    debt_amount=new_debt,
                    updated_at=now,
                )
                kind = EventKind.VAULT_UPDATED
            self._positions[caller] = position

            self._events.emit(
                kind,
                actor=caller,
                timestamp=now,
                payload={
                    "collateral_asset": collateral_asset,
                    "collateral_deposited": collateral_amount,
                    "debt_minted": debt_amount,
                    "collateral_amount": new_collateral,
                    "debt_amount": new_debt,
                    "price": price,
                },
            )
            logger.info(
                "Vault.create_vault: owner=%s asset=%s +collateral=%s +debt=%s -> collateral=%s debt=%s",
                caller,
                collateral_asset,
                fp.format_fixed(collateral_amount),
                fp.format_fixed(debt_amount),
                fp.format_fixed(new_collateral),
                fp.format_fixed(new_debt),
            )
            return position

    def repay_debt(
        self,
        caller: Account,
        collateral_asset: AssetId,
        repay_amount: FixedPoint,
        withdraw_amount: FixedPoint,
    ) -> Optional[VaultPosition]:
        """Burn debt and release collateral in one atomic step.

        Zero on either side is a no-op for that side. The solvency check
        applies only when collateral leaves a position that keeps debt.
        Returns the updated position, or None when the position was closed.

        Raises:
            SystemPaused: While paused.
            PositionNotFound: If the caller has no position.
            CollateralAssetMismatch: If ``collateral_asset`` differs from
                the position's asset.
            InsufficientDebt: If ``repay_amount`` exceeds the debt.
            InsufficientCollateral: If ``withdraw_amount`` exceeds the
                collateral, or the remainder would not cover the remaining
                debt at the current price.
            PriceUnavailable: If collateral is withdrawn from an indebted
                position whose asset has no price sample.
            InsufficientBalance: If the caller cannot cover the burn.
        """

        with self._status.serialized("repay_debt"):
            _require_amount(repay_amount, "repay_amount")
            _require_amount(withdraw_amount, "withdraw_amount")
            position = self._require_position(caller)
            if position.collateral_asset != collateral_asset:
                raise CollateralAssetMismatch(
                    f"{caller}'s position holds {position.collateral_asset}, not {collateral_asset}"
                )
            if repay_amount == 0 and withdraw_amount == 0:
                return position

            if repay_amount > position.debt_amount:
                raise InsufficientDebt(
                    f"repay {fp.format_fixed(repay_amount)} exceeds debt "
                    f"{fp.format_fixed(position.debt_amount)}"
                )
            if withdraw_amount > position.collateral_amount:
                raise InsufficientCollateral(
                    f"withdraw {fp.format_fixed(withdraw_amount)} exceeds collateral "
                    f"{fp.format_fixed(position.collateral_amount)}"
                )

            remaining_debt = position.debt_amount - repay_amount
            remaining_collateral = position.collateral_amount - withdraw_amount
            price = self._sampled_price(collateral_asset)
            # A pure repayment only lowers debt, so an undercollateralized
            # position may still deleverage step by step.
            if withdraw_amount > 0 and remaining_debt > 0:
                price = self._require_price(collateral_asset)
                if not is_collateralized(remaining_collateral, remaining_debt, price, self._min_collateral_ratio):
                    logger.warning(
                        "Vault.repay_debt rejected: owner=%s remaining collateral=%s debt=%s price=%s",
                        caller,
                        fp.format_fixed(remaining_collateral),
                        fp.format_fixed(remaining_debt),
                        fp.format_fixed(price),
                    )
                    raise InsufficientCollateral(
                        f"remaining collateral {fp.format_fixed(remaining_collateral)} at price "
                        f"{fp.format_fixed(price)} cannot back debt {fp.format_fixed(remaining_debt)}"
                    )

            collateral_token = self._tokens[collateral_asset]
            if repay_amount > 0:
                self._debt_token.check_burn(self._address, caller, repay_amount)
            if withdraw_amount > 0:
                collateral_token.check_transfer(self._address, withdraw_amount)

            # Validation complete; commit.
            if repay_amount > 0:
                self._debt_token.burn(self._address, caller, repay_amount)
            if withdraw_amount > 0:
                collateral_token.transfer(self._address, caller, withdraw_amount)

            now = self._clock.now()
            updated = replace(
                position,
                collateral_amount=remaining_collateral,
                debt_amount=remaining_debt,
                updated_at=now,
            )
            closed = updated.is_empty
            if closed:
                del self._positions[caller]
            else:
                self._positions[caller] = updated

            self._events.emit(
                EventKind.VAULT_REPAID,
                actor=caller,
                timestamp=now,
                payload={
                    "collateral_asset": collateral_asset,
                    "debt_repaid": repay_amount,
                    "collateral_withdrawn": withdraw_amount,
                    "collateral_amount": remaining_collateral,
                    "debt_amount": remaining_debt,
                    "price": price,
                },
            )
            if closed:
                self._events.emit(
                    EventKind.VAULT_CLOSED,
                    actor=caller,
                    timestamp=now,
                    payload={"collateral_asset": collateral_asset},
                )
            logger.info(
                "Vault.repay_debt: owner=%s -debt=%s -collateral=%s -> collateral=%s debt=%s%s",
                caller,
                fp.format_fixed(repay_amount),
                fp.format_fixed(withdraw_amount),
                fp.format_fixed(remaining_collateral),
                fp.format_fixed(remaining_debt),
                " (closed)" if closed else "",
            )
            return None if closed else updated

    # ======================================================================
    # Internal
    # ======================================================================

    def _require_position(self, owner: Account) -> VaultPosition:
        position = self._positions.get(owner)
        if position is None:
            raise PositionNotFound(f"{owner} has no vault position")
        return position

    def _sampled_price(self, asset: AssetId) -> Optional[FixedPoint]:
        sample = self._oracle.latest_sample(asset)
        return sample.price if sample is not None else None

    def _require_price(self, asset: AssetId) -> FixedPoint:
        price = self._sampled_price(asset)
        if price is None:
            logger.warning("Vault: no price sample for collateral %s", asset)
            raise PriceUnavailable(asset)
        return price
