"""JoeCoin – thin token ledger.

An ERC-20-like balance book for a single asset. Only ``mint`` and
``burn`` are gated: both require the owner or a granted minter (the
vault, the stabilizer), and ``mint`` additionally requires the attached
:class:`StabilizationGate` to be open while stabilization is enabled.

Every mutating method has a validation-only ``check_*`` counterpart so
that composite operations (the vault) can validate all of their steps
before mutating any of them.
"""

from __future__ import annotations

from typing import Dict, Optional, Set, Tuple

from joecoin.core import fixed_point as fp
from joecoin.core.access import AccessControl
from joecoin.core.clock import Clock
from joecoin.core.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    Unauthorized,
)
from joecoin.core.fixed_point import FixedPoint
from joecoin.core.logging import get_logger
from joecoin.core.status import SystemStatus
from joecoin.core.types import Account, AssetId
from joecoin.events.log import EventLog
from joecoin.events.types import EventKind
from joecoin.stability.gate import StabilizationGate


logger = get_logger(__name__)


def _require_amount(amount: FixedPoint, name: str = "amount") -> FixedPoint:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidAmount(f"{name} must be a non-negative int, got {amount!r}")
    if amount > fp.MAX_VALUE:
        raise InvalidAmount(f"{name} exceeds 2**256-1")
    return amount


class TokenLedger:
    """Balances, allowances and supply of one asset.

    Args:
        asset_id: Identifier of the asset (also its oracle key).
        clock: Time source for event timestamps.
        status: Shared pause flag and serialization lock.
        access: Principals; the owner manages minters, governors manage
            the stabilization gate.
        events: Event log receiving token events.
        gate: Optional stabilization gate consulted by :meth:`mint`.
        stabilization_enabled: Whether the gate is enforced.
    """

    def __init__(
        self,
        asset_id: AssetId,
        clock: Clock,
        status: SystemStatus,
        access: AccessControl,
        events: EventLog,
        *,
        gate: Optional[StabilizationGate] = None,
        stabilization_enabled: bool = False,
    ) -> None:
        self._asset_id = asset_id
        self._clock = clock
        self._status = status
        self._access = access
        self._events = events
        self._gate = gate
        self._stabilization_enabled = stabilization_enabled

        self._balances: Dict[Account, FixedPoint] = {}
        self._allowances: Dict[Tuple[Account, Account], FixedPoint] = {}
        self._total_supply: FixedPoint = 0
        self._minters: Set[Account] = set()

    # ======================================================================
    # Views
    # ======================================================================

    @property
    def asset_id(self) -> AssetId:
        return self._asset_id

    @property
    def total_supply(self) -> FixedPoint:
        return self._total_supply

    @property
    def stabilization_enabled(self) -> bool:
        return self._stabilization_enabled

    @property
    def gate(self) -> Optional[StabilizationGate]:
        return self._gate

    def balance_of(self, account: Account) -> FixedPoint:
        return self._balances.get(account, 0)

    def allowance(self, owner: Account, spender: Account) -> FixedPoint:
        return self._allowances.get((owner, spender), 0)

    def is_minter(self, account: Account) -> bool:
        return account == self._access.owner or account in self._minters

    # ======================================================================
    # Validation
    # ======================================================================

    def check_transfer(self, sender: Account, amount: FixedPoint) -> None:
        _require_amount(amount)
        if self.balance_of(sender) < amount:
            raise InsufficientBalance(
                f"{sender} holds {self.balance_of(sender)} {self._asset_id}, needs {amount}"
            )

    def check_transfer_from(self, spender: Account, owner: Account, amount: FixedPoint) -> None:
        self.check_transfer(owner, amount)
        if spender != owner and self.allowance(owner, spender) < amount:
            raise InsufficientAllowance(
                f"{spender} may spend {self.allowance(owner, spender)} of {owner}'s "
                f"{self._asset_id}, needs {amount}"
            )

    def check_mint(self, caller: Account, amount: FixedPoint) -> None:
        """Validate a mint without performing it.

        Raises:
            Unauthorized: If ``caller`` is neither owner nor minter.
            InvalidAmount: If ``amount`` is invalid or supply would overflow.
            StabilizationBlocked: If stabilization is enabled and the gate
                is closed.
        """

        if not self.is_minter(caller):
            raise Unauthorized(caller, f"{self._asset_id} minter")
        _require_amount(amount)
        if self._total_supply + amount > fp.MAX_VALUE:
            raise InvalidAmount("mint would overflow total supply")
        if self._stabilization_enabled and self._gate is not None:
            self._gate.require_can_mint()

    def check_burn(self, caller: Account, account: Account, amount: FixedPoint) -> None:
        if not self.is_minter(caller):
            raise Unauthorized(caller, f"{self._asset_id} minter")
        self.check_transfer(account, amount)

    # ======================================================================
    # Transfers
    # ======================================================================

    def transfer(self, caller: Account, to: Account, amount: FixedPoint) -> None:
        with self._status.serialized("transfer"):
            self.check_transfer(caller, amount)
            self._move(caller, to, amount)
            self._emit(EventKind.TOKEN_TRANSFERRED, caller, {"from": caller, "to": to, "amount": amount})

    def approve(self, caller: Account, spender: Account, amount: FixedPoint) -> None:
        with self._status.serialized("approve"):
            _require_amount(amount)
            self._allowances[(caller, spender)] = amount
            self._emit(EventKind.TOKEN_APPROVED, caller, {"spender": spender, "amount": amount})

    def transfer_from(self, caller: Account, owner: Account, to: Account, amount: FixedPoint) -> None:
        """Move ``amount`` from ``owner`` to ``to`` using ``caller``'s allowance."""

        with self._status.serialized("transfer_from"):
            self.check_transfer_from(caller, owner, amount)
            if caller != owner:
                self._allowances[(owner, caller)] = self.allowance(owner, caller) - amount
            self._move(owner, to, amount)
            self._emit(
                EventKind.TOKEN_TRANSFERRED,
                caller,
                {"from": owner, "to": to, "amount": amount},
            )

    # ======================================================================
    # Supply
    # ======================================================================

    def mint(self, caller: Account, account: Account, amount: FixedPoint) -> None:
        """Create ``amount`` new tokens for ``account``.

        Raises:
            SystemPaused: While paused.
            Unauthorized: If ``caller`` is neither owner nor minter.
            StabilizationBlocked: If the stabilization gate is closed.
        """

        with self._status.serialized("mint"):
            self.check_mint(caller, amount)
            self._balances[account] = self.balance_of(account) + amount
            self._total_supply += amount
            self._emit(EventKind.TOKEN_MINTED, caller, {"account": account, "amount": amount})
            logger.info(
                "TokenLedger.mint: asset=%s account=%s amount=%s by=%s",
                self._asset_id,
                account,
                fp.format_fixed(amount),
                caller,
            )

    def burn(self, caller: Account, account: Account, amount: FixedPoint) -> None:
        with self._status.serialized("burn"):
            self.check_burn(caller, account, amount)
            self._balances[account] = self.balance_of(account) - amount
            self._total_supply -= amount
            self._emit(EventKind.TOKEN_BURNED, caller, {"account": account, "amount": amount})
            logger.info(
                "TokenLedger.burn: asset=%s account=%s amount=%s by=%s",
                self._asset_id,
                account,
                fp.format_fixed(amount),
                caller,
            )

    # ======================================================================
    # Administration
    # ======================================================================

    def grant_minter(self, caller: Account, account: Account) -> None:
        with self._status.serialized("grant_minter"):
            self._access.require_owner(caller)
            self._minters.add(account)
            logger.info("TokenLedger.grant_minter: asset=%s minter=%s", self._asset_id, account)

    def revoke_minter(self, caller: Account, account: Account) -> None:
        with self._status.serialized("revoke_minter"):
            self._access.require_owner(caller)
            self._minters.discard(account)

    def set_stabilizer(self, caller: Account, gate: Optional[StabilizationGate]) -> None:
        with self._status.serialized("set_stabilizer"):
            self._access.require_governor(caller)
            self._gate = gate

    def toggle_stabilization(self, caller: Account, enabled: bool) -> None:
        """Enable or disable gate enforcement on :meth:`mint` (governor only)."""

        with self._status.serialized("toggle_stabilization"):
            self._access.require_governor(caller)
            self._stabilization_enabled = bool(enabled)
            self._emit(EventKind.STABILIZATION_TOGGLED, caller, {"enabled": self._stabilization_enabled})
            logger.info(
                "TokenLedger.toggle_stabilization: asset=%s enabled=%s",
                self._asset_id,
                self._stabilization_enabled,
            )

    # ======================================================================
    # Internal
    # ======================================================================

    def _move(self, sender: Account, to: Account, amount: FixedPoint) -> None:
        self._balances[sender] = self.balance_of(sender) - amount
        self._balances[to] = self.balance_of(to) + amount

    def _emit(self, kind: EventKind, actor: Account, payload: dict) -> None:
        payload = {"asset": self._asset_id, **payload}
        self._events.emit(kind, actor=actor, timestamp=self._clock.now(), payload=payload)
