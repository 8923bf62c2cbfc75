"""
JoeCoin: Tests for the Token Ledger

Test suite for ``joecoin.ledger.token``. Covers:
- Transfers, allowances and supply accounting
- Minter role and the stabilization gate on mint
- Validation-only checks leaving state untouched
"""

from __future__ import annotations

import pytest

from joecoin.core import fixed_point as fp
from joecoin.core.access import AccessControl
from joecoin.core.clock import ManualClock
from joecoin.core.config import RiskEngineConfig
from joecoin.core.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    StabilizationBlocked,
    SystemPaused,
    Unauthorized,
)
from joecoin.core.status import SystemStatus
from joecoin.events.log import EventLog
from joecoin.events.types import EventKind
from joecoin.ledger import TokenLedger
from joecoin.oracle.engine import PriceOracle
from joecoin.risk import ParameterBounds, RiskEngine, RiskParameters
from joecoin.stability import StabilizationGate


F = fp.to_fixed


def _make_ledger(with_gate: bool = False, enabled: bool = False):  # type: ignore[no-untyped-def]
    clock = ManualClock(start=1_000)
    status = SystemStatus()
    access = AccessControl("owner", "gov", status=status)
    events = EventLog()
    oracle = PriceOracle(clock, status, access, events)
    gate = None
    if with_gate:
        config = RiskEngineConfig()
        engine = RiskEngine(
            clock,
            status,
            access,
            events,
            RiskParameters.from_config(config),
            ParameterBounds.from_config(config),
        )
        gate = StabilizationGate(engine, oracle, "JOE")
    ledger = TokenLedger("JOE", clock, status, access, events, gate=gate, stabilization_enabled=enabled)
    return ledger, oracle, status, events


class TestTransfers:
    def test_mint_transfer_and_supply(self) -> None:
        ledger, _, _, events = _make_ledger()

        ledger.mint("owner", "alice", F("100"))
        ledger.transfer("alice", "bob", F("40"))

        assert ledger.balance_of("alice") == F("60")
        assert ledger.balance_of("bob") == F("40")
        assert ledger.total_supply == F("100")
        minted = events.last(EventKind.TOKEN_MINTED)
        assert minted is not None
        assert minted.payload == {"asset": "JOE", "account": "alice", "amount": F("100")}

    def test_transfer_beyond_balance_fails_atomically(self) -> None:
        ledger, _, _, events = _make_ledger()
        ledger.mint("owner", "alice", F("10"))
        count = len(events)

        with pytest.raises(InsufficientBalance):
            ledger.transfer("alice", "bob", F("10.000000000000000001"))

        assert ledger.balance_of("alice") == F("10")
        assert ledger.balance_of("bob") == 0
        assert len(events) == count

    def test_transfer_from_consumes_allowance(self) -> None:
        ledger, _, _, _ = _make_ledger()
        ledger.mint("owner", "alice", F("10"))
        ledger.approve("alice", "vault", F("6"))

        with pytest.raises(InsufficientAllowance):
            ledger.transfer_from("vault", "alice", "vault", F("7"))

        ledger.transfer_from("vault", "alice", "vault", F("6"))
        assert ledger.allowance("alice", "vault") == 0
        assert ledger.balance_of("vault") == F("6")

    def test_self_transfer_from_needs_no_allowance(self) -> None:
        ledger, _, _, _ = _make_ledger()
        ledger.mint("owner", "alice", F("10"))
        ledger.transfer_from("alice", "alice", "bob", F("1"))
        assert ledger.balance_of("bob") == F("1")

    @pytest.mark.parametrize("amount", [-1, True, 1.5, 2**256])
    def test_invalid_amounts(self, amount: object) -> None:
        ledger, _, _, _ = _make_ledger()
        with pytest.raises(InvalidAmount):
            ledger.approve("alice", "bob", amount)  # type: ignore[arg-type]

    def test_paused_ledger_rejects_transfers(self) -> None:
        ledger, _, status, _ = _make_ledger()
        ledger.mint("owner", "alice", F("1"))
        status.set_paused(True)
        with pytest.raises(SystemPaused):
            ledger.transfer("alice", "bob", F("1"))
        with pytest.raises(SystemPaused):
            ledger.mint("owner", "alice", F("1"))
        assert ledger.balance_of("alice") == F("1")


class TestSupplyRoles:
    def test_only_minters_mint_and_burn(self) -> None:
        ledger, _, _, _ = _make_ledger()
        with pytest.raises(Unauthorized):
            ledger.mint("alice", "alice", F("1"))

        ledger.grant_minter("owner", "vault")
        assert ledger.is_minter("vault")
        ledger.mint("vault", "alice", F("5"))
        ledger.burn("vault", "alice", F("2"))
        assert ledger.total_supply == F("3")

        ledger.revoke_minter("owner", "vault")
        with pytest.raises(Unauthorized):
            ledger.burn("vault", "alice", F("1"))

    def test_grant_minter_requires_owner(self) -> None:
        ledger, _, _, _ = _make_ledger()
        with pytest.raises(Unauthorized):
            ledger.grant_minter("gov", "vault")

    def test_burn_beyond_balance(self) -> None:
        ledger, _, _, _ = _make_ledger()
        ledger.mint("owner", "alice", F("1"))
        with pytest.raises(InsufficientBalance):
            ledger.burn("owner", "alice", F("2"))
        assert ledger.total_supply == F("1")


class TestStabilization:
    def test_gate_ignored_while_disabled(self) -> None:
        ledger, oracle, _, _ = _make_ledger(with_gate=True, enabled=False)
        oracle.submit_price("feeder", "JOE", F("2"))
        ledger.mint("owner", "alice", F("1"))
        assert ledger.total_supply == F("1")

    def test_enabled_gate_blocks_mint(self) -> None:
        ledger, oracle, _, events = _make_ledger(with_gate=True)
        ledger.toggle_stabilization("gov", True)
        oracle.submit_price("feeder", "JOE", F("2"))

        with pytest.raises(StabilizationBlocked):
            ledger.mint("owner", "alice", F("1"))
        with pytest.raises(StabilizationBlocked):
            ledger.check_mint("owner", F("1"))

        assert ledger.total_supply == 0
        assert events.last(EventKind.TOKEN_MINTED) is None
        toggled = events.last(EventKind.STABILIZATION_TOGGLED)
        assert toggled is not None
        assert toggled.payload["enabled"] is True

    def test_burn_not_gated(self) -> None:
        ledger, oracle, _, _ = _make_ledger(with_gate=True)
        ledger.mint("owner", "alice", F("1"))
        ledger.toggle_stabilization("owner", True)
        oracle.submit_price("feeder", "JOE", F("2"))

        ledger.burn("owner", "alice", F("1"))
        assert ledger.total_supply == 0

    def test_toggle_and_stabilizer_require_governor(self) -> None:
        ledger, _, _, _ = _make_ledger(with_gate=True)
        with pytest.raises(Unauthorized):
            ledger.toggle_stabilization("alice", True)
        with pytest.raises(Unauthorized):
            ledger.set_stabilizer("alice", None)

        ledger.set_stabilizer("gov", None)
        assert ledger.gate is None
        assert not ledger.stabilization_enabled
