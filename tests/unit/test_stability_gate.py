"""
JoeCoin: Tests for the Stabilization Gate

Test suite for ``joecoin.stability.gate``. Covers:
- Both conditions (risk score and wall) being required
- Reported reasons and the StabilizationBlocked error
- Band consistency and constructor validation
"""

from __future__ import annotations

import pytest

from joecoin.core import fixed_point as fp
from joecoin.core.access import AccessControl
from joecoin.core.clock import ManualClock
from joecoin.core.config import RiskEngineConfig
from joecoin.core.errors import StabilizationBlocked
from joecoin.core.status import SystemStatus
from joecoin.events.log import EventLog
from joecoin.oracle.engine import PriceOracle
from joecoin.risk import ParameterBounds, RiskEngine, RiskParameters
from joecoin.stability import GateReason, StabilizationGate


F = fp.to_fixed


def _make_gate(**kwargs):  # type: ignore[no-untyped-def]
    clock = ManualClock(start=50_000)
    status = SystemStatus()
    access = AccessControl("owner", status=status)
    events = EventLog()
    config = RiskEngineConfig()
    engine = RiskEngine(
        clock,
        status,
        access,
        events,
        RiskParameters.from_config(config),
        ParameterBounds.from_config(config),
    )
    oracle = PriceOracle(clock, status, access, events)
    gate = StabilizationGate(engine, oracle, "JOE", **kwargs)
    return gate, engine, oracle, clock


def _stress(engine: RiskEngine, current: tuple[str, str, str]) -> None:
    engine.update_baselines("owner", F("1"), F("0.01"), F("1"))
    engine.update_current_values("keeper", *(F(v) for v in current))
    engine.update_risk_factors("keeper")


class TestEvaluate:
    def test_open_at_peg_with_calm_score(self) -> None:
        gate, engine, oracle, _ = _make_gate()
        oracle.submit_price("feeder", "JOE", F("1"))
        _stress(engine, ("0.99", "0.012", "0.99"))

        decision = gate.evaluate()

        assert decision.allowed
        assert decision.reasons == ()
        assert decision.risk_score == F("0.106")
        assert decision.deviation == 0
        assert gate.can_mint()
        assert gate.require_can_mint() == decision

    def test_open_before_any_update(self) -> None:
        gate, _, _, _ = _make_gate()
        # No sample: the peg asset reports the default price (the peg).
        assert gate.can_mint()

    def test_price_outside_wall_blocks_with_calm_score(self) -> None:
        gate, _, oracle, _ = _make_gate()
        oracle.submit_price("feeder", "JOE", F("1.021"))

        decision = gate.evaluate()

        assert not decision.allowed
        assert decision.reasons == (GateReason.PRICE_OUTSIDE_WALL,)
        assert decision.deviation == F("0.021")
        assert decision.wall == F("0.02")

    def test_price_on_wall_is_allowed(self) -> None:
        gate, _, oracle, _ = _make_gate()
        oracle.submit_price("feeder", "JOE", F("0.98"))
        assert gate.can_mint()

    def test_stressed_score_blocks_at_perfect_price(self) -> None:
        gate, engine, oracle, _ = _make_gate()
        oracle.submit_price("feeder", "JOE", F("1"))
        _stress(engine, ("0.5", "0.02", "1"))

        decision = gate.evaluate()

        assert decision.risk_score >= decision.risk_threshold
        assert decision.reasons == (GateReason.RISK_SCORE_ABOVE_THRESHOLD,)

    def test_score_equal_to_threshold_blocks(self) -> None:
        gate, engine, _, _ = _make_gate(risk_threshold=F("0.106"))
        _stress(engine, ("0.99", "0.012", "0.99"))
        assert not gate.can_mint()

    def test_both_reasons_reported(self) -> None:
        gate, engine, oracle, _ = _make_gate()
        oracle.submit_price("feeder", "JOE", F("2"))
        _stress(engine, ("0", "0", "0"))

        with pytest.raises(StabilizationBlocked) as excinfo:
            gate.require_can_mint()

        assert excinfo.value.reasons == (
            "RISK_SCORE_ABOVE_THRESHOLD",
            "PRICE_OUTSIDE_WALL",
        )
        assert "Stability conditions not met" in str(excinfo.value)

    def test_wall_follows_governance_updates(self) -> None:
        gate, engine, oracle, _ = _make_gate()
        oracle.submit_price("feeder", "JOE", F("1.05"))
        assert not gate.can_mint()

        engine.set_w0("owner", F("0.1"))

        assert gate.wall == F("0.1")
        assert gate.can_mint()


class TestBands:
    def test_cushion_inside_wall(self) -> None:
        gate, engine, _, _ = _make_gate()
        assert gate.cushion == F("0.01")
        assert gate.bands_consistent()
        engine.set_w0("owner", F("0.01"))
        assert gate.bands_consistent()

    def test_constructor_validation(self) -> None:
        with pytest.raises(ValueError):
            _make_gate(peg=0)
        with pytest.raises(ValueError):
            _make_gate(risk_threshold=0)
        with pytest.raises(ValueError):
            _make_gate(risk_threshold=fp.SCALE + 1)
