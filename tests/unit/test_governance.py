"""
JoeCoin: Tests for the Governance Hooks

Test suite for ``joecoin.governance.hooks``. Covers:
- Parameter and baseline updates through the hook surface
- Pause/unpause semantics across components
"""

from __future__ import annotations

import pytest

from joecoin.core import fixed_point as fp
from joecoin.core.clock import ManualClock
from joecoin.core.config import JoeCoinConfig
from joecoin.core.errors import ParameterOutOfRange, SystemPaused, Unauthorized
from joecoin.events.types import EventKind
from joecoin.risk import RiskParameters
from joecoin.system import StabilizationSystem, build_system


F = fp.to_fixed


def _make_system() -> StabilizationSystem:
    return build_system(JoeCoinConfig(), clock=ManualClock(), governance="gov")


class TestParameterHooks:
    def test_set_risk_parameters(self) -> None:
        system = _make_system()
        params = RiskParameters(c0=F("0.005"), w0=F("0.03"), alpha=F("0.4"), beta=F("0.4"), gamma=F("0.2"))

        system.governance.set_risk_parameters("gov", params)

        assert system.risk_engine.parameters == params
        assert system.gate.wall == F("0.03")

    def test_alpha_bounds_enforced(self) -> None:
        system = _make_system()
        params = RiskParameters(c0=F("0.01"), w0=F("0.02"), alpha=F("1.5"), beta=F("0.5"), gamma=F("0.1"))
        with pytest.raises(ParameterOutOfRange) as excinfo:
            system.governance.set_risk_parameters("gov", params)
        assert excinfo.value.name == "alpha"

    def test_set_baselines(self) -> None:
        system = _make_system()
        baseline = system.governance.set_baselines("gov", F("1"), F("0.01"), F("1"))
        assert system.risk_engine.baseline == baseline

    def test_hooks_require_governor(self) -> None:
        system = _make_system()
        with pytest.raises(Unauthorized):
            system.governance.set_baselines("mallory", F("1"), F("1"), F("1"))
        with pytest.raises(Unauthorized):
            system.governance.pause("mallory")
        assert not system.governance.paused


class TestPause:
    def test_pause_blocks_mutations_but_not_views(self) -> None:
        system = _make_system()
        system.oracle.submit_price("feeder", "JOE", F("1"))

        system.governance.pause("gov")

        assert system.governance.paused
        with pytest.raises(SystemPaused):
            system.oracle.submit_price("feeder", "WETH", F("1"))
        with pytest.raises(SystemPaused):
            system.token.mint("owner", "alice", F("1"))
        with pytest.raises(SystemPaused):
            system.governance.set_baselines("gov", F("1"), F("1"), F("1"))
        with pytest.raises(SystemPaused):
            system.governance.pause("gov")
        with pytest.raises(SystemPaused):
            system.token.grant_minter("owner", "mallory")
        with pytest.raises(SystemPaused):
            system.token.revoke_minter("owner", "vault")
        with pytest.raises(SystemPaused):
            system.oracle.add_feeder("owner", "mallory")
        with pytest.raises(SystemPaused):
            system.oracle.remove_feeder("owner", "feeder")
        with pytest.raises(SystemPaused):
            system.access.set_governance("owner", "mallory")
        with pytest.raises(SystemPaused):
            system.access.transfer_ownership("owner", "mallory")

        assert system.access.owner == "owner"
        assert system.access.governance == "gov"
        assert system.oracle.current_price("JOE") == F("1")
        assert system.gate.can_mint()
        assert system.events.last().kind is EventKind.SYSTEM_PAUSED

    def test_unpause_restores_operation(self) -> None:
        system = _make_system()
        system.governance.pause("owner")

        with pytest.raises(Unauthorized):
            system.governance.unpause("mallory")
        system.governance.unpause("gov")

        assert not system.status.paused
        system.token.mint("owner", "alice", F("1"))
        kinds = [e.kind for e in system.events.events()]
        assert EventKind.SYSTEM_UNPAUSED in kinds

    def test_unpause_when_active_is_noop(self) -> None:
        system = _make_system()
        before = len(system.events)
        system.governance.unpause("gov")
        assert len(system.events) == before
