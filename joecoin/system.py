"""
JoeCoin: Stabilization System Wiring

This module assembles the stability core from configuration: one shared
clock, status, access control and event log, and on top of them the
price oracle, RBS risk engine, stabilization gate, the stabilized token
ledger, the CDP vault and the governance hook surface.

Key responsibilities:
- Convert decimal configuration values into fixed point
- Construct every component against the same shared collaborators
- Register the vault as minter of the stabilized token
- Register collateral token ledgers with the vault

External dependencies:
- None beyond the joecoin core (configuration via pydantic-settings)

Database tables accessed:
- ledger_events (only when an EventStorage sink is supplied)

Thread safety: All components share one SystemStatus lock; the
assembled system is safe to call from multiple threads.

Author: JoeCoin Team
Created: 2026-10-19
Last Modified: 2026-10-19
Status: Development
Version: v0.1.0
"""

# ============================================================================
# Imports
# ============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from joecoin.core import fixed_point as fp
from joecoin.core.access import AccessControl
from joecoin.core.clock import Clock, SystemClock
from joecoin.core.config import JoeCoinConfig, get_config
from joecoin.core.logging import get_logger
from joecoin.core.status import SystemStatus
from joecoin.core.types import Account, AssetId
from joecoin.events.log import EventLog, EventSink
from joecoin.governance.hooks import GovernanceHooks
from joecoin.ledger.token import TokenLedger
from joecoin.oracle.engine import PriceOracle
from joecoin.risk.engine import RiskEngine
from joecoin.risk.parameters import ParameterBounds, RiskParameters
from joecoin.stability.gate import StabilizationGate
from joecoin.vault.engine import Vault


logger = get_logger(__name__)


STABLE_ASSET: AssetId = "JOE"
VAULT_ADDRESS: Account = "vault"


# ============================================================================
# Data Models
# ============================================================================


@dataclass
class StabilizationSystem:
    """Fully wired stability core.

    Attributes:
        clock: Shared time source.
        status: Shared pause flag and serialization lock.
        access: Owner and governance principals.
        events: Shared event log.
        oracle: Price oracle.
        risk_engine: RBS risk engine.
        gate: Stabilization gate over the risk engine and the oracle.
        token: Ledger of the stabilized token (gate attached).
        vault: CDP vault minting ``token`` as debt.
        governance: Governance hook surface.
        max_price_age: Staleness horizon used by monitoring views.
        collateral: Collateral token ledgers registered with the vault.
    """

    clock: Clock
    status: SystemStatus
    access: AccessControl
    events: EventLog
    oracle: PriceOracle
    risk_engine: RiskEngine
    gate: StabilizationGate
    token: TokenLedger
    vault: Vault
    governance: GovernanceHooks
    max_price_age: int = 7200
    collateral: Dict[AssetId, TokenLedger] = field(default_factory=dict)

    def add_collateral(self, caller: Account, asset_id: AssetId) -> TokenLedger:
        """Create (or reuse) a ledger for ``asset_id`` and allow-list it.

        Raises:
            Unauthorized: If ``caller`` is not a governor.
        """

        ledger = self.collateral.get(asset_id)
        if ledger is None:
            ledger = TokenLedger(asset_id, self.clock, self.status, self.access, self.events)
        self.vault.set_collateral_support(caller, ledger, True)
        self.collateral[asset_id] = ledger
        return ledger


# ============================================================================
# Public API
# ============================================================================


def build_system(
    config: Optional[JoeCoinConfig] = None,
    *,
    clock: Optional[Clock] = None,
    owner: Account = "owner",
    governance: Optional[Account] = None,
    sink: Optional[EventSink] = None,
    stabilization_enabled: bool = True,
) -> StabilizationSystem:
    """Assemble a :class:`StabilizationSystem` from configuration.

    Args:
        config: Configuration; defaults to :func:`get_config`.
        clock: Time source; defaults to :class:`SystemClock`.
        owner: Deploying account.
        governance: Optional governance principal.
        sink: Optional persistent event sink (e.g. ``EventStorage``).
        stabilization_enabled: Whether the token enforces the gate on mint.
    """

    if config is None:
        config = get_config()
    if clock is None:
        clock = SystemClock()

    oracle_cfg = config.oracle
    risk_cfg = config.risk_engine
    vault_cfg = config.vault

    status = SystemStatus()
    access = AccessControl(owner, governance, status=status)
    events = EventLog(sink=sink)
    peg = fp.to_fixed(oracle_cfg.peg_price)

    oracle = PriceOracle(
        clock,
        status,
        access,
        events,
        min_update_interval=oracle_cfg.min_update_interval,
        default_price=peg,
    )
    risk_engine = RiskEngine(
        clock,
        status,
        access,
        events,
        RiskParameters.from_config(risk_cfg),
        ParameterBounds.from_config(risk_cfg),
        current_update_interval=risk_cfg.current_update_interval,
    )
    gate = StabilizationGate(
        risk_engine,
        oracle,
        STABLE_ASSET,
        peg=peg,
        risk_threshold=fp.to_fixed(risk_cfg.risk_threshold),
    )
    token = TokenLedger(
        STABLE_ASSET,
        clock,
        status,
        access,
        events,
        gate=gate,
        stabilization_enabled=stabilization_enabled,
    )
    vault = Vault(
        VAULT_ADDRESS,
        clock,
        status,
        access,
        events,
        oracle,
        token,
        min_collateral_ratio=fp.to_fixed(vault_cfg.min_collateral_ratio),
    )
    token.grant_minter(owner, VAULT_ADDRESS)
    hooks = GovernanceHooks(clock, status, access, events, risk_engine)

    logger.info(
        "build_system: owner=%s governance=%s stable_asset=%s stabilization_enabled=%s",
        owner,
        governance,
        STABLE_ASSET,
        stabilization_enabled,
    )

    return StabilizationSystem(
        clock=clock,
        status=status,
        access=access,
        events=events,
        oracle=oracle,
        risk_engine=risk_engine,
        gate=gate,
        token=token,
        vault=vault,
        governance=hooks,
        max_price_age=oracle_cfg.max_price_age,
    )
