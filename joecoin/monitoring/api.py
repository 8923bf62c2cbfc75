"""JoeCoin – Monitoring Status API.

This module provides read-only REST endpoints for external watchers
(dashboards, keepers, alerting) to query oracle, risk engine, gate,
vault and event state of a running :class:`StabilizationSystem`.

Fixed-point amounts are rendered as decimal strings so that 18-decimal
values survive JSON consumers that parse numbers as doubles.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from joecoin.core import fixed_point as fp
from joecoin.core.logging import get_logger
from joecoin.events.types import EventKind
from joecoin.system import StabilizationSystem


router = APIRouter(prefix="/api/status", tags=["monitoring"])
vault_router = APIRouter(prefix="/api/vaults", tags=["vaults"])
events_router = APIRouter(prefix="/api/events", tags=["events"])
logger = get_logger(__name__)


# ============================================================================
# Response Models
# ============================================================================


class OracleStatus(BaseModel):
    """Latest accepted price of one asset."""

    asset: str
    price: str
    has_sample: bool = False
    last_updated: Optional[int] = None
    next_update_at: int
    stale: bool = True
    max_price_age: int


class RiskStatus(BaseModel):
    """Risk engine phase, signals, factors and score."""

    phase: str
    risk_score: str
    factors_updated_at: Optional[int] = None
    current_updated_at: Optional[int] = None
    baseline: Dict[str, str] = Field(default_factory=dict)
    current: Dict[str, str] = Field(default_factory=dict)
    factors: Dict[str, str] = Field(default_factory=dict)
    parameters: Dict[str, str] = Field(default_factory=dict)


class GateStatus(BaseModel):
    """Current mint/no-mint decision."""

    allowed: bool
    stabilization_enabled: bool
    risk_score: str
    risk_threshold: str
    price: str
    peg: str
    deviation: str
    wall: str
    cushion: str
    bands_consistent: bool
    reasons: List[str] = Field(default_factory=list)


class SystemStatusView(BaseModel):
    """Global system flags and supply figures."""

    timestamp: int
    paused: bool
    owner: str
    governance: Optional[str] = None
    stable_asset: str
    total_supply: str
    total_debt: str
    open_vaults: int
    supported_collateral: List[str] = Field(default_factory=list)
    event_count: int


class VaultStatus(BaseModel):
    """One vault position with its valuation at the current price."""

    owner: str
    collateral_asset: str
    collateral_amount: str
    debt_amount: str
    collateral_value: str
    collateral_ratio: Optional[str] = None
    max_mintable: str
    opened_at: int
    updated_at: int


class EventsResponse(BaseModel):
    """Most recent ledger events, oldest first."""

    events: List[Dict[str, Any]] = Field(default_factory=list)


# ============================================================================
# Dependencies
# ============================================================================


def get_system(request: Request) -> StabilizationSystem:
    """Return the system attached to the application state."""

    system = getattr(request.app.state, "system", None)
    if system is None:
        raise HTTPException(status_code=503, detail="stabilization system not attached")
    return system


def _fmt(values: Dict[str, int]) -> Dict[str, str]:
    return {name: fp.format_fixed(value) for name, value in values.items()}


# ============================================================================
# Status Endpoints
# ============================================================================


@router.get("/oracle/{asset}", response_model=OracleStatus)
async def get_oracle_status(
    asset: str,
    system: StabilizationSystem = Depends(get_system),
) -> OracleStatus:
    """Return the latest price of ``asset`` and its staleness."""

    oracle = system.oracle
    sample = oracle.latest_sample(asset)
    return OracleStatus(
        asset=asset,
        price=fp.format_fixed(oracle.current_price(asset)),
        has_sample=sample is not None,
        last_updated=oracle.last_updated(asset),
        next_update_at=oracle.next_update_at(asset),
        stale=oracle.is_stale(asset, system.max_price_age),
        max_price_age=system.max_price_age,
    )


@router.get("/risk", response_model=RiskStatus)
async def get_risk_status(system: StabilizationSystem = Depends(get_system)) -> RiskStatus:
    snapshot = system.risk_engine.snapshot()
    return RiskStatus(
        phase=snapshot.phase.value,
        risk_score=fp.format_fixed(snapshot.risk_score),
        factors_updated_at=snapshot.factors_updated_at,
        current_updated_at=snapshot.current_updated_at,
        baseline=_fmt(snapshot.baseline.as_dict()),
        current=_fmt(snapshot.current.as_dict()),
        factors=_fmt(snapshot.factors.as_dict()),
        parameters=_fmt(system.risk_engine.parameters.as_dict()),
    )


@router.get("/gate", response_model=GateStatus)
async def get_gate_status(system: StabilizationSystem = Depends(get_system)) -> GateStatus:
    gate = system.gate
    decision = gate.evaluate()
    return GateStatus(
        allowed=decision.allowed,
        stabilization_enabled=system.token.stabilization_enabled,
        risk_score=fp.format_fixed(decision.risk_score),
        risk_threshold=fp.format_fixed(decision.risk_threshold),
        price=fp.format_fixed(decision.price),
        peg=fp.format_fixed(decision.peg),
        deviation=fp.format_fixed(decision.deviation),
        wall=fp.format_fixed(decision.wall),
        cushion=fp.format_fixed(gate.cushion),
        bands_consistent=gate.bands_consistent(),
        reasons=[r.value for r in decision.reasons],
    )


@router.get("/system", response_model=SystemStatusView)
async def get_system_status(system: StabilizationSystem = Depends(get_system)) -> SystemStatusView:
    return SystemStatusView(
        timestamp=system.clock.now(),
        paused=system.status.paused,
        owner=system.access.owner,
        governance=system.access.governance,
        stable_asset=system.token.asset_id,
        total_supply=fp.format_fixed(system.token.total_supply),
        total_debt=fp.format_fixed(system.vault.total_debt()),
        open_vaults=len(system.vault.positions()),
        supported_collateral=system.vault.supported_assets(),
        event_count=len(system.events),
    )


# ============================================================================
# Vault and Event Endpoints
# ============================================================================


@vault_router.get("/{owner}", response_model=VaultStatus)
async def get_vault(owner: str, system: StabilizationSystem = Depends(get_system)) -> VaultStatus:
    """Return ``owner``'s position, or 404 when none is open."""

    vault = system.vault
    position = vault.position(owner)
    if position is None:
        raise HTTPException(status_code=404, detail=f"no vault position for {owner}")

    ratio = vault.collateral_ratio(owner)
    return VaultStatus(
        owner=position.owner,
        collateral_asset=position.collateral_asset,
        collateral_amount=fp.format_fixed(position.collateral_amount),
        debt_amount=fp.format_fixed(position.debt_amount),
        collateral_value=fp.format_fixed(vault.collateral_value(owner)),
        collateral_ratio=fp.format_fixed(ratio) if ratio is not None else None,
        max_mintable=fp.format_fixed(vault.max_mintable(owner)),
        opened_at=position.opened_at,
        updated_at=position.updated_at,
    )


@events_router.get("", response_model=EventsResponse)
async def get_events(
    kind: Optional[str] = Query(None, description="Event kind filter, e.g. PRICE_UPDATED"),
    limit: int = Query(100, ge=1, le=1000),
    system: StabilizationSystem = Depends(get_system),
) -> EventsResponse:
    event_kind: Optional[EventKind] = None
    if kind:
        try:
            event_kind = EventKind(kind.upper())
        except ValueError:
            raise HTTPException(status_code=400, detail=f"unknown event kind: {kind}") from None

    events = system.events.events(kind=event_kind, limit=limit)
    return EventsResponse(events=[e.to_dict() for e in events])
