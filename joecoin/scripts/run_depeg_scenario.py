"""JoeCoin – Depeg scenario CLI.

This script assembles an in-memory stability core against a
:class:`ManualClock` and replays a short depeg scenario:

1. Governance sets baselines, the oracle receives the peg price and the
   collateral price, and the risk engine computes its first score.
2. A user locks collateral and mints debt through the vault while the
   gate is open.
3. After one oracle interval the stabilized token price moves to
   ``--shock-price``; factors are recomputed and the user tries to mint
   again.

Each step prints the gate decision, so the effect of the wall (W0) and
the risk threshold on issuance can be inspected without a database.

Example
-------

    python -m joecoin.scripts.run_depeg_scenario --shock-price 2

"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import List, Optional, Sequence

from joecoin.core import fixed_point as fp
from joecoin.core.clock import ManualClock
from joecoin.core.config import get_config
from joecoin.core.database import get_db_manager
from joecoin.core.errors import JoeCoinError
from joecoin.core.ids import generate_run_id
from joecoin.core.logging import get_logger
from joecoin.events.log import EventSink
from joecoin.events.storage import EventStorage
from joecoin.stability.types import GateDecision
from joecoin.system import StabilizationSystem, build_system


logger = get_logger(__name__)


OWNER = "owner"
GOVERNANCE = "governance"
USER = "alice"
COLLATERAL_ASSET = "WETH"


@dataclass(frozen=True)
class ScenarioStep:
    """Outcome of one scenario step."""

    label: str
    decision: GateDecision
    outcome: str


def run_scenario(
    *,
    shock_price: str = "2",
    collateral_price: str = "1",
    collateral: str = "100",
    debt: str = "50",
    sink: Optional[EventSink] = None,
) -> List[ScenarioStep]:
    """Run the depeg scenario and return one :class:`ScenarioStep` per step."""

    config = get_config()
    clock = ManualClock()
    run_id = generate_run_id("depeg")
    logger.info("run_depeg_scenario: run_id=%s shock_price=%s", run_id, shock_price)
    system = build_system(config, clock=clock, owner=OWNER, governance=GOVERNANCE, sink=sink)
    steps: List[ScenarioStep] = []

    peg = fp.to_fixed(config.oracle.peg_price)
    collateral_amount = fp.to_fixed(collateral)
    debt_amount = fp.to_fixed(debt)

    weth = system.add_collateral(GOVERNANCE, COLLATERAL_ASSET)
    weth.mint(OWNER, USER, collateral_amount * 2)
    weth.approve(USER, system.vault.address, collateral_amount * 2)

    system.governance.set_baselines(GOVERNANCE, fp.to_fixed("1"), fp.to_fixed("0.01"), fp.to_fixed("1"))
    system.oracle.submit_price(OWNER, system.token.asset_id, peg)
    system.oracle.submit_price(OWNER, COLLATERAL_ASSET, fp.to_fixed(collateral_price))
    system.risk_engine.update_current_values(
        OWNER, fp.to_fixed("0.99"), fp.to_fixed("0.012"), fp.to_fixed("0.99")
    )
    system.risk_engine.update_risk_factors(OWNER)
    steps.append(ScenarioStep("calibrated", system.gate.evaluate(), "baselines and prices set"))

    steps.append(_try_mint(system, "mint at peg", collateral_amount, debt_amount))

    clock.advance(system.oracle.min_update_interval)
    system.oracle.submit_price(OWNER, system.token.asset_id, fp.to_fixed(shock_price))
    system.risk_engine.update_risk_factors(OWNER)
    steps.append(_try_mint(system, f"mint at {shock_price}", collateral_amount, debt_amount))

    return steps


def _try_mint(system: StabilizationSystem, label: str, collateral_amount: int, debt_amount: int) -> ScenarioStep:
    decision = system.gate.evaluate()
    try:
        position = system.vault.create_vault(USER, COLLATERAL_ASSET, collateral_amount, debt_amount)
    except JoeCoinError as exc:
        logger.info("run_depeg_scenario: %s rejected: %s", label, exc)
        return ScenarioStep(label, decision, f"rejected: {exc}")
    return ScenarioStep(
        label,
        decision,
        "accepted: collateral={} debt={}".format(
            fp.format_fixed(position.collateral_amount),
            fp.format_fixed(position.debt_amount),
        ),
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description=(
            "Replay a depeg of the stabilized token against an in-memory "
            "stability core and print the gate decision at each step."
        ),
    )
    parser.add_argument("--shock-price", type=str, default="2", help="Stabilized token price after the shock")
    parser.add_argument("--collateral-price", type=str, default="1", help="Collateral asset price")
    parser.add_argument("--collateral", type=str, default="100", help="Collateral locked per mint attempt")
    parser.add_argument("--debt", type=str, default="50", help="Debt minted per mint attempt")
    parser.add_argument(
        "--persist",
        action="store_true",
        help="Also write ledger events to the runtime database (ledger_events)",
    )

    args = parser.parse_args(argv)

    db_manager = get_db_manager() if args.persist else None
    try:
        steps = run_scenario(
            shock_price=args.shock_price,
            collateral_price=args.collateral_price,
            collateral=args.collateral,
            debt=args.debt,
            sink=EventStorage(db_manager) if db_manager is not None else None,
        )
    finally:
        if db_manager is not None:
            db_manager.close_all()

    for step in steps:
        d = step.decision
        print(f"# {step.label}")
        print(
            f"allowed={d.allowed} score={fp.format_fixed(d.risk_score)} "
            f"threshold={fp.format_fixed(d.risk_threshold)} price={fp.format_fixed(d.price)} "
            f"deviation={fp.format_fixed(d.deviation)} wall={fp.format_fixed(d.wall)} "
            f"reasons={[r.value for r in d.reasons]}"
        )
        print(step.outcome)
        print()


if __name__ == "__main__":  # pragma: no cover - manual CLI entry
    main()
