"""JoeCoin – Stability core configuration inspection CLI.

This script prints the oracle, risk engine and vault configuration as
seen by :func:`joecoin.core.config.get_config`, together with the
underlying environment variables that drive it.

It is intended as a quick way to confirm which peg, cooldowns, bands
and weights are active before wiring a system.

Example
-------

    python -m joecoin.scripts.show_config

"""

from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import Optional, Sequence

from joecoin.core.config import get_config, load_config
from joecoin.core.logging import get_logger


logger = get_logger(__name__)


_ENV_KEYS = [
    "ORACLE_MIN_UPDATE_INTERVAL",
    "ORACLE_MAX_PRICE_AGE",
    "PEG_PRICE",
    "RBS_CURRENT_UPDATE_INTERVAL",
    "RBS_RISK_THRESHOLD",
    "RBS_C0",
    "RBS_W0",
    "RBS_ALPHA",
    "RBS_BETA",
    "RBS_GAMMA",
    "VAULT_MIN_COLLATERAL_RATIO",
]


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description=(
            "Show JoeCoin stability core settings as loaded from environment "
            "and JoeCoinConfig. Decimal values are shown as configured."
        ),
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=None,
        help="Optional .env file to load before reading the configuration",
    )

    args = parser.parse_args(argv)

    if args.env_file:
        config = load_config(Path(args.env_file))
    else:
        config = get_config()

    oracle = config.oracle
    risk = config.risk_engine
    vault = config.vault

    print("# Oracle (JoeCoinConfig.oracle)")
    print(f"min_update_interval={oracle.min_update_interval}")
    print(f"max_price_age={oracle.max_price_age}")
    print(f"peg_price={oracle.peg_price}")
    print()

    print("# Risk engine (JoeCoinConfig.risk_engine)")
    print(f"current_update_interval={risk.current_update_interval}")
    print(f"risk_threshold={risk.risk_threshold}")
    for name in ("c0", "w0", "alpha", "beta", "gamma"):
        lower, upper = risk.bounds[name]
        print(f"{name}={getattr(risk, name)} bounds=[{lower}, {upper}]")
    print()

    print("# Vault (JoeCoinConfig.vault)")
    print(f"min_collateral_ratio={vault.min_collateral_ratio}")
    print()

    print("# Raw environment variables (empty means not set)")
    for key in _ENV_KEYS:
        value = os.environ.get(key, "")
        print(f"{key}={value}")


if __name__ == "__main__":  # pragma: no cover - manual CLI entry
    main()
