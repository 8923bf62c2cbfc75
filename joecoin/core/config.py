"""
JoeCoin: Configuration Management

This module provides centralised configuration management for the
JoeCoin stability core. It loads configuration from environment
variables (optionally via a .env file), with strongly typed access via
Pydantic BaseSettings.

Key responsibilities:
- Load and validate configuration from environment variables
- Provide typed configuration objects for the oracle, risk engine,
  vault, event database and logging
- Expose a cached global configuration accessor for convenience

External dependencies:
- pydantic: Data validation and settings management
- pydantic-settings: Environment variable integration for settings
- python-dotenv: Optional .env loading for local development

Database tables accessed:
- None (configuration only)

Thread safety: Thread-safe (configuration is immutable after initial load)

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

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# ============================================================================
# Data Models
# ============================================================================


class DatabaseConfig(BaseModel):
    """Database connection configuration.

    Attributes:
        host: Database host name or IP address.
        port: TCP port for the PostgreSQL instance.
        name: Database name.
        user: Database user for connections.
        password: Password for the database user.
        pool_size: Maximum number of connections in the pool.
    """

    host: str
    port: int
    name: str
    user: str
    password: str
    pool_size: int = 5


class LoggingConfig(BaseModel):
    """Logging configuration for JoeCoin.

    Attributes:
        level: Log level name (e.g. "INFO", "DEBUG").
        file: Path to the primary log file.
    """

    level: str = "INFO"
    file: str = "joecoin.log"


class OracleConfig(BaseModel):
    """Price oracle timing and peg settings.

    Decimal values are kept as strings so they can be converted to
    18-decimal fixed point without passing through binary floats.

    Attributes:
        min_update_interval: Minimum seconds between two accepted samples
            of the same asset.
        max_price_age: Age in seconds after which a sample is reported
            as stale by monitoring views.
        peg_price: Target price of the stabilized token.
    """

    min_update_interval: int = 3600
    max_price_age: int = 7200
    peg_price: str = "1"


class RiskEngineConfig(BaseModel):
    """Initial RBS parameters, their admissible bounds and gate threshold.

    Attributes:
        current_update_interval: Minimum seconds between two current-value
            updates.
        risk_threshold: Risk score at or above which minting is blocked.
        c0: Cushion band.
        w0: Wall band (maximum tolerated deviation from peg).
        alpha: Sentiment weight.
        beta: Volatility weight.
        gamma: Order-book-imbalance weight.
        bounds: Admissible ``(min, max)`` per parameter name.
    """

    current_update_interval: int = 3600
    risk_threshold: str = "0.5"
    c0: str = "0.01"
    w0: str = "0.02"
    alpha: str = "0.5"
    beta: str = "0.5"
    gamma: str = "0.1"
    bounds: dict[str, tuple[str, str]] = Field(
        default_factory=lambda: {
            "c0": ("0.001", "0.1"),
            "w0": ("0.005", "0.25"),
            "alpha": ("0.1", "1"),
            "beta": ("0.1", "1"),
            "gamma": ("0.05", "0.5"),
        }
    )


class VaultConfig(BaseModel):
    """Vault solvency settings.

    Attributes:
        min_collateral_ratio: Minimum collateral value per unit of debt
            (``1.5`` means 150%).
    """

    min_collateral_ratio: str = "1.5"


class JoeCoinConfig(BaseSettings):
    """Main JoeCoin configuration loaded from environment variables.

    Environment variables use the following mapping by default:

    - RUNTIME_DB_* for the event database
    - LOG_LEVEL / LOG_FILE for logging
    - ORACLE_* for oracle timing and PEG_PRICE for the peg
    - RBS_* for risk engine parameters and the gate threshold
    - VAULT_* for vault solvency
    - ENVIRONMENT for environment name (development/staging/production)
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    # Runtime DB (event store)
    runtime_db_host: str = Field(default="localhost", alias="RUNTIME_DB_HOST")
    runtime_db_port: int = Field(default=5432, alias="RUNTIME_DB_PORT")
    runtime_db_name: str = Field(default="joecoin_runtime", alias="RUNTIME_DB_NAME")
    runtime_db_user: str = Field(default="joecoin", alias="RUNTIME_DB_USER")
    runtime_db_password: str = Field(default="", alias="RUNTIME_DB_PASSWORD")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_file: str = Field(default="joecoin.log", alias="LOG_FILE")

    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Oracle
    oracle_min_update_interval: int = Field(default=3600, alias="ORACLE_MIN_UPDATE_INTERVAL")
    oracle_max_price_age: int = Field(default=7200, alias="ORACLE_MAX_PRICE_AGE")
    peg_price: str = Field(default="1", alias="PEG_PRICE")

    # Risk engine (RBS)
    rbs_current_update_interval: int = Field(default=3600, alias="RBS_CURRENT_UPDATE_INTERVAL")
    rbs_risk_threshold: str = Field(default="0.5", alias="RBS_RISK_THRESHOLD")
    rbs_c0: str = Field(default="0.01", alias="RBS_C0")
    rbs_w0: str = Field(default="0.02", alias="RBS_W0")
    rbs_alpha: str = Field(default="0.5", alias="RBS_ALPHA")
    rbs_beta: str = Field(default="0.5", alias="RBS_BETA")
    rbs_gamma: str = Field(default="0.1", alias="RBS_GAMMA")

    # Vault
    vault_min_collateral_ratio: str = Field(default="1.5", alias="VAULT_MIN_COLLATERAL_RATIO")

    @property
    def runtime_db(self) -> DatabaseConfig:
        """Return database configuration for the runtime (event) DB."""

        return DatabaseConfig(
            host=self.runtime_db_host,
            port=self.runtime_db_port,
            name=self.runtime_db_name,
            user=self.runtime_db_user,
            password=self.runtime_db_password,
        )

    @property
    def logging(self) -> LoggingConfig:
        """Return logging configuration."""

        return LoggingConfig(level=self.log_level, file=self.log_file)

    @property
    def oracle(self) -> OracleConfig:
        """Return oracle configuration.

        Environment variables:
        - ORACLE_MIN_UPDATE_INTERVAL
        - ORACLE_MAX_PRICE_AGE
        - PEG_PRICE
        """

        return OracleConfig(
            min_update_interval=self.oracle_min_update_interval,
            max_price_age=self.oracle_max_price_age,
            peg_price=self.peg_price,
        )

    @property
    def risk_engine(self) -> RiskEngineConfig:
        """Return risk engine configuration.

        Bounds are policy and are not environment driven.
        """

        return RiskEngineConfig(
            current_update_interval=self.rbs_current_update_interval,
            risk_threshold=self.rbs_risk_threshold,
            c0=self.rbs_c0,
            w0=self.rbs_w0,
            alpha=self.rbs_alpha,
            beta=self.rbs_beta,
            gamma=self.rbs_gamma,
        )

    @property
    def vault(self) -> VaultConfig:
        """Return vault configuration."""

        return VaultConfig(min_collateral_ratio=self.vault_min_collateral_ratio)


# ============================================================================
# Public API
# ============================================================================


def load_config(env_file: Optional[Path] = None) -> JoeCoinConfig:
    """Load JoeCoin configuration.

    For local development this function will attempt to load a `.env` file
    from the current working directory if one is present. Environment
    variables always take precedence over values from `.env`.

    Args:
        env_file: Optional explicit path to a `.env` file. If omitted,
            the function will look for `.env` in the current working
            directory.

    Returns:
        A fully populated :class:`JoeCoinConfig` instance.

    Raises:
        FileNotFoundError: If an explicit ``env_file`` is provided but
            does not exist.
    """

    if env_file is not None:
        if not env_file.exists():
            msg = f"Environment file not found: {env_file}"
            raise FileNotFoundError(msg)
        # An explicit env_file wins over values already in the process
        # environment so tests and local runs control configuration.
        load_dotenv(env_file, override=True)
    else:
        default_env = Path(".env")
        if default_env.exists():
            load_dotenv(default_env)

    return JoeCoinConfig()  # type: ignore[call-arg]


_global_config: Optional[JoeCoinConfig] = None


def get_config() -> JoeCoinConfig:
    """Return the global JoeCoin configuration singleton.

    The configuration is loaded on first access and cached for
    subsequent calls.

    Returns:
        A cached :class:`JoeCoinConfig` instance.
    """

    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config
