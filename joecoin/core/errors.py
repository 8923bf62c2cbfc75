"""
JoeCoin: Error Taxonomy

This module defines the exceptions raised by the stability core. Every
failure is local and synchronous: the rejected operation leaves all
state unchanged and the caller must satisfy the precondition before
resubmitting.

Key responsibilities:
- Provide a single base class (:class:`JoeCoinError`) for callers that
  want to handle any rejection uniformly
- Name each rejection kind so callers and tests can match on it

External dependencies:
- None

Database tables accessed:
- None

Thread safety: Thread-safe (exception types only)

Author: JoeCoin Team
Created: 2026-10-19
Last Modified: 2026-10-19
Status: Development
Version: v0.1.0
"""

from __future__ import annotations


class JoeCoinError(Exception):
    """Base class for every rejection raised by the stability core."""


class CooldownActive(JoeCoinError):
    """Raised when an update arrives before its minimum interval elapsed."""

    def __init__(self, what: str, now: int, ready_at: int) -> None:
        super().__init__(
            f"{what} is cooling down: now={now}, next update allowed at {ready_at}"
        )
        self.what = what
        self.now = now
        self.ready_at = ready_at


class ParameterOutOfRange(JoeCoinError):
    """Raised when a governance-set value lies outside its policy bounds."""

    def __init__(self, name: str, value: int, lower: int | None = None, upper: int | None = None) -> None:
        if lower is None and upper is None:
            detail = f"{name}={value} is not admissible"
        else:
            detail = f"{name}={value} outside admissible range [{lower}, {upper}]"
        super().__init__(detail)
        self.name = name
        self.value = value
        self.lower = lower
        self.upper = upper


class DivisionByZeroBaseline(JoeCoinError):
    """Raised when a deviation ratio is requested against a zero baseline."""

    def __init__(self, signal: str) -> None:
        super().__init__(f"baseline for {signal!r} is zero; deviation is undefined")
        self.signal = signal


class InsufficientCollateral(JoeCoinError):
    """Raised when a vault position would fall below its collateral ratio."""


class InsufficientDebt(JoeCoinError):
    """Raised when more debt is repaid than a position carries."""


class StabilizationBlocked(JoeCoinError):
    """Raised when a mint is attempted while the stabilization gate is closed."""

    def __init__(self, reasons: list[str] | tuple[str, ...]) -> None:
        super().__init__("Stability conditions not met: " + ", ".join(reasons))
        self.reasons = tuple(reasons)


class Unauthorized(JoeCoinError):
    """Raised when the caller lacks the principal role an operation needs."""

    def __init__(self, caller: str, role: str) -> None:
        super().__init__(f"account {caller!r} is not authorized as {role}")
        self.caller = caller
        self.role = role


class SystemPaused(JoeCoinError):
    """Raised by state-changing calls while the system is emergency-paused."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} rejected: system is paused")
        self.operation = operation


class InvalidAmount(JoeCoinError, ValueError):
    """Raised when an amount or price is negative or otherwise unusable."""


class UnsupportedCollateral(JoeCoinError):
    """Raised when a collateral asset is not on the vault allow-list."""


class CollateralAssetMismatch(JoeCoinError):
    """Raised when an operation names a different asset than the position holds."""


class PositionNotFound(JoeCoinError, LookupError):
    """Raised when an account has no vault position."""


class InsufficientBalance(JoeCoinError):
    """Raised when a token balance cannot cover a transfer or burn."""


class InsufficientAllowance(JoeCoinError):
    """Raised when a spender's allowance cannot cover a transfer."""


class PriceUnavailable(JoeCoinError, LookupError):
    """Raised when an asset must be valued but has no accepted price sample."""

    def __init__(self, asset: str) -> None:
        super().__init__(f"no accepted price sample for {asset}")
        self.asset = asset
