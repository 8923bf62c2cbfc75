"""JoeCoin – governance hooks package."""

from joecoin.governance.hooks import GovernanceHooks

__all__ = ["GovernanceHooks"]
