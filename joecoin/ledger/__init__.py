"""JoeCoin – token ledger package."""

from joecoin.ledger.token import TokenLedger

__all__ = ["TokenLedger"]
