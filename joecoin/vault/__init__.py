"""JoeCoin – collateralized debt position (CDP) vault package."""

from joecoin.vault.types import VaultPosition
from joecoin.vault.engine import Vault, is_collateralized

__all__ = ["VaultPosition", "Vault", "is_collateralized"]
