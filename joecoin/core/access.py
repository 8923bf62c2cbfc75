"""JoeCoin – principals and capability checks.

Accounts are plain strings (addresses). Two principals carry authority
over the core:

- ``owner``: the deploying account; manages feeders and minters and may
  hand the governance role to another account.
- ``governance``: the external governance module. Together with the
  owner it forms the *governor* capability required by parameter,
  baseline, allow-list and pause changes.
"""

from __future__ import annotations

from typing import Optional

from joecoin.core.errors import Unauthorized
from joecoin.core.logging import get_logger
from joecoin.core.status import SystemStatus
from joecoin.core.types import Account


logger = get_logger(__name__)


class AccessControl:
    """Owner and governance principals with capability checks."""

    def __init__(
        self,
        owner: Account,
        governance: Optional[Account] = None,
        *,
        status: Optional[SystemStatus] = None,
    ) -> None:
        if not owner:
            raise ValueError("owner account must be non-empty")
        self._owner = owner
        self._governance = governance
        # Role changes share the pause flag and lock of the components.
        self._status = status if status is not None else SystemStatus()

    @property
    def owner(self) -> Account:
        return self._owner

    @property
    def governance(self) -> Optional[Account]:
        return self._governance

    def is_governor(self, caller: Account) -> bool:
        return caller == self._owner or (
            self._governance is not None and caller == self._governance
        )

    def require_owner(self, caller: Account) -> None:
        if caller != self._owner:
            raise Unauthorized(caller, "owner")

    def require_governor(self, caller: Account) -> None:
        if not self.is_governor(caller):
            raise Unauthorized(caller, "governance")

    def set_governance(self, caller: Account, governance: Account) -> None:
        """Assign the governance principal (owner only)."""

        with self._status.serialized("set_governance"):
            self.require_owner(caller)
            if not governance:
                raise ValueError("governance account must be non-empty")
            self._governance = governance
            logger.info("AccessControl.set_governance: governance=%s", governance)

    def transfer_ownership(self, caller: Account, new_owner: Account) -> None:
        with self._status.serialized("transfer_ownership"):
            self.require_owner(caller)
            if not new_owner:
                raise ValueError("new owner account must be non-empty")
            previous, self._owner = self._owner, new_owner
            logger.info("AccessControl.transfer_ownership: %s -> %s", previous, new_owner)
