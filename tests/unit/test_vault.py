"""
JoeCoin: Tests for the CDP Vault

Test suite for ``joecoin.vault.engine``. Covers:
- Opening, topping up, repaying and closing positions
- The collateralization invariant after every accepted mutation
- Atomicity of rejected calls across vault and token ledgers
"""

from __future__ import annotations

import pytest

from joecoin.core import fixed_point as fp
from joecoin.core.clock import ManualClock
from joecoin.core.config import JoeCoinConfig
from joecoin.core.errors import (
    CollateralAssetMismatch,
    InsufficientAllowance,
    InsufficientBalance,
    InsufficientCollateral,
    InsufficientDebt,
    InvalidAmount,
    PositionNotFound,
    PriceUnavailable,
    StabilizationBlocked,
    SystemPaused,
    Unauthorized,
    UnsupportedCollateral,
)
from joecoin.events.types import EventKind
from joecoin.system import StabilizationSystem, build_system
from joecoin.vault import is_collateralized


F = fp.to_fixed


def _make_system(collateral_price: str = "1") -> StabilizationSystem:
    system = build_system(JoeCoinConfig(), clock=ManualClock(start=5_000), governance="gov")
    weth = system.add_collateral("gov", "WETH")
    weth.mint("owner", "alice", F("1000"))
    weth.approve("alice", system.vault.address, F("1000"))
    system.oracle.submit_price("feeder", "WETH", F(collateral_price))
    return system


def _assert_solvent(system: StabilizationSystem) -> None:
    vault = system.vault
    for position in vault.positions():
        price = system.oracle.current_price(position.collateral_asset)
        assert is_collateralized(
            position.collateral_amount,
            position.debt_amount,
            price,
            vault.min_collateral_ratio,
        )
    assert system.token.total_supply == vault.total_debt()


class TestCreateVault:
    def test_open_position(self) -> None:
        system = _make_system()

        position = system.vault.create_vault("alice", "WETH", F("100"), F("50"))

        assert position.collateral_amount == F("100")
        assert position.debt_amount == F("50")
        assert position.opened_at == 5_000
        assert system.token.balance_of("alice") == F("50")
        assert system.collateral["WETH"].balance_of("vault") == F("100")
        assert system.collateral["WETH"].balance_of("alice") == F("900")
        event = system.events.last(EventKind.VAULT_CREATED)
        assert event is not None
        assert event.payload["debt_minted"] == F("50")
        _assert_solvent(system)

    def test_top_up_existing_position(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))

        position = system.vault.create_vault("alice", "WETH", F("50"), F("0"))

        assert position.collateral_amount == F("150")
        assert position.debt_amount == F("50")
        assert system.events.last(EventKind.VAULT_UPDATED) is not None
        _assert_solvent(system)

    def test_exact_ratio_boundary(self) -> None:
        system = _make_system()
        # 150 * 1.0 == 100 * 1.5
        system.vault.create_vault("alice", "WETH", F("150"), F("100"))
        with pytest.raises(InsufficientCollateral):
            system.vault.create_vault("alice", "WETH", 0, 1)

    def test_undercollateralized_rejected_atomically(self) -> None:
        system = _make_system()
        before = len(system.events)

        with pytest.raises(InsufficientCollateral):
            system.vault.create_vault("alice", "WETH", F("100"), F("66.67"))

        assert system.vault.position("alice") is None
        assert system.token.total_supply == 0
        assert system.collateral["WETH"].balance_of("alice") == F("1000")
        assert len(system.events) == before

    def test_valuation_uses_current_price(self) -> None:
        system = _make_system(collateral_price="2")
        system.vault.create_vault("alice", "WETH", F("75"), F("100"))
        assert system.vault.collateral_value("alice") == F("150")
        assert system.vault.collateral_ratio("alice") == F("1.5")
        assert system.vault.max_mintable("alice") == 0

    def test_unpriced_collateral_cannot_back_debt(self) -> None:
        system = _make_system()
        junk = system.add_collateral("gov", "JUNK")
        junk.mint("owner", "bob", F("100"))
        junk.approve("bob", system.vault.address, F("100"))
        before = len(system.events)

        with pytest.raises(PriceUnavailable) as excinfo:
            system.vault.create_vault("bob", "JUNK", F("100"), F("60"))

        assert excinfo.value.asset == "JUNK"
        assert system.vault.position("bob") is None
        assert junk.balance_of("bob") == F("100")
        assert system.token.total_supply == 0
        assert len(system.events) == before

    def test_unsupported_and_mismatched_collateral(self) -> None:
        system = _make_system()
        with pytest.raises(UnsupportedCollateral):
            system.vault.create_vault("alice", "WBTC", F("1"), 0)

        system.add_collateral("gov", "WBTC")
        system.vault.create_vault("alice", "WETH", F("10"), 0)
        with pytest.raises(CollateralAssetMismatch):
            system.vault.create_vault("alice", "WBTC", F("1"), 0)

    def test_removed_collateral_blocks_new_deposits_only(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))

        system.vault.set_collateral_support("gov", system.collateral["WETH"], False)

        assert not system.vault.is_supported("WETH")
        with pytest.raises(UnsupportedCollateral):
            system.vault.create_vault("alice", "WETH", F("1"), 0)
        system.vault.repay_debt("alice", "WETH", F("50"), F("100"))
        assert system.vault.position("alice") is None

    def test_collateral_support_requires_governor(self) -> None:
        system = _make_system()
        with pytest.raises(Unauthorized):
            system.add_collateral("alice", "DOGE")
        assert not system.vault.is_supported("DOGE")

    def test_amount_validation(self) -> None:
        system = _make_system()
        with pytest.raises(InvalidAmount):
            system.vault.create_vault("alice", "WETH", 0, 0)
        with pytest.raises(InvalidAmount):
            system.vault.create_vault("alice", "WETH", -1, 0)

    def test_missing_allowance_rolls_back(self) -> None:
        system = _make_system()
        system.collateral["WETH"].mint("owner", "bob", F("100"))

        with pytest.raises(InsufficientAllowance):
            system.vault.create_vault("bob", "WETH", F("100"), F("10"))

        assert system.vault.position("bob") is None
        assert system.token.balance_of("bob") == 0

    def test_missing_balance_rolls_back(self) -> None:
        system = _make_system()
        system.collateral["WETH"].approve("carol", "vault", F("100"))
        with pytest.raises(InsufficientBalance):
            system.vault.create_vault("carol", "WETH", F("100"), F("10"))
        assert system.vault.positions() == []

    def test_blocked_gate_rolls_back_collateral(self) -> None:
        system = _make_system()
        system.oracle.submit_price("feeder", "JOE", F("2"))

        with pytest.raises(StabilizationBlocked):
            system.vault.create_vault("alice", "WETH", F("100"), F("50"))

        assert system.collateral["WETH"].balance_of("alice") == F("1000")
        assert system.collateral["WETH"].allowance("alice", "vault") == F("1000")
        assert system.vault.position("alice") is None

    def test_collateral_only_deposit_ignores_gate(self) -> None:
        system = _make_system()
        system.oracle.submit_price("feeder", "JOE", F("2"))
        position = system.vault.create_vault("alice", "WETH", F("10"), 0)
        assert position.debt_amount == 0

    def test_paused_vault(self) -> None:
        system = _make_system()
        system.governance.pause("gov")
        with pytest.raises(SystemPaused):
            system.vault.create_vault("alice", "WETH", F("100"), F("50"))


class TestRepayDebt:
    def test_repay_and_withdraw_reference_case(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))

        position = system.vault.repay_debt("alice", "WETH", F("50"), F("50"))

        assert position is not None
        assert position.collateral_amount == F("50")
        assert position.debt_amount == 0
        assert system.token.balance_of("alice") == 0
        assert system.collateral["WETH"].balance_of("alice") == F("950")
        assert system.vault.collateral_ratio("alice") is None
        _assert_solvent(system)

    def test_full_close_removes_position(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))

        assert system.vault.repay_debt("alice", "WETH", F("50"), F("100")) is None

        assert system.vault.position("alice") is None
        assert system.events.last(EventKind.VAULT_CLOSED) is not None
        assert system.collateral["WETH"].balance_of("vault") == 0

    def test_over_repay_rejected(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))
        with pytest.raises(InsufficientDebt):
            system.vault.repay_debt("alice", "WETH", F("50.1"), 0)

    def test_withdraw_breaking_ratio_rejected_atomically(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))
        before = len(system.events)

        with pytest.raises(InsufficientCollateral):
            system.vault.repay_debt("alice", "WETH", F("10"), F("50"))

        position = system.vault.position("alice")
        assert position is not None
        assert (position.collateral_amount, position.debt_amount) == (F("100"), F("50"))
        assert system.token.balance_of("alice") == F("50")
        assert len(system.events) == before

    def test_withdraw_more_than_locked(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), 0)
        with pytest.raises(InsufficientCollateral):
            system.vault.repay_debt("alice", "WETH", 0, F("101"))

    def test_repay_without_tokens_rolls_back(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))
        system.token.transfer("alice", "bob", F("50"))

        with pytest.raises(InsufficientBalance):
            system.vault.repay_debt("alice", "WETH", F("50"), F("100"))

        position = system.vault.position("alice")
        assert position is not None
        assert position.collateral_amount == F("100")

    def test_zero_amounts_are_noop(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))
        before = len(system.events)

        position = system.vault.repay_debt("alice", "WETH", 0, 0)

        assert position == system.vault.position("alice")
        assert len(system.events) == before

    def test_missing_or_mismatched_position(self) -> None:
        system = _make_system()
        with pytest.raises(PositionNotFound):
            system.vault.repay_debt("alice", "WETH", 0, 0)
        system.vault.create_vault("alice", "WETH", F("10"), 0)
        with pytest.raises(CollateralAssetMismatch):
            system.vault.repay_debt("alice", "WBTC", 0, F("1"))

    def test_repay_allowed_while_gate_closed(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))
        system.oracle.submit_price("feeder", "JOE", F("0.5"))

        system.vault.repay_debt("alice", "WETH", F("50"), F("100"))

        assert system.token.total_supply == 0

    def test_price_drop_blocks_withdrawal(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))
        system.clock.advance(3600)  # type: ignore[attr-defined]
        system.oracle.submit_price("feeder", "WETH", F("0.8"))

        # 100 * 0.8 = 80 >= 75, but 90 * 0.8 = 72 < 75.
        with pytest.raises(InsufficientCollateral):
            system.vault.repay_debt("alice", "WETH", 0, F("10"))
        assert system.vault.max_mintable("alice") == F("3.333333333333333333")

    def test_underwater_position_can_deleverage_gradually(self) -> None:
        system = _make_system()
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))
        system.clock.advance(3600)  # type: ignore[attr-defined]
        system.oracle.submit_price("feeder", "WETH", F("0.6"))

        # 100 * 0.6 = 60 < 45 * 1.5 = 67.5: still short after the repayment.
        position = system.vault.repay_debt("alice", "WETH", F("5"), 0)

        assert position is not None
        assert position.debt_amount == F("45")
        assert system.token.total_supply == F("45")
        assert system.events.last().kind is EventKind.VAULT_REPAID
        with pytest.raises(InsufficientCollateral):
            system.vault.repay_debt("alice", "WETH", F("5"), F("1"))


class TestViews:
    def test_views_without_position(self) -> None:
        system = _make_system()
        with pytest.raises(PositionNotFound):
            system.vault.collateral_value("nobody")
        assert system.vault.total_collateral("WETH") == 0
        assert system.vault.supported_assets() == ["WETH"]

    def test_totals(self) -> None:
        system = _make_system()
        system.collateral["WETH"].mint("owner", "bob", F("100"))
        system.collateral["WETH"].approve("bob", "vault", F("100"))
        system.vault.create_vault("alice", "WETH", F("100"), F("50"))
        system.vault.create_vault("bob", "WETH", F("60"), F("20"))

        assert system.vault.total_collateral("WETH") == F("160")
        assert system.vault.total_debt() == F("70")
        assert [p.owner for p in system.vault.positions()] == ["alice", "bob"]
        _assert_solvent(system)
