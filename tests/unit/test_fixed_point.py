"""
JoeCoin: Tests for Fixed-Point Math

Test suite for ``joecoin.core.fixed_point``. Covers:
- Decimal string conversion in both directions
- Checked arithmetic and rounding direction
- Overflow, underflow and division-by-zero failures
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from joecoin.core import fixed_point as fp
from joecoin.core.errors import JoeCoinError


class TestConversion:
    def test_to_fixed_parses_decimal_strings(self) -> None:
        assert fp.to_fixed("1") == fp.SCALE
        assert fp.to_fixed("0.5") == 5 * 10**17
        assert fp.to_fixed("0.000000000000000001") == 1
        assert fp.to_fixed(Decimal("2.25")) == 2_250_000_000_000_000_000
        assert fp.to_fixed(3) == 3 * fp.SCALE

    def test_to_fixed_rejects_floats_and_bools(self) -> None:
        with pytest.raises(TypeError):
            fp.to_fixed(0.1)  # type: ignore[arg-type]
        with pytest.raises(TypeError):
            fp.to_fixed(True)  # type: ignore[arg-type]

    def test_to_fixed_rejects_excess_precision_and_garbage(self) -> None:
        with pytest.raises(ValueError):
            fp.to_fixed("0.0000000000000000001")
        with pytest.raises(ValueError):
            fp.to_fixed("one")
        with pytest.raises(ValueError):
            fp.to_fixed("Infinity")

    def test_to_fixed_range(self) -> None:
        with pytest.raises(fp.FixedPointUnderflow):
            fp.to_fixed("-1")
        with pytest.raises(fp.FixedPointOverflow):
            fp.to_fixed(str(2**256))

    def test_large_values_survive_without_rounding(self) -> None:
        value = fp.MAX_VALUE
        assert fp.to_fixed(fp.format_fixed(value)) == value

    def test_from_fixed_and_format(self) -> None:
        assert fp.from_fixed(fp.to_fixed("1.5")) == Decimal("1.5")
        assert fp.format_fixed(fp.to_fixed("100")) == "100"
        assert fp.format_fixed(0) == "0"
        assert fp.format_fixed(fp.to_fixed("0.012")) == "0.012"


class TestArithmetic:
    def test_mul_and_div_round_down(self) -> None:
        one_third = fp.div(fp.SCALE, 3 * fp.SCALE)
        assert one_third == 333_333_333_333_333_333
        assert fp.mul(one_third, 3 * fp.SCALE) == 999_999_999_999_999_999
        assert fp.mul(fp.to_fixed("1.5"), fp.to_fixed("2")) == fp.to_fixed("3")

    def test_add_sub_checked(self) -> None:
        assert fp.add(fp.SCALE, fp.SCALE) == 2 * fp.SCALE
        assert fp.sub(fp.SCALE, fp.SCALE) == 0
        with pytest.raises(fp.FixedPointUnderflow):
            fp.sub(0, 1)
        with pytest.raises(fp.FixedPointOverflow):
            fp.add(fp.MAX_VALUE, 1)
        with pytest.raises(fp.FixedPointOverflow):
            fp.mul(fp.MAX_VALUE, 2 * fp.SCALE)

    def test_division_by_zero(self) -> None:
        with pytest.raises(fp.FixedPointDivisionByZero):
            fp.div(fp.SCALE, 0)
        # Callers may catch either the arithmetic or the domain base class.
        with pytest.raises(ZeroDivisionError):
            fp.div(1, 0)
        with pytest.raises(JoeCoinError):
            fp.div(1, 0)

    def test_abs_diff_and_clamp(self) -> None:
        assert fp.abs_diff(3, 5) == 2
        assert fp.abs_diff(5, 3) == 2
        assert fp.clamp(2 * fp.SCALE) == fp.SCALE
        assert fp.clamp(7, 10, 20) == 10
        assert fp.clamp(15, 10, 20) == 15
        with pytest.raises(ValueError):
            fp.clamp(1, 5, 2)

    def test_arithmetic_rejects_non_int(self) -> None:
        with pytest.raises(TypeError):
            fp.add(1, 1.0)  # type: ignore[arg-type]
