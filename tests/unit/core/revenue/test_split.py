"""
core/revenue/split.py 테스트

분배 규칙: owner = round_half_up(amount * 0.70), growth = amount - owner
"""

from decimal import Decimal

import pytest

from core.constants import LedgerDefaults
from core.revenue.errors import InvalidAmount
from core.revenue.split import RevenueSplit, calculate_split, validate_amount


class TestCalculateSplit:
    """calculate_split 테스트"""

    def test_hundred(self) -> None:
        """100 → 소유자 70, Growth Fund 30"""
        split = calculate_split(Decimal("100"))

        assert split.owner_share == Decimal("70.00")
        assert split.growth_fund_share == Decimal("30.00")
        assert split.amount == Decimal("100.00")

    def test_zero(self) -> None:
        """0 → 0 / 0"""
        split = calculate_split(0)

        assert split.owner_share == Decimal("0")
        assert split.growth_fund_share == Decimal("0")

    def test_one_cent(self) -> None:
        """0.01 → 소유자 0.01 (0.007 반올림), Growth Fund 0"""
        split = calculate_split("0.01")

        assert split.owner_share == Decimal("0.01")
        assert split.growth_fund_share == Decimal("0.00")

    def test_half_up_rounding(self) -> None:
        """0.05 * 0.7 = 0.035 → 0.04 (ROUND_HALF_UP)"""
        split = calculate_split("0.05")

        assert split.owner_share == Decimal("0.04")
        assert split.growth_fund_share == Decimal("0.01")

    @pytest.mark.parametrize(
        "amount",
        ["0.01", "0.03", "1.11", "33.33", "99.99", "12345.67", "0.5", 7, 19.99],
    )
    def test_shares_sum_to_amount(self, amount) -> None:
        """두 몫의 합은 항상 금액과 정확히 일치"""
        split = calculate_split(amount)

        assert split.growth_fund_share + split.owner_share == split.amount
        assert split.growth_fund_share >= 0
        assert split.owner_share >= 0

    def test_float_input_is_exact(self) -> None:
        """float 입력은 문자열을 거쳐 변환 (이진 오차 없음)"""
        split = calculate_split(19.99)

        assert split.amount == Decimal("19.99")
        assert split.owner_share == Decimal("13.99")
        assert split.growth_fund_share == Decimal("6.00")

    def test_custom_owner_rate(self) -> None:
        """설정된 비율 사용"""
        split = calculate_split(Decimal("100"), owner_rate=Decimal("0.65"))

        assert split.owner_share == Decimal("65.00")
        assert split.growth_fund_share == Decimal("35.00")

    def test_owner_rate_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            calculate_split(Decimal("100"), owner_rate=Decimal("1.5"))

    def test_result_is_frozen(self) -> None:
        split = calculate_split(Decimal("10"))

        assert isinstance(split, RevenueSplit)
        with pytest.raises(AttributeError):
            split.owner_share = Decimal("0")  # type: ignore[misc]


class TestValidateAmount:
    """validate_amount 테스트"""

    @pytest.mark.parametrize("amount", ["-1", -0.01, Decimal("-100")])
    def test_negative(self, amount) -> None:
        with pytest.raises(InvalidAmount):
            validate_amount(amount)

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity", float("inf")])
    def test_non_finite(self, amount) -> None:
        with pytest.raises(InvalidAmount):
            validate_amount(amount)

    @pytest.mark.parametrize("amount", ["abc", "", None, True, [1]])
    def test_not_a_number(self, amount) -> None:
        with pytest.raises(InvalidAmount):
            validate_amount(amount)

    def test_sub_cent_precision(self) -> None:
        """최소 통화 단위보다 세밀한 금액은 거부"""
        with pytest.raises(InvalidAmount):
            validate_amount("0.001")

    def test_trailing_zeros_allowed(self) -> None:
        assert validate_amount("10.500") == Decimal("10.50")

    def test_negative_zero_normalized(self) -> None:
        """-0은 0으로 정규화"""
        value = validate_amount("-0")

        assert value == Decimal("0")
        assert not value.is_signed()

    def test_error_code(self) -> None:
        with pytest.raises(InvalidAmount) as exc_info:
            validate_amount("-5")

        assert exc_info.value.code == "INVALID_AMOUNT"
        assert exc_info.value.status_code == 400

    def test_maximum_allowed(self) -> None:
        assert validate_amount(LedgerDefaults.MAX_AMOUNT) == LedgerDefaults.MAX_AMOUNT

    @pytest.mark.parametrize("amount", ["1000000000000.01", Decimal("100000000000000000"), 1e30])
    def test_above_maximum(self, amount) -> None:
        """cent 정수가 int64를 넘을 수 있는 금액은 거부"""
        with pytest.raises(InvalidAmount, match="exceeds maximum"):
            validate_amount(amount)
