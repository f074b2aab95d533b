"""
수익 분배 계산

owner_share = round_half_up(amount * OWNER_RATE, 0.01)
growth_fund_share = amount - owner_share

Growth Fund 몫을 나머지로 계산하므로 두 몫의 합은 항상 amount와 정확히 일치.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from core.constants import LedgerDefaults
from core.revenue.errors import InvalidAmount
from core.utils.money import is_currency_precise, round_currency, to_decimal


@dataclass(frozen=True)
class RevenueSplit:
    """수익 분배 결과 (불변)"""

    amount: Decimal
    growth_fund_share: Decimal
    owner_share: Decimal


def validate_amount(amount: Any) -> Decimal:
    """금액 검증 후 Decimal 반환

    Raises:
        InvalidAmount: 숫자가 아니거나, 음수/비유한수이거나, MAX_AMOUNT 초과이거나,
            최소 통화 단위보다 세밀한 금액
    """
    try:
        value = to_decimal(amount)
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(f"Amount is not a number: {amount!r}") from e

    if not value.is_finite():
        raise InvalidAmount(f"Amount must be finite: {amount!r}")

    if value < 0:
        raise InvalidAmount(f"Amount must not be negative: {amount!r}")

    if value > LedgerDefaults.MAX_AMOUNT:
        raise InvalidAmount(
            f"Amount exceeds maximum {LedgerDefaults.MAX_AMOUNT}: {amount!r}"
        )

    try:
        precise = is_currency_precise(value)
    except InvalidOperation as e:
        # quantize 정밀도 초과 (비정상적으로 큰 금액)
        raise InvalidAmount(f"Amount is out of range: {amount!r}") from e

    if not precise:
        raise InvalidAmount(
            f"Amount must not be finer than {LedgerDefaults.CURRENCY_UNIT}: {amount!r}"
        )

    return abs(round_currency(value))


def calculate_split(
    amount: Any,
    owner_rate: Decimal = LedgerDefaults.OWNER_RATE,
) -> RevenueSplit:
    """수익을 소유자 몫 / Growth Fund 몫으로 분배

    Args:
        amount: 수익 금액 (0 이상)
        owner_rate: 소유자 몫 비율 (0~1)

    Returns:
        RevenueSplit

    Raises:
        InvalidAmount: 금액이 유효하지 않은 경우
        ValueError: owner_rate가 0~1 범위를 벗어난 경우

    Example:
        >>> calculate_split(Decimal("100"))
        RevenueSplit(amount=Decimal('100.00'), growth_fund_share=Decimal('30.00'), owner_share=Decimal('70.00'))
    """
    if not Decimal(0) <= owner_rate <= Decimal(1):
        raise ValueError(f"owner_rate must be within [0, 1]: {owner_rate}")

    value = validate_amount(amount)

    owner_share = round_currency(value * owner_rate)
    growth_fund_share = value - owner_share

    return RevenueSplit(
        amount=value,
        growth_fund_share=growth_fund_share,
        owner_share=owner_share,
    )
