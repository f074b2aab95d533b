"""
금액 유틸리티

Python에서는 Decimal, DB에서는 최소 통화 단위(cent) 정수로 금액을 다룸.
정수 컬럼이어야 SQLite가 `col = col + ?` 증가 연산을 정확하게 수행함.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from core.constants import LedgerDefaults

# 1 통화 단위 = MINOR_PER_UNIT 최소 단위
MINOR_PER_UNIT = int(Decimal(1) / LedgerDefaults.CURRENCY_UNIT)


def to_decimal(value: Any) -> Decimal:
    """임의 입력을 Decimal로 변환

    float는 str을 거쳐 변환 (이진 표현 오차 방지).

    Raises:
        InvalidOperation: 숫자로 해석할 수 없는 경우
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidOperation(f"bool is not an amount: {value!r}")
    if isinstance(value, (int, float, str)):
        return Decimal(str(value))
    raise InvalidOperation(f"Unsupported amount type: {type(value).__name__}")


def round_currency(value: Decimal) -> Decimal:
    """최소 통화 단위로 반올림 (ROUND_HALF_UP)

    Example:
        >>> round_currency(Decimal("0.035"))
        Decimal('0.04')
    """
    return value.quantize(LedgerDefaults.CURRENCY_UNIT, rounding=ROUND_HALF_UP)


def is_currency_precise(value: Decimal) -> bool:
    """최소 통화 단위보다 세밀한 자릿수가 없는지 확인"""
    return value == round_currency(value)


def to_minor(value: Decimal) -> int:
    """Decimal 금액 → 최소 단위 정수

    Raises:
        ValueError: 최소 통화 단위보다 세밀한 금액
    """
    if not is_currency_precise(value):
        raise ValueError(f"Amount has sub-unit precision: {value}")
    return int(value * MINOR_PER_UNIT)


def from_minor(value: int | None) -> Decimal:
    """최소 단위 정수 → Decimal 금액 (None이면 0)"""
    if value is None:
        return round_currency(Decimal(0))
    return round_currency(Decimal(value) / MINOR_PER_UNIT)


def format_amount(value: Decimal) -> str:
    """응답용 금액 문자열 (소수점 2자리 고정)"""
    return str(round_currency(value))
