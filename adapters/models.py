"""
어댑터 공통 데이터 모델

외부 지급(payment rail) 요청/응답을 표준화한 모델.
모든 금액은 Decimal 타입 사용.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


class PaymentRailError(Exception):
    """외부 지급 실패 (거절, 타임아웃, 응답 오류)

    Attributes:
        retryable: 일시적 오류 여부 (타임아웃, 5xx)
    """

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


@dataclass(frozen=True)
class PayoutTransfer:
    """외부 지급 요청

    Attributes:
        payout_id: 지급 ID (외부 시스템 멱등 키로 사용)
        recipient_id: 수령인
        amount: 송금 금액 (수수료 차감 후)
        currency: 통화 코드
        method_type: 지급 수단 유형 (BANK_TRANSFER 등)
        method_details: 지급 수단 상세 (계좌 정보 등)
    """

    payout_id: str
    recipient_id: str
    amount: Decimal
    currency: str = "USD"
    method_type: str = "BANK_TRANSFER"
    method_details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PayoutReceipt:
    """외부 지급 결과

    Attributes:
        transaction_id: 외부 거래 ID
        status: 외부 시스템 상태 문자열
        raw: 원본 응답 (디버깅용)
    """

    transaction_id: str
    status: str = "COMPLETED"
    raw: dict[str, Any] = field(default_factory=dict)
