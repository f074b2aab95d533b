"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from adapters.models import PayoutReceipt, PayoutTransfer
    from core.types import Caller


@runtime_checkable
class IPaymentRail(Protocol):
    """외부 지급 인터페이스

    소유자 지급을 실제 송금으로 실행.
    실패 시 PaymentRailError를 발생시켜야 함.
    """

    async def send_payout(self, transfer: "PayoutTransfer") -> "PayoutReceipt":
        """송금 실행

        Args:
            transfer: 지급 요청

        Returns:
            외부 거래 ID를 담은 PayoutReceipt

        Raises:
            PaymentRailError: 송금 실패
        """
        ...


@runtime_checkable
class ICallerResolver(Protocol):
    """요청 주체 확인 인터페이스

    인증 토큰을 검증하여 사용자 ID와 역할을 반환.
    """

    def resolve(self, token: str | None) -> "Caller":
        """토큰 → Caller

        Raises:
            Unauthorized: 토큰 없음/위조/만료
            Forbidden: 역할 정보 없음
        """
        ...


@runtime_checkable
class INotifier(Protocol):
    """알림 서비스 인터페이스

    지급 결과, 에러 알림 등을 외부 서비스로 전송.
    """

    async def send(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """알림 전송

        Args:
            message: 알림 메시지
            level: 알림 레벨 (INFO, WARNING, ERROR, CRITICAL)
            extra: 추가 데이터 (선택)

        Returns:
            전송 성공 여부
        """
        ...

    async def send_payout_alert(
        self,
        payout_id: str,
        amount: str,
        status: str,
        detail: str | None = None,
    ) -> bool:
        """지급 결과 알림 (포맷팅된 메시지)

        Args:
            payout_id: 지급 ID
            amount: 지급 금액
            status: 지급 상태 (COMPLETED/FAILED)
            detail: 거래 ID 또는 실패 사유

        Returns:
            전송 성공 여부
        """
        ...
