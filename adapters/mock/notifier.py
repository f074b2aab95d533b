"""
Mock 알림 서비스

테스트용 Mock Notifier.
INotifier Protocol 준수.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from core.utils.timezone import now_utc


@dataclass
class NotificationRecord:
    """알림 기록"""

    message: str
    level: str
    extra: dict[str, Any] | None
    timestamp: datetime
    sent: bool


class MockNotifier:
    """Mock 알림 서비스

    INotifier Protocol 구현.
    발송된 모든 알림을 기록하여 테스트에서 검증 가능.

    사용 예시:
    ```python
    notifier = MockNotifier()

    await notifier.send("테스트 메시지", level="INFO")

    # 발송 기록 확인
    assert len(notifier.notifications) == 1
    assert notifier.notifications[0].message == "테스트 메시지"
    ```
    """

    def __init__(self, should_fail: bool = False):
        """
        Args:
            should_fail: True면 모든 발송 실패 (에러 시나리오 테스트용)
        """
        self.should_fail = should_fail
        self.notifications: list[NotificationRecord] = []

    async def send(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """알림 전송"""
        self.notifications.append(
            NotificationRecord(
                message=message,
                level=level,
                extra=extra,
                timestamp=now_utc(),
                sent=not self.should_fail,
            )
        )
        return not self.should_fail

    async def send_payout_alert(
        self,
        payout_id: str,
        amount: str,
        status: str,
        detail: str | None = None,
    ) -> bool:
        """지급 결과 알림"""
        message = f"[Payout {status}] {payout_id} {amount}"
        if detail:
            message = f"{message} ({detail})"

        return await self.send(
            message=message,
            level="INFO" if status == "COMPLETED" else "ERROR",
            extra={
                "payout_id": payout_id,
                "amount": amount,
                "status": status,
                "detail": detail,
            },
        )

    # -------------------------------------------------------------------------
    # 테스트 헬퍼 메서드
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """알림 기록 초기화"""
        self.notifications.clear()

    def get_by_level(self, level: str) -> list[NotificationRecord]:
        """특정 레벨의 알림 조회"""
        return [n for n in self.notifications if n.level == level]

    def get_errors(self) -> list[NotificationRecord]:
        """에러 레벨 알림 조회"""
        return self.get_by_level("ERROR")

    @property
    def last_notification(self) -> NotificationRecord | None:
        """마지막 알림 조회"""
        return self.notifications[-1] if self.notifications else None

    @property
    def message_count(self) -> int:
        """전체 알림 수"""
        return len(self.notifications)

    @property
    def failed_count(self) -> int:
        """발송 실패한 알림 수"""
        return sum(1 for n in self.notifications if not n.sent)
