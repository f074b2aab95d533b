"""
Payout Scheduler

종료 시각이 지난 ACTIVE 정산 기간을 자동 마감하고,
마감으로 생성된 지급을 바로 처리.

cron 등 외부 스케줄러가 scripts/process_payouts.py --close-due 로 주기 실행.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from core.revenue.audit import RESOURCE_PERIOD, AuditStore
from core.revenue.errors import LedgerError
from core.revenue.payouts import PayoutProcessor
from core.revenue.periods import RevenuePeriodManager
from core.revenue.store import run_atomic
from core.types import AuditAction, AuditSeverity, Caller, UserRole
from core.utils.timezone import db_timestamp, now_utc

logger = logging.getLogger(__name__)

# 자동 마감 주체
SCHEDULER_CALLER = Caller.create("scheduler", UserRole.ADMIN)


@dataclass(frozen=True)
class ScheduledCloseResult:
    """기간 1건의 자동 마감 결과"""

    period_id: str
    success: bool
    message: str
    payout_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "period_id": self.period_id,
            "success": self.success,
            "message": self.message,
            "payout_id": self.payout_id,
        }


class PayoutScheduler:
    """기간 자동 마감 + 지급

    Args:
        manager: 정산 기간 관리자
        processor: 지급 처리기 (None이면 지급은 PENDING으로 남김)
        clock: 현재 시각 함수 (테스트에서 교체)
    """

    def __init__(
        self,
        manager: RevenuePeriodManager,
        processor: PayoutProcessor | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.manager = manager
        self.processor = processor
        self.audit = AuditStore(manager.db)
        self._clock = clock

    async def close_due_periods(self) -> dict[str, Any]:
        """end_date <= 현재 시각인 ACTIVE 기간 마감 (종료 시각 순)

        한 기간의 실패는 AUTO_PAYOUT_FAILED 감사 로그로 남기고 다음 기간을 계속 처리.

        Returns:
            {"due": n, "successful": n, "failed": n, "results": [ScheduledCloseResult, ...]}
        """
        now = db_timestamp(self._clock())
        due_ids = await self.manager.periods.list_due_ids(now)
        results = [await self._close_and_pay(period_id) for period_id in due_ids]

        successful = sum(1 for r in results if r.success)
        summary = {
            "due": len(results),
            "successful": successful,
            "failed": len(results) - successful,
            "results": results,
        }

        logger.info(
            "Due periods processed",
            extra={k: v for k, v in summary.items() if k != "results"},
        )

        return summary

    async def _close_and_pay(self, period_id: str) -> ScheduledCloseResult:
        payout_id = None
        try:
            closed = await self.manager.close_period(SCHEDULER_CALLER, period_id)
            if closed.payout is None:
                return ScheduledCloseResult(period_id, True, "Period closed without payout")

            payout_id = closed.payout.payout_id
            if self.processor is None:
                return ScheduledCloseResult(period_id, True, "Payout left PENDING", payout_id)

            result = await self.processor.process_payout(payout_id)
            return ScheduledCloseResult(period_id, result.success, result.message, payout_id)

        except LedgerError as e:
            logger.error(
                f"Auto payout failed: {e.code}",
                extra={"period_id": period_id, "payout_id": payout_id, "error": e.message},
            )
            await self._record_failure(period_id, payout_id, e)
            return ScheduledCloseResult(period_id, False, e.message, payout_id)

    async def _record_failure(self, period_id: str, payout_id: str | None, error: LedgerError) -> None:
        async def work() -> None:
            await self.audit.record(
                AuditAction.AUTO_PAYOUT_FAILED,
                RESOURCE_PERIOD,
                period_id,
                db_timestamp(self._clock()),
                user_id=SCHEDULER_CALLER.id,
                context={"payout_id": payout_id, "code": error.code},
                severity=AuditSeverity.ERROR,
                error=error.message,
            )

        await run_atomic(self.manager.db, work)
