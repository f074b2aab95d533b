"""
Revenue Period Manager

정산 기간 생성 / 마감 / 조회.

기간은 반열린 구간 [start_date, end_date).
마감 시 창 안의 미귀속 수익을 합산해 기간에 귀속하고,
auto_payout이면 같은 트랜잭션에서 PENDING 지급을 생성.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import LedgerConfig
from core.constants import Defaults, LedgerDefaults
from core.domain.state_machines import PeriodStateMachine
from core.revenue.audit import RESOURCE_PAYOUT, RESOURCE_PERIOD, AuditStore
from core.revenue.auth import require_admin, require_role
from core.revenue.errors import AlreadyClosed, InvalidRange, NotFound, OverlappingPeriod
from core.revenue.models import Payout, RevenuePeriod
from core.revenue.payout_store import PayoutStore
from core.revenue.period_store import PeriodStore
from core.revenue.store import run_atomic
from core.types import AuditAction, Caller, PayoutStatus, PeriodStatus
from core.utils.money import format_amount
from core.utils.timezone import db_timestamp, now_utc, to_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodCloseResult:
    """기간 마감 결과"""

    period: RevenuePeriod
    payout: Payout | None = None

    def to_dict(self) -> dict:
        return {
            "period": self.period.to_dict(),
            "payout": self.payout.to_dict() if self.payout else None,
        }


class RevenuePeriodManager:
    """정산 기간 관리자

    Args:
        db: SQLite 어댑터
        config: 정산 설정 (지급 수령인 등)
        clock: 현재 시각 함수 (테스트에서 교체)
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        config: LedgerConfig | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.db = db
        self.config = config or LedgerConfig()
        self.periods = PeriodStore(db)
        self.payouts = PayoutStore(db)
        self.audit = AuditStore(db)
        self._clock = clock

    async def create_period(
        self,
        caller: Caller,
        start_date: datetime,
        end_date: datetime,
        auto_payout: bool = True,
    ) -> RevenuePeriod:
        """정산 기간 생성 (ACTIVE)

        겹침 검사와 저장을 하나의 IMMEDIATE 트랜잭션에서 수행하여
        동시 생성 요청 간에도 겹치는 기간이 생기지 않음.

        Raises:
            Forbidden: ADMIN/OWNER가 아님
            InvalidRange: end_date <= start_date
            OverlappingPeriod: 기존 ACTIVE/CLOSED 기간과 겹침
        """
        require_admin(caller)

        start = to_utc(start_date)
        end = to_utc(end_date)
        if end <= start:
            raise InvalidRange(
                f"end_date must be after start_date: {start.isoformat()} >= {end.isoformat()}"
            )

        now = db_timestamp(self._clock())
        period = RevenuePeriod(
            period_id=str(uuid.uuid4()),
            start_date=db_timestamp(start),
            end_date=db_timestamp(end),
            status=PeriodStatus.ACTIVE.value,
            auto_payout=auto_payout,
            created_at=now,
            created_by=caller.id,
        )

        async def work() -> None:
            existing = await self.periods.find_overlapping(period.start_date, period.end_date)
            if existing is not None:
                raise OverlappingPeriod(
                    f"Period overlaps {existing.period_id} "
                    f"[{existing.start_date}, {existing.end_date})"
                )
            await self.periods.insert(period)
            await self.audit.record(
                AuditAction.REVENUE_PERIOD_CREATED,
                RESOURCE_PERIOD,
                period.period_id,
                now,
                user_id=caller.id,
                context={
                    "start_date": period.start_date,
                    "end_date": period.end_date,
                    "auto_payout": period.auto_payout,
                },
            )

        await run_atomic(self.db, work)

        logger.info(
            "Revenue period created",
            extra={
                "period_id": period.period_id,
                "start_date": period.start_date,
                "end_date": period.end_date,
                "created_by": caller.id,
            },
        )

        return period

    async def close_period(self, caller: Caller, period_id: str) -> PeriodCloseResult:
        """정산 기간 마감

        1. 창 안의 미귀속 수익 합산 (payable_total = 수익 합계)
        2. 이벤트를 기간에 귀속
        3. ACTIVE → CLOSED (compare-and-set)
        4. auto_payout이고 합계 > 0이면 PENDING 지급 생성

        Raises:
            Forbidden: ADMIN/OWNER가 아님
            NotFound: 기간 없음
            AlreadyClosed: 이미 마감됨 (동시 마감 포함)
        """
        require_admin(caller)

        async def work() -> PeriodCloseResult:
            period = await self.periods.get(period_id)
            if period is None:
                raise NotFound(f"Period not found: {period_id}")

            if not PeriodStateMachine(period.status).can_transition(PeriodStatus.CLOSED):
                raise AlreadyClosed(f"Period is already {period.status}: {period_id}")

            now = db_timestamp(self._clock())
            totals = await self.periods.aggregate_unattributed(period.start_date, period.end_date)
            await self.periods.attribute_events(period_id, period.start_date, period.end_date)

            if not await self.periods.mark_closed(period_id, totals, now):
                raise AlreadyClosed(f"Period was closed concurrently: {period_id}")

            payout = None
            payable: Decimal = totals["payable_total"]
            if period.auto_payout and payable > 0:
                payout = await self._create_payout(period_id, payable, now)
                await self.periods.link_payout(period_id, payout.payout_id)
                await self.audit.record(
                    AuditAction.PAYOUT_CREATED,
                    RESOURCE_PAYOUT,
                    payout.payout_id,
                    now,
                    user_id=caller.id,
                    context={
                        "period_id": period_id,
                        "recipient_id": payout.recipient_id,
                        "amount": format_amount(payout.amount),
                    },
                )

            closed = await self.periods.get(period_id)
            await self.audit.record(
                AuditAction.REVENUE_PERIOD_CLOSED,
                RESOURCE_PERIOD,
                period_id,
                now,
                user_id=caller.id,
                context={
                    "payable_total": format_amount(payable),
                    "transaction_count": closed.transaction_count,
                    "payout_id": payout.payout_id if payout else None,
                },
            )
            return PeriodCloseResult(period=closed, payout=payout)

        result = await run_atomic(self.db, work)

        logger.info(
            f"Revenue period closed: payable={format_amount(result.period.payable_total)}",
            extra={
                "period_id": period_id,
                "transaction_count": result.period.transaction_count,
                "payout_id": result.payout.payout_id if result.payout else None,
            },
        )

        return result

    async def _create_payout(self, period_id: str, amount: Decimal, now: str) -> Payout:
        """마감 트랜잭션 안에서 PENDING 지급 생성"""
        recipient = self.config.payout_recipient_id
        method = await self.payouts.get_default_method(recipient)

        payout = Payout(
            payout_id=str(uuid.uuid4()),
            recipient_id=recipient,
            amount=amount,
            status=PayoutStatus.PENDING.value,
            created_at=now,
            updated_at=now,
            period_id=period_id,
            payment_method=method.method_type if method else LedgerDefaults.DEFAULT_PAYMENT_METHOD,
            notes=f"Revenue share for period {period_id}",
        )
        await self.payouts.insert(payout)
        return payout

    async def get_period(self, caller: Caller, period_id: str) -> RevenuePeriod:
        require_role(caller)
        period = await self.periods.get(period_id)
        if period is None:
            raise NotFound(f"Period not found: {period_id}")
        return period

    async def list_periods(
        self,
        caller: Caller,
        status: PeriodStatus | str | None = None,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[RevenuePeriod]:
        """정산 기간 목록 (최신 시작일 순)"""
        require_role(caller)
        status_value = status.value if isinstance(status, PeriodStatus) else status
        return await self.periods.list_periods(status_value, limit)

    async def get_pending_balance(self, caller: Caller) -> Decimal:
        """마감된 기간에 귀속되지 않은 수익 합계"""
        require_role(caller)
        return await self.periods.get_pending_balance()
