"""
Revenue Ledger

수익 기록 및 SystemFund 조회.

record_revenue()는 아래 세 쓰기를 하나의 트랜잭션으로 수행:
1. RevenueEvent 저장
2. 사용자 잔액 += owner_share
3. SystemFund += (growth_fund_share, owner_share)
중간에 실패하면 세 쓰기 모두 롤백.
"""

import logging
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import LedgerConfig
from core.revenue.auth import require_admin, require_role
from core.revenue.errors import InvalidRevenueType
from core.revenue.models import FundSnapshot, RevenueEvent
from core.revenue.period_store import PeriodStore
from core.revenue.payout_store import PayoutStore
from core.revenue.split import calculate_split
from core.revenue.store import RevenueStore, run_atomic
from core.types import Caller, RevenueType
from core.utils.money import format_amount
from core.utils.timezone import db_timestamp, now_utc

logger = logging.getLogger(__name__)


def parse_revenue_type(value: RevenueType | str) -> RevenueType:
    """수익 유형 검증

    Raises:
        InvalidRevenueType: 정의되지 않은 유형
    """
    if isinstance(value, RevenueType):
        return value
    try:
        return RevenueType(str(value).upper())
    except ValueError as e:
        raise InvalidRevenueType(f"Unknown revenue type: {value!r}") from e


class RevenueLedger:
    """수익 원장

    Args:
        db: SQLite 어댑터
        config: 분배 설정 (owner_rate 등)
        clock: 현재 시각 함수 (테스트에서 교체)

    사용 예시:
    ```python
    ledger = RevenueLedger(db, settings.ledger)
    event = await ledger.record_revenue(caller, Decimal("100"), RevenueType.PRODUCT_SALE)
    fund = await ledger.get_fund_status(caller)
    ```
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        config: LedgerConfig | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.db = db
        self.config = config or LedgerConfig()
        self.store = RevenueStore(db)
        self._clock = clock

    async def record_revenue(
        self,
        caller: Caller,
        amount: Any,
        revenue_type: RevenueType | str,
        description: str | None = None,
        project_id: str | None = None,
        product_id: str | None = None,
        content_id: str | None = None,
    ) -> RevenueEvent:
        """수익 기록

        Args:
            caller: 요청 주체 (수익이 귀속될 사용자)
            amount: 수익 금액 (0 이상, 최소 통화 단위까지)
            revenue_type: 수익 유형

        Returns:
            저장된 RevenueEvent

        Raises:
            Unauthorized: 요청 주체 없음
            InvalidAmount: 금액이 유효하지 않음 (아무것도 저장하지 않음)
            StorageConflict: 트랜잭션 충돌 (재시도 1회 후)
        """
        require_role(caller)
        rtype = parse_revenue_type(revenue_type)
        split = calculate_split(amount, self.config.owner_rate)

        event = RevenueEvent(
            event_id=str(uuid.uuid4()),
            amount=split.amount,
            revenue_type=rtype.value,
            user_id=caller.id,
            growth_fund_share=split.growth_fund_share,
            owner_share=split.owner_share,
            created_at=db_timestamp(self._clock()),
            description=description,
            project_id=project_id,
            product_id=product_id,
            content_id=content_id,
        )

        async def work() -> None:
            await self.store.ensure_user(caller.id, caller.role)
            await self.store.insert_event(event)
            await self.store.increment_user_balance(caller.id, event.owner_share)
            await self.store.apply_fund_increment(event.growth_fund_share, event.owner_share)

        await run_atomic(self.db, work)

        logger.info(
            f"Revenue recorded: {event.revenue_type} {format_amount(event.amount)}",
            extra={
                "event_id": event.event_id,
                "user_id": caller.id,
                "growth_fund_share": str(event.growth_fund_share),
                "owner_share": str(event.owner_share),
            },
        )

        return event

    async def get_fund_status(self, caller: Caller) -> FundSnapshot:
        """SystemFund 현재 값

        커밋된 상태만 읽으므로 부분 적용된 값은 보이지 않음.
        """
        require_role(caller)
        return await self.store.get_fund()

    async def list_user_revenue(self, caller: Caller, limit: int = 30) -> dict[str, Any]:
        """요청 주체의 수익 이벤트와 합계

        Returns:
            {"events": [RevenueEvent, ...], "summary": {...}}
        """
        require_role(caller)
        events = await self.store.list_events_by_user(caller.id, limit)
        summary = await self.store.get_user_summary(caller.id)
        return {"events": events, "summary": summary}

    async def get_user_balance(self, caller: Caller) -> Decimal:
        require_role(caller)
        return await self.store.get_user_balance(caller.id)

    async def get_revenue_stats(self, caller: Caller, days: int = 30) -> dict[str, Any]:
        """관리자용 수익 통계

        최근 days일 유형별 합계, SystemFund, 미정산 잔액, 지급 완료 합계.
        """
        require_admin(caller)

        since = db_timestamp(self._clock() - timedelta(days=days))
        by_type = await self.store.get_totals_by_type(since)
        fund = await self.store.get_fund()
        pending = await PeriodStore(self.db).get_pending_balance()
        paid_out = await PayoutStore(self.db).get_completed_total()

        return {
            "days": days,
            "since": since,
            "by_type": by_type,
            "fund": fund,
            "pending_balance": pending,
            "completed_payouts": paid_out,
            "owner_rate": self.config.owner_rate,
        }
