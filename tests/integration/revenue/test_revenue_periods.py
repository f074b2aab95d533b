"""
RevenuePeriodManager 통합 테스트

기간 생성 / 겹침 검사 / 마감 집계 / 자동 지급 생성.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import LedgerConfig
from core.revenue.errors import (
    AlreadyClosed,
    Forbidden,
    InvalidRange,
    NotFound,
    OverlappingPeriod,
)
from core.revenue.ledger import RevenueLedger
from core.revenue.payout_methods import PayoutMethodService
from core.revenue.payout_store import PayoutStore
from core.revenue.periods import RevenuePeriodManager
from core.types import Caller, PeriodStatus, RevenueType


def utc(day: int, month: int = 3) -> datetime:
    return datetime(2026, month, day, tzinfo=timezone.utc)


@pytest.fixture
def ledger(db: SQLiteAdapter, clock) -> RevenueLedger:
    return RevenueLedger(db, clock=clock)


@pytest.fixture
def manager(db: SQLiteAdapter, clock) -> RevenuePeriodManager:
    return RevenuePeriodManager(db, clock=clock)


class TestCreatePeriod:
    @pytest.mark.asyncio
    async def test_create(self, manager: RevenuePeriodManager, admin: Caller) -> None:
        period = await manager.create_period(admin, utc(1), utc(8))

        assert period.status == "ACTIVE"
        assert period.auto_payout is True
        assert period.start_date == "2026-03-01T00:00:00.000000Z"
        assert period.end_date == "2026-03-08T00:00:00.000000Z"
        assert period.created_by == "admin-1"
        assert period.payable_total is None

        assert await manager.get_period(admin, period.period_id) == period

    @pytest.mark.asyncio
    async def test_naive_datetimes_are_utc(self, manager: RevenuePeriodManager, owner: Caller) -> None:
        period = await manager.create_period(owner, datetime(2026, 3, 1), datetime(2026, 3, 2))

        assert period.start_date == "2026-03-01T00:00:00.000000Z"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("end", [utc(1), utc(28, month=2)])
    async def test_invalid_range(
        self, manager: RevenuePeriodManager, admin: Caller, end: datetime
    ) -> None:
        """end_date <= start_date"""
        with pytest.raises(InvalidRange):
            await manager.create_period(admin, utc(1), end)

    @pytest.mark.asyncio
    async def test_overlap_rejected(self, manager: RevenuePeriodManager, admin: Caller) -> None:
        await manager.create_period(admin, utc(1), utc(8))

        with pytest.raises(OverlappingPeriod) as exc_info:
            await manager.create_period(admin, utc(7), utc(14))

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_contained_overlap_rejected(
        self, manager: RevenuePeriodManager, admin: Caller
    ) -> None:
        await manager.create_period(admin, utc(1), utc(31))

        with pytest.raises(OverlappingPeriod):
            await manager.create_period(admin, utc(10), utc(11))

    @pytest.mark.asyncio
    async def test_adjacent_allowed(self, manager: RevenuePeriodManager, admin: Caller) -> None:
        """[1, 8)과 [8, 15)는 겹치지 않음"""
        await manager.create_period(admin, utc(1), utc(8))
        second = await manager.create_period(admin, utc(8), utc(15))

        assert second.status == "ACTIVE"

    @pytest.mark.asyncio
    async def test_overlap_with_closed_period(
        self, manager: RevenuePeriodManager, admin: Caller
    ) -> None:
        period = await manager.create_period(admin, utc(1), utc(8))
        await manager.close_period(admin, period.period_id)

        with pytest.raises(OverlappingPeriod):
            await manager.create_period(admin, utc(5), utc(6))

    @pytest.mark.asyncio
    async def test_concurrent_overlapping_creates(
        self, manager: RevenuePeriodManager, admin: Caller
    ) -> None:
        """동시 생성 중 하나만 성공"""
        results = await asyncio.gather(
            manager.create_period(admin, utc(1), utc(8)),
            manager.create_period(admin, utc(2), utc(9)),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        assert len(errors) == 1
        assert isinstance(errors[0], OverlappingPeriod)

    @pytest.mark.asyncio
    async def test_user_forbidden(self, manager: RevenuePeriodManager, user: Caller) -> None:
        with pytest.raises(Forbidden):
            await manager.create_period(user, utc(1), utc(8))


class TestClosePeriod:
    @pytest.mark.asyncio
    async def test_close_with_auto_payout(
        self,
        manager: RevenuePeriodManager,
        ledger: RevenueLedger,
        admin: Caller,
        user: Caller,
        clock,
        db: SQLiteAdapter,
    ) -> None:
        """50 + 25 → payable 75, PENDING 지급 75 생성"""
        period = await manager.create_period(admin, utc(1), utc(8), auto_payout=True)

        clock.set(utc(2))
        first = await ledger.record_revenue(user, "50", RevenueType.PRODUCT_SALE)
        clock.set(utc(5))
        second = await ledger.record_revenue(user, "25", RevenueType.SUBSCRIPTION)
        clock.set(utc(10))
        outside = await ledger.record_revenue(user, "10", RevenueType.OTHER)

        result = await manager.close_period(admin, period.period_id)

        closed = result.period
        assert closed.status == "CLOSED"
        assert closed.payable_total == Decimal("75.00")
        assert closed.owner_share_total == Decimal("52.50")
        assert closed.growth_fund_total == Decimal("22.50")
        assert closed.transaction_count == 2
        assert closed.closed_at == "2026-03-10T00:00:00.000000Z"

        payout = result.payout
        assert payout is not None
        assert payout.status == "PENDING"
        assert payout.amount == Decimal("75.00")
        assert payout.recipient_id == "owner"
        assert payout.period_id == period.period_id
        assert payout.payment_method == "BANK_TRANSFER"
        assert closed.payout_id == payout.payout_id

        assert await PayoutStore(db).get(payout.payout_id) == payout

        # 창 안의 이벤트만 기간에 귀속
        for event in (first, second):
            assert (await ledger.store.get_event(event.event_id)).period_id == period.period_id
        assert (await ledger.store.get_event(outside.event_id)).period_id is None

        assert await manager.get_pending_balance(user) == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_close_without_auto_payout(
        self, manager: RevenuePeriodManager, ledger: RevenueLedger, admin: Caller, user: Caller, clock
    ) -> None:
        period = await manager.create_period(admin, utc(1), utc(8), auto_payout=False)
        clock.set(utc(3))
        await ledger.record_revenue(user, "40", RevenueType.SERVICE)

        result = await manager.close_period(admin, period.period_id)

        assert result.period.payable_total == Decimal("40.00")
        assert result.payout is None
        assert result.period.payout_id is None

    @pytest.mark.asyncio
    async def test_close_empty_period(self, manager: RevenuePeriodManager, admin: Caller) -> None:
        """수익 없는 기간: payable 0, 지급 생성 안 함"""
        period = await manager.create_period(admin, utc(1), utc(8))

        result = await manager.close_period(admin, period.period_id)

        assert result.period.payable_total == Decimal("0.00")
        assert result.period.transaction_count == 0
        assert result.payout is None

    @pytest.mark.asyncio
    async def test_second_close_fails(
        self, manager: RevenuePeriodManager, ledger: RevenueLedger, admin: Caller, user: Caller, clock, db
    ) -> None:
        """두 번째 마감은 AlreadyClosed, 합계/지급 변화 없음"""
        period = await manager.create_period(admin, utc(1), utc(8))
        clock.set(utc(2))
        await ledger.record_revenue(user, "30", RevenueType.OTHER)
        await manager.close_period(admin, period.period_id)

        clock.set(utc(3))
        await ledger.record_revenue(user, "5", RevenueType.OTHER)

        with pytest.raises(AlreadyClosed) as exc_info:
            await manager.close_period(admin, period.period_id)

        assert exc_info.value.status_code == 409
        reloaded = await manager.get_period(admin, period.period_id)
        assert reloaded.payable_total == Decimal("30.00")
        assert len(await PayoutStore(db).list_payouts()) == 1

    @pytest.mark.asyncio
    async def test_early_close_leaves_later_events_pending(
        self, manager: RevenuePeriodManager, ledger: RevenueLedger, admin: Caller, user: Caller, clock
    ) -> None:
        """end_date 전에 마감 → 이후 창 안의 수익은 미귀속으로 남아 pending balance에 포함"""
        period = await manager.create_period(admin, utc(1), utc(8))
        clock.set(utc(2))
        await ledger.record_revenue(user, "30", RevenueType.OTHER)
        await manager.close_period(admin, period.period_id)

        clock.set(utc(5))
        await ledger.record_revenue(user, "12.50", RevenueType.OTHER)

        reloaded = await manager.get_period(admin, period.period_id)
        assert reloaded.payable_total == Decimal("30.00")
        assert reloaded.transaction_count == 1
        assert await manager.get_pending_balance(user) == Decimal("12.50")

        # 마감된 창과 겹치는 새 기간으로는 귀속할 수 없음
        with pytest.raises(OverlappingPeriod):
            await manager.create_period(admin, utc(5), utc(12))

    @pytest.mark.asyncio
    async def test_concurrent_close_single_payout(
        self, manager: RevenuePeriodManager, ledger: RevenueLedger, admin: Caller, user: Caller, clock, db
    ) -> None:
        period = await manager.create_period(admin, utc(1), utc(8))
        clock.set(utc(2))
        await ledger.record_revenue(user, "20", RevenueType.OTHER)

        results = await asyncio.gather(
            manager.close_period(admin, period.period_id),
            manager.close_period(admin, period.period_id),
            return_exceptions=True,
        )

        assert sum(1 for r in results if isinstance(r, AlreadyClosed)) == 1
        assert len(await PayoutStore(db).list_payouts()) == 1

    @pytest.mark.asyncio
    async def test_not_found(self, manager: RevenuePeriodManager, admin: Caller) -> None:
        with pytest.raises(NotFound):
            await manager.close_period(admin, "missing")

    @pytest.mark.asyncio
    async def test_user_forbidden(
        self, manager: RevenuePeriodManager, admin: Caller, user: Caller
    ) -> None:
        period = await manager.create_period(admin, utc(1), utc(8))

        with pytest.raises(Forbidden):
            await manager.close_period(user, period.period_id)

    @pytest.mark.asyncio
    async def test_configured_recipient(
        self, db: SQLiteAdapter, ledger: RevenueLedger, admin: Caller, user: Caller, clock
    ) -> None:
        manager = RevenuePeriodManager(db, LedgerConfig(payout_recipient_id="founder"), clock=clock)
        period = await manager.create_period(admin, utc(1), utc(8))
        clock.set(utc(2))
        await ledger.record_revenue(user, "15", RevenueType.OTHER)

        result = await manager.close_period(admin, period.period_id)

        assert result.payout.recipient_id == "founder"

    @pytest.mark.asyncio
    async def test_default_method_type_used(
        self, manager: RevenuePeriodManager, ledger: RevenueLedger, admin: Caller, user: Caller, clock, db
    ) -> None:
        await PayoutMethodService(db, clock).add_method(
            Caller.create("owner", "OWNER"), "paypal", {"email": "owner@example.com"}
        )
        period = await manager.create_period(admin, utc(1), utc(8))
        clock.set(utc(2))
        await ledger.record_revenue(user, "15", RevenueType.OTHER)

        result = await manager.close_period(admin, period.period_id)

        assert result.payout.payment_method == "PAYPAL"


class TestPeriodQueries:
    @pytest.mark.asyncio
    async def test_list_periods_newest_first(
        self, manager: RevenuePeriodManager, admin: Caller, user: Caller
    ) -> None:
        first = await manager.create_period(admin, utc(1), utc(8))
        second = await manager.create_period(admin, utc(8), utc(15))
        await manager.close_period(admin, first.period_id)

        periods = await manager.list_periods(user)
        assert [p.period_id for p in periods] == [second.period_id, first.period_id]

        closed = await manager.list_periods(user, PeriodStatus.CLOSED)
        assert [p.period_id for p in closed] == [first.period_id]

        assert len(await manager.list_periods(user, limit=1)) == 1

    @pytest.mark.asyncio
    async def test_get_period_not_found(self, manager: RevenuePeriodManager, user: Caller) -> None:
        with pytest.raises(NotFound):
            await manager.get_period(user, "missing")

    @pytest.mark.asyncio
    async def test_pending_balance(
        self, manager: RevenuePeriodManager, ledger: RevenueLedger, user: Caller
    ) -> None:
        assert await manager.get_pending_balance(user) == Decimal("0")

        await ledger.record_revenue(user, "12.34", RevenueType.OTHER)

        assert await manager.get_pending_balance(user) == Decimal("12.34")
