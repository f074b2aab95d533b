"""
PayoutScheduler 통합 테스트

종료 시각이 지난 기간의 자동 마감 + 지급 처리.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.mock.payment_rail import MockPaymentRail
from core.revenue.audit import RESOURCE_PERIOD, AuditStore
from core.revenue.errors import AlreadyClosed
from core.revenue.ledger import RevenueLedger
from core.revenue.payout_methods import PayoutMethodService
from core.revenue.payout_store import PayoutStore
from core.revenue.payouts import PayoutProcessor
from core.revenue.periods import RevenuePeriodManager
from core.revenue.scheduler import PayoutScheduler, ScheduledCloseResult
from core.types import Caller, RevenueType


def utc(day: int) -> datetime:
    return datetime(2026, 3, day, tzinfo=timezone.utc)


@pytest.fixture
def rail() -> MockPaymentRail:
    return MockPaymentRail()


@pytest.fixture
def manager(db: SQLiteAdapter, clock) -> RevenuePeriodManager:
    return RevenuePeriodManager(db, clock=clock)


@pytest.fixture
def scheduler(db: SQLiteAdapter, manager: RevenuePeriodManager, rail: MockPaymentRail, clock) -> PayoutScheduler:
    return PayoutScheduler(manager, PayoutProcessor(db, rail, clock=clock), clock=clock)


async def add_verified_method(db: SQLiteAdapter, admin: Caller, owner: Caller, clock) -> None:
    service = PayoutMethodService(db, clock)
    method = await service.add_method(owner, "PAYPAL", {"email": "owner@example.com"})
    await service.verify_method(admin, method.method_id)


class TestCloseDuePeriods:
    @pytest.mark.asyncio
    async def test_due_period_closed_and_paid(
        self,
        db: SQLiteAdapter,
        manager: RevenuePeriodManager,
        scheduler: PayoutScheduler,
        rail: MockPaymentRail,
        admin: Caller,
        owner: Caller,
        user: Caller,
        clock,
    ) -> None:
        """종료된 기간은 마감 + 지급 완료, 아직 진행 중인 기간은 그대로"""
        await add_verified_method(db, admin, owner, clock)
        due = await manager.create_period(admin, utc(1), utc(8))
        running = await manager.create_period(admin, utc(8), utc(15))

        clock.set(utc(2))
        await RevenueLedger(db, clock=clock).record_revenue(user, "100", RevenueType.PRODUCT_SALE)

        clock.set(utc(10))
        summary = await scheduler.close_due_periods()

        assert summary["due"] == 1
        assert summary["successful"] == 1
        assert summary["failed"] == 0
        result = summary["results"][0]
        assert result.period_id == due.period_id
        assert result.success is True
        assert result.payout_id is not None

        closed = await manager.get_period(admin, due.period_id)
        assert closed.status == "CLOSED"
        assert closed.payout_id == result.payout_id
        assert (await manager.get_period(admin, running.period_id)).status == "ACTIVE"

        assert rail.sent_count == 1
        assert (await PayoutStore(db).get(result.payout_id)).status == "COMPLETED"

    @pytest.mark.asyncio
    async def test_end_boundary_is_due(
        self, manager: RevenuePeriodManager, scheduler: PayoutScheduler, admin: Caller, clock
    ) -> None:
        """end_date == 현재 시각이면 마감 대상"""
        period = await manager.create_period(admin, utc(1), utc(8))
        clock.set(utc(8))

        summary = await scheduler.close_due_periods()

        assert summary["results"] == [
            ScheduledCloseResult(period.period_id, True, "Period closed without payout")
        ]

    @pytest.mark.asyncio
    async def test_nothing_due(
        self, manager: RevenuePeriodManager, scheduler: PayoutScheduler, admin: Caller, clock
    ) -> None:
        await manager.create_period(admin, utc(1), utc(8))
        clock.set(utc(7))

        summary = await scheduler.close_due_periods()

        assert summary == {"due": 0, "successful": 0, "failed": 0, "results": []}

    @pytest.mark.asyncio
    async def test_without_processor_payout_stays_pending(
        self, db: SQLiteAdapter, manager: RevenuePeriodManager, admin: Caller, user: Caller, clock
    ) -> None:
        period = await manager.create_period(admin, utc(1), utc(8))
        clock.set(utc(2))
        await RevenueLedger(db, clock=clock).record_revenue(user, "40", RevenueType.SERVICE)
        clock.set(utc(9))

        summary = await PayoutScheduler(manager, clock=clock).close_due_periods()

        result = summary["results"][0]
        assert result.success is True
        assert result.message == "Payout left PENDING"
        payout = await PayoutStore(db).get(result.payout_id)
        assert payout.status == "PENDING"
        assert payout.period_id == period.period_id
        assert payout.amount == Decimal("40.00")

    @pytest.mark.asyncio
    async def test_payout_failure_reported(
        self,
        db: SQLiteAdapter,
        manager: RevenuePeriodManager,
        scheduler: PayoutScheduler,
        rail: MockPaymentRail,
        admin: Caller,
        user: Caller,
        clock,
    ) -> None:
        """지급 수단이 없으면 마감은 되고 지급은 FAILED"""
        period = await manager.create_period(admin, utc(1), utc(8))
        clock.set(utc(2))
        await RevenueLedger(db, clock=clock).record_revenue(user, "100", RevenueType.OTHER)
        clock.set(utc(9))

        summary = await scheduler.close_due_periods()

        assert summary["failed"] == 1
        result = summary["results"][0]
        assert "No default payout method" in result.message
        assert (await manager.get_period(admin, period.period_id)).status == "CLOSED"
        assert (await PayoutStore(db).get(result.payout_id)).status == "FAILED"
        assert rail.transfers == []

    @pytest.mark.asyncio
    async def test_close_error_recorded_in_audit(
        self,
        db: SQLiteAdapter,
        manager: RevenuePeriodManager,
        scheduler: PayoutScheduler,
        admin: Caller,
        clock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """마감 실패 → AUTO_PAYOUT_FAILED 감사 로그, 다음 기간은 계속 처리"""
        first = await manager.create_period(admin, utc(1), utc(8))
        second = await manager.create_period(admin, utc(8), utc(15))
        clock.set(utc(20))

        original = manager.close_period

        async def close_period(caller: Caller, period_id: str):
            if period_id == first.period_id:
                raise AlreadyClosed(f"Period was closed concurrently: {period_id}")
            return await original(caller, period_id)

        monkeypatch.setattr(manager, "close_period", close_period)

        summary = await scheduler.close_due_periods()

        assert summary["due"] == 2
        assert summary["successful"] == 1
        assert summary["failed"] == 1
        assert (await manager.get_period(admin, second.period_id)).status == "CLOSED"

        entries = await AuditStore(db).list_entries(resource=RESOURCE_PERIOD, action="AUTO_PAYOUT_FAILED")
        assert len(entries) == 1
        entry = entries[0]
        assert entry.resource_id == first.period_id
        assert entry.severity == "ERROR"
        assert entry.status == "FAILURE"
        assert entry.user_id == "scheduler"
        assert entry.context["code"] == "ALREADY_CLOSED"
        assert "closed concurrently" in entry.error
