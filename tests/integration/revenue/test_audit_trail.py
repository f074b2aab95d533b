"""
감사 로그 통합 테스트

상태 변경과 같은 트랜잭션에서 기록되는지, 실패 시 함께 롤백되는지 검증.
"""

import sqlite3
from datetime import datetime, timezone

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.mock.payment_rail import MockPaymentRail
from core.revenue.audit import RESOURCE_PAYOUT, RESOURCE_PAYOUT_METHOD, RESOURCE_PERIOD, AuditStore, AuditTrail
from core.revenue.errors import Forbidden, OverlappingPeriod, StorageConflict
from core.revenue.ledger import RevenueLedger
from core.revenue.payout_methods import PayoutMethodService
from core.revenue.payouts import PayoutProcessor
from core.revenue.periods import RevenuePeriodManager
from core.types import AuditAction, Caller, RevenueType


def utc(day: int) -> datetime:
    return datetime(2026, 3, day, tzinfo=timezone.utc)


@pytest.fixture
def audit(db: SQLiteAdapter) -> AuditStore:
    return AuditStore(db)


@pytest.fixture
def manager(db: SQLiteAdapter, clock) -> RevenuePeriodManager:
    return RevenuePeriodManager(db, clock=clock)


async def close_with_payout(manager: RevenuePeriodManager, db: SQLiteAdapter, admin: Caller, user: Caller, clock):
    period = await manager.create_period(admin, utc(1), utc(8))
    clock.set(utc(2))
    await RevenueLedger(db, clock=clock).record_revenue(user, "100", RevenueType.PRODUCT_SALE)
    clock.set(utc(9))
    return await manager.close_period(admin, period.period_id)


async def verified_method(db: SQLiteAdapter, admin: Caller, owner: Caller, clock) -> str:
    service = PayoutMethodService(db, clock)
    method = await service.add_method(owner, "PAYPAL", {"email": "owner@example.com"})
    await service.verify_method(admin, method.method_id)
    return method.method_id


class TestPeriodAudit:
    @pytest.mark.asyncio
    async def test_create_and_close(
        self, db: SQLiteAdapter, manager: RevenuePeriodManager, audit: AuditStore, admin: Caller, user: Caller, clock
    ) -> None:
        result = await close_with_payout(manager, db, admin, user, clock)
        period_id = result.period.period_id

        entries = await audit.list_entries(resource=RESOURCE_PERIOD, resource_id=period_id)

        assert [e.action for e in entries] == ["REVENUE_PERIOD_CLOSED", "REVENUE_PERIOD_CREATED"]
        closed, created = entries
        assert created.user_id == "admin-1"
        assert created.created_at == "2026-03-01T00:00:00.000000Z"
        assert created.context["auto_payout"] is True
        assert closed.created_at == "2026-03-09T00:00:00.000000Z"
        assert closed.context == {
            "payable_total": "100.00",
            "transaction_count": 1,
            "payout_id": result.payout.payout_id,
        }
        assert closed.status == "SUCCESS"

        payout_entries = await audit.list_entries(resource=RESOURCE_PAYOUT)
        assert [e.action for e in payout_entries] == ["PAYOUT_CREATED"]
        assert payout_entries[0].resource_id == result.payout.payout_id
        assert payout_entries[0].context["amount"] == "100.00"

    @pytest.mark.asyncio
    async def test_rejected_create_not_recorded(
        self, manager: RevenuePeriodManager, audit: AuditStore, admin: Caller
    ) -> None:
        await manager.create_period(admin, utc(1), utc(8))

        with pytest.raises(OverlappingPeriod):
            await manager.create_period(admin, utc(5), utc(10))

        entries = await audit.list_entries(action=AuditAction.REVENUE_PERIOD_CREATED.value)
        assert len(entries) == 1


class TestPayoutAudit:
    @pytest.mark.asyncio
    async def test_completed(
        self,
        db: SQLiteAdapter,
        manager: RevenuePeriodManager,
        audit: AuditStore,
        admin: Caller,
        owner: Caller,
        user: Caller,
        clock,
    ) -> None:
        await verified_method(db, admin, owner, clock)
        payout = (await close_with_payout(manager, db, admin, user, clock)).payout
        rail = MockPaymentRail()

        await PayoutProcessor(db, rail, clock=clock).process_payout(payout.payout_id)

        entries = await audit.list_entries(resource=RESOURCE_PAYOUT, resource_id=payout.payout_id)
        assert [e.action for e in entries] == ["PAYOUT_COMPLETED", "PAYOUT_PROCESSING", "PAYOUT_CREATED"]
        assert entries[0].context == {
            "transaction_id": rail.transfers[0].transaction_id,
            "fees": "3.50",
            "net_amount": "96.50",
        }

    @pytest.mark.asyncio
    async def test_failed(
        self, db: SQLiteAdapter, manager: RevenuePeriodManager, audit: AuditStore, admin: Caller, owner: Caller, user: Caller, clock
    ) -> None:
        await verified_method(db, admin, owner, clock)
        payout = (await close_with_payout(manager, db, admin, user, clock)).payout
        rail = MockPaymentRail(should_fail=True, failure_message="account closed")

        await PayoutProcessor(db, rail, clock=clock).process_payout(payout.payout_id)

        entries = await audit.list_entries(resource_id=payout.payout_id, action="PAYOUT_FAILED")
        assert len(entries) == 1
        assert entries[0].severity == "ERROR"
        assert entries[0].status == "FAILURE"
        assert entries[0].error == "account closed"

    @pytest.mark.asyncio
    async def test_completion_rollback_not_recorded(
        self,
        db: SQLiteAdapter,
        manager: RevenuePeriodManager,
        audit: AuditStore,
        admin: Caller,
        owner: Caller,
        user: Caller,
        clock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """완료 트랜잭션이 롤백되면 PAYOUT_COMPLETED도 남지 않음"""
        await verified_method(db, admin, owner, clock)
        payout = (await close_with_payout(manager, db, admin, user, clock)).payout
        processor = PayoutProcessor(db, MockPaymentRail(), clock=clock)

        async def locked(amount) -> None:
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(processor.revenue, "increment_paid_out", locked)

        with pytest.raises(StorageConflict):
            await processor.process_payout(payout.payout_id)

        actions = [e.action for e in await audit.list_entries(resource_id=payout.payout_id)]
        assert actions == ["PAYOUT_PROCESSING", "PAYOUT_CREATED"]


class TestPayoutMethodAudit:
    @pytest.mark.asyncio
    async def test_verified(self, db: SQLiteAdapter, audit: AuditStore, admin: Caller, owner: Caller, clock) -> None:
        method_id = await verified_method(db, admin, owner, clock)

        entries = await audit.list_entries(resource=RESOURCE_PAYOUT_METHOD)

        assert len(entries) == 1
        assert entries[0].action == "PAYOUT_METHOD_VERIFIED"
        assert entries[0].resource_id == method_id
        assert entries[0].user_id == "admin-1"


class TestAuditTrail:
    @pytest.mark.asyncio
    async def test_admin_only(self, db: SQLiteAdapter, user: Caller) -> None:
        with pytest.raises(Forbidden):
            await AuditTrail(db).list_entries(user)

    @pytest.mark.asyncio
    async def test_filters_and_limit(
        self, db: SQLiteAdapter, manager: RevenuePeriodManager, owner: Caller, admin: Caller
    ) -> None:
        await manager.create_period(admin, utc(1), utc(8))
        await manager.create_period(admin, utc(8), utc(15))
        trail = AuditTrail(db)

        assert len(await trail.list_entries(owner)) == 2
        assert len(await trail.list_entries(owner, limit=1)) == 1
        assert len(await trail.list_entries(owner, action=AuditAction.REVENUE_PERIOD_CREATED)) == 2
        assert await trail.list_entries(owner, action=AuditAction.PAYOUT_COMPLETED) == []
