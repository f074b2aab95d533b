"""
Period Store

정산 기간 저장소. 상태 변경은 compare-and-set UPDATE로만 수행.
"""

import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.revenue.models import RevenuePeriod
from core.types import PeriodStatus
from core.utils.money import from_minor, to_minor

logger = logging.getLogger(__name__)


class PeriodStore:
    """정산 기간 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def insert(self, period: RevenuePeriod) -> None:
        """정산 기간 저장"""
        await self.db.execute(
            """
            INSERT INTO revenue_period (
                period_id, start_date, end_date, status, auto_payout,
                created_by, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                period.period_id,
                period.start_date,
                period.end_date,
                period.status,
                1 if period.auto_payout else 0,
                period.created_by,
                period.created_at,
            ),
        )

    async def get(self, period_id: str) -> RevenuePeriod | None:
        """ID로 정산 기간 조회"""
        row = await self.db.fetchone(
            f"SELECT {RevenuePeriod.COLUMNS} FROM revenue_period WHERE period_id = ?",
            (period_id,),
        )
        return RevenuePeriod.from_row(row) if row else None

    async def find_overlapping(self, start_date: str, end_date: str) -> RevenuePeriod | None:
        """[start_date, end_date)와 겹치는 ACTIVE/CLOSED 기간

        반열린 구간이므로 경계가 맞닿는 것은 겹침이 아님.
        """
        row = await self.db.fetchone(
            f"""
            SELECT {RevenuePeriod.COLUMNS} FROM revenue_period
            WHERE status IN (?, ?)
              AND start_date < ?
              AND ? < end_date
            ORDER BY start_date
            LIMIT 1
            """,
            (
                PeriodStatus.ACTIVE.value,
                PeriodStatus.CLOSED.value,
                end_date,
                start_date,
            ),
        )
        return RevenuePeriod.from_row(row) if row else None

    async def list_periods(
        self,
        status: str | None = None,
        limit: int = 20,
    ) -> list[RevenuePeriod]:
        """정산 기간 목록 (최신 시작일 순)"""
        sql = f"SELECT {RevenuePeriod.COLUMNS} FROM revenue_period"
        params: list[Any] = []
        if status is not None:
            sql += " WHERE status = ?"
            params.append(status)
        sql += " ORDER BY start_date DESC LIMIT ?"
        params.append(limit)

        rows = await self.db.fetchall(sql, tuple(params))
        return [RevenuePeriod.from_row(row) for row in rows]

    async def list_due_ids(self, now: str) -> list[str]:
        """종료 시각이 지난 ACTIVE 기간 ID (종료 시각 순)"""
        rows = await self.db.fetchall(
            """
            SELECT period_id FROM revenue_period
            WHERE status = ? AND end_date <= ?
            ORDER BY end_date
            """,
            (PeriodStatus.ACTIVE.value, now),
        )
        return [row[0] for row in rows]

    async def count(self, status: str | None = None) -> int:
        if status is None:
            row = await self.db.fetchone("SELECT COUNT(*) FROM revenue_period")
        else:
            row = await self.db.fetchone(
                "SELECT COUNT(*) FROM revenue_period WHERE status = ?",
                (status,),
            )
        return row[0] if row else 0

    async def aggregate_unattributed(self, start_date: str, end_date: str) -> dict[str, Any]:
        """기간 창 안에서 아직 귀속되지 않은 수익 이벤트 합계"""
        row = await self.db.fetchone(
            """
            SELECT
                COALESCE(SUM(amount_minor), 0),
                COALESCE(SUM(owner_share_minor), 0),
                COALESCE(SUM(growth_fund_minor), 0),
                COUNT(*)
            FROM revenue_event
            WHERE period_id IS NULL
              AND created_at >= ?
              AND created_at < ?
            """,
            (start_date, end_date),
        )
        return {
            "payable_total": from_minor(row[0]),
            "owner_share_total": from_minor(row[1]),
            "growth_fund_total": from_minor(row[2]),
            "transaction_count": row[3],
        }

    async def attribute_events(self, period_id: str, start_date: str, end_date: str) -> int:
        """창 안의 미귀속 수익 이벤트를 기간에 귀속

        Returns:
            귀속된 이벤트 수
        """
        cursor = await self.db.execute(
            """
            UPDATE revenue_event
            SET period_id = ?
            WHERE period_id IS NULL
              AND created_at >= ?
              AND created_at < ?
            """,
            (period_id, start_date, end_date),
        )
        return cursor.rowcount

    async def mark_closed(
        self,
        period_id: str,
        totals: dict[str, Any],
        closed_at: str,
    ) -> bool:
        """ACTIVE → CLOSED (compare-and-set)

        Returns:
            True: 마감됨
            False: 이미 ACTIVE가 아님
        """
        cursor = await self.db.execute(
            """
            UPDATE revenue_period
            SET status = ?,
                payable_total_minor = ?,
                owner_share_total_minor = ?,
                growth_fund_total_minor = ?,
                transaction_count = ?,
                closed_at = ?
            WHERE period_id = ? AND status = ?
            """,
            (
                PeriodStatus.CLOSED.value,
                to_minor(totals["payable_total"]),
                to_minor(totals["owner_share_total"]),
                to_minor(totals["growth_fund_total"]),
                totals["transaction_count"],
                closed_at,
                period_id,
                PeriodStatus.ACTIVE.value,
            ),
        )
        return cursor.rowcount == 1

    async def link_payout(self, period_id: str, payout_id: str) -> None:
        await self.db.execute(
            "UPDATE revenue_period SET payout_id = ? WHERE period_id = ?",
            (payout_id, period_id),
        )

    async def get_pending_balance(self):
        """마감된 기간에 귀속되지 않은 수익 합계"""
        row = await self.db.fetchone(
            "SELECT COALESCE(SUM(amount_minor), 0) FROM revenue_event WHERE period_id IS NULL"
        )
        return from_minor(row[0] if row else 0)
