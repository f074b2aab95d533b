"""
Revenue Store

수익 이벤트 / 사용자 잔액 / SystemFund 저장소.

메서드는 트랜잭션을 직접 열지 않음. 여러 쓰기를 묶을 때는
호출자가 run_atomic()으로 감싸서 하나의 IMMEDIATE 트랜잭션에서 실행.
금액 증감은 항상 `col = col + ?` 형태로 DB에서 수행 (read-modify-write 금지).
"""

import logging
import sqlite3
from typing import Any, Awaitable, Callable, TypeVar

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.revenue.errors import StorageConflict
from core.revenue.models import FundSnapshot, RevenueEvent
from core.types import UserRole
from core.utils.money import from_minor, to_minor

logger = logging.getLogger(__name__)

T = TypeVar("T")

# SQLite 쓰기 락 경합 메시지
BUSY_MESSAGES = ("database is locked", "database is busy", "database table is locked")

FUND_ID = 1


def is_busy_error(exc: BaseException) -> bool:
    """SQLite busy/locked 오류 여부"""
    if not isinstance(exc, sqlite3.OperationalError):
        return False
    message = str(exc).lower()
    return any(m in message for m in BUSY_MESSAGES)


async def run_atomic(
    db: SQLiteAdapter,
    work: Callable[[], Awaitable[T]],
    retries: int = 1,
) -> T:
    """work()를 하나의 IMMEDIATE 트랜잭션으로 실행

    work() 내부 어디서든 예외가 나면 전체 롤백.
    busy/locked 충돌은 retries 횟수만큼 재시도 후 StorageConflict.

    Args:
        db: SQLite 어댑터
        work: 트랜잭션 안에서 실행할 코루틴 함수
        retries: 충돌 시 재시도 횟수

    Raises:
        StorageConflict: 재시도 후에도 충돌
    """
    attempt = 0
    while True:
        try:
            async with db.transaction(immediate=True):
                return await work()
        except sqlite3.OperationalError as e:
            if not is_busy_error(e):
                raise
            if attempt >= retries:
                logger.error(
                    "Storage conflict (retries exhausted)",
                    extra={"attempts": attempt + 1, "error": str(e)},
                )
                raise StorageConflict(f"Storage conflict: {e}") from e
            attempt += 1
            logger.warning(
                "Storage conflict, retrying",
                extra={"attempt": attempt, "error": str(e)},
            )


class RevenueStore:
    """수익 이벤트 / SystemFund 저장소

    Args:
        db: SQLite 어댑터

    사용 예시:
    ```python
    store = RevenueStore(db)

    async def work():
        await store.ensure_user(user_id, role)
        await store.insert_event(event)
        await store.increment_user_balance(user_id, event.owner_share)
        await store.apply_fund_increment(event.growth_fund_share, event.owner_share)

    await run_atomic(db, work)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 사용자
    # -------------------------------------------------------------------------

    async def ensure_user(self, user_id: str, role: str = UserRole.USER.value) -> None:
        """사용자 행이 없으면 생성 (INSERT OR IGNORE)"""
        await self.db.execute(
            "INSERT OR IGNORE INTO app_user (user_id, role) VALUES (?, ?)",
            (user_id, role),
        )

    async def increment_user_balance(self, user_id: str, amount) -> None:
        """사용자 잔액 증가"""
        cursor = await self.db.execute(
            """
            UPDATE app_user
            SET balance_minor = balance_minor + ?,
                updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
            WHERE user_id = ?
            """,
            (to_minor(amount), user_id),
        )
        if cursor.rowcount != 1:
            raise RuntimeError(f"User row missing: {user_id}")

    async def get_user_balance(self, user_id: str):
        """사용자 잔액 (없으면 0)"""
        row = await self.db.fetchone(
            "SELECT balance_minor FROM app_user WHERE user_id = ?",
            (user_id,),
        )
        return from_minor(row[0] if row else 0)

    # -------------------------------------------------------------------------
    # 수익 이벤트
    # -------------------------------------------------------------------------

    async def insert_event(self, event: RevenueEvent) -> None:
        """수익 이벤트 저장"""
        await self.db.execute(
            """
            INSERT INTO revenue_event (
                event_id, amount_minor, revenue_type, user_id,
                growth_fund_minor, owner_share_minor, created_at,
                description, project_id, product_id, content_id, period_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                event.event_id,
                to_minor(event.amount),
                event.revenue_type,
                event.user_id,
                to_minor(event.growth_fund_share),
                to_minor(event.owner_share),
                event.created_at,
                event.description,
                event.project_id,
                event.product_id,
                event.content_id,
                event.period_id,
            ),
        )

        logger.debug(
            f"Revenue event inserted: {event.revenue_type}",
            extra={"event_id": event.event_id, "amount": str(event.amount)},
        )

    async def get_event(self, event_id: str) -> RevenueEvent | None:
        """ID로 수익 이벤트 조회"""
        row = await self.db.fetchone(
            f"SELECT {RevenueEvent.COLUMNS} FROM revenue_event WHERE event_id = ?",
            (event_id,),
        )
        return RevenueEvent.from_row(row) if row else None

    async def list_events_by_user(self, user_id: str, limit: int = 30) -> list[RevenueEvent]:
        """사용자 수익 이벤트 (최신순)"""
        rows = await self.db.fetchall(
            f"""
            SELECT {RevenueEvent.COLUMNS} FROM revenue_event
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
            LIMIT ?
            """,
            (user_id, limit),
        )
        return [RevenueEvent.from_row(row) for row in rows]

    async def count_events(self) -> int:
        row = await self.db.fetchone("SELECT COUNT(*) FROM revenue_event")
        return row[0] if row else 0

    async def get_user_summary(self, user_id: str) -> dict[str, Any]:
        """사용자 수익 합계"""
        row = await self.db.fetchone(
            """
            SELECT
                COALESCE(SUM(amount_minor), 0),
                COALESCE(SUM(owner_share_minor), 0),
                COALESCE(SUM(growth_fund_minor), 0),
                COUNT(*)
            FROM revenue_event
            WHERE user_id = ?
            """,
            (user_id,),
        )
        return {
            "total_revenue": from_minor(row[0]),
            "owner_earnings": from_minor(row[1]),
            "growth_fund": from_minor(row[2]),
            "transaction_count": row[3],
        }

    async def get_totals_by_type(self, since: str | None = None) -> list[dict[str, Any]]:
        """수익 유형별 합계

        Args:
            since: 이 시각 이후 이벤트만 (db_timestamp 포맷, None이면 전체)
        """
        sql = """
            SELECT
                revenue_type,
                COALESCE(SUM(amount_minor), 0),
                COUNT(*)
            FROM revenue_event
        """
        params: tuple[Any, ...] = ()
        if since is not None:
            sql += " WHERE created_at >= ?"
            params = (since,)
        sql += " GROUP BY revenue_type ORDER BY revenue_type"

        rows = await self.db.fetchall(sql, params)
        return [
            {
                "revenue_type": row[0],
                "total": from_minor(row[1]),
                "transaction_count": row[2],
            }
            for row in rows
        ]

    # -------------------------------------------------------------------------
    # SystemFund
    # -------------------------------------------------------------------------

    async def apply_fund_increment(self, growth_fund, owner_earnings) -> None:
        """SystemFund 증가 (행이 없으면 먼저 생성)

        total_revenue는 두 몫의 합만큼 증가.
        """
        growth_minor = to_minor(growth_fund)
        owner_minor = to_minor(owner_earnings)

        await self.db.execute(
            "INSERT OR IGNORE INTO system_fund (fund_id) VALUES (?)",
            (FUND_ID,),
        )
        await self.db.execute(
            """
            UPDATE system_fund
            SET growth_fund_minor = growth_fund_minor + ?,
                owner_earnings_minor = owner_earnings_minor + ?,
                total_revenue_minor = total_revenue_minor + ?,
                updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
            WHERE fund_id = ?
            """,
            (growth_minor, owner_minor, growth_minor + owner_minor, FUND_ID),
        )

    async def increment_paid_out(self, amount) -> None:
        """소유자 지급 완료 누계 증가"""
        await self.db.execute(
            "INSERT OR IGNORE INTO system_fund (fund_id) VALUES (?)",
            (FUND_ID,),
        )
        await self.db.execute(
            """
            UPDATE system_fund
            SET owner_paid_out_minor = owner_paid_out_minor + ?,
                updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
            WHERE fund_id = ?
            """,
            (to_minor(amount), FUND_ID),
        )

    async def get_fund(self) -> FundSnapshot:
        """SystemFund 스냅샷 (첫 수익 전이면 모두 0)"""
        row = await self.db.fetchone(
            """
            SELECT growth_fund_minor, owner_earnings_minor,
                   total_revenue_minor, owner_paid_out_minor, updated_at
            FROM system_fund
            WHERE fund_id = ?
            """,
            (FUND_ID,),
        )
        if row is None:
            return FundSnapshot.empty()

        return FundSnapshot(
            growth_fund=from_minor(row[0]),
            owner_earnings=from_minor(row[1]),
            total_revenue=from_minor(row[2]),
            owner_paid_out=from_minor(row[3]),
            updated_at=row[4],
        )
