"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
Web 프로세스와 운영 스크립트가 동시에 접근 가능하도록 설정.

금액 컬럼은 모두 최소 통화 단위 INTEGER(*_minor)로 저장.
주의: SQLite alias로 time, count 사용 금지 (예약어)
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Paths
from core.types import AppMode

logger = logging.getLogger(__name__)


def get_db_path(mode: AppMode | str) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        mode: 실행 모드 (PRODUCTION/DEVELOPMENT)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if isinstance(mode, str):
        mode = AppMode(mode.lower())

    if mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.DEV_DB


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)

    # 디렉토리가 없으면 생성
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly:
        conn = await aiosqlite.connect(f"file:{db_path_str}?mode=ro", uri=True)
    else:
        conn = await aiosqlite.connect(db_path_str)

    await conn.execute("PRAGMA journal_mode=WAL")

    # 다른 연결이 쓰기 락을 잡고 있으면 최대 30초 대기
    await conn.execute("PRAGMA busy_timeout=30000")

    await conn.execute("PRAGMA foreign_keys=ON")

    logger.info(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    WAL 모드로 SQLite 연결 관리.
    트랜잭션 컨텍스트 매니저 제공.

    하나의 연결을 여러 코루틴이 공유하므로 트랜잭션은 연결 단위
    asyncio.Lock으로 직렬화됨. immediate=True이면 BEGIN IMMEDIATE로
    시작하여 다른 연결(프로세스)과의 쓰기도 직렬화됨.

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회용)

    사용 예시:
    ```python
    adapter = SQLiteAdapter(db_path)
    await adapter.connect()

    async with adapter.transaction(immediate=True):
        await adapter.execute("UPDATE system_fund SET ...")

    await adapter.close()
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._tx_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        """연결 상태 확인"""
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        """트랜잭션 진행 중 여부"""
        return self._conn is not None and self._conn.in_transaction

    async def connect(self) -> None:
        """연결 생성"""
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        """연결 종료"""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def executemany(
        self,
        sql: str,
        parameters: list[tuple[Any, ...]],
    ) -> aiosqlite.Cursor:
        """SQL 다중 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        return await self._conn.executemany(sql, parameters)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchall()

    async def commit(self) -> None:
        """커밋"""
        if self._conn is not None:
            await self._conn.commit()

    async def rollback(self) -> None:
        """롤백"""
        if self._conn is not None:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.

        Args:
            immediate: True면 BEGIN IMMEDIATE로 시작 (쓰기 락 선점)

        사용 예시:
        ```python
        async with adapter.transaction(immediate=True) as conn:
            await conn.execute("INSERT INTO ...")
            # 성공 시 자동 커밋
        ```
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        async with self._tx_lock:
            # 이전에 커밋되지 않은 암묵적 트랜잭션이 남아 있으면 먼저 정리
            if self._conn.in_transaction:
                await self._conn.commit()

            if immediate:
                await self._conn.execute("BEGIN IMMEDIATE")

            try:
                yield self._conn
                await self._conn.commit()
            except BaseException:
                await self._conn.rollback()
                raise

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        columns = []
        for row in rows:
            columns.append({
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            })

        return columns

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    앱 시작 시 호출. 이미 존재하면 건너뜀 (IF NOT EXISTS).

    Args:
        adapter: 연결된 SQLiteAdapter
    """
    # app_user (Identity Provider 사용자의 로컬 미러 + 미지급 잔액)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS app_user (
            user_id          TEXT PRIMARY KEY,
            role             TEXT NOT NULL DEFAULT 'USER',
            balance_minor    INTEGER NOT NULL DEFAULT 0 CHECK (balance_minor >= 0),

            created_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
            updated_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
        )
    """)

    # revenue_period (정산 기간, [start_date, end_date))
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS revenue_period (
            period_id                TEXT PRIMARY KEY,
            start_date               TEXT NOT NULL,
            end_date                 TEXT NOT NULL,
            status                   TEXT NOT NULL DEFAULT 'ACTIVE',
            auto_payout              INTEGER NOT NULL DEFAULT 1,

            payable_total_minor      INTEGER,
            owner_share_total_minor  INTEGER,
            growth_fund_total_minor  INTEGER,
            transaction_count        INTEGER NOT NULL DEFAULT 0,
            payout_id                TEXT,

            created_by               TEXT,
            created_at               TEXT NOT NULL,
            closed_at                TEXT,

            CHECK (end_date > start_date)
        )
    """)

    # revenue_event (불변 수익 기록)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS revenue_event (
            event_id           TEXT PRIMARY KEY,
            amount_minor       INTEGER NOT NULL CHECK (amount_minor >= 0),
            revenue_type       TEXT NOT NULL,
            description        TEXT,

            user_id            TEXT NOT NULL,
            project_id         TEXT,
            product_id         TEXT,
            content_id         TEXT,

            growth_fund_minor  INTEGER NOT NULL CHECK (growth_fund_minor >= 0),
            owner_share_minor  INTEGER NOT NULL CHECK (owner_share_minor >= 0),

            period_id          TEXT,
            created_at         TEXT NOT NULL,

            CHECK (growth_fund_minor + owner_share_minor = amount_minor),
            FOREIGN KEY (user_id) REFERENCES app_user(user_id),
            FOREIGN KEY (period_id) REFERENCES revenue_period(period_id)
        )
    """)

    # system_fund (싱글턴 집계 행, fund_id = 1 고정)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS system_fund (
            fund_id               INTEGER PRIMARY KEY CHECK (fund_id = 1),
            growth_fund_minor     INTEGER NOT NULL DEFAULT 0,
            owner_earnings_minor  INTEGER NOT NULL DEFAULT 0,
            total_revenue_minor   INTEGER NOT NULL DEFAULT 0,
            owner_paid_out_minor  INTEGER NOT NULL DEFAULT 0,

            created_at            TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
            updated_at            TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),

            CHECK (total_revenue_minor = growth_fund_minor + owner_earnings_minor)
        )
    """)

    # payout (지급)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS payout (
            payout_id              TEXT PRIMARY KEY,
            period_id              TEXT,
            recipient_id           TEXT NOT NULL,
            amount_minor           INTEGER NOT NULL CHECK (amount_minor >= 0),
            fees_minor             INTEGER,
            net_amount_minor       INTEGER,
            status                 TEXT NOT NULL DEFAULT 'PENDING',
            payment_method         TEXT,
            transaction_id         TEXT,
            notes                  TEXT,

            created_at             TEXT NOT NULL,
            updated_at             TEXT NOT NULL,
            processing_started_at  TEXT,
            completed_at           TEXT,

            FOREIGN KEY (period_id) REFERENCES revenue_period(period_id)
        )
    """)

    # payout_method (지급 수단)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS payout_method (
            method_id     TEXT PRIMARY KEY,
            owner_id      TEXT NOT NULL,
            method_type   TEXT NOT NULL,
            details_json  TEXT NOT NULL DEFAULT '{}',
            is_default    INTEGER NOT NULL DEFAULT 0,
            is_verified   INTEGER NOT NULL DEFAULT 0,
            status        TEXT NOT NULL DEFAULT 'ACTIVE',

            created_at    TEXT NOT NULL
        )
    """)

    # audit_log (추가 전용 감사 로그)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS audit_log (
            audit_id      INTEGER PRIMARY KEY AUTOINCREMENT,
            action        TEXT NOT NULL,
            resource      TEXT NOT NULL,
            resource_id   TEXT,
            user_id       TEXT,
            severity      TEXT NOT NULL DEFAULT 'INFO',
            status        TEXT NOT NULL DEFAULT 'SUCCESS',
            context_json  TEXT NOT NULL DEFAULT '{}',
            error         TEXT,

            created_at    TEXT NOT NULL
        )
    """)

    # 인덱스 생성
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_revenue_event_created_at
        ON revenue_event(created_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_revenue_event_user
        ON revenue_event(user_id, created_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_revenue_event_period
        ON revenue_event(period_id)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_revenue_period_status
        ON revenue_period(status, start_date)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_payout_status
        ON payout(status, created_at)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_payout_method_owner
        ON payout_method(owner_id, is_default)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_audit_log_resource
        ON audit_log(resource, resource_id)
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
