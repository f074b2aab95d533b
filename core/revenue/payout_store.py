"""
Payout Store

지급 / 지급 수단 저장소.

지급 상태 변경은 모두 compare-and-set UPDATE.
PENDING → PROCESSING 클레임은 rowcount로 단일 처리자를 보장.
"""

import json
import logging
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.revenue.models import Payout, PayoutMethod
from core.types import PayoutMethodStatus, PayoutStatus
from core.utils.money import from_minor, to_minor

logger = logging.getLogger(__name__)


class PayoutStore:
    """지급 저장소

    Args:
        db: SQLite 어댑터

    사용 예시:
    ```python
    store = PayoutStore(db)

    # PENDING 지급 클레임
    if await store.claim(payout_id, now):
        # 외부 지급 처리...
        await store.mark_completed(payout_id, fees, net, txn_id, now)
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 지급
    # -------------------------------------------------------------------------

    async def insert(self, payout: Payout) -> None:
        """지급 저장"""
        await self.db.execute(
            """
            INSERT INTO payout (
                payout_id, period_id, recipient_id, amount_minor,
                status, payment_method, notes, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                payout.payout_id,
                payout.period_id,
                payout.recipient_id,
                to_minor(payout.amount),
                payout.status,
                payout.payment_method,
                payout.notes,
                payout.created_at,
                payout.updated_at,
            ),
        )

        logger.debug(
            "Payout inserted",
            extra={"payout_id": payout.payout_id, "amount": str(payout.amount)},
        )

    async def get(self, payout_id: str) -> Payout | None:
        """ID로 지급 조회"""
        row = await self.db.fetchone(
            f"SELECT {Payout.COLUMNS} FROM payout WHERE payout_id = ?",
            (payout_id,),
        )
        return Payout.from_row(row) if row else None

    async def list_payouts(
        self,
        status: str | None = None,
        limit: int = 20,
    ) -> list[Payout]:
        """지급 목록 (최신순)"""
        sql = f"SELECT {Payout.COLUMNS} FROM payout"
        params: list[Any] = []
        if status is not None:
            sql += " WHERE status = ?"
            params.append(status)
        sql += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)

        rows = await self.db.fetchall(sql, tuple(params))
        return [Payout.from_row(row) for row in rows]

    async def list_pending_ids(self) -> list[str]:
        """PENDING 지급 ID (오래된 순)"""
        rows = await self.db.fetchall(
            "SELECT payout_id FROM payout WHERE status = ? ORDER BY created_at, rowid",
            (PayoutStatus.PENDING.value,),
        )
        return [row[0] for row in rows]

    async def claim(self, payout_id: str, now: str) -> bool:
        """PENDING → PROCESSING (compare-and-set)

        Returns:
            True: 클레임 성공
            False: 다른 처리자가 먼저 클레임했거나 PENDING이 아님
        """
        cursor = await self.db.execute(
            """
            UPDATE payout
            SET status = ?, processing_started_at = ?, updated_at = ?
            WHERE payout_id = ? AND status = ?
            """,
            (
                PayoutStatus.PROCESSING.value,
                now,
                now,
                payout_id,
                PayoutStatus.PENDING.value,
            ),
        )
        return cursor.rowcount == 1

    async def mark_completed(
        self,
        payout_id: str,
        fees,
        net_amount,
        transaction_id: str,
        now: str,
    ) -> bool:
        """PROCESSING → COMPLETED (compare-and-set)"""
        cursor = await self.db.execute(
            """
            UPDATE payout
            SET status = ?,
                fees_minor = ?,
                net_amount_minor = ?,
                transaction_id = ?,
                completed_at = ?,
                updated_at = ?
            WHERE payout_id = ? AND status = ?
            """,
            (
                PayoutStatus.COMPLETED.value,
                to_minor(fees),
                to_minor(net_amount),
                transaction_id,
                now,
                now,
                payout_id,
                PayoutStatus.PROCESSING.value,
            ),
        )
        return cursor.rowcount == 1

    async def mark_failed(self, payout_id: str, notes: str, now: str) -> bool:
        """PROCESSING → FAILED (compare-and-set)"""
        cursor = await self.db.execute(
            """
            UPDATE payout
            SET status = ?, notes = ?, updated_at = ?
            WHERE payout_id = ? AND status = ?
            """,
            (
                PayoutStatus.FAILED.value,
                notes,
                now,
                payout_id,
                PayoutStatus.PROCESSING.value,
            ),
        )
        return cursor.rowcount == 1

    async def get_completed_total(self, recipient_id: str | None = None):
        """완료된 지급 합계"""
        sql = "SELECT COALESCE(SUM(amount_minor), 0) FROM payout WHERE status = ?"
        params: tuple[Any, ...] = (PayoutStatus.COMPLETED.value,)
        if recipient_id is not None:
            sql += " AND recipient_id = ?"
            params = params + (recipient_id,)
        row = await self.db.fetchone(sql, params)
        return from_minor(row[0] if row else 0)

    # -------------------------------------------------------------------------
    # 지급 수단
    # -------------------------------------------------------------------------

    async def insert_method(self, method: PayoutMethod) -> None:
        """지급 수단 저장

        기본 수단으로 저장하면 같은 소유자의 기존 기본 수단은 해제.
        """
        if method.is_default:
            await self.db.execute(
                "UPDATE payout_method SET is_default = 0 WHERE owner_id = ?",
                (method.owner_id,),
            )

        await self.db.execute(
            """
            INSERT INTO payout_method (
                method_id, owner_id, method_type, details_json,
                is_default, is_verified, status, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                method.method_id,
                method.owner_id,
                method.method_type,
                json.dumps(method.details, ensure_ascii=False),
                1 if method.is_default else 0,
                1 if method.is_verified else 0,
                method.status,
                method.created_at,
            ),
        )

    async def get_method(self, method_id: str) -> PayoutMethod | None:
        row = await self.db.fetchone(
            f"SELECT {PayoutMethod.COLUMNS} FROM payout_method WHERE method_id = ?",
            (method_id,),
        )
        return PayoutMethod.from_row(row) if row else None

    async def list_methods(self, owner_id: str) -> list[PayoutMethod]:
        """소유자의 지급 수단 (기본 수단 우선)"""
        rows = await self.db.fetchall(
            f"""
            SELECT {PayoutMethod.COLUMNS} FROM payout_method
            WHERE owner_id = ?
            ORDER BY is_default DESC, created_at DESC
            """,
            (owner_id,),
        )
        return [PayoutMethod.from_row(row) for row in rows]

    async def get_default_method(self, owner_id: str) -> PayoutMethod | None:
        """소유자의 ACTIVE 기본 지급 수단"""
        row = await self.db.fetchone(
            f"""
            SELECT {PayoutMethod.COLUMNS} FROM payout_method
            WHERE owner_id = ? AND is_default = 1 AND status = ?
            LIMIT 1
            """,
            (owner_id, PayoutMethodStatus.ACTIVE.value),
        )
        return PayoutMethod.from_row(row) if row else None

    async def mark_method_verified(self, method_id: str) -> bool:
        cursor = await self.db.execute(
            "UPDATE payout_method SET is_verified = 1 WHERE method_id = ?",
            (method_id,),
        )
        return cursor.rowcount == 1
