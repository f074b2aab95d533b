"""
Audit Trail

정산 기간 / 지급 상태 변경의 감사 로그.

AuditStore.record()는 트랜잭션을 열지 않음. 상태 변경과 같은
run_atomic() 안에서 호출하여 변경과 감사 기록이 함께 커밋/롤백되도록 함.
"""

import json
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.revenue.auth import require_admin
from core.revenue.models import AuditEntry
from core.types import AuditAction, AuditSeverity, Caller

# 감사 대상 리소스
RESOURCE_PERIOD = "REVENUE_PERIOD"
RESOURCE_PAYOUT = "PAYOUT"
RESOURCE_PAYOUT_METHOD = "PAYOUT_METHOD"


class AuditStore:
    """감사 로그 저장소

    Args:
        db: SQLite 어댑터
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def record(
        self,
        action: AuditAction,
        resource: str,
        resource_id: str | None,
        now: str,
        user_id: str | None = None,
        context: dict[str, Any] | None = None,
        severity: AuditSeverity = AuditSeverity.INFO,
        error: str | None = None,
    ) -> None:
        """감사 로그 1건 추가

        error가 있으면 status는 FAILURE.
        """
        await self.db.execute(
            """
            INSERT INTO audit_log (
                action, resource, resource_id, user_id,
                severity, status, context_json, error, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                action.value,
                resource,
                resource_id,
                user_id,
                severity.value,
                "FAILURE" if error else "SUCCESS",
                json.dumps(context or {}, default=str),
                error,
                now,
            ),
        )

    async def list_entries(
        self,
        resource: str | None = None,
        resource_id: str | None = None,
        action: str | None = None,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[AuditEntry]:
        """감사 로그 조회 (최신순)"""
        conditions: list[str] = []
        params: list[Any] = []
        if resource is not None:
            conditions.append("resource = ?")
            params.append(resource)
        if resource_id is not None:
            conditions.append("resource_id = ?")
            params.append(resource_id)
        if action is not None:
            conditions.append("action = ?")
            params.append(action)

        sql = f"SELECT {AuditEntry.COLUMNS} FROM audit_log"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY audit_id DESC LIMIT ?"
        params.append(limit)

        rows = await self.db.fetchall(sql, tuple(params))
        return [AuditEntry.from_row(row) for row in rows]


class AuditTrail:
    """감사 로그 조회 (ADMIN/OWNER)"""

    def __init__(self, db: SQLiteAdapter):
        self.store = AuditStore(db)

    async def list_entries(
        self,
        caller: Caller,
        resource: str | None = None,
        resource_id: str | None = None,
        action: AuditAction | str | None = None,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[AuditEntry]:
        require_admin(caller)
        action_value = action.value if isinstance(action, AuditAction) else action
        return await self.store.list_entries(resource, resource_id, action_value, limit)
