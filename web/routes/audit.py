"""
Audit 라우트

감사 로그 조회 API (ADMIN/OWNER)
"""

from fastapi import APIRouter, Depends, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.constants import Defaults
from core.revenue.audit import AuditTrail
from core.types import AuditAction, Caller
from web.dependencies import get_current_caller, get_db
from web.models.responses import AuditEntryResponse, AuditListResponse

router = APIRouter(prefix="/api/audit", tags=["Audit"])


@router.get("", response_model=AuditListResponse)
async def list_audit_entries(
    resource: str | None = Query(default=None, description="리소스 유형 (REVENUE_PERIOD/PAYOUT/PAYOUT_METHOD)"),
    resource_id: str | None = Query(default=None, description="리소스 ID"),
    action: AuditAction | None = Query(default=None, description="액션 필터"),
    limit: int = Query(default=Defaults.LIST_LIMIT, ge=1, le=Defaults.LIST_LIMIT_MAX),
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db),
) -> AuditListResponse:
    """감사 로그 (최신순)"""
    entries = await AuditTrail(db).list_entries(caller, resource, resource_id, action, limit)
    return AuditListResponse(
        entries=[AuditEntryResponse(**e.to_dict()) for e in entries],
        total=len(entries),
    )
