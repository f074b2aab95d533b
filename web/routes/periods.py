"""
Periods 라우트

정산 기간 생성 / 마감 / 조회 API
"""

from fastapi import APIRouter, Depends, Path, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.constants import Defaults
from core.revenue.periods import RevenuePeriodManager
from core.types import Caller, PeriodStatus
from core.utils.money import format_amount
from web.dependencies import get_app_settings, get_current_caller, get_db, get_db_write
from web.models.requests import PeriodCreateRequest
from web.models.responses import (
    PendingBalanceResponse,
    PeriodCloseResponse,
    PeriodListResponse,
    PeriodResponse,
)

router = APIRouter(prefix="/api/payouts", tags=["Periods"])


@router.post("/periods", response_model=PeriodResponse, status_code=201)
async def create_period(
    request: PeriodCreateRequest,
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
) -> PeriodResponse:
    """정산 기간 생성 (ADMIN/OWNER)

    기존 ACTIVE/CLOSED 기간과 겹치면 409.
    """
    manager = RevenuePeriodManager(db, settings.ledger)
    period = await manager.create_period(
        caller,
        start_date=request.start_date,
        end_date=request.end_date,
        auto_payout=request.auto_payout,
    )
    return PeriodResponse(**period.to_dict())


@router.post("/periods/{period_id}/close", response_model=PeriodCloseResponse)
async def close_period(
    period_id: str = Path(..., description="기간 ID"),
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
) -> PeriodCloseResponse:
    """정산 기간 마감 (ADMIN/OWNER)

    auto_payout이고 합계가 0보다 크면 PENDING 지급 생성.
    """
    manager = RevenuePeriodManager(db, settings.ledger)
    result = await manager.close_period(caller, period_id)

    return PeriodCloseResponse(
        period_id=result.period.period_id,
        payable_total=format_amount(result.period.payable_total),
        payout_id=result.payout.payout_id if result.payout else None,
        period=PeriodResponse(**result.period.to_dict()),
    )


@router.get("/periods", response_model=PeriodListResponse)
async def list_periods(
    status: PeriodStatus | None = Query(default=None, description="상태 필터"),
    limit: int = Query(default=Defaults.LIST_LIMIT, ge=1, le=Defaults.LIST_LIMIT_MAX),
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PeriodListResponse:
    """정산 기간 목록 (최신 시작일 순)"""
    manager = RevenuePeriodManager(db, settings.ledger)
    periods = await manager.list_periods(caller, status, limit)
    return PeriodListResponse(
        periods=[PeriodResponse(**p.to_dict()) for p in periods],
        total=len(periods),
    )


@router.get("/pending-balance", response_model=PendingBalanceResponse)
async def get_pending_balance(
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PendingBalanceResponse:
    """마감된 기간에 귀속되지 않은 수익 합계"""
    manager = RevenuePeriodManager(db, settings.ledger)
    balance = await manager.get_pending_balance(caller)
    return PendingBalanceResponse(pending_balance=format_amount(balance))
