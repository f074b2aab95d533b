"""
Revenue 라우트

수익 기록 및 조회 API
"""

from fastapi import APIRouter, Depends, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.revenue.ledger import RevenueLedger
from core.types import Caller
from core.utils.money import format_amount
from web.dependencies import get_app_settings, get_current_caller, get_db, get_db_write
from web.models.requests import RevenueCreateRequest
from web.models.responses import (
    FundStatusResponse,
    RevenueEventResponse,
    RevenueListResponse,
    RevenueStatsResponse,
    RevenueSummaryResponse,
    RevenueTypeTotal,
)

router = APIRouter(prefix="/api/revenue", tags=["Revenue"])


@router.post("", response_model=RevenueEventResponse, status_code=201)
async def record_revenue(
    request: RevenueCreateRequest,
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
) -> RevenueEventResponse:
    """수익 기록

    금액을 소유자 몫 / Growth Fund 몫으로 분배하고
    이벤트, 사용자 잔액, SystemFund를 하나의 트랜잭션으로 갱신.
    """
    ledger = RevenueLedger(db, settings.ledger)
    event = await ledger.record_revenue(
        caller,
        amount=request.amount,
        revenue_type=request.revenue_type,
        description=request.description,
        project_id=request.project_id,
        product_id=request.product_id,
        content_id=request.content_id,
    )
    return RevenueEventResponse(**event.to_dict())


@router.get("", response_model=RevenueListResponse)
async def list_revenue(
    limit: int = Query(default=30, ge=1, le=200),
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> RevenueListResponse:
    """요청 주체의 수익 이벤트 (최신순) 및 합계"""
    ledger = RevenueLedger(db, settings.ledger)
    result = await ledger.list_user_revenue(caller, limit)
    summary = result["summary"]

    return RevenueListResponse(
        events=[RevenueEventResponse(**e.to_dict()) for e in result["events"]],
        summary=RevenueSummaryResponse(
            total_revenue=format_amount(summary["total_revenue"]),
            owner_earnings=format_amount(summary["owner_earnings"]),
            growth_fund=format_amount(summary["growth_fund"]),
            transaction_count=summary["transaction_count"],
        ),
    )


@router.get("/stats", response_model=RevenueStatsResponse)
async def get_revenue_stats(
    days: int = Query(default=30, ge=1, le=365),
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> RevenueStatsResponse:
    """수익 통계 (ADMIN/OWNER)"""
    ledger = RevenueLedger(db, settings.ledger)
    stats = await ledger.get_revenue_stats(caller, days)

    return RevenueStatsResponse(
        days=stats["days"],
        since=stats["since"],
        by_type=[
            RevenueTypeTotal(
                revenue_type=row["revenue_type"],
                total=format_amount(row["total"]),
                transaction_count=row["transaction_count"],
            )
            for row in stats["by_type"]
        ],
        fund=FundStatusResponse(**stats["fund"].to_dict()),
        pending_balance=format_amount(stats["pending_balance"]),
        completed_payouts=format_amount(stats["completed_payouts"]),
        owner_rate=str(stats["owner_rate"]),
    )
