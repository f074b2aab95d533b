"""
Payouts 라우트

지급 처리 / 조회 API (ADMIN/OWNER)

주의: /api/payouts/{payout_id} 경로가 다른 /api/payouts/* 경로를 가리지 않도록
이 라우터는 periods, payout_methods 라우터 다음에 등록.
"""

from fastapi import APIRouter, Depends, Path, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import INotifier, IPaymentRail
from core.config.loader import Settings
from core.constants import Defaults
from core.revenue.payouts import PayoutProcessor
from core.types import Caller, PayoutStatus
from web.dependencies import (
    get_admin_caller,
    get_app_settings,
    get_current_caller,
    get_db,
    get_db_write,
    get_notifier,
    get_payment_rail,
)
from web.models.responses import (
    PayoutListResponse,
    PayoutResponse,
    PayoutResultResponse,
    ProcessPendingResponse,
)

router = APIRouter(prefix="/api/payouts", tags=["Payouts"])


@router.get("", response_model=PayoutListResponse)
async def list_payouts(
    status: PayoutStatus | None = Query(default=None, description="상태 필터"),
    limit: int = Query(default=Defaults.LIST_LIMIT, ge=1, le=Defaults.LIST_LIMIT_MAX),
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PayoutListResponse:
    """지급 목록 (최신순)"""
    # 조회는 송금 어댑터가 필요 없음
    processor = PayoutProcessor(db, payment_rail=None, config=settings.ledger)
    payouts = await processor.list_payouts(caller, status, limit)
    return PayoutListResponse(
        payouts=[PayoutResponse(**p.to_dict()) for p in payouts],
        total=len(payouts),
    )


@router.post("/process-pending", response_model=ProcessPendingResponse)
async def process_pending_payouts(
    caller: Caller = Depends(get_admin_caller),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
    payment_rail: IPaymentRail = Depends(get_payment_rail),
    notifier: INotifier | None = Depends(get_notifier),
) -> ProcessPendingResponse:
    """모든 PENDING 지급 처리"""
    processor = PayoutProcessor(db, payment_rail, settings.ledger, notifier)
    summary = await processor.process_pending_payouts()

    return ProcessPendingResponse(
        processed=summary["processed"],
        successful=summary["successful"],
        failed=summary["failed"],
        results=[PayoutResultResponse(**r.to_dict()) for r in summary["results"]],
    )


@router.post("/{payout_id}/process", response_model=PayoutResultResponse)
async def process_payout(
    payout_id: str = Path(..., description="지급 ID"),
    caller: Caller = Depends(get_admin_caller),
    db: SQLiteAdapter = Depends(get_db_write),
    settings: Settings = Depends(get_app_settings),
    payment_rail: IPaymentRail = Depends(get_payment_rail),
    notifier: INotifier | None = Depends(get_notifier),
) -> PayoutResultResponse:
    """단일 지급 처리

    PENDING이 아니면 409 (이미 처리 중이거나 완료).
    """
    processor = PayoutProcessor(db, payment_rail, settings.ledger, notifier)
    result = await processor.process_payout(payout_id)
    return PayoutResultResponse(**result.to_dict())


@router.get("/{payout_id}", response_model=PayoutResponse)
async def get_payout(
    payout_id: str = Path(..., description="지급 ID"),
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PayoutResponse:
    """지급 상세"""
    processor = PayoutProcessor(db, payment_rail=None, config=settings.ledger)
    payout = await processor.get_payout(caller, payout_id)
    return PayoutResponse(**payout.to_dict())
