"""
Payout Methods 라우트

지급 수단 등록 / 조회 / 검증 API
"""

from fastapi import APIRouter, Depends, Path

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.revenue.payout_methods import PayoutMethodService
from core.types import Caller
from web.dependencies import get_current_caller, get_db, get_db_write
from web.models.requests import PayoutMethodCreateRequest
from web.models.responses import PayoutMethodListResponse, PayoutMethodResponse

router = APIRouter(prefix="/api/payouts/methods", tags=["Payout Methods"])


@router.get("", response_model=PayoutMethodListResponse)
async def list_payout_methods(
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db),
) -> PayoutMethodListResponse:
    """요청 주체의 지급 수단 (기본 수단 우선)"""
    service = PayoutMethodService(db)
    methods = await service.list_methods(caller)
    return PayoutMethodListResponse(
        methods=[PayoutMethodResponse(**m.to_dict()) for m in methods],
    )


@router.post("", response_model=PayoutMethodResponse, status_code=201)
async def add_payout_method(
    request: PayoutMethodCreateRequest,
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db_write),
) -> PayoutMethodResponse:
    """지급 수단 등록 (미검증 상태로 저장)"""
    service = PayoutMethodService(db)
    method = await service.add_method(
        caller,
        method_type=request.method_type,
        details=request.details,
        is_default=request.is_default,
    )
    return PayoutMethodResponse(**method.to_dict())


@router.post("/{method_id}/verify", response_model=PayoutMethodResponse)
async def verify_payout_method(
    method_id: str = Path(..., description="지급 수단 ID"),
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db_write),
) -> PayoutMethodResponse:
    """지급 수단 검증 처리 (ADMIN/OWNER)"""
    service = PayoutMethodService(db)
    method = await service.verify_method(caller, method_id)
    return PayoutMethodResponse(**method.to_dict())
