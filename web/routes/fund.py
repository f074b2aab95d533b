"""
Fund 라우트

GET /api/fund/status - SystemFund 현재 값
"""

from fastapi import APIRouter, Depends

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import Settings
from core.revenue.ledger import RevenueLedger
from core.types import Caller
from web.dependencies import get_app_settings, get_current_caller, get_db
from web.models.responses import FundStatusResponse

router = APIRouter(prefix="/api/fund", tags=["Fund"])


@router.get("/status", response_model=FundStatusResponse)
async def get_fund_status(
    caller: Caller = Depends(get_current_caller),
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> FundStatusResponse:
    """SystemFund 조회

    저장소 오류는 그대로 전파 (0으로 대체하지 않음).
    """
    ledger = RevenueLedger(db, settings.ledger)
    fund = await ledger.get_fund_status(caller)
    return FundStatusResponse(**fund.to_dict())
