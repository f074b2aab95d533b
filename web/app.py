"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config.loader import get_settings
from core.logging import setup_logging
from core.revenue.errors import LedgerError

# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

from web.routes import (
    audit,
    fund,
    health,
    payout_methods,
    payouts,
    periods,
    revenue,
)
from web.dependencies import set_notifier, set_payment_rail

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
    from adapters.payment.http_rail import HttpPaymentRail
    from adapters.slack.notifier import SlackNotifier

    settings = get_settings()

    # 시작 시 - DB 스키마 자동 초기화
    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)

    notifier = None
    if settings.slack_webhook_url:
        notifier = SlackNotifier(webhook_url=settings.slack_webhook_url)
        set_notifier(notifier)
        logger.info("Web: Slack 알림 활성화")

    payment_rail = None
    if settings.payment_rail is not None:
        payment_rail = HttpPaymentRail(
            base_url=settings.payment_rail.base_url,
            api_key=settings.payment_rail.api_key,
        )
        set_payment_rail(payment_rail)
        logger.info("Web: Payment rail 활성화")
    else:
        logger.info("Web: payment_rail 설정 없음, 지급 처리 비활성화")

    yield

    # 종료 시 - 리소스 정리
    set_notifier(None)
    set_payment_rail(None)
    if notifier is not None:
        await notifier.close()
    if payment_rail is not None:
        await payment_rail.close()


app = FastAPI(
    title="AIVEL Ledger API",
    description="수익 분배 / Growth Fund / 소유자 정산 API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    """정산 도메인 예외 → status_code + {"error", "detail"}"""
    if exc.status_code >= 500:
        logger.error(
            f"Ledger error: {exc.code}",
            extra={"path": request.url.path, "detail": exc.message},
        )
    else:
        logger.info(
            f"Ledger error: {exc.code}",
            extra={"path": request.url.path, "detail": exc.message},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(revenue.router)
app.include_router(fund.router)
app.include_router(periods.router)
app.include_router(payout_methods.router)
app.include_router(audit.router)
# /api/payouts/{payout_id} 경로를 가지므로 마지막에 등록
app.include_router(payouts.router)
