"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.identity.jwt_resolver import JwtCallerResolver
from adapters.interfaces import ICallerResolver, INotifier, IPaymentRail
from core.config.loader import Settings, get_settings
from core.revenue.auth import require_admin
from core.types import Caller

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


async def get_db() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    조회 API에서 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


async def get_db_write() -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)

    수익 기록, 기간 생성/마감, 지급 처리 시 사용.
    """
    settings = get_settings()
    async with SQLiteAdapter(settings.db_path, readonly=False) as db:
        yield db


# =========================================================================
# 요청 주체
# =========================================================================

def get_caller_resolver(
    settings: Settings = Depends(get_app_settings),
) -> ICallerResolver:
    """JWT 검증기 (web.secret_key로 서명 검증)"""
    return JwtCallerResolver(settings.web_secret_key)


def get_current_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    resolver: ICallerResolver = Depends(get_caller_resolver),
) -> Caller:
    """Authorization: Bearer 토큰 → Caller

    토큰이 없거나 유효하지 않으면 Unauthorized (401).
    """
    token = credentials.credentials if credentials else None
    return resolver.resolve(token)


def get_admin_caller(caller: Caller = Depends(get_current_caller)) -> Caller:
    """ADMIN/OWNER 요청 주체 (아니면 Forbidden, 403)"""
    return require_admin(caller)


# =========================================================================
# 외부 어댑터 (lifespan에서 설정)
# =========================================================================

_notifier: INotifier | None = None
_payment_rail: IPaymentRail | None = None


def set_notifier(notifier: INotifier | None) -> None:
    """알림 서비스 설정 (앱 시작 시)"""
    global _notifier
    _notifier = notifier


def set_payment_rail(payment_rail: IPaymentRail | None) -> None:
    """송금 어댑터 설정 (앱 시작 시)"""
    global _payment_rail
    _payment_rail = payment_rail


def get_notifier() -> INotifier | None:
    """알림 서비스 반환 (Slack 미설정 시 None)"""
    return _notifier


def get_payment_rail() -> IPaymentRail:
    """송금 어댑터 반환

    Raises:
        HTTPException: payment_rail 미설정 (503)
    """
    if _payment_rail is None:
        raise HTTPException(
            status_code=503,
            detail="Payment rail is not configured",
        )
    return _payment_rail
