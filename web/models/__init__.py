"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    PayoutMethodCreateRequest,
    PeriodCreateRequest,
    RevenueCreateRequest,
)
from web.models.responses import (
    AuditEntryResponse,
    AuditListResponse,
    ErrorResponse,
    FundStatusResponse,
    HealthResponse,
    PayoutListResponse,
    PayoutMethodListResponse,
    PayoutMethodResponse,
    PayoutResponse,
    PayoutResultResponse,
    PendingBalanceResponse,
    PeriodCloseResponse,
    PeriodListResponse,
    PeriodResponse,
    ProcessPendingResponse,
    RevenueEventResponse,
    RevenueListResponse,
    RevenueStatsResponse,
)

__all__ = [
    # Requests
    "RevenueCreateRequest",
    "PeriodCreateRequest",
    "PayoutMethodCreateRequest",
    # Responses
    "ErrorResponse",
    "HealthResponse",
    "RevenueEventResponse",
    "RevenueListResponse",
    "RevenueStatsResponse",
    "FundStatusResponse",
    "PeriodResponse",
    "PeriodListResponse",
    "PeriodCloseResponse",
    "PendingBalanceResponse",
    "PayoutResponse",
    "PayoutListResponse",
    "PayoutResultResponse",
    "ProcessPendingResponse",
    "PayoutMethodResponse",
    "PayoutMethodListResponse",
    "AuditEntryResponse",
    "AuditListResponse",
]
