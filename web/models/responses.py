"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화.
금액은 소수점 2자리 고정 문자열.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    mode: str = Field(..., description="실행 모드 (production/development)")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class ErrorResponse(BaseModel):
    """에러 응답"""

    error: str = Field(..., description="에러 코드 (INVALID_AMOUNT 등)")
    detail: str = Field(..., description="에러 메시지")


# =========================================================================
# 수익 / Fund
# =========================================================================

class RevenueEventResponse(BaseModel):
    """수익 이벤트 응답"""

    event_id: str = Field(..., description="이벤트 ID")
    amount: str = Field(..., description="수익 금액")
    revenue_type: str = Field(..., description="수익 유형")
    description: str | None = Field(default=None, description="설명")
    user_id: str = Field(..., description="사용자 ID")
    project_id: str | None = Field(default=None, description="프로젝트 ID")
    product_id: str | None = Field(default=None, description="상품 ID")
    content_id: str | None = Field(default=None, description="콘텐츠 ID")
    growth_fund_share: str = Field(..., description="Growth Fund 몫")
    owner_share: str = Field(..., description="소유자 몫")
    period_id: str | None = Field(default=None, description="귀속 정산 기간")
    created_at: str = Field(..., description="기록 시각 (UTC)")


class RevenueSummaryResponse(BaseModel):
    """사용자 수익 합계"""

    total_revenue: str = Field(..., description="수익 합계")
    owner_earnings: str = Field(..., description="소유자 몫 합계")
    growth_fund: str = Field(..., description="Growth Fund 몫 합계")
    transaction_count: int = Field(..., description="이벤트 수")


class RevenueListResponse(BaseModel):
    """사용자 수익 목록 응답"""

    events: list[RevenueEventResponse] = Field(..., description="수익 이벤트 (최신순)")
    summary: RevenueSummaryResponse = Field(..., description="합계")


class RevenueTypeTotal(BaseModel):
    revenue_type: str
    total: str
    transaction_count: int


class RevenueStatsResponse(BaseModel):
    """관리자용 수익 통계"""

    days: int = Field(..., description="집계 기간 (일)")
    since: str = Field(..., description="집계 시작 시각 (UTC)")
    by_type: list[RevenueTypeTotal] = Field(..., description="유형별 합계")
    fund: "FundStatusResponse" = Field(..., description="SystemFund 현재 값")
    pending_balance: str = Field(..., description="미정산 수익 합계")
    completed_payouts: str = Field(..., description="완료된 지급 합계")
    owner_rate: str = Field(..., description="소유자 몫 비율")


class FundStatusResponse(BaseModel):
    """SystemFund 응답"""

    growth_fund: str = Field(..., description="Growth Fund 누계")
    owner_earnings: str = Field(..., description="소유자 몫 누계")
    total_revenue: str = Field(..., description="총 수익 누계")
    owner_paid_out: str = Field(..., description="지급 완료 누계")
    updated_at: str | None = Field(default=None, description="마지막 갱신 시각")


RevenueStatsResponse.model_rebuild()


# =========================================================================
# 정산 기간
# =========================================================================

class PeriodResponse(BaseModel):
    """정산 기간 응답"""

    period_id: str = Field(..., description="기간 ID")
    start_date: str = Field(..., description="시작 시각 (포함)")
    end_date: str = Field(..., description="종료 시각 (미포함)")
    status: str = Field(..., description="상태 (ACTIVE/CLOSED)")
    auto_payout: bool = Field(..., description="자동 지급 여부")
    payable_total: str | None = Field(default=None, description="지급 대상 합계 (마감 후)")
    owner_share_total: str | None = Field(default=None, description="소유자 몫 합계")
    growth_fund_total: str | None = Field(default=None, description="Growth Fund 몫 합계")
    transaction_count: int = Field(default=0, description="귀속 이벤트 수")
    payout_id: str | None = Field(default=None, description="생성된 지급 ID")
    created_by: str | None = Field(default=None, description="생성자")
    created_at: str = Field(..., description="생성 시각")
    closed_at: str | None = Field(default=None, description="마감 시각")


class PeriodListResponse(BaseModel):
    periods: list[PeriodResponse]
    total: int


class PeriodCloseResponse(BaseModel):
    """정산 기간 마감 응답"""

    period_id: str = Field(..., description="기간 ID")
    payable_total: str = Field(..., description="지급 대상 합계")
    payout_id: str | None = Field(default=None, description="생성된 PENDING 지급 ID")
    period: PeriodResponse = Field(..., description="마감된 기간")


class PendingBalanceResponse(BaseModel):
    pending_balance: str = Field(..., description="마감 기간에 귀속되지 않은 수익 합계")


# =========================================================================
# 지급
# =========================================================================

class PayoutResponse(BaseModel):
    """지급 응답"""

    payout_id: str = Field(..., description="지급 ID")
    period_id: str | None = Field(default=None, description="정산 기간 ID")
    recipient_id: str = Field(..., description="수령인")
    amount: str = Field(..., description="지급 금액")
    fees: str | None = Field(default=None, description="수수료")
    net_amount: str | None = Field(default=None, description="실수령액")
    status: str = Field(..., description="상태 (PENDING/PROCESSING/COMPLETED/FAILED)")
    payment_method: str | None = Field(default=None, description="지급 수단 유형")
    transaction_id: str | None = Field(default=None, description="외부 거래 ID")
    notes: str | None = Field(default=None, description="메모/실패 사유")
    created_at: str = Field(..., description="생성 시각")
    updated_at: str = Field(..., description="갱신 시각")
    processing_started_at: str | None = Field(default=None, description="처리 시작 시각")
    completed_at: str | None = Field(default=None, description="완료 시각")


class PayoutListResponse(BaseModel):
    payouts: list[PayoutResponse]
    total: int


class PayoutResultResponse(BaseModel):
    """지급 처리 결과"""

    payout_id: str = Field(..., description="지급 ID")
    success: bool = Field(..., description="성공 여부")
    message: str = Field(..., description="결과 메시지")
    transaction_id: str | None = Field(default=None, description="외부 거래 ID")
    fees: str | None = Field(default=None, description="수수료")
    net_amount: str | None = Field(default=None, description="실수령액")


class ProcessPendingResponse(BaseModel):
    """PENDING 지급 일괄 처리 결과"""

    processed: int = Field(..., description="처리 시도 수")
    successful: int = Field(..., description="성공 수")
    failed: int = Field(..., description="실패 수")
    results: list[PayoutResultResponse] = Field(..., description="개별 결과")


class PayoutMethodResponse(BaseModel):
    """지급 수단 응답"""

    method_id: str = Field(..., description="지급 수단 ID")
    owner_id: str = Field(..., description="소유자 ID")
    method_type: str = Field(..., description="유형")
    details: dict[str, Any] = Field(default_factory=dict, description="상세 정보")
    is_default: bool = Field(..., description="기본 수단 여부")
    is_verified: bool = Field(..., description="검증 여부")
    status: str = Field(..., description="상태")
    created_at: str = Field(..., description="등록 시각")


class PayoutMethodListResponse(BaseModel):
    methods: list[PayoutMethodResponse]


# =========================================================================
# Audit
# =========================================================================


class AuditEntryResponse(BaseModel):
    """감사 로그 항목"""

    audit_id: int = Field(..., description="감사 로그 ID")
    action: str = Field(..., description="액션")
    resource: str = Field(..., description="리소스 유형")
    resource_id: str | None = Field(default=None, description="리소스 ID")
    user_id: str | None = Field(default=None, description="수행자")
    severity: str = Field(..., description="심각도 (INFO/WARNING/ERROR)")
    status: str = Field(..., description="결과 (SUCCESS/FAILURE)")
    context: dict[str, Any] = Field(default_factory=dict, description="부가 정보")
    error: str | None = Field(default=None, description="오류 메시지")
    created_at: str = Field(..., description="기록 시각")


class AuditListResponse(BaseModel):
    entries: list[AuditEntryResponse]
    total: int
