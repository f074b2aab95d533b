"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
금액은 문자열/숫자 모두 허용하고 검증은 core.revenue.split에서 수행.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class RevenueCreateRequest(BaseModel):
    """수익 기록 요청"""

    amount: int | float | str = Field(..., description="수익 금액 (0 이상, 소수점 2자리까지)")
    revenue_type: str = Field(..., alias="type", description="수익 유형 (PRODUCT_SALE 등)")
    description: str | None = Field(default=None, max_length=500, description="설명")
    project_id: str | None = Field(default=None, alias="projectId", description="프로젝트 ID")
    product_id: str | None = Field(default=None, alias="productId", description="상품 ID")
    content_id: str | None = Field(default=None, alias="contentId", description="콘텐츠 ID")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "amount": "100.00",
                    "type": "PRODUCT_SALE",
                    "description": "Template bundle",
                    "productId": "prod_123",
                },
            ]
        },
    }


class PeriodCreateRequest(BaseModel):
    """정산 기간 생성 요청 ([start_date, end_date))"""

    start_date: datetime = Field(..., alias="startDate", description="시작 시각 (포함)")
    end_date: datetime = Field(..., alias="endDate", description="종료 시각 (미포함)")
    auto_payout: bool = Field(default=True, alias="autoPayout", description="마감 시 지급 자동 생성")

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "startDate": "2026-10-01T00:00:00Z",
                    "endDate": "2026-11-01T00:00:00Z",
                    "autoPayout": True,
                },
            ]
        },
    }


class PayoutMethodCreateRequest(BaseModel):
    """지급 수단 등록 요청"""

    method_type: Literal["BANK_TRANSFER", "PAYPAL", "CRYPTO_WALLET", "CHECK"] = Field(
        ..., alias="type", description="지급 수단 유형"
    )
    details: dict[str, Any] = Field(default_factory=dict, description="계좌/지갑 정보")
    is_default: bool = Field(default=False, alias="isDefault", description="기본 수단 여부")

    model_config = {"populate_by_name": True}
