"""
정산 도메인 모델

DB 행을 도메인 객체로 변환한 불변 데이터 구조.
금액은 Decimal, 시각은 db_timestamp() 포맷 UTC 문자열.
"""

import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from core.utils.money import format_amount, from_minor


@dataclass(frozen=True)
class RevenueEvent:
    """수익 이벤트 (생성 후 금액/분배 불변)

    Attributes:
        event_id: 이벤트 ID (UUID)
        amount: 수익 금액
        revenue_type: 수익 유형 (RevenueType 값)
        user_id: 수익 발생 사용자
        growth_fund_share: Growth Fund 몫
        owner_share: 소유자 몫
        created_at: 기록 시각 (UTC)
        period_id: 귀속된 정산 기간 (마감 전에는 None)
    """

    event_id: str
    amount: Decimal
    revenue_type: str
    user_id: str
    growth_fund_share: Decimal
    owner_share: Decimal
    created_at: str
    description: str | None = None
    project_id: str | None = None
    product_id: str | None = None
    content_id: str | None = None
    period_id: str | None = None

    COLUMNS = (
        "event_id, amount_minor, revenue_type, user_id, "
        "growth_fund_minor, owner_share_minor, created_at, "
        "description, project_id, product_id, content_id, period_id"
    )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> "RevenueEvent":
        """COLUMNS 순서의 행 → RevenueEvent"""
        return cls(
            event_id=row[0],
            amount=from_minor(row[1]),
            revenue_type=row[2],
            user_id=row[3],
            growth_fund_share=from_minor(row[4]),
            owner_share=from_minor(row[5]),
            created_at=row[6],
            description=row[7],
            project_id=row[8],
            product_id=row[9],
            content_id=row[10],
            period_id=row[11],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "amount": format_amount(self.amount),
            "revenue_type": self.revenue_type,
            "description": self.description,
            "user_id": self.user_id,
            "project_id": self.project_id,
            "product_id": self.product_id,
            "content_id": self.content_id,
            "growth_fund_share": format_amount(self.growth_fund_share),
            "owner_share": format_amount(self.owner_share),
            "period_id": self.period_id,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class FundSnapshot:
    """SystemFund 집계 스냅샷

    total_revenue == growth_fund + owner_earnings 항상 성립.
    owner_paid_out은 완료된 지급 누계 (owner_earnings는 차감하지 않음).
    """

    growth_fund: Decimal
    owner_earnings: Decimal
    total_revenue: Decimal
    owner_paid_out: Decimal = Decimal("0.00")
    updated_at: str | None = None

    @property
    def payable_available(self) -> Decimal:
        """아직 지급되지 않은 누적 수익 (정산 지급 한도)"""
        return self.total_revenue - self.owner_paid_out

    @classmethod
    def empty(cls) -> "FundSnapshot":
        """첫 수익 기록 전 상태"""
        return cls(
            growth_fund=from_minor(0),
            owner_earnings=from_minor(0),
            total_revenue=from_minor(0),
            owner_paid_out=from_minor(0),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "growth_fund": format_amount(self.growth_fund),
            "owner_earnings": format_amount(self.owner_earnings),
            "total_revenue": format_amount(self.total_revenue),
            "owner_paid_out": format_amount(self.owner_paid_out),
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class RevenuePeriod:
    """정산 기간 [start_date, end_date)

    마감 전에는 합계 필드가 None.
    """

    period_id: str
    start_date: str
    end_date: str
    status: str
    auto_payout: bool
    created_at: str
    created_by: str | None = None
    payable_total: Decimal | None = None
    owner_share_total: Decimal | None = None
    growth_fund_total: Decimal | None = None
    transaction_count: int = 0
    payout_id: str | None = None
    closed_at: str | None = None

    COLUMNS = (
        "period_id, start_date, end_date, status, auto_payout, created_at, "
        "created_by, payable_total_minor, owner_share_total_minor, "
        "growth_fund_total_minor, transaction_count, payout_id, closed_at"
    )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> "RevenuePeriod":
        """COLUMNS 순서의 행 → RevenuePeriod"""
        return cls(
            period_id=row[0],
            start_date=row[1],
            end_date=row[2],
            status=row[3],
            auto_payout=bool(row[4]),
            created_at=row[5],
            created_by=row[6],
            payable_total=from_minor(row[7]) if row[7] is not None else None,
            owner_share_total=from_minor(row[8]) if row[8] is not None else None,
            growth_fund_total=from_minor(row[9]) if row[9] is not None else None,
            transaction_count=row[10] or 0,
            payout_id=row[11],
            closed_at=row[12],
        )

    def to_dict(self) -> dict[str, Any]:
        def _fmt(value: Decimal | None) -> str | None:
            return format_amount(value) if value is not None else None

        return {
            "period_id": self.period_id,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "status": self.status,
            "auto_payout": self.auto_payout,
            "payable_total": _fmt(self.payable_total),
            "owner_share_total": _fmt(self.owner_share_total),
            "growth_fund_total": _fmt(self.growth_fund_total),
            "transaction_count": self.transaction_count,
            "payout_id": self.payout_id,
            "created_by": self.created_by,
            "created_at": self.created_at,
            "closed_at": self.closed_at,
        }


@dataclass(frozen=True)
class Payout:
    """소유자 지급

    fees / net_amount / transaction_id는 COMPLETED 이후에만 채워짐.
    """

    payout_id: str
    recipient_id: str
    amount: Decimal
    status: str
    created_at: str
    updated_at: str
    period_id: str | None = None
    fees: Decimal | None = None
    net_amount: Decimal | None = None
    payment_method: str | None = None
    transaction_id: str | None = None
    notes: str | None = None
    processing_started_at: str | None = None
    completed_at: str | None = None

    COLUMNS = (
        "payout_id, recipient_id, amount_minor, status, created_at, updated_at, "
        "period_id, fees_minor, net_amount_minor, payment_method, "
        "transaction_id, notes, processing_started_at, completed_at"
    )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> "Payout":
        """COLUMNS 순서의 행 → Payout"""
        return cls(
            payout_id=row[0],
            recipient_id=row[1],
            amount=from_minor(row[2]),
            status=row[3],
            created_at=row[4],
            updated_at=row[5],
            period_id=row[6],
            fees=from_minor(row[7]) if row[7] is not None else None,
            net_amount=from_minor(row[8]) if row[8] is not None else None,
            payment_method=row[9],
            transaction_id=row[10],
            notes=row[11],
            processing_started_at=row[12],
            completed_at=row[13],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "payout_id": self.payout_id,
            "period_id": self.period_id,
            "recipient_id": self.recipient_id,
            "amount": format_amount(self.amount),
            "fees": format_amount(self.fees) if self.fees is not None else None,
            "net_amount": format_amount(self.net_amount) if self.net_amount is not None else None,
            "status": self.status,
            "payment_method": self.payment_method,
            "transaction_id": self.transaction_id,
            "notes": self.notes,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "processing_started_at": self.processing_started_at,
            "completed_at": self.completed_at,
        }


@dataclass(frozen=True)
class PayoutMethod:
    """지급 수단 (계좌, 지갑 등)"""

    method_id: str
    owner_id: str
    method_type: str
    created_at: str
    details: dict[str, Any] = field(default_factory=dict)
    is_default: bool = False
    is_verified: bool = False
    status: str = "ACTIVE"

    COLUMNS = (
        "method_id, owner_id, method_type, created_at, "
        "details_json, is_default, is_verified, status"
    )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> "PayoutMethod":
        """COLUMNS 순서의 행 → PayoutMethod"""
        return cls(
            method_id=row[0],
            owner_id=row[1],
            method_type=row[2],
            created_at=row[3],
            details=json.loads(row[4]) if row[4] else {},
            is_default=bool(row[5]),
            is_verified=bool(row[6]),
            status=row[7],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "method_id": self.method_id,
            "owner_id": self.owner_id,
            "method_type": self.method_type,
            "details": self.details,
            "is_default": self.is_default,
            "is_verified": self.is_verified,
            "status": self.status,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class AuditEntry:
    """감사 로그 항목 (추가 전용)

    기간/지급 상태 변경과 같은 트랜잭션에서 기록됨.
    """

    audit_id: int
    action: str
    resource: str
    resource_id: str | None
    created_at: str
    user_id: str | None = None
    severity: str = "INFO"
    status: str = "SUCCESS"
    context: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    COLUMNS = (
        "audit_id, action, resource, resource_id, created_at, "
        "user_id, severity, status, context_json, error"
    )

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> "AuditEntry":
        """COLUMNS 순서의 행 → AuditEntry"""
        return cls(
            audit_id=row[0],
            action=row[1],
            resource=row[2],
            resource_id=row[3],
            created_at=row[4],
            user_id=row[5],
            severity=row[6],
            status=row[7],
            context=json.loads(row[8]) if row[8] else {},
            error=row[9],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "audit_id": self.audit_id,
            "action": self.action,
            "resource": self.resource,
            "resource_id": self.resource_id,
            "user_id": self.user_id,
            "severity": self.severity,
            "status": self.status,
            "context": self.context,
            "error": self.error,
            "created_at": self.created_at,
        }
