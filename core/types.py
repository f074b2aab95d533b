"""
타입 정의 모듈

Enum, Dataclass 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from dataclasses import dataclass
from enum import Enum


class AppMode(str, Enum):
    """실행 모드 (운영 / 개발)"""

    PRODUCTION = "production"
    DEVELOPMENT = "development"


class RevenueType(str, Enum):
    """수익 발생 유형"""

    PRODUCT_SALE = "PRODUCT_SALE"
    CONTENT_SALE = "CONTENT_SALE"
    SUBSCRIPTION = "SUBSCRIPTION"
    AFFILIATE = "AFFILIATE"
    SERVICE = "SERVICE"
    ADVERTISING = "ADVERTISING"
    OTHER = "OTHER"


class UserRole(str, Enum):
    """사용자 역할 (Identity Provider 발급)"""

    USER = "USER"
    ADMIN = "ADMIN"
    OWNER = "OWNER"


class PeriodStatus(str, Enum):
    """정산 기간 상태"""

    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class PayoutStatus(str, Enum):
    """지급 상태"""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class PayoutMethodStatus(str, Enum):
    """지급 수단 상태"""

    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"


class AuditAction(str, Enum):
    """감사 로그 액션"""

    REVENUE_PERIOD_CREATED = "REVENUE_PERIOD_CREATED"
    REVENUE_PERIOD_CLOSED = "REVENUE_PERIOD_CLOSED"
    PAYOUT_CREATED = "PAYOUT_CREATED"
    PAYOUT_PROCESSING = "PAYOUT_PROCESSING"
    PAYOUT_COMPLETED = "PAYOUT_COMPLETED"
    PAYOUT_FAILED = "PAYOUT_FAILED"
    AUTO_PAYOUT_FAILED = "AUTO_PAYOUT_FAILED"
    PAYOUT_METHOD_VERIFIED = "PAYOUT_METHOD_VERIFIED"


class AuditSeverity(str, Enum):
    """감사 로그 심각도"""

    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Caller:
    """요청 주체 (불변)

    Identity Provider가 확인한 사용자 ID와 역할.
    """

    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        """관리 권한 보유 여부 (ADMIN 또는 OWNER)"""
        return self.role in (UserRole.ADMIN.value, UserRole.OWNER.value)

    @classmethod
    def create(cls, user_id: str, role: str | UserRole = UserRole.USER) -> "Caller":
        """Caller 생성 헬퍼

        Enum 또는 문자열 모두 허용
        """
        return cls(
            id=user_id,
            role=role.value if isinstance(role, Enum) else role,
        )
