"""
정산 도메인 예외

모든 예외는 LedgerError를 상속하며 code / status_code를 가짐.
Web 레이어는 status_code를 그대로 HTTP 응답 코드로 사용.
"""


class LedgerError(Exception):
    """정산 도메인 예외 기본 클래스"""

    code: str = "LEDGER_ERROR"
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """응답 본문용 dict"""
        return {"error": self.code, "detail": self.message}


class InvalidAmount(LedgerError):
    """음수, 비유한수, 최소 통화 단위보다 세밀한 금액"""

    code = "INVALID_AMOUNT"
    status_code = 400


class InvalidRevenueType(LedgerError):
    """정의되지 않은 수익 유형"""

    code = "INVALID_REVENUE_TYPE"
    status_code = 400


class InvalidRange(LedgerError):
    """정산 기간 종료일이 시작일보다 같거나 이른 경우"""

    code = "INVALID_RANGE"
    status_code = 400


class OverlappingPeriod(LedgerError):
    """기존 ACTIVE/CLOSED 기간과 겹치는 기간"""

    code = "OVERLAPPING_PERIOD"
    status_code = 409


class NotFound(LedgerError):
    """기간/지급/수익 참조 없음"""

    code = "NOT_FOUND"
    status_code = 404


class AlreadyClosed(LedgerError):
    """ACTIVE가 아닌 기간을 마감하려는 경우"""

    code = "ALREADY_CLOSED"
    status_code = 409


class PayoutNotPending(LedgerError):
    """PENDING이 아닌 지급을 처리하려는 경우 (이미 처리 중/완료)"""

    code = "PAYOUT_NOT_PENDING"
    status_code = 409


class Unauthorized(LedgerError):
    """요청 주체 확인 실패"""

    code = "UNAUTHORIZED"
    status_code = 401


class Forbidden(Unauthorized):
    """요청 주체가 필요한 역할을 갖고 있지 않음"""

    code = "FORBIDDEN"
    status_code = 403


class StorageConflict(LedgerError):
    """저장소 트랜잭션 충돌 (재시도 1회 후에도 실패)"""

    code = "STORAGE_CONFLICT"
    status_code = 503
