"""
수익 정산 도메인

수익 기록, 70/30 분배, SystemFund 집계, 정산 기간 마감, 소유자 지급.
"""

from core.revenue.errors import (
    AlreadyClosed,
    Forbidden,
    InvalidAmount,
    InvalidRange,
    InvalidRevenueType,
    LedgerError,
    NotFound,
    OverlappingPeriod,
    PayoutNotPending,
    StorageConflict,
    Unauthorized,
)
from core.revenue.split import RevenueSplit, calculate_split, validate_amount

__all__ = [
    # Errors
    "LedgerError",
    "InvalidAmount",
    "InvalidRevenueType",
    "InvalidRange",
    "OverlappingPeriod",
    "NotFound",
    "AlreadyClosed",
    "PayoutNotPending",
    "Unauthorized",
    "Forbidden",
    "StorageConflict",
    # Split
    "RevenueSplit",
    "calculate_split",
    "validate_amount",
]
