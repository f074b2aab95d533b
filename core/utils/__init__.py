"""
유틸리티 패키지

타임존 처리, 금액 변환 등 공통 유틸리티
"""

from core.utils.money import (
    format_amount,
    from_minor,
    is_currency_precise,
    round_currency,
    to_decimal,
    to_minor,
)
from core.utils.timezone import (
    db_timestamp,
    now_utc,
    parse_db_timestamp,
    to_utc,
)

__all__ = [
    "format_amount",
    "from_minor",
    "is_currency_precise",
    "round_currency",
    "to_decimal",
    "to_minor",
    "db_timestamp",
    "now_utc",
    "parse_db_timestamp",
    "to_utc",
]
