"""
타임존 유틸리티

내부 저장: UTC 고정 포맷 문자열 원칙 준수를 위한 헬퍼 함수.
DB의 시각 컬럼은 모두 db_timestamp() 포맷으로 저장하여
문자열 비교(BETWEEN, <, >=)가 시간 순서와 일치하도록 함.
"""

from datetime import datetime, timezone

# 마이크로초까지 항상 포함하는 고정 길이 포맷
DB_TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def to_utc(dt: datetime) -> datetime:
    """datetime을 UTC로 변환

    Args:
        dt: datetime 객체 (naive면 UTC로 간주)

    Returns:
        UTC 타임존의 datetime
    """
    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def db_timestamp(dt: datetime) -> str:
    """DB 저장용 UTC 문자열 생성

    Example:
        >>> db_timestamp(datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc))
        '2026-03-01T09:00:00.000000Z'
    """
    return to_utc(dt).strftime(DB_TS_FORMAT)


def parse_db_timestamp(value: str) -> datetime:
    """db_timestamp() 문자열을 UTC datetime으로 복원"""
    return datetime.strptime(value, DB_TS_FORMAT).replace(tzinfo=timezone.utc)


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)
