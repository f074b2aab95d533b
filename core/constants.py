"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → aivel/)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수"""

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # 목록 조회 기본/최대 개수
    LIST_LIMIT: int = 20
    LIST_LIMIT_MAX: int = 200


class LedgerDefaults:
    """수익 분배 / 정산 기본값

    secrets.yaml의 ledger 섹션으로 덮어쓸 수 있음.
    """

    # 소유자 몫 비율 (나머지는 Growth Fund)
    OWNER_RATE: Decimal = Decimal("0.70")

    # 최소 통화 단위 (cent)
    CURRENCY_UNIT: Decimal = Decimal("0.01")

    # 이벤트 1건의 최대 금액
    # cent 정수는 SQLite INTEGER(int64)에 저장되므로 SystemFund 누계까지 여유를 둠
    MAX_AMOUNT: Decimal = Decimal("1000000000000.00")

    # 자동 정산 수령인 (Identity Provider의 OWNER 사용자 ID)
    PAYOUT_RECIPIENT_ID: str = "owner"

    # 최소 지급액
    MIN_PAYOUT: Decimal = Decimal("10")

    # 수수료: max(처리 수수료 최소값, 금액 * 처리 수수료율) + 금액 * 거래 수수료율
    PROCESSING_FEE_RATE: Decimal = Decimal("0.01")
    PROCESSING_FEE_MIN: Decimal = Decimal("0.30")
    TRANSACTION_FEE_RATE: Decimal = Decimal("0.025")

    DEFAULT_PAYMENT_METHOD: str = "BANK_TRANSFER"


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"
    CLI_LOGS_DIR: Path = LOGS_DIR / "cli"

    # 설정 파일
    SECRETS_FILE: Path = CONFIG_DIR / "secrets.yaml"

    # DB 파일
    PROD_DB: Path = DATA_DIR / "aivel_prod.db"
    DEV_DB: Path = DATA_DIR / "aivel_dev.db"
