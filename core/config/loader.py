"""
설정 로더

secrets.yaml 로드 및 정산(ledger) 설정 생성
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from core.constants import LedgerDefaults, Paths
from core.types import AppMode


@dataclass(frozen=True)
class LedgerConfig:
    """수익 분배 / 정산 설정

    불변 데이터 구조로 설정 변경 방지
    """

    owner_rate: Decimal = LedgerDefaults.OWNER_RATE
    payout_recipient_id: str = LedgerDefaults.PAYOUT_RECIPIENT_ID
    min_payout: Decimal = LedgerDefaults.MIN_PAYOUT
    processing_fee_rate: Decimal = LedgerDefaults.PROCESSING_FEE_RATE
    processing_fee_min: Decimal = LedgerDefaults.PROCESSING_FEE_MIN
    transaction_fee_rate: Decimal = LedgerDefaults.TRANSACTION_FEE_RATE


@dataclass(frozen=True)
class PaymentRailConfig:
    """외부 지급(payment rail) 연결 설정"""

    base_url: str
    api_key: str


@dataclass(frozen=True)
class Secrets:
    """보안 설정 (secrets.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    mode: AppMode
    web_secret_key: str
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    slack_webhook_url: str | None = None
    payment_rail: PaymentRailConfig | None = None


class SecretsLoadError(Exception):
    """Secrets 로드 실패 예외"""

    pass


def _parse_rate(data: dict[str, Any], key: str, default: Decimal) -> Decimal:
    """0 이상 1 이하 비율 파싱"""
    raw = data.get(key)
    if raw is None:
        return default

    try:
        value = Decimal(str(raw))
    except InvalidOperation as e:
        raise ValueError(f"ledger.{key} 값이 숫자가 아닙니다: {raw!r}") from e

    if not value.is_finite() or value < 0 or value > 1:
        raise ValueError(f"ledger.{key} 값은 0과 1 사이여야 합니다: {raw!r}")

    return value


def _parse_amount(data: dict[str, Any], key: str, default: Decimal) -> Decimal:
    """0 이상 금액 파싱"""
    raw = data.get(key)
    if raw is None:
        return default

    try:
        value = Decimal(str(raw))
    except InvalidOperation as e:
        raise ValueError(f"ledger.{key} 값이 숫자가 아닙니다: {raw!r}") from e

    if not value.is_finite() or value < 0:
        raise ValueError(f"ledger.{key} 값은 0 이상이어야 합니다: {raw!r}")

    return value


def parse_ledger_config(data: dict[str, Any] | None) -> LedgerConfig:
    """ledger 섹션을 LedgerConfig로 변환

    Args:
        data: secrets.yaml의 ledger 섹션 (None이면 기본값)

    Returns:
        LedgerConfig 인스턴스

    Raises:
        ValueError: 비율/금액 값이 유효하지 않은 경우
    """
    if not data:
        return LedgerConfig()

    recipient = data.get("payout_recipient_id") or LedgerDefaults.PAYOUT_RECIPIENT_ID

    return LedgerConfig(
        owner_rate=_parse_rate(data, "owner_rate", LedgerDefaults.OWNER_RATE),
        payout_recipient_id=str(recipient),
        min_payout=_parse_amount(data, "min_payout", LedgerDefaults.MIN_PAYOUT),
        processing_fee_rate=_parse_rate(
            data, "processing_fee_rate", LedgerDefaults.PROCESSING_FEE_RATE
        ),
        processing_fee_min=_parse_amount(
            data, "processing_fee_min", LedgerDefaults.PROCESSING_FEE_MIN
        ),
        transaction_fee_rate=_parse_rate(
            data, "transaction_fee_rate", LedgerDefaults.TRANSACTION_FEE_RATE
        ),
    )


def load_secrets(path: Path | None = None) -> Secrets:
    """secrets.yaml 파일 로드

    Args:
        path: secrets.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Secrets 인스턴스

    Raises:
        SecretsLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 mode 또는 ledger 값인 경우
    """
    if path is None:
        path = Paths.SECRETS_FILE

    if not path.exists():
        raise SecretsLoadError(f"secrets.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SecretsLoadError(f"secrets.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SecretsLoadError("secrets.yaml이 비어 있습니다")

    # mode 검증
    mode_str = data.get("mode")
    if mode_str is None:
        raise SecretsLoadError("secrets.yaml에 'mode' 필드가 없습니다")

    try:
        mode = AppMode(mode_str)
    except ValueError as e:
        valid_modes = [m.value for m in AppMode]
        raise ValueError(
            f"유효하지 않은 mode입니다: '{mode_str}'. "
            f"유효한 값: {valid_modes}"
        ) from e

    # Web secret key 로드 (Identity Provider 토큰 검증용)
    web_config = data.get("web", {}) or {}
    web_secret_key = web_config.get("secret_key", "")

    if not web_secret_key:
        raise SecretsLoadError(
            "secrets.yaml의 web 섹션에 'secret_key'가 없습니다"
        )

    ledger = parse_ledger_config(data.get("ledger"))

    slack_config = data.get("slack", {}) or {}
    slack_webhook_url = slack_config.get("webhook_url") or None

    # payment_rail은 선택 (없으면 지급 처리 비활성화)
    payment_rail = None
    rail_config = data.get("payment_rail")
    if rail_config:
        base_url = rail_config.get("base_url")
        api_key = rail_config.get("api_key")
        if not base_url or not api_key:
            raise SecretsLoadError(
                "secrets.yaml의 payment_rail 섹션에 'base_url'과 'api_key'가 모두 필요합니다"
            )
        payment_rail = PaymentRailConfig(base_url=base_url, api_key=api_key)

    return Secrets(
        mode=mode,
        web_secret_key=web_secret_key,
        ledger=ledger,
        slack_webhook_url=slack_webhook_url,
        payment_rail=payment_rail,
    )


def get_db_path(secrets: Secrets) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        secrets: Secrets 인스턴스

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if secrets.mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    else:
        return Paths.DEV_DB


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    secrets.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _secrets: Secrets | None = None

    def __new__(cls, secrets_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, secrets_path: Path | None = None) -> None:
        if self._secrets is None:
            self._secrets = load_secrets(secrets_path)

    @property
    def mode(self) -> AppMode:
        """현재 실행 모드"""
        assert self._secrets is not None
        return self._secrets.mode

    @property
    def web_secret_key(self) -> str:
        """Web JWT Secret Key"""
        assert self._secrets is not None
        return self._secrets.web_secret_key

    @property
    def ledger(self) -> LedgerConfig:
        """정산 설정"""
        assert self._secrets is not None
        return self._secrets.ledger

    @property
    def slack_webhook_url(self) -> str | None:
        """Slack Webhook URL (없으면 None)"""
        assert self._secrets is not None
        return self._secrets.slack_webhook_url

    @property
    def payment_rail(self) -> PaymentRailConfig | None:
        """지급 연결 설정 (없으면 None)"""
        assert self._secrets is not None
        return self._secrets.payment_rail

    @property
    def db_path(self) -> Path:
        """현재 모드의 DB 경로"""
        assert self._secrets is not None
        return get_db_path(self._secrets)

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._secrets = None


def get_settings(secrets_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        secrets_path: secrets.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(secrets_path)
