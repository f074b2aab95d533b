"""
pytest 공통 fixture 정의

임시 secrets.yaml, 스키마가 초기화된 임시 DB, 요청 주체(Caller), 고정 시계.
"""

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import Settings
from core.types import Caller, UserRole


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_secrets_file(temp_dir: Path) -> Path:
    """테스트용 secrets.yaml 파일 생성 (development 모드)"""
    secrets_content = """# 테스트용 secrets.yaml
mode: development

web:
  secret_key: "test_jwt_secret_key_xyz"
"""
    secrets_path = temp_dir / "secrets.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture
def temp_secrets_file_production(temp_dir: Path) -> Path:
    """테스트용 secrets.yaml 파일 생성 (production 모드, 전체 섹션)"""
    secrets_content = """mode: production

web:
  secret_key: "prod_jwt_secret_key_xyz"

ledger:
  owner_rate: 0.65
  payout_recipient_id: "founder"
  min_payout: 25
  processing_fee_rate: 0.02
  processing_fee_min: "0.50"
  transaction_fee_rate: 0.01

slack:
  webhook_url: "https://hooks.slack.com/services/T000/B000/XXXX"

payment_rail:
  base_url: "https://payments.example.com"
  api_key: "rail_api_key"
"""
    secrets_path = temp_dir / "secrets_prod.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture
def temp_secrets_file_invalid_mode(temp_dir: Path) -> Path:
    """잘못된 모드의 secrets.yaml 파일 생성"""
    secrets_content = """mode: invalid_mode

web:
  secret_key: "jwt_secret"
"""
    secrets_path = temp_dir / "secrets_invalid.yaml"
    secrets_path.write_text(secrets_content, encoding="utf-8")
    return secrets_path


@pytest.fixture(autouse=True)
def reset_settings():
    """테스트 간 Settings 싱글턴 격리"""
    Settings.reset()
    yield
    Settings.reset()


# -------------------------------------------------------------------------
# DB
# -------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db(tmp_path: Path) -> SQLiteAdapter:
    """스키마가 초기화된 임시 DB"""
    adapter = SQLiteAdapter(tmp_path / "test_ledger.db")
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()


# -------------------------------------------------------------------------
# 요청 주체
# -------------------------------------------------------------------------

@pytest.fixture
def user() -> Caller:
    return Caller.create("user-1", UserRole.USER)


@pytest.fixture
def admin() -> Caller:
    return Caller.create("admin-1", UserRole.ADMIN)


@pytest.fixture
def owner() -> Caller:
    return Caller.create("owner", UserRole.OWNER)


# -------------------------------------------------------------------------
# 시계
# -------------------------------------------------------------------------

class FakeClock:
    """수동으로 진행하는 시계"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    """2026-03-01 00:00 UTC에서 시작하는 시계"""
    return FakeClock(datetime(2026, 3, 1, tzinfo=timezone.utc))
