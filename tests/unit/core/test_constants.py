"""
core/constants.py 테스트

모든 경로가 pathlib.Path 타입이고, 상수가 정상적으로 접근 가능한지 확인
"""

from decimal import Decimal
from pathlib import Path

from core.constants import PROJECT_ROOT, Defaults, LedgerDefaults, Paths


class TestProjectRoot:
    """PROJECT_ROOT 테스트"""

    def test_project_root_is_path(self) -> None:
        assert isinstance(PROJECT_ROOT, Path)

    def test_project_root_is_absolute(self) -> None:
        assert PROJECT_ROOT.is_absolute()

    def test_project_root_contains_core_directory(self) -> None:
        """PROJECT_ROOT에 core 디렉토리가 있는지 확인"""
        assert (PROJECT_ROOT / "core").exists()


class TestLedgerDefaults:
    """LedgerDefaults 테스트"""

    def test_amounts_are_decimal(self) -> None:
        """금액/비율은 모두 Decimal (float 금지)"""
        for value in (
            LedgerDefaults.OWNER_RATE,
            LedgerDefaults.CURRENCY_UNIT,
            LedgerDefaults.MIN_PAYOUT,
            LedgerDefaults.PROCESSING_FEE_RATE,
            LedgerDefaults.PROCESSING_FEE_MIN,
            LedgerDefaults.TRANSACTION_FEE_RATE,
        ):
            assert isinstance(value, Decimal)

    def test_owner_rate(self) -> None:
        assert LedgerDefaults.OWNER_RATE == Decimal("0.70")

    def test_currency_unit(self) -> None:
        assert LedgerDefaults.CURRENCY_UNIT == Decimal("0.01")


class TestDefaults:
    """Defaults 테스트"""

    def test_list_limits(self) -> None:
        assert 0 < Defaults.LIST_LIMIT <= Defaults.LIST_LIMIT_MAX

    def test_web(self) -> None:
        assert isinstance(Defaults.WEB_PORT, int)
        assert Defaults.WEB_HOST == "127.0.0.1"


class TestPaths:
    """Paths 테스트"""

    def test_all_paths_are_path(self) -> None:
        for value in (
            Paths.CONFIG_DIR,
            Paths.DATA_DIR,
            Paths.LOGS_DIR,
            Paths.WEB_LOGS_DIR,
            Paths.CLI_LOGS_DIR,
            Paths.SECRETS_FILE,
            Paths.PROD_DB,
            Paths.DEV_DB,
        ):
            assert isinstance(value, Path)

    def test_db_files_in_data_dir(self) -> None:
        assert Paths.PROD_DB.parent == Paths.DATA_DIR
        assert Paths.DEV_DB.parent == Paths.DATA_DIR
        assert Paths.PROD_DB != Paths.DEV_DB

    def test_secrets_in_config_dir(self) -> None:
        assert Paths.SECRETS_FILE == Paths.CONFIG_DIR / "secrets.yaml"
