"""
core/types.py 테스트

모든 Enum이 문자열 직렬화 가능하고, Caller가 올바르게 동작하는지 확인
"""

import pytest

from core.types import (
    AppMode,
    Caller,
    PayoutMethodStatus,
    PayoutStatus,
    PeriodStatus,
    RevenueType,
    UserRole,
)


class TestAppMode:
    """AppMode 테스트"""

    def test_values(self) -> None:
        assert AppMode.PRODUCTION.value == "production"
        assert AppMode.DEVELOPMENT.value == "development"

    def test_from_string(self) -> None:
        assert AppMode("development") == AppMode.DEVELOPMENT


class TestRevenueType:
    """RevenueType 테스트"""

    def test_all_types(self) -> None:
        assert {t.value for t in RevenueType} == {
            "PRODUCT_SALE",
            "CONTENT_SALE",
            "SUBSCRIPTION",
            "AFFILIATE",
            "SERVICE",
            "ADVERTISING",
            "OTHER",
        }

    def test_string_comparison(self) -> None:
        """Enum은 문자열과 == 비교 가능 (str 상속)"""
        assert RevenueType.SUBSCRIPTION == "SUBSCRIPTION"

    def test_unknown_value(self) -> None:
        with pytest.raises(ValueError):
            RevenueType("DONATION")


class TestStatuses:
    """상태 Enum 테스트"""

    def test_period_status(self) -> None:
        assert [s.value for s in PeriodStatus] == ["ACTIVE", "CLOSED"]

    def test_payout_status(self) -> None:
        assert [s.value for s in PayoutStatus] == [
            "PENDING",
            "PROCESSING",
            "COMPLETED",
            "FAILED",
        ]

    def test_payout_method_status(self) -> None:
        assert PayoutMethodStatus.ACTIVE.value == "ACTIVE"


class TestCaller:
    """Caller 테스트"""

    def test_create_with_enum(self) -> None:
        """Enum 역할은 문자열로 저장"""
        caller = Caller.create("admin-1", UserRole.ADMIN)

        assert caller.id == "admin-1"
        assert caller.role == "ADMIN"
        assert isinstance(caller.role, str)

    def test_default_role(self) -> None:
        assert Caller.create("user-1").role == "USER"

    @pytest.mark.parametrize(
        "role,expected",
        [(UserRole.USER, False), (UserRole.ADMIN, True), (UserRole.OWNER, True)],
    )
    def test_is_admin(self, role: UserRole, expected: bool) -> None:
        assert Caller.create("x", role).is_admin is expected

    def test_frozen(self) -> None:
        caller = Caller.create("user-1")

        with pytest.raises(AttributeError):
            caller.role = "OWNER"  # type: ignore

    def test_equality(self) -> None:
        assert Caller.create("u", "USER") == Caller(id="u", role="USER")
