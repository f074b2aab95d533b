"""
권한 확인 테스트
"""

import pytest

from core.revenue.auth import ADMIN_ROLES, ANY_ROLE, require_admin, require_role
from core.revenue.errors import Forbidden, Unauthorized
from core.types import Caller, UserRole


class TestRequireRole:
    def test_any_role_allows_user(self, user: Caller) -> None:
        assert require_role(user) is user

    def test_none_is_unauthorized(self) -> None:
        with pytest.raises(Unauthorized) as exc_info:
            require_role(None)

        assert exc_info.value.status_code == 401

    def test_empty_id_is_unauthorized(self) -> None:
        with pytest.raises(Unauthorized):
            require_role(Caller(id="", role="USER"))

    def test_unknown_role_is_forbidden(self) -> None:
        with pytest.raises(Forbidden) as exc_info:
            require_role(Caller(id="x", role="GUEST"))

        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "FORBIDDEN"

    def test_role_tuples(self) -> None:
        assert set(ANY_ROLE) == {"USER", "ADMIN", "OWNER"}
        assert set(ADMIN_ROLES) == {"ADMIN", "OWNER"}


class TestRequireAdmin:
    def test_user_forbidden(self, user: Caller) -> None:
        with pytest.raises(Forbidden):
            require_admin(user)

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.OWNER])
    def test_admin_roles_allowed(self, role: UserRole) -> None:
        caller = Caller.create("boss", role)

        assert require_admin(caller) is caller

    def test_forbidden_is_unauthorized_subclass(self, user: Caller) -> None:
        """Forbidden은 Unauthorized 하위 타입"""
        with pytest.raises(Unauthorized):
            require_admin(user)
