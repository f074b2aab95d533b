"""
권한 확인

모든 정산 연산은 요청 주체(Caller)를 받아 역할을 먼저 확인.
"""

from core.revenue.errors import Forbidden, Unauthorized
from core.types import Caller, UserRole

ANY_ROLE: tuple[str, ...] = tuple(r.value for r in UserRole)
ADMIN_ROLES: tuple[str, ...] = (UserRole.ADMIN.value, UserRole.OWNER.value)


def require_role(caller: Caller | None, allowed: tuple[str, ...] = ANY_ROLE) -> Caller:
    """요청 주체 역할 확인

    Args:
        caller: 요청 주체 (None이면 미인증)
        allowed: 허용 역할

    Returns:
        확인된 Caller

    Raises:
        Unauthorized: 요청 주체 없음
        Forbidden: 허용되지 않은 역할
    """
    if caller is None or not caller.id:
        raise Unauthorized("Authentication required")

    if caller.role not in allowed:
        raise Forbidden(f"Role {caller.role} is not allowed (requires one of {list(allowed)})")

    return caller


def require_admin(caller: Caller | None) -> Caller:
    """ADMIN 또는 OWNER 역할 확인"""
    return require_role(caller, ADMIN_ROLES)
