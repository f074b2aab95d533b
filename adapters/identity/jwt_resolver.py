"""
JWT 요청 주체 확인

HS256 Bearer 토큰을 검증하여 Caller 반환.
ICallerResolver Protocol 준수.

토큰 클레임:
- sub: 사용자 ID
- role: USER / ADMIN / OWNER
- exp: 만료 시각 (선택)
"""

import logging
from datetime import datetime, timedelta
from typing import Any

import jwt

from core.revenue.errors import Forbidden, Unauthorized
from core.types import Caller, UserRole
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def issue_token(
    secret_key: str,
    user_id: str,
    role: UserRole | str,
    expires_in: timedelta | None = timedelta(hours=12),
    now: datetime | None = None,
) -> str:
    """Bearer 토큰 발급 (운영 스크립트/테스트용)"""
    issued_at = now or now_utc()
    claims: dict[str, Any] = {
        "sub": user_id,
        "role": role.value if isinstance(role, UserRole) else role,
        "iat": issued_at,
    }
    if expires_in is not None:
        claims["exp"] = issued_at + expires_in
    return jwt.encode(claims, secret_key, algorithm=ALGORITHM)


class JwtCallerResolver:
    """JWT 기반 요청 주체 확인

    Args:
        secret_key: 서명 키 (web.secret_key)
    """

    def __init__(self, secret_key: str):
        if not secret_key:
            raise ValueError("secret_key는 필수입니다")
        self.secret_key = secret_key

    def resolve(self, token: str | None) -> Caller:
        """토큰 → Caller

        Raises:
            Unauthorized: 토큰 없음/위조/만료/sub 없음
            Forbidden: role 없음 또는 알 수 없는 role
        """
        if not token:
            raise Unauthorized("Missing bearer token")

        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[ALGORITHM],
                options={"require": ["sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise Unauthorized("Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.debug("Invalid token", extra={"error": str(e)})
            raise Unauthorized("Invalid token") from e

        user_id = claims.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise Unauthorized("Token has no subject")

        role = claims.get("role")
        if role not in {r.value for r in UserRole}:
            raise Forbidden(f"Token has no valid role: {role!r}")

        return Caller.create(user_id, role)
