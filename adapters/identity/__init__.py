"""
Identity 어댑터

Bearer 토큰 검증으로 요청 주체(Caller) 확인.
ICallerResolver Protocol 준수.
"""

from adapters.identity.jwt_resolver import JwtCallerResolver, issue_token

__all__ = [
    "JwtCallerResolver",
    "issue_token",
]
