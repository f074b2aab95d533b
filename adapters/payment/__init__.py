"""
Payment Rail 어댑터

외부 송금 API 연동.
IPaymentRail Protocol 준수.
"""

from adapters.payment.http_rail import HttpPaymentRail

__all__ = [
    "HttpPaymentRail",
]
