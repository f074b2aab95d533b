"""
어댑터 테스트 픽스처

공통 테스트 설정 및 픽스처 제공.
"""

from decimal import Decimal

import pytest

from adapters.mock.notifier import MockNotifier
from adapters.mock.payment_rail import MockPaymentRail
from adapters.models import PayoutTransfer


@pytest.fixture
def sample_transfer() -> PayoutTransfer:
    """샘플 지급 요청"""
    return PayoutTransfer(
        payout_id="payout-sample",
        recipient_id="owner",
        amount=Decimal("96.50"),
        method_type="PAYPAL",
        method_details={"email": "owner@example.com"},
    )


@pytest.fixture
def mock_notifier() -> MockNotifier:
    return MockNotifier()


@pytest.fixture
def mock_payment_rail() -> MockPaymentRail:
    return MockPaymentRail()
