"""
어댑터 데이터 모델 테스트
"""

from decimal import Decimal

import pytest

from adapters.models import PaymentRailError, PayoutReceipt, PayoutTransfer


class TestPayoutTransfer:
    def test_defaults(self) -> None:
        transfer = PayoutTransfer(payout_id="p", recipient_id="owner", amount=Decimal("10"))

        assert transfer.currency == "USD"
        assert transfer.method_type == "BANK_TRANSFER"
        assert transfer.method_details == {}

    def test_frozen(self, sample_transfer: PayoutTransfer) -> None:
        with pytest.raises(AttributeError):
            sample_transfer.amount = Decimal("0")  # type: ignore

    def test_details_not_shared(self) -> None:
        """기본 method_details는 인스턴스마다 별도 dict"""
        first = PayoutTransfer(payout_id="a", recipient_id="owner", amount=Decimal("1"))
        second = PayoutTransfer(payout_id="b", recipient_id="owner", amount=Decimal("1"))

        assert first.method_details is not second.method_details


class TestPayoutReceipt:
    def test_defaults(self) -> None:
        receipt = PayoutReceipt(transaction_id="txn")

        assert receipt.status == "COMPLETED"
        assert receipt.raw == {}


class TestPaymentRailError:
    def test_retryable_flag(self) -> None:
        assert PaymentRailError("x").retryable is False
        assert PaymentRailError("x", retryable=True).retryable is True
        assert str(PaymentRailError("rejected")) == "rejected"
