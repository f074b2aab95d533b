"""
Mock Payment Rail

테스트용 Mock 송금 어댑터.
IPaymentRail Protocol 준수.
"""

import uuid
from dataclasses import dataclass

from adapters.models import PaymentRailError, PayoutReceipt, PayoutTransfer


@dataclass
class TransferRecord:
    """송금 요청 기록"""

    transfer: PayoutTransfer
    transaction_id: str | None
    succeeded: bool


class MockPaymentRail:
    """Mock 송금 어댑터

    모든 요청을 기록하고, should_fail이면 PaymentRailError 발생.

    사용 예시:
    ```python
    rail = MockPaymentRail()
    receipt = await rail.send_payout(transfer)

    assert rail.transfers[0].transfer.amount == Decimal("72.82")
    ```
    """

    def __init__(self, should_fail: bool = False, failure_message: str = "Mock transfer rejected"):
        self.should_fail = should_fail
        self.failure_message = failure_message
        self.transfers: list[TransferRecord] = []

    async def send_payout(self, transfer: PayoutTransfer) -> PayoutReceipt:
        if self.should_fail:
            self.transfers.append(TransferRecord(transfer, None, False))
            raise PaymentRailError(self.failure_message)

        transaction_id = f"mock_txn_{uuid.uuid4().hex[:12]}"
        self.transfers.append(TransferRecord(transfer, transaction_id, True))
        return PayoutReceipt(transaction_id=transaction_id)

    @property
    def sent_count(self) -> int:
        """성공한 송금 수"""
        return sum(1 for t in self.transfers if t.succeeded)
