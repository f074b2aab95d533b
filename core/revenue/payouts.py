"""
Payout Processor

PENDING 지급을 외부 송금으로 실행.

처리 순서:
1. PENDING → PROCESSING 클레임 (compare-and-set, 단일 처리자 보장)
2. 안전 검사 (최소 금액, 미지급 누적 수익, 검증된 기본 지급 수단)
3. 수수료 계산 후 payment rail 호출
4. 성공: COMPLETED + SystemFund.owner_paid_out 증가 (하나의 트랜잭션)
   실패: FAILED + 사유 기록 + 알림
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import INotifier, IPaymentRail
from adapters.models import PaymentRailError, PayoutTransfer
from core.config.loader import LedgerConfig
from core.constants import Defaults
from core.domain.state_machines import PayoutStateMachine
from core.revenue.audit import RESOURCE_PAYOUT, AuditStore
from core.revenue.auth import require_admin
from core.revenue.errors import LedgerError, NotFound, PayoutNotPending, StorageConflict
from core.revenue.models import Payout, PayoutMethod
from core.revenue.payout_store import PayoutStore
from core.revenue.store import RevenueStore, run_atomic
from core.types import AuditAction, AuditSeverity, Caller, PayoutStatus
from core.utils.money import format_amount, round_currency
from core.utils.timezone import db_timestamp, now_utc

logger = logging.getLogger(__name__)


class PayoutSafetyError(Exception):
    """지급 전 안전 검사 실패 (지급은 FAILED로 기록)"""
    pass


@dataclass(frozen=True)
class PayoutFees:
    """지급 수수료 내역"""

    processing_fee: Decimal
    transaction_fee: Decimal
    total: Decimal
    net_amount: Decimal


@dataclass(frozen=True)
class PayoutResult:
    """단일 지급 처리 결과"""

    payout_id: str
    success: bool
    message: str
    transaction_id: str | None = None
    fees: Decimal | None = None
    net_amount: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "payout_id": self.payout_id,
            "success": self.success,
            "message": self.message,
            "transaction_id": self.transaction_id,
            "fees": format_amount(self.fees) if self.fees is not None else None,
            "net_amount": format_amount(self.net_amount) if self.net_amount is not None else None,
        }


def calculate_fees(amount: Decimal, config: LedgerConfig) -> PayoutFees:
    """지급 수수료 계산

    processing_fee = max(processing_fee_min, amount * processing_fee_rate)
    transaction_fee = amount * transaction_fee_rate

    Example:
        >>> calculate_fees(Decimal("100.00"), LedgerConfig()).total
        Decimal('3.50')
    """
    processing = round_currency(max(config.processing_fee_min, amount * config.processing_fee_rate))
    transaction = round_currency(amount * config.transaction_fee_rate)
    total = processing + transaction
    return PayoutFees(
        processing_fee=processing,
        transaction_fee=transaction,
        total=total,
        net_amount=amount - total,
    )


class PayoutProcessor:
    """지급 처리기

    Args:
        db: SQLite 어댑터
        payment_rail: 외부 송금 어댑터 (조회만 할 때는 None)
        config: 정산 설정 (최소 지급액, 수수료율)
        notifier: 알림 서비스 (None이면 알림 생략)
        clock: 현재 시각 함수 (테스트에서 교체)

    사용 예시:
    ```python
    processor = PayoutProcessor(db, HttpPaymentRail(...), settings.ledger, notifier)
    summary = await processor.process_pending_payouts()
    ```
    """

    def __init__(
        self,
        db: SQLiteAdapter,
        payment_rail: IPaymentRail | None,
        config: LedgerConfig | None = None,
        notifier: INotifier | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.db = db
        self.payment_rail = payment_rail
        self.config = config or LedgerConfig()
        self.notifier = notifier
        self.payouts = PayoutStore(db)
        self.revenue = RevenueStore(db)
        self.audit = AuditStore(db)
        self._clock = clock

    def _now(self) -> str:
        return db_timestamp(self._clock())

    async def process_payout(self, payout_id: str) -> PayoutResult:
        """단일 지급 처리

        Returns:
            PayoutResult (안전 검사/송금 실패도 success=False로 반환)

        Raises:
            NotFound: 지급 없음
            PayoutNotPending: PENDING이 아님 (이미 다른 처리자가 클레임)
            StorageConflict: 트랜잭션 충돌
        """
        if self.payment_rail is None:
            raise RuntimeError("Payment rail is not configured")

        payout = await self._claim(payout_id)

        try:
            method = await self._check_safety(payout)
            fees = calculate_fees(payout.amount, self.config)
            if fees.net_amount <= 0:
                raise PayoutSafetyError(
                    f"Net amount after fees is not positive: {format_amount(fees.net_amount)}"
                )

            receipt = await self.payment_rail.send_payout(
                PayoutTransfer(
                    payout_id=payout.payout_id,
                    recipient_id=payout.recipient_id,
                    amount=fees.net_amount,
                    method_type=method.method_type,
                    method_details=method.details,
                )
            )
        except (PayoutSafetyError, PaymentRailError) as e:
            await self._fail(payout, str(e))
            return PayoutResult(payout_id=payout.payout_id, success=False, message=str(e))

        await self._complete(payout, fees, receipt.transaction_id)

        return PayoutResult(
            payout_id=payout.payout_id,
            success=True,
            message="Payout completed",
            transaction_id=receipt.transaction_id,
            fees=fees.total,
            net_amount=fees.net_amount,
        )

    async def process_pending_payouts(self) -> dict[str, Any]:
        """모든 PENDING 지급 처리 (오래된 순)

        Returns:
            {"processed": n, "successful": n, "failed": n, "results": [PayoutResult, ...]}
        """
        pending_ids = await self.payouts.list_pending_ids()
        results: list[PayoutResult] = []

        for payout_id in pending_ids:
            try:
                results.append(await self.process_payout(payout_id))
            except LedgerError as e:
                # 한 건의 실패(동시 클레임, 저장 충돌)로 나머지 처리를 중단하지 않음
                logger.warning(
                    f"Payout skipped: {e.code}",
                    extra={"payout_id": payout_id, "error": e.message},
                )
                results.append(PayoutResult(payout_id=payout_id, success=False, message=e.message))

        successful = sum(1 for r in results if r.success)
        summary = {
            "processed": len(results),
            "successful": successful,
            "failed": len(results) - successful,
            "results": results,
        }

        logger.info(
            "Pending payouts processed",
            extra={k: v for k, v in summary.items() if k != "results"},
        )

        return summary

    async def get_payout(self, caller: Caller, payout_id: str) -> Payout:
        require_admin(caller)
        payout = await self.payouts.get(payout_id)
        if payout is None:
            raise NotFound(f"Payout not found: {payout_id}")
        return payout

    async def list_payouts(
        self,
        caller: Caller,
        status: PayoutStatus | str | None = None,
        limit: int = Defaults.LIST_LIMIT,
    ) -> list[Payout]:
        require_admin(caller)
        status_value = status.value if isinstance(status, PayoutStatus) else status
        return await self.payouts.list_payouts(status_value, limit)

    # -------------------------------------------------------------------------
    # 내부 단계
    # -------------------------------------------------------------------------

    async def _claim(self, payout_id: str) -> Payout:
        """PENDING → PROCESSING"""

        async def work() -> Payout:
            payout = await self.payouts.get(payout_id)
            if payout is None:
                raise NotFound(f"Payout not found: {payout_id}")

            if not PayoutStateMachine(payout.status).can_transition(PayoutStatus.PROCESSING):
                raise PayoutNotPending(f"Payout is {payout.status}: {payout_id}")

            now = self._now()
            if not await self.payouts.claim(payout_id, now):
                raise PayoutNotPending(f"Payout was claimed concurrently: {payout_id}")

            await self.audit.record(
                AuditAction.PAYOUT_PROCESSING,
                RESOURCE_PAYOUT,
                payout_id,
                now,
                context={"amount": format_amount(payout.amount)},
            )
            return payout

        payout = await run_atomic(self.db, work)

        logger.info(
            "Payout claimed",
            extra={"payout_id": payout_id, "amount": str(payout.amount)},
        )
        return payout

    async def _check_safety(self, payout: Payout) -> PayoutMethod:
        """지급 전 안전 검사

        Returns:
            송금에 사용할 기본 지급 수단

        Raises:
            PayoutSafetyError: 검사 실패
        """
        if payout.amount < self.config.min_payout:
            raise PayoutSafetyError(
                f"Amount {format_amount(payout.amount)} is below minimum payout "
                f"{format_amount(self.config.min_payout)}"
            )

        fund = await self.revenue.get_fund()
        if fund.payable_available < payout.amount:
            raise PayoutSafetyError(
                f"Insufficient unpaid revenue: available {format_amount(fund.payable_available)}, "
                f"requested {format_amount(payout.amount)}"
            )

        method = await self.payouts.get_default_method(payout.recipient_id)
        if method is None:
            raise PayoutSafetyError(f"No default payout method for {payout.recipient_id}")
        if not method.is_verified:
            raise PayoutSafetyError(f"Default payout method is not verified: {method.method_id}")

        return method

    async def _complete(self, payout: Payout, fees: PayoutFees, transaction_id: str) -> None:
        """PROCESSING → COMPLETED, 지급 완료 누계 증가"""

        async def work() -> None:
            now = self._now()
            if not await self.payouts.mark_completed(
                payout.payout_id, fees.total, fees.net_amount, transaction_id, now
            ):
                raise PayoutNotPending(f"Payout left PROCESSING unexpectedly: {payout.payout_id}")
            await self.revenue.increment_paid_out(payout.amount)
            await self.audit.record(
                AuditAction.PAYOUT_COMPLETED,
                RESOURCE_PAYOUT,
                payout.payout_id,
                now,
                context={
                    "transaction_id": transaction_id,
                    "fees": format_amount(fees.total),
                    "net_amount": format_amount(fees.net_amount),
                },
            )

        try:
            await run_atomic(self.db, work)
        except StorageConflict:
            # 송금은 이미 실행됨. PROCESSING으로 남겨 수동 대사 대상으로 둠
            logger.critical(
                "Payout sent but completion could not be recorded",
                extra={"payout_id": payout.payout_id, "transaction_id": transaction_id},
            )
            raise

        logger.info(
            "Payout completed",
            extra={
                "payout_id": payout.payout_id,
                "net_amount": str(fees.net_amount),
                "transaction_id": transaction_id,
            },
        )

        await self._notify(payout, PayoutStatus.COMPLETED.value, transaction_id)

    async def _fail(self, payout: Payout, reason: str) -> None:
        """PROCESSING → FAILED, 사유 기록 및 알림"""

        async def work() -> None:
            now = self._now()
            if not await self.payouts.mark_failed(payout.payout_id, reason, now):
                raise PayoutNotPending(f"Payout left PROCESSING unexpectedly: {payout.payout_id}")
            await self.audit.record(
                AuditAction.PAYOUT_FAILED,
                RESOURCE_PAYOUT,
                payout.payout_id,
                now,
                context={"amount": format_amount(payout.amount)},
                severity=AuditSeverity.ERROR,
                error=reason,
            )

        await run_atomic(self.db, work)

        logger.error(
            "Payout failed",
            extra={"payout_id": payout.payout_id, "reason": reason},
        )

        await self._notify(payout, PayoutStatus.FAILED.value, reason)

    async def _notify(self, payout: Payout, status: str, detail: str) -> None:
        if self.notifier is None:
            return
        await self.notifier.send_payout_alert(
            payout_id=payout.payout_id,
            amount=format_amount(payout.amount),
            status=status,
            detail=detail,
        )
