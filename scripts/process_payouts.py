"""
PENDING 지급 일괄 처리

외부 cron에서 주기적으로 실행 (앱 내부 스케줄러 없음).

사용법:
    python -m scripts.process_payouts
    python -m scripts.process_payouts --payout-id <payout_id>
    python -m scripts.process_payouts --dry-run
    python -m scripts.process_payouts --close-due
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.payment.http_rail import HttpPaymentRail
from adapters.slack.notifier import SlackNotifier
from core.config.loader import get_settings
from core.logging import setup_logging
from core.revenue.payout_store import PayoutStore
from core.revenue.payouts import PayoutProcessor
from core.revenue.periods import RevenuePeriodManager
from core.revenue.scheduler import PayoutScheduler
from core.types import PayoutStatus
from core.utils.money import format_amount
from core.utils.timezone import db_timestamp, now_utc

logger = logging.getLogger(__name__)


async def main(payout_id: str | None, dry_run: bool, close_due: bool = False) -> int:
    """지급 처리 실행

    close_due이면 종료 시각이 지난 기간을 먼저 마감하고 생성된 지급을 처리한 뒤
    남은 PENDING 지급을 처리.

    Returns:
        종료 코드 (실패한 지급이 있으면 1)
    """
    settings = get_settings()

    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)

        if dry_run:
            pending = await PayoutStore(db).list_payouts(PayoutStatus.PENDING.value, limit=1000)
            logger.info(f"PENDING 지급 {len(pending)}건 (dry-run, 처리하지 않음)")
            for p in pending:
                logger.info(f"  - {p.payout_id} {format_amount(p.amount)} → {p.recipient_id}")
            if close_due:
                due = await RevenuePeriodManager(db).periods.list_due_ids(db_timestamp(now_utc()))
                logger.info(f"마감 대상 기간 {len(due)}건 (dry-run, 마감하지 않음)")
            return 0

        if settings.payment_rail is None:
            logger.error("secrets.yaml에 payment_rail 설정이 없습니다")
            return 1

        notifier = None
        if settings.slack_webhook_url:
            notifier = SlackNotifier(webhook_url=settings.slack_webhook_url)

        async with HttpPaymentRail(
            base_url=settings.payment_rail.base_url,
            api_key=settings.payment_rail.api_key,
        ) as rail:
            processor = PayoutProcessor(db, rail, settings.ledger, notifier)
            closed_ok = True
            try:
                if close_due:
                    manager = RevenuePeriodManager(db, settings.ledger)
                    closed = await PayoutScheduler(manager, processor).close_due_periods()
                    closed_ok = closed["failed"] == 0
                    logger.info(
                        f"기간 마감 {closed['due']}건: "
                        f"성공 {closed['successful']}, 실패 {closed['failed']}"
                    )
                    for c in closed["results"]:
                        logger.info(f"  [{'OK' if c.success else 'FAILED'}] {c.period_id}: {c.message}")

                if payout_id:
                    result = await processor.process_payout(payout_id)
                    results = [result]
                else:
                    summary = await processor.process_pending_payouts()
                    results = summary["results"]
                    logger.info(
                        f"처리 {summary['processed']}건: "
                        f"성공 {summary['successful']}, 실패 {summary['failed']}"
                    )
            finally:
                if notifier is not None:
                    await notifier.close()

    for r in results:
        status = "OK" if r.success else "FAILED"
        logger.info(f"  [{status}] {r.payout_id}: {r.message}")

    return 0 if closed_ok and all(r.success for r in results) else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="PENDING 지급 일괄 처리"
    )
    parser.add_argument(
        "--payout-id",
        default=None,
        help="특정 지급만 처리 (기본: 모든 PENDING)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="처리하지 않고 PENDING 목록만 출력"
    )
    parser.add_argument(
        "--close-due",
        action="store_true",
        help="종료 시각이 지난 ACTIVE 기간을 먼저 마감하고 지급 처리"
    )
    args = parser.parse_args()

    setup_logging("cli")
    sys.exit(asyncio.run(main(args.payout_id, args.dry_run, args.close_due)))
