#!/usr/bin/env python3
"""DB 상태 확인 스크립트

SystemFund 스냅샷, 미정산 잔액, 최근 정산 기간/지급 출력.
"""

import asyncio
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.config.loader import get_settings
from core.revenue.payout_store import PayoutStore
from core.revenue.period_store import PeriodStore
from core.revenue.store import RevenueStore
from core.utils.money import format_amount


async def main():
    db_path = get_settings().db_path

    async with SQLiteAdapter(db_path, readonly=True) as db:
        fund = await RevenueStore(db).get_fund()
        total_events = await RevenueStore(db).count_events()
        pending = await PeriodStore(db).get_pending_balance()

        print(f"DB Path: {db_path}")
        print(f"Revenue events: {total_events}")
        print(f"Total revenue:  {format_amount(fund.total_revenue)}")
        print(f"Growth fund:    {format_amount(fund.growth_fund)}")
        print(f"Owner earnings: {format_amount(fund.owner_earnings)}")
        print(f"Owner paid out: {format_amount(fund.owner_paid_out)}")
        print(f"Pending balance: {format_amount(pending)}")

        periods = await PeriodStore(db).list_periods(limit=5)
        print(f"\nRecent periods ({len(periods)}):")
        for p in periods:
            total = format_amount(p.payable_total) if p.payable_total is not None else "-"
            print(f"  - {p.period_id[:8]} [{p.start_date}, {p.end_date}) {p.status} payable={total}")

        payouts = await PayoutStore(db).list_payouts(limit=5)
        print(f"\nRecent payouts ({len(payouts)}):")
        for po in payouts:
            print(f"  - {po.payout_id[:8]} {format_amount(po.amount)} {po.status}")


if __name__ == "__main__":
    asyncio.run(main())
