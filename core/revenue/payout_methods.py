"""
Payout Method Service

요청 주체의 지급 수단 등록 / 조회, 관리자 검증.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Callable

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.revenue.audit import RESOURCE_PAYOUT_METHOD, AuditStore
from core.revenue.auth import require_admin, require_role
from core.revenue.errors import NotFound
from core.revenue.models import PayoutMethod
from core.revenue.payout_store import PayoutStore
from core.revenue.store import run_atomic
from core.types import AuditAction, Caller, PayoutMethodStatus
from core.utils.timezone import db_timestamp, now_utc

logger = logging.getLogger(__name__)

METHOD_TYPES = ("BANK_TRANSFER", "PAYPAL", "CRYPTO_WALLET", "CHECK")


class PayoutMethodService:
    """지급 수단 관리

    Args:
        db: SQLite 어댑터
        clock: 현재 시각 함수
    """

    def __init__(self, db: SQLiteAdapter, clock: Callable[[], datetime] = now_utc):
        self.db = db
        self.store = PayoutStore(db)
        self.audit = AuditStore(db)
        self._clock = clock

    async def add_method(
        self,
        caller: Caller,
        method_type: str,
        details: dict[str, Any] | None = None,
        is_default: bool = False,
    ) -> PayoutMethod:
        """지급 수단 등록 (미검증 상태)

        소유자의 첫 지급 수단은 자동으로 기본 수단이 됨.

        Raises:
            ValueError: 지원하지 않는 method_type
        """
        require_role(caller)

        method_type = method_type.upper()
        if method_type not in METHOD_TYPES:
            raise ValueError(f"Unsupported method_type: {method_type}")

        async def work() -> PayoutMethod:
            existing = await self.store.list_methods(caller.id)
            method = PayoutMethod(
                method_id=str(uuid.uuid4()),
                owner_id=caller.id,
                method_type=method_type,
                created_at=db_timestamp(self._clock()),
                details=details or {},
                is_default=is_default or not existing,
                is_verified=False,
                status=PayoutMethodStatus.ACTIVE.value,
            )
            await self.store.insert_method(method)
            return method

        method = await run_atomic(self.db, work)

        logger.info(
            "Payout method added",
            extra={"method_id": method.method_id, "owner_id": caller.id},
        )
        return method

    async def list_methods(self, caller: Caller) -> list[PayoutMethod]:
        require_role(caller)
        return await self.store.list_methods(caller.id)

    async def verify_method(self, caller: Caller, method_id: str) -> PayoutMethod:
        """지급 수단 검증 처리 (ADMIN/OWNER)

        Raises:
            NotFound: 지급 수단 없음
        """
        require_admin(caller)

        async def work() -> None:
            if not await self.store.mark_method_verified(method_id):
                raise NotFound(f"Payout method not found: {method_id}")
            await self.audit.record(
                AuditAction.PAYOUT_METHOD_VERIFIED,
                RESOURCE_PAYOUT_METHOD,
                method_id,
                db_timestamp(self._clock()),
                user_id=caller.id,
            )

        await run_atomic(self.db, work)

        logger.info(
            "Payout method verified",
            extra={"method_id": method_id, "verified_by": caller.id},
        )

        return await self.store.get_method(method_id)
