"""
HTTP Payment Rail 클라이언트

외부 송금 REST API 호출.
IPaymentRail Protocol 준수.

payout_id를 Idempotency-Key 헤더로 전달하므로 재시도해도 중복 송금되지 않음.
"""

import asyncio
import logging
from typing import Any

import httpx

from adapters.models import PaymentRailError, PayoutReceipt, PayoutTransfer

logger = logging.getLogger(__name__)


class HttpPaymentRail:
    """HTTP Payment Rail 클라이언트

    IPaymentRail Protocol 구현.

    Args:
        base_url: 송금 API 베이스 URL
        api_key: API 키 (Bearer)
        timeout: 요청 타임아웃 (초)
        max_retries: 최대 시도 횟수 (타임아웃/5xx 시)
        transport: httpx transport (테스트에서 MockTransport 주입)
    """

    PAYOUT_PATH = "/v1/payouts"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url:
            raise ValueError("base_url은 필수입니다")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP 클라이언트 가져오기 (lazy initialization)"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """HTTP 클라이언트 종료"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def send_payout(self, transfer: PayoutTransfer) -> PayoutReceipt:
        """송금 실행

        Raises:
            PaymentRailError: 거절(4xx), 재시도 후에도 실패(5xx/타임아웃)
        """
        body = {
            "recipient_id": transfer.recipient_id,
            "amount": str(transfer.amount),
            "currency": transfer.currency,
            "method_type": transfer.method_type,
            "method_details": transfer.method_details,
            "reference": transfer.payout_id,
        }
        data = await self._request("POST", self.PAYOUT_PATH, body, transfer.payout_id)

        transaction_id = data.get("transaction_id") or data.get("id")
        if not transaction_id:
            raise PaymentRailError(f"Payment rail response has no transaction id: {data}")

        status = str(data.get("status", "COMPLETED")).upper()
        if status in ("FAILED", "REJECTED", "DECLINED"):
            raise PaymentRailError(
                f"Payment rail rejected payout: {data.get('reason') or status}"
            )

        logger.info(
            "Payment rail transfer sent",
            extra={"payout_id": transfer.payout_id, "transaction_id": transaction_id},
        )

        return PayoutReceipt(transaction_id=str(transaction_id), status=status, raw=data)

    async def _request(
        self,
        method: str,
        path: str,
        body: dict[str, Any],
        idempotency_key: str,
    ) -> dict[str, Any]:
        """API 요청 실행 (타임아웃/5xx 재시도)"""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Idempotency-Key": idempotency_key,
        }
        url = f"{self.base_url}{path}"
        client = await self._get_client()

        last_error = "no attempt"
        for attempt in range(self.max_retries):
            try:
                response = await client.request(method, url, json=body, headers=headers)
            except httpx.TimeoutException:
                last_error = "timeout"
                logger.warning(
                    "Payment rail timeout",
                    extra={"path": path, "attempt": attempt + 1},
                )
            except httpx.RequestError as e:
                last_error = str(e)
                logger.error(
                    "Payment rail request error",
                    extra={"path": path, "error": str(e), "attempt": attempt + 1},
                )
            else:
                if response.status_code < 400:
                    return self._parse_body(response)

                message = self._error_message(response)
                if response.status_code < 500:
                    raise PaymentRailError(
                        f"Payment rail rejected request ({response.status_code}): {message}"
                    )

                last_error = f"{response.status_code}: {message}"
                logger.warning(
                    "Payment rail server error",
                    extra={"status": response.status_code, "attempt": attempt + 1},
                )

            if attempt < self.max_retries - 1:
                await asyncio.sleep(1 * (attempt + 1))

        raise PaymentRailError(
            f"Payment rail failed after {self.max_retries} attempts: {last_error}",
            retryable=True,
        )

    @staticmethod
    def _parse_body(response: httpx.Response) -> dict[str, Any]:
        """성공 응답 본문 → dict

        Raises:
            PaymentRailError: JSON 객체가 아닌 본문
        """
        try:
            data = response.json()
        except ValueError as e:
            raise PaymentRailError(
                f"Payment rail returned non-JSON body ({response.status_code}): "
                f"{response.text[:200]}"
            ) from e

        if not isinstance(data, dict):
            raise PaymentRailError(
                f"Payment rail returned unexpected body ({response.status_code}): {data!r}"
            )
        return data

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text
        if isinstance(data, dict):
            return str(data.get("message") or data.get("error") or data)
        return str(data)

    async def __aenter__(self) -> "HttpPaymentRail":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
