"""
HttpPaymentRail 테스트

httpx.MockTransport로 외부 송금 API 응답을 재현.
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from adapters.interfaces import IPaymentRail
from adapters.models import PaymentRailError, PayoutTransfer
from adapters.payment.http_rail import HttpPaymentRail


def _transfer() -> PayoutTransfer:
    return PayoutTransfer(
        payout_id="payout-1",
        recipient_id="owner",
        amount=Decimal("72.82"),
        method_details={"account": "123-456"},
    )


def _rail(handler) -> HttpPaymentRail:
    return HttpPaymentRail(
        base_url="https://payments.example.com/",
        api_key="rail_key",
        transport=httpx.MockTransport(handler),
    )


class TestHttpPaymentRail:
    def test_implements_protocol(self) -> None:
        assert isinstance(HttpPaymentRail("https://x", "k"), IPaymentRail)

    def test_requires_base_url(self) -> None:
        with pytest.raises(ValueError):
            HttpPaymentRail("", "k")

    @pytest.mark.asyncio
    async def test_success(self) -> None:
        """요청 형식 및 응답 파싱"""
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(200, json={"transaction_id": "txn_1", "status": "completed"})

        async with _rail(handler) as rail:
            receipt = await rail.send_payout(_transfer())

        assert receipt.transaction_id == "txn_1"
        assert receipt.status == "COMPLETED"

        request = captured[0]
        assert str(request.url) == "https://payments.example.com/v1/payouts"
        assert request.headers["Authorization"] == "Bearer rail_key"
        assert request.headers["Idempotency-Key"] == "payout-1"
        body = json.loads(request.content)
        assert body["amount"] == "72.82"
        assert body["reference"] == "payout-1"
        assert body["method_details"] == {"account": "123-456"}

    @pytest.mark.asyncio
    async def test_id_field_fallback(self) -> None:
        rail = _rail(lambda request: httpx.Response(201, json={"id": "txn_2"}))

        receipt = await rail.send_payout(_transfer())

        assert receipt.transaction_id == "txn_2"
        await rail.close()

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self) -> None:
        """4xx는 즉시 실패 (재시도 없음)"""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(422, json={"message": "invalid account"})

        rail = _rail(handler)

        with pytest.raises(PaymentRailError, match="invalid account") as exc_info:
            await rail.send_payout(_transfer())

        assert calls == 1
        assert exc_info.value.retryable is False
        await rail.close()

    @pytest.mark.asyncio
    async def test_server_error_retried(self) -> None:
        """5xx는 재시도 후 성공 가능"""
        responses = [
            httpx.Response(503, text="unavailable"),
            httpx.Response(200, json={"transaction_id": "txn_3"}),
        ]

        rail = _rail(lambda request: responses.pop(0))

        with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            receipt = await rail.send_payout(_transfer())

        assert receipt.transaction_id == "txn_3"
        mock_sleep.assert_awaited_once_with(1)
        await rail.close()

    @pytest.mark.asyncio
    async def test_retries_exhausted(self) -> None:
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            raise httpx.ReadTimeout("timeout", request=request)

        rail = _rail(handler)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(PaymentRailError, match="after 3 attempts") as exc_info:
                await rail.send_payout(_transfer())

        assert calls == 3
        assert exc_info.value.retryable is True
        await rail.close()

    @pytest.mark.asyncio
    async def test_rejected_status(self) -> None:
        rail = _rail(
            lambda request: httpx.Response(
                200, json={"id": "txn_4", "status": "DECLINED", "reason": "limit exceeded"}
            )
        )

        with pytest.raises(PaymentRailError, match="limit exceeded"):
            await rail.send_payout(_transfer())
        await rail.close()

    @pytest.mark.asyncio
    async def test_missing_transaction_id(self) -> None:
        rail = _rail(lambda request: httpx.Response(200, json={"status": "COMPLETED"}))

        with pytest.raises(PaymentRailError, match="no transaction id"):
            await rail.send_payout(_transfer())
        await rail.close()

    @pytest.mark.asyncio
    async def test_non_json_success_body(self) -> None:
        """2xx HTML 본문 → PaymentRailError (재시도 없음)"""
        calls = 0

        def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            return httpx.Response(200, text="<html>ok</html>")

        rail = _rail(handler)

        with pytest.raises(PaymentRailError, match="non-JSON") as exc_info:
            await rail.send_payout(_transfer())

        assert exc_info.value.retryable is False
        assert calls == 1
        await rail.close()

    @pytest.mark.asyncio
    async def test_json_list_success_body(self) -> None:
        rail = _rail(lambda request: httpx.Response(200, json=[{"id": "txn_5"}]))

        with pytest.raises(PaymentRailError, match="unexpected body"):
            await rail.send_payout(_transfer())
        await rail.close()
