"""BasePay gateway against a mocked payment API."""
import json
from decimal import Decimal

import httpx
import pytest

from community_stream.core.exceptions import PaymentError
from community_stream.providers.payments import BasePayGateway, PaymentStatus


def _gateway(handler, **kwargs) -> BasePayGateway:
    return BasePayGateway(
        "https://payments.test",
        "secret",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_initiate_payment_sends_decimal_string_and_auth():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200, json={"id": "pay-42", "status": "pending", "transactionHash": "0xabc"}
        )

    async with _gateway(handler) as gateway:
        result = await gateway.initiate_payment(Decimal("259.200000"), "0xcommunity")

    assert seen["path"] == "/payments"
    assert seen["auth"] == "Bearer secret"
    assert seen["body"] == {"amount": "259.200000", "to": "0xcommunity", "testnet": True}
    assert result.payment_id == "pay-42"
    assert result.status == PaymentStatus.PENDING
    assert result.transaction_hash == "0xabc"


@pytest.mark.asyncio
async def test_rejected_payment_raises_with_network_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"error": "Insufficient balance"})

    async with _gateway(handler) as gateway:
        with pytest.raises(PaymentError, match="Insufficient balance"):
            await gateway.initiate_payment(Decimal("1"), "0xcommunity")


@pytest.mark.asyncio
async def test_failed_status_on_initiate_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "pay-1", "status": "failed"})

    async with _gateway(handler) as gateway:
        with pytest.raises(PaymentError):
            await gateway.initiate_payment(Decimal("1"), "0xcommunity")


@pytest.mark.asyncio
async def test_check_status_passes_network_flag():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json={"id": "pay-1", "status": "completed"})

    async with _gateway(handler, testnet=False) as gateway:
        status = await gateway.check_status("pay-1")

    assert status == PaymentStatus.COMPLETED
    assert seen["url"].path == "/payments/pay-1"
    assert seen["url"].params["testnet"] == "false"


@pytest.mark.asyncio
async def test_unknown_payment_counts_as_failed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": "not found"})

    async with _gateway(handler) as gateway:
        assert await gateway.check_status("missing") == PaymentStatus.FAILED
