"""BasePay gateway for USDC payments to the community wallet."""
import logging
from decimal import Decimal

import httpx

from community_stream.core.exceptions import PaymentError
from community_stream.providers.payments.models import (PaymentRequest,
                                                        PaymentResult,
                                                        PaymentStatus)
from community_stream.providers.payments.payment_gateway_abc import PaymentGatewayABC

logger = logging.getLogger(__name__)


class BasePayGateway(PaymentGatewayABC):
    """Payment gateway over the BasePay REST API.

    Uses httpx for REST calls. Amounts are sent as decimal strings so no
    float rounding happens on the way out.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        testnet: bool = True,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            base_url: API root (e.g. "https://api.pay.base.org").
            api_key: Optional bearer token.
            testnet: Route payments to the test network.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        headers: dict[str, str] = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._testnet = testnet
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def initiate_payment(self, amount: Decimal, destination: str) -> PaymentResult:
        body = PaymentRequest(amount=amount, to=destination, testnet=self._testnet)
        response = await self._client.post("/payments", json=body.model_dump(mode="json"))
        if response.status_code >= 400:
            logger.warning("Payment of %s to %s rejected: %s", amount, destination, response.text)
            raise PaymentError(_error_text(response) or "Payment failed")
        result = PaymentResult.model_validate(response.json())
        if result.status == PaymentStatus.FAILED:
            raise PaymentError("Payment failed")
        logger.info("Payment %s initiated: %s USDC to %s", result.payment_id, amount, destination)
        return result

    async def check_status(self, payment_id: str) -> PaymentStatus:
        response = await self._client.get(
            f"/payments/{payment_id}", params={"testnet": str(self._testnet).lower()}
        )
        if response.status_code == 404:
            return PaymentStatus.FAILED
        response.raise_for_status()
        return PaymentStatus(response.json().get("status", PaymentStatus.PENDING.value))

    async def close(self) -> None:
        await self._client.aclose()


def _error_text(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        return data.get("error") or data.get("message")
    return None
