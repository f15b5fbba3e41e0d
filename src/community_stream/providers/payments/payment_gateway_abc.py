"""Abstract base class for payment network gateways."""
from abc import ABC, abstractmethod
from decimal import Decimal

from community_stream.providers.payments.models import PaymentResult, PaymentStatus


class PaymentGatewayABC(ABC):
    """Narrow interface to the external payment network.

    The stream lifecycle only needs to start a payment toward the community
    wallet and later ask how it went; settlement is the network's concern.
    """

    @abstractmethod
    async def initiate_payment(self, amount: Decimal, destination: str) -> PaymentResult:
        """Start a payment of amount (USDC) to destination.

        Raises:
            PaymentError: The network rejected the payment.
        """

    @abstractmethod
    async def check_status(self, payment_id: str) -> PaymentStatus:
        """Return the current status of a payment."""

    async def close(self) -> None:
        """Clean up resources (connections, clients).

        Override in subclasses if cleanup is needed.
        """

    async def __aenter__(self) -> "PaymentGatewayABC":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        """Async context manager exit - calls close()."""
        await self.close()
