"""Payment network gateways."""
from community_stream.providers.payments.basepay.base_pay_gateway import BasePayGateway
from community_stream.providers.payments.models import (PaymentRequest,
                                                        PaymentResult,
                                                        PaymentStatus)
from community_stream.providers.payments.payment_gateway_abc import PaymentGatewayABC

__all__ = [
    "BasePayGateway",
    "PaymentGatewayABC",
    "PaymentRequest",
    "PaymentResult",
    "PaymentStatus",
]
