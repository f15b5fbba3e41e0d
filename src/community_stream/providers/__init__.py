"""External collaborators: payment network and wallet signature checks.

- BasePayGateway: USDC payments to the community wallet via BasePay
- TrustingSignatureVerifier: wallet connect without signature checks

Example:
    async with BasePayGateway("https://api.pay.base.org") as gateway:
        result = await gateway.initiate_payment(Decimal("8.64"), wallet)
        status = await gateway.check_status(result.payment_id)
"""
from community_stream.providers.payments import (BasePayGateway,
                                                 PaymentGatewayABC,
                                                 PaymentResult, PaymentStatus)
from community_stream.providers.signatures import (SignatureVerifierABC,
                                                   TrustingSignatureVerifier,
                                                   VerifiedWallet)

__all__ = [
    "BasePayGateway",
    "PaymentGatewayABC",
    "PaymentResult",
    "PaymentStatus",
    "SignatureVerifierABC",
    "TrustingSignatureVerifier",
    "VerifiedWallet",
]
