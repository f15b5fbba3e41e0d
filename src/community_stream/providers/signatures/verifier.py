"""Wallet signature verification."""
from abc import ABC, abstractmethod

from pydantic import BaseModel


class VerifiedWallet(BaseModel):
    """Result of a wallet connect check."""

    address: str
    is_verified: bool = False


class SignatureVerifierABC(ABC):
    """Turns (address, signature, message) into a wallet the caller may act as."""

    @abstractmethod
    async def verify(self, address: str, signature: str, message: str) -> VerifiedWallet:
        """Return the wallet the signature proves, or raise AccessDeniedError."""


class TrustingSignatureVerifier(SignatureVerifierABC):
    """Accepts the claimed address without checking the signature.

    Wallets connected this way are marked unverified.
    """

    async def verify(self, address: str, signature: str, message: str) -> VerifiedWallet:
        return VerifiedWallet(address=address.strip(), is_verified=False)
