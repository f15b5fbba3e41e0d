"""Wallet signature verifiers."""
from community_stream.providers.signatures.verifier import (
    SignatureVerifierABC,
    TrustingSignatureVerifier,
    VerifiedWallet,
)

__all__ = ["SignatureVerifierABC", "TrustingSignatureVerifier", "VerifiedWallet"]
