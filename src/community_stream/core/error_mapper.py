"""Maps domain exceptions to HTTP responses."""
import logging
from dataclasses import dataclass

import httpx
from fastapi import HTTPException

from community_stream.core.exceptions import (AccessDeniedError,
                                              InvalidAmountError,
                                              NotFoundError, PaymentError)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorMapper:
    """Maps service exceptions to HTTP (status_code, detail).

    One instance per router resource so 404 and 500 messages read naturally
    (e.g. "Stream not found", "Failed to update stream").
    """

    resource_name: str = "Resource"
    failure_message: str = "Internal server error"

    def to_http(self, exc: Exception) -> tuple[int, str]:
        """Map an exception to (status_code, detail).

        Unexpected exceptions become a generic 500; their detail is logged,
        never returned.
        """
        if isinstance(exc, NotFoundError):
            return (404, f"{exc.resource or self.resource_name} not found")
        if isinstance(exc, AccessDeniedError):
            return (403, "Access denied: an active stream is required")
        if isinstance(exc, InvalidAmountError):
            return (400, str(exc) or f"Invalid {self.resource_name.lower()} data")
        if isinstance(exc, PaymentError):
            return (502, str(exc) or "Payment failed")
        if isinstance(exc, httpx.HTTPError):
            return (502, "Payment network error")
        return (500, self.failure_message)

    def raise_http(self, exc: Exception) -> None:
        """Map exception to HTTP and raise HTTPException. Never returns."""
        status_code, detail = self.to_http(exc)
        if status_code >= 500 and status_code != 502:
            logger.error("%s: %s", self.failure_message, exc, exc_info=exc)
        raise HTTPException(status_code=status_code, detail=detail) from exc
