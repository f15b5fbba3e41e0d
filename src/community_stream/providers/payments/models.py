"""Payment gateway models."""
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PaymentStatus(str, Enum):
    """Lifecycle of an external payment."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentResult(BaseModel):
    """Outcome of initiating a payment."""

    model_config = ConfigDict(populate_by_name=True)

    payment_id: str = Field(alias="id")
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_hash: str | None = Field(default=None, alias="transactionHash")


class PaymentRequest(BaseModel):
    """Body sent to the payment network to start a payment."""

    amount: Decimal
    to: str
    testnet: bool = True
