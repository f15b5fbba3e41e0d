"""Domain exceptions raised by the store-facing services.

Routers translate these into HTTP responses through ErrorMapper; the
realtime handler logs and drops them.
"""


class CommunityError(Exception):
    """Base class for expected domain failures."""


class NotFoundError(CommunityError):
    """Referenced entity does not exist."""

    def __init__(self, resource: str, entity_id: str) -> None:
        super().__init__(f"{resource} '{entity_id}' not found")
        self.resource = resource
        self.entity_id = entity_id


class AccessDeniedError(CommunityError):
    """User has no active, unpaused stream."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User '{user_id}' has no active stream")
        self.user_id = user_id


class InvalidAmountError(CommunityError, ValueError):
    """Amount is not positive or exceeds its ceiling."""


class PaymentError(CommunityError):
    """External payment network rejected or failed a request."""
