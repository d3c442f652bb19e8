"""Domain exceptions raised by the service layer.

Each exception carries the HTTP status the API layer reports it with; the
message is shown to the user verbatim.
"""

from __future__ import annotations

from fastapi import status


class DopelistError(RuntimeError):
    """Base exception for failures surfaced to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class UnauthorizedError(DopelistError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(DopelistError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Unauthorized"


class NotFoundError(DopelistError):
    """Target listing is absent or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Post not found or unauthorized"


class ValidationError(DopelistError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class PaymentNotCompletedError(DopelistError):
    """Provider session exists but has not been paid; restart checkout."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment not completed"


class PaymentAlreadyUsedError(DopelistError):
    """Payment token was already spent on a create or renew."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment session already used"


class CheckoutExpiredError(DopelistError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Checkout session has expired, please start again"


class CommentsClosedError(DopelistError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Comments are closed for this post"


class PaymentProviderError(DopelistError):
    """Payment provider could not be reached or rejected the request."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Payment provider request failed"
