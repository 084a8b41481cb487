"""
Domain errors for the storefront.

All of them are HTTPExceptions so a service can raise one and FastAPI
renders it as-is, the same way route handlers raise HTTPException.
"""

from fastapi import HTTPException
from starlette import status


class StoreError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Request could not be processed"

    def __init__(self, detail: str | None = None, headers: dict | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.detail,
            headers=headers
        )


class AuthenticationRequired(StoreError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Authentication required. Please sign in."

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ValidationError(StoreError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    detail = "Invalid input"


class EmptyCart(ValidationError):
    detail = "Cart is empty"


class InsufficientStock(ValidationError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Not enough stock for one or more items"


class NotFound(StoreError):
    # Also used when a policy hides the row, so absence and denial look the same
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found"


class PermissionDenied(StoreError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Operation not permitted"


class StorageFailure(StoreError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Storage is temporarily unavailable. Please try again."


class OrderPlacementFailed(StorageFailure):
    detail = "Order placement failed. Please try again."
