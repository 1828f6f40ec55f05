"""Domain errors raised by services and mapped to HTTP responses in main."""
from __future__ import annotations


class BazarError(Exception):
    status_code = 500
    default_detail = "internal error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(BazarError):
    status_code = 401
    default_detail = "authentication required"


class Forbidden(BazarError):
    status_code = 403
    default_detail = "insufficient privileges"


class NotFound(BazarError):
    status_code = 404
    default_detail = "not found"


class ValidationError(BazarError):
    status_code = 400
    default_detail = "invalid input"


class InvalidQuantity(ValidationError):
    default_detail = "invalid quantity"


class UnknownUnit(ValidationError):
    default_detail = "unknown unit"


class EmptyCart(ValidationError):
    default_detail = "cart is empty"


class InsufficientStock(BazarError):
    status_code = 409
    default_detail = "insufficient stock"


class TotalMismatch(BazarError):
    status_code = 409
    default_detail = "cart total changed, please review your order"


class InvalidTransition(BazarError):
    status_code = 409
    default_detail = "invalid status transition"


class StoreError(BazarError):
    """The data store could not be reached or rejected a read."""
    status_code = 503
    default_detail = "data store unavailable"


class StoreWriteError(StoreError):
    status_code = 502
    default_detail = "could not save to the data store"
