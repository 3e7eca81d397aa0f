"""
Application errors raised by repositories and services.

Routers translate these into HTTP responses:
    NotFoundError                -> 404
    ValidationError              -> 400
    InsufficientStockError       -> 400
    ConflictError                -> 409
    InvalidStatusTransitionError -> 409
"""


class InvenHubError(Exception):
    """Base class for expected business errors"""


class NotFoundError(InvenHubError):
    pass


class ValidationError(InvenHubError):
    pass


class ConflictError(InvenHubError):
    pass


class InvalidStatusTransitionError(ConflictError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change purchase order status from {current} to {requested}")


class InsufficientStockError(ValidationError):
    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. Available: {available}, Requested: {requested}"
        )
