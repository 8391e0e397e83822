"""
Business-rule failures raised inside the order workflow and the inventory ledger.

They never escape the service layer: ``OrderService`` converts them into a failed
``Result`` carrying the same ``ErrorKind`` so routers can map them to HTTP codes.
"""
import enum


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    INSUFFICIENT_STOCK = "insufficient_stock"
    UNAVAILABLE = "unavailable"
    INVALID_TRANSITION = "invalid_transition"
    ALREADY_CANCELLED = "already_cancelled"
    TRANSIENT = "transient"
    UNKNOWN = "unknown"


class DomainError(Exception):
    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__("Order not found")
        self.order_id = order_id


class ValidationFailedError(DomainError):
    kind = ErrorKind.VALIDATION


class InsufficientStockError(DomainError):
    kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, product_name: str):
        super().__init__(f"Insufficient stock for {product_name}")
        self.product_name = product_name


class ProductUnavailableError(DomainError):
    kind = ErrorKind.UNAVAILABLE

    def __init__(self, product_name: str):
        super().__init__(f"Product {product_name} is not available")
        self.product_name = product_name


class InvalidTransitionError(DomainError):
    kind = ErrorKind.INVALID_TRANSITION


class AlreadyCancelledError(DomainError):
    kind = ErrorKind.ALREADY_CANCELLED

    def __init__(self):
        super().__init__("Order is already cancelled")


class DuplicateSkuError(ValidationFailedError):
    def __init__(self, sku: str):
        super().__init__("A product with this SKU already exists")
        self.sku = sku
