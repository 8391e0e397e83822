from .errors import (
    AlreadyCancelledError,
    DomainError,
    DuplicateSkuError,
    ErrorKind,
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    OrderNotFoundError,
    ProductNotFoundError,
    ProductUnavailableError,
    ValidationFailedError,
)
from .pagination import PaginatedList, PaginationParams
from .result import Result
