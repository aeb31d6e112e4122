"""Service layer exceptions.

Raised by write operations when business rules or storage constraints
are violated. The API layer catches these and translates them into
HTTP responses. Read-only validators never raise; they return results.
"""
import re
from typing import Dict, List

from app.services.validation import FieldError

# "=(value)" parts of a PostgreSQL DETAIL line
VALUE_PATTERN = re.compile(r"=\(.*?\)(?= already exists|$)", re.MULTILINE)


class ServiceError(Exception):
    """Base class for service layer errors."""


class NotFoundError(ServiceError):
    """The requested row does not exist."""


class ProductNotFoundError(NotFoundError):
    """Exception raised when the requested product doesn't exist."""


class OrderNotFoundError(NotFoundError):
    """Exception raised when the requested order doesn't exist."""


class ConflictError(ServiceError):
    """A uniqueness or referential constraint rejected the write."""


class ProductInUseError(ConflictError):
    """The product is still referenced by at least one order."""


def conflict_message(exc: Exception, messages: Dict[str, str], default: str) -> str:
    """
    Pick a user-facing message for a storage constraint violation.

    Args:
        exc: The IntegrityError raised by the driver
        messages: Column name -> message, checked in order
        default: Message used when no column name appears in the error

    Columns are matched as identifiers only: "products.sku" (SQLite),
    "products_sku_key" or "Key (sku)=" (PostgreSQL). The offending values
    quoted in the error are ignored.

    Returns:
        The message for the first column mentioned in the driver error
    """
    detail = str(getattr(exc, "orig", exc)).lower()
    detail = VALUE_PATTERN.sub("", detail)
    for column, message in messages.items():
        column = re.escape(column)
        if re.search(rf"\.{column}\b|_{column}_key\b|\({column}\)", detail):
            return message
    return default


class ValidationFailedError(ServiceError):
    """One or more field or business rules failed."""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        super().__init__("; ".join(error.message for error in self.errors))
