"""Domain exceptions shared by services and routes.

Routes do not catch these; exception handlers registered in ``main.py``
translate them into JSON error responses.
"""

from typing import Optional


class InventoryError(Exception):
    """Base class for inventory domain errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InventoryValidationError(InventoryError):
    """Rejected input. Raised before any batch is built."""


class PersistenceError(InventoryError):
    """Ledger store fetch/append failed (non-2xx response or network error)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AdvisoryError(InventoryError):
    """Advisory (language model) call failed. Never escapes the advisory service."""
