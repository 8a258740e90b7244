"""Storefront exceptions.

Validation problems are reported with ``protean.exceptions.ValidationError``
and missing records with ``ObjectNotFoundError``. The classes below cover
the failures Protean has no vocabulary for. The API layer translates them
into HTTP responses.
"""


class StorefrontError(Exception):
    """Base class for storefront failures carrying a human-readable message."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class WriteRejectedError(StorefrontError):
    """A write was refused by the access policy (zero rows affected)."""


class ProofUploadError(StorefrontError):
    """The payment proof could not be stored."""


class OrderCreationError(StorefrontError):
    """The order creation procedure failed."""


class ProcedureUnavailableError(StorefrontError):
    """The requested order creation procedure version is not deployed."""

    def __init__(self, version, message=None):
        super().__init__(message or f"Order creation procedure v{version} is not available")
        self.version = version
