class StoreError(Exception):
    """Base class for failures recovered at the store operation boundary."""


class ValidationError(StoreError):
    """Bad argument type, shape or range (e.g. a non-numeric product id)."""


class NotFoundError(StoreError):
    """Unknown product id, empty category match, product not in cart."""


class ExternalServiceError(Exception):
    """The chat-completion service failed or returned unusable output."""
