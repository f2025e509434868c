"""Typed failures raised by the evidence engine."""


class EvidenceError(Exception):
    """Base class for evidence engine errors."""


class ProviderInitError(EvidenceError):
    """Chain provider could not be reached within the connection retry budget."""

    def __init__(self, attempts: int, last_error: Exception | None = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to initialize provider after {attempts} attempts: {last_error}"
        )


class TransactionNotFound(EvidenceError):
    """No receipt exists for the transaction (unknown or not yet mined)."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction not found or not yet mined: {tx_hash}")


class PartialStateReadFailure(EvidenceError):
    """A single contract state read failed; the field is omitted."""

    def __init__(self, field: str, cause: Exception):
        self.field = field
        self.cause = cause
        super().__init__(f"State read '{field}' failed: {cause}")


class CacheUnavailable(EvidenceError):
    """Cache backend missing or erroring; caching is bypassed."""
