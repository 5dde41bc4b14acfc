"""Application-level exceptions."""


class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str, code: str = "APP_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, message: str):
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(f"{resource} not found: {identifier}", code="NOT_FOUND")


class LedgerIntegrityError(AppError):
    """
    Raised when replaying the ledger would produce a negative holding.

    A SELL larger than the quantity held at that point in time means the
    ledger itself is inconsistent; the position is never clamped to zero.
    """

    def __init__(
        self,
        ticker: str,
        requested: str,
        available: str,
        txn_id: object = None,
    ):
        self.ticker = ticker
        self.requested = requested
        self.available = available
        self.txn_id = txn_id
        super().__init__(
            f"Ledger integrity violation for {ticker}: sell of {requested} "
            f"exceeds held quantity {available} (transaction {txn_id})",
            code="LEDGER_INTEGRITY",
        )


class UpstreamDataError(AppError):
    """Raised when the reference data provider fails or returns unusable data."""

    def __init__(self, source: str, identifier: str, reason: str):
        self.source = source
        self.identifier = identifier
        super().__init__(
            f"{source} failed for {identifier}: {reason}",
            code="UPSTREAM_DATA",
        )


class InsufficientHistoryError(AppError):
    """Raised when a series is too short for a statistic."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient history: need {required} points, have {available}",
            code="INSUFFICIENT_HISTORY",
        )
