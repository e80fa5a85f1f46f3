"""Exception hierarchy for the categorization pipeline.

Stage-level errors (``ServiceError``, ``ValidationError``) abort a run and are
rendered to the caller. Row-level and audit errors never escape the pipeline;
they exist so failures are logged with a consistent type.
"""

from typing import Any


class CategorizationError(Exception):
    """Base class for errors surfaced to API callers.

    Attributes:
        error_code: Stable machine-readable code returned as ``error``.
        http_status: Status code used by the HTTP layer.
        details: Extra context for logs and the audit payload.
    """

    error_code = "categorization_failed"
    http_status = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class AuthError(CategorizationError):
    """No authenticated owner was supplied. Never audited."""

    error_code = "unauthorized"
    http_status = 401


class ServiceError(CategorizationError):
    """The language-model call failed or returned no content."""

    error_code = "classification_service"
    http_status = 502

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message, details={"status_code": status_code} if status_code else None)
        self.status_code = status_code


class ValidationError(CategorizationError):
    """The model output could not be parsed or did not match the result shape."""

    error_code = "invalid_model_output"
    http_status = 422

    def __init__(self, message: str, raw_text: str):
        super().__init__(message)
        self.raw_text = raw_text


class NotFoundError(CategorizationError):
    error_code = "not_found"
    http_status = 404


class DispositionError(CategorizationError):
    """A review action could not be applied to the transaction."""

    error_code = "invalid_disposition"
    http_status = 400


class RowUpdateError(Exception):
    """A single transaction update failed during reconciliation."""

    def __init__(self, transaction_id: str, cause: BaseException | None = None):
        super().__init__(f"Failed to update transaction {transaction_id}: {cause}")
        self.transaction_id = transaction_id
        self.cause = cause


class AuditWriteError(Exception):
    """Persisting a classification run failed."""
