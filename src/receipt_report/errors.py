"""
Error taxonomy for report generation and its external collaborators.

Validation, serialization and timeout errors propagate to the caller as a
structured error (kind + message). Per-record data defects never appear
here: they are absorbed by the layout engine and reported as warnings.
"""

from typing import Dict


class ReportError(Exception):
    """Base class for errors surfaced to the API boundary."""

    kind = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.kind, "message": self.message}


class ReportValidationError(ReportError):
    kind = "validation"


class ReportSerializationError(ReportError):
    kind = "serialization"


class ReportTimeoutError(ReportError):
    kind = "timeout"


class BoundaryError(ReportError):
    """Failure reported by an external service (OCR, distance, storage)."""

    kind = "boundary"


class DocumentFormatUnsupported(BoundaryError):
    kind = "document_format_unsupported"


class ServiceUnavailable(BoundaryError):
    kind = "service_unavailable"


class NoRouteFound(BoundaryError):
    kind = "no_route_found"


class InvalidAddress(BoundaryError):
    kind = "invalid_address"
