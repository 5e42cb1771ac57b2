from .errors import (
    ReportError,
    ReportSerializationError,
    ReportTimeoutError,
    ReportValidationError,
)
from .report_models import ExpenseCategory, MileageRecord, ReceiptRecord, ReportRequest
from .workbook import XLSX_CONTENT_TYPE, content_disposition, generate_expense_report_workbook

__all__ = [
    "ExpenseCategory",
    "MileageRecord",
    "ReceiptRecord",
    "ReportError",
    "ReportRequest",
    "ReportSerializationError",
    "ReportTimeoutError",
    "ReportValidationError",
    "XLSX_CONTENT_TYPE",
    "content_disposition",
    "generate_expense_report_workbook",
]
