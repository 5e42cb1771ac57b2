"""
Workbook assembly: the single entry point that turns a ReportRequest into
xlsx bytes plus a download filename.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from datetime import datetime
from io import BytesIO
from typing import Dict, Optional
from zoneinfo import ZoneInfo

from openpyxl import Workbook

from .config_loader import DEFAULTS, load_report_config
from .errors import ReportError, ReportSerializationError, ReportTimeoutError
from .layout import ExpenseSheetBuilder, apply_column_widths
from .mileage_sheet import build_mileage_sheet
from .report_models import GeneratedReport, ReportRequest, ReportTotals

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

NON_ALNUM_RE = re.compile(r"[^A-Za-z0-9]")


def content_disposition(filename: str) -> str:
    return f'attachment; filename="{filename}"'


def report_filename(employee_name: str, timezone: str, now: Optional[datetime] = None) -> str:
    """expense_report_<name>_<YYYY-MM-DD>.xlsx, dated in ``timezone``."""
    tz = ZoneInfo(timezone)
    if now is None:
        now = datetime.now(tz)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    else:
        now = now.astimezone(tz)
    safe_name = NON_ALNUM_RE.sub("_", employee_name.strip())
    return f"expense_report_{safe_name}_{now.strftime('%Y-%m-%d')}.xlsx"


def _build(request: ReportRequest, config: Dict, now: Optional[datetime]) -> GeneratedReport:
    request.validate()
    logger.info("building expense report for %s: %d receipts, %d mileage entries",
                request.employee_name, len(request.receipts), len(request.mileage_entries))

    wb = Workbook()
    expense_ws = wb.active
    widths = config.get("column_widths", DEFAULTS["column_widths"])

    mileage = None
    if request.mileage_entries:
        mileage_ws = wb.create_sheet()
        mileage = build_mileage_sheet(mileage_ws, request.employee_name, request.mileage_entries, config)
        apply_column_widths(mileage_ws, widths.get("mileage", DEFAULTS["column_widths"]["mileage"]))

    sheet = ExpenseSheetBuilder(config).build(
        expense_ws,
        request,
        mileage_ref=mileage.amount_ref if mileage else None,
        mileage_total=mileage.total_amount if mileage else 0.0,
    )
    apply_column_widths(expense_ws, widths.get("expense", DEFAULTS["column_widths"]["expense"]))

    buf = BytesIO()
    try:
        wb.save(buf)
    except Exception as e:
        raise ReportSerializationError(f"Failed to write expense report workbook: {e}") from e

    totals = ReportTotals(
        category_totals=sheet.category_totals,
        receipts_total=sheet.receipts_total,
        mileage_total=mileage.total_amount if mileage else 0.0,
        mileage_distance=mileage.total_distance if mileage else 0.0,
    )
    filename = report_filename(request.employee_name, config.get("timezone", DEFAULTS["timezone"]), now)
    logger.info("expense report %s ready: grand total %.2f, %d bytes",
                filename, totals.grand_total, buf.getbuffer().nbytes)
    return GeneratedReport(
        content=buf.getvalue(),
        filename=filename,
        totals=totals,
        warnings=list(sheet.warnings),
    )


def generate_expense_report_workbook(request: ReportRequest, config: Optional[Dict] = None,
                                     now: Optional[datetime] = None) -> GeneratedReport:
    """Render ``request`` into an expense-report workbook.

    Raises ReportValidationError for a bad request, ReportSerializationError
    if the workbook cannot be written and ReportTimeoutError when generation
    runs past ``generation_timeout_seconds``.
    """
    if config is None:
        config = load_report_config()
    # fail fast before spinning up a worker
    request.validate()

    timeout = config.get("generation_timeout_seconds")
    executor = ThreadPoolExecutor(max_workers=1) if timeout else None
    try:
        if executor is None:
            return _build(request, config, now)
        future = executor.submit(_build, request, config, now)
        try:
            return future.result(timeout=float(timeout))
        except FutureTimeout:
            future.cancel()
            raise ReportTimeoutError(f"Expense report generation exceeded {timeout} seconds") from None
    except ReportError:
        raise
    except Exception as e:
        logger.exception("expense report generation failed")
        raise ReportError(f"Failed to generate expense report: {e}") from e
    finally:
        if executor is not None:
            executor.shutdown(wait=False)
