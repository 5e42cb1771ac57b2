"""
Expense sheet layout.

The sheet reproduces the company's paper expense form, so every label and
value lives at a fixed coordinate (1-based rows/columns):

    row 2       title (merged C2:L2)
    row 4       employee name, send-check-to / site, week ending
    row 7       section header (merged A7:C7)
    row 9       column headers
    rows 10-37  28 receipt lines: A date, B location, C purpose,
                D-O one column per ExpenseCategory, P row total
    row 39      TOTALS (per category, grand total in P)
    rows 40-48  explanation header and account coding reference
    rows 51-53  certification text
    rows 54-57  summary: total expenses, net advances, balance due
    row 59      form revision note
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .classifier import classify, explain, is_fallback
from .normalizer import format_date_for_display, parse_amount, parse_date
from .report_models import CATEGORY_ORDER, ExpenseCategory, ReceiptRecord, ReportRequest
from .sorter import sort_chronologically

logger = logging.getLogger(__name__)

SHEET_TITLE = "Expense Report"

TITLE_ROW = 2
TITLE_RANGE = "C2:L2"
INFO_ROW = 4
SECTION_ROW = 7
SECTION_RANGE = "A7:C7"
HEADER_ROW = 9
FIRST_DATA_ROW = 10
LAST_DATA_ROW = 37
MAX_RECEIPT_ROWS = LAST_DATA_ROW - FIRST_DATA_ROW + 1
TOTALS_ROW = 39
EXPLANATION_ROW = 40
CODING_HEADER_ROW = 42
CODING_FIRST_ROW = 43
CERTIFICATION_ROWS = (51, 52, 53)
TOTAL_EXPENSES_ROW = 54
NET_ADVANCES_ROW = 55
APPROVAL_ROW = 56
BALANCE_DUE_ROW = 57
REVISION_ROW = 59

DATE_COL = 1
LOCATION_COL = 2
PURPOSE_COL = 3
TOTALS_COL = 16
LAST_COL = TOTALS_COL
SUMMARY_LABEL_COL = 5
SUMMARY_VALUE_COL = 11
SIGNATURE_LABEL_COL = 13
SIGNATURE_DATE_COL = 15

CODING_LEFT_COL = 6
CODING_RIGHT_COL = 10

MONEY_FORMAT = "$#,##0.00"
DEFAULT_PURPOSE = "Business Expense"

HEADER_LABELS = {
    ExpenseCategory.HOTEL_MOTEL: "HOTEL/\nMOTEL",
    ExpenseCategory.MEALS: "MEALS",
    ExpenseCategory.ENTERTAINMENT: "ENTER-\nTAINMENT",
    ExpenseCategory.TRANSPORT_AIR_RAIL: "TRANSPORT\nAIR-RAIL",
    ExpenseCategory.COMPUTER_SUPPLIES: "COMPUTER\nSUPPLIES",
    ExpenseCategory.CELL_PHONE: "CELL\nPHONE",
    ExpenseCategory.GAS: "GAS/\nMILEAGE",
    ExpenseCategory.COPIES: "COPIES",
    ExpenseCategory.DUES: "DUES",
    ExpenseCategory.POSTAGE: "POSTAGE",
    ExpenseCategory.OFFICE_SUPPLIES: "OFFICE\nSUPPLIES",
    ExpenseCategory.MISC: "MISC",
}

CERTIFICATION_TEXT = (
    "I HEREBY CERTIFY THAT ALL THE EXPENSES ABOVE ARE DIRECTLY",
    "RELATED TO AND/OR ASSOCIATED WITH THE ACTIVE CONDUCT OF THE",
    "COMPANY'S BUSINESS.",
)

HAS_DIGIT_RE = re.compile(r"\d")


@dataclass
class SheetResult:
    category_totals: Dict[ExpenseCategory, float]
    receipts_total: float
    rows_placed: int
    rows_dropped: int
    warnings: List[str] = field(default_factory=list)


class ExpenseSheetBuilder:
    """Fills a worksheet with the expense form for one report request."""

    def __init__(self, config: Dict):
        self.config = config

        self.bold = Font(bold=True)
        self.title_font = Font(bold=True, size=14)
        self.header_font = Font(bold=True, size=10)
        self.small_font = Font(size=9)
        self.header_fill = PatternFill(start_color="FFE0E0E0", end_color="FFE0E0E0", fill_type="solid")
        self.centered = Alignment(horizontal="center", vertical="center", wrap_text=True)
        thin = Side(style="thin")
        double = Side(style="double")
        self.thin_border = Border(left=thin, right=thin, top=thin, bottom=thin)
        self.totals_border = Border(left=thin, right=thin, top=double, bottom=double)

    def build(self, ws: Worksheet, request: ReportRequest, mileage_ref: Optional[str] = None,
              mileage_total: float = 0.0) -> SheetResult:
        """Lay out ``request`` on ``ws``.

        ``mileage_ref`` is a cell reference (e.g. ``'Mileage Details'!$F$27``)
        holding the mileage reimbursement total; when given it replaces the
        GAS column total and is added to the grand total.
        """
        request.validate()
        ws.title = SHEET_TITLE
        warnings: List[str] = []

        self._write_header(ws, request)
        self._write_column_headers(ws)

        ordered = sort_chronologically(request.receipts)
        placed = ordered[:MAX_RECEIPT_ROWS]
        dropped = len(ordered) - len(placed)
        if dropped:
            msg = (f"capacity: {len(ordered)} receipts exceed the {MAX_RECEIPT_ROWS} lines on the form; "
                   f"{dropped} receipt(s) dated from {ordered[MAX_RECEIPT_ROWS].date or 'no date'} were left off")
            logger.warning(msg)
            warnings.append(msg)

        category_totals = {c: 0.0 for c in CATEGORY_ORDER}
        receipts_total = 0.0
        for index, rec in enumerate(placed):
            row = FIRST_DATA_ROW + index
            amount, category = self._write_receipt_row(ws, row, rec, warnings)
            category_totals[category] += amount
            receipts_total += amount

        for row in range(FIRST_DATA_ROW + len(placed), LAST_DATA_ROW + 1):
            self._write_empty_row(ws, row)

        if mileage_ref and category_totals[ExpenseCategory.GAS]:
            msg = (f"GAS receipts totalling {category_totals[ExpenseCategory.GAS]:.2f} are counted in the "
                   f"grand total but the GAS column total shows mileage only")
            logger.warning(msg)
            warnings.append(msg)

        self._write_totals_row(ws, mileage_ref)
        self._write_account_coding(ws)
        self._write_certification(ws)
        self._write_summary(ws)
        self._setup_page(ws)

        logger.debug("expense sheet: %d rows placed, receipts %.2f, mileage %.2f",
                     len(placed), receipts_total, mileage_total)
        return SheetResult(
            category_totals=category_totals,
            receipts_total=receipts_total,
            rows_placed=len(placed),
            rows_dropped=dropped,
            warnings=warnings,
        )

    def _write_header(self, ws: Worksheet, request: ReportRequest):
        ws.merge_cells(TITLE_RANGE)
        title = ws.cell(row=TITLE_ROW, column=3, value=self.config.get("title", "EXPENSE REPORT"))
        title.font = self.title_font
        title.alignment = Alignment(horizontal="center")

        ws.cell(row=INFO_ROW, column=1, value="EMPLOYEE NAME").font = self.bold
        ws.cell(row=INFO_ROW, column=2, value=request.employee_name.strip())
        ws.cell(row=INFO_ROW, column=4, value="SEND CHECK TO:")
        ws.cell(row=INFO_ROW, column=6, value=self.config.get("site_label", ""))
        if request.week_ending_date:
            ws.cell(row=INFO_ROW, column=14, value="Week Ending").font = self.bold
            ws.cell(row=INFO_ROW, column=15, value=format_date_for_display(request.week_ending_date))

        ws.merge_cells(SECTION_RANGE)
        section = ws.cell(row=SECTION_ROW, column=1, value="LISTING AND DESCRIPTION OF REIMBURSABLE EXPENSES")
        section.font = Font(bold=True, size=11)

    def _write_column_headers(self, ws: Worksheet):
        labels = ["DATE", "LOCATION", "PURPOSE OF TRIP/EXPENDITURE"]
        labels += [HEADER_LABELS[c] for c in CATEGORY_ORDER]
        labels.append("TOTALS")
        for col, label in enumerate(labels, 1):
            cell = ws.cell(row=HEADER_ROW, column=col, value=label)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.border = self.thin_border
            cell.alignment = self.centered
        ws.row_dimensions[HEADER_ROW].height = 30

    def _write_receipt_row(self, ws: Worksheet, row: int, rec: ReceiptRecord, warnings: List[str]):
        if rec.date and parse_date(rec.date) is None:
            warnings.append(f"row {row}: could not read date {rec.date!r}; written as entered")
        if rec.total and not HAS_DIGIT_RE.search(rec.total):
            warnings.append(f"row {row}: could not read amount {rec.total!r}; counted as 0.00")
        if is_fallback(rec) and rec.category:
            warnings.append(f"row {row}: unrecognized category {rec.category!r}; filed under MISC")

        amount = parse_amount(rec.total)
        category, column = classify(rec)

        ws.cell(row=row, column=DATE_COL, value=format_date_for_display(rec.date))
        ws.cell(row=row, column=LOCATION_COL, value=rec.merchant or "")
        ws.cell(row=row, column=PURPOSE_COL, value=(rec.description or "").strip() or DEFAULT_PURPOSE)

        amount_cell = ws.cell(row=row, column=column, value=amount)
        amount_cell.number_format = MONEY_FORMAT

        first = get_column_letter(CATEGORY_ORDER[0].column)
        last = get_column_letter(CATEGORY_ORDER[-1].column)
        total_cell = ws.cell(row=row, column=TOTALS_COL, value=f"=SUM({first}{row}:{last}{row})")
        total_cell.number_format = MONEY_FORMAT

        self._border_row(ws, row)
        logger.debug("row %d: %.2f, %s", row, amount, explain(rec))
        return amount, category

    def _write_empty_row(self, ws: Worksheet, row: int):
        total_cell = ws.cell(row=row, column=TOTALS_COL, value=0)
        total_cell.number_format = MONEY_FORMAT
        self._border_row(ws, row)

    def _border_row(self, ws: Worksheet, row: int):
        for col in range(1, LAST_COL + 1):
            ws.cell(row=row, column=col).border = self.thin_border
        ws.row_dimensions[row].height = 20

    def _write_totals_row(self, ws: Worksheet, mileage_ref: Optional[str]):
        label = ws.cell(row=TOTALS_ROW, column=PURPOSE_COL, value="TOTALS")
        label.font = self.bold
        label.alignment = Alignment(horizontal="right")

        for category in CATEGORY_ORDER:
            letter = get_column_letter(category.column)
            if category is ExpenseCategory.GAS and mileage_ref:
                formula = f"={mileage_ref}"
            else:
                formula = f"=SUM({letter}{FIRST_DATA_ROW}:{letter}{LAST_DATA_ROW})"
            self._money(ws.cell(row=TOTALS_ROW, column=category.column, value=formula), bold=True)

        totals_letter = get_column_letter(TOTALS_COL)
        grand = f"=SUM({totals_letter}{FIRST_DATA_ROW}:{totals_letter}{LAST_DATA_ROW})"
        if mileage_ref:
            grand += f"+{mileage_ref}"
        self._money(ws.cell(row=TOTALS_ROW, column=TOTALS_COL, value=grand), bold=True)

        for col in range(PURPOSE_COL, LAST_COL + 1):
            ws.cell(row=TOTALS_ROW, column=col).border = self.totals_border

    def _write_account_coding(self, ws: Worksheet):
        ws.cell(row=EXPLANATION_ROW, column=1, value="DATE")
        ws.cell(row=EXPLANATION_ROW, column=2, value="*EXPLANATION OF ENTERTAINMENT & MISC. EXPENSES")
        ws.cell(row=EXPLANATION_ROW, column=6, value="AMOUNT")
        ws.cell(row=EXPLANATION_ROW, column=7, value="Account Coding").font = self.bold

        for base in (CODING_LEFT_COL, CODING_RIGHT_COL):
            for offset, label in enumerate(("Desc.", "Account", "Amount")):
                ws.cell(row=CODING_HEADER_ROW, column=base + offset, value=label).font = self.bold

        coding = self.config.get("account_coding", {})
        for base, key in ((CODING_LEFT_COL, "left"), (CODING_RIGHT_COL, "right")):
            for index, (desc, account) in enumerate(coding.get(key, [])):
                ws.cell(row=CODING_FIRST_ROW + index, column=base, value=desc)
                ws.cell(row=CODING_FIRST_ROW + index, column=base + 1, value=str(account))

    def _write_certification(self, ws: Worksheet):
        for row, text in zip(CERTIFICATION_ROWS, CERTIFICATION_TEXT):
            ws.merge_cells(start_row=row, start_column=9, end_row=row, end_column=15)
            ws.cell(row=row, column=9, value=text).font = self.small_font

    def _write_summary(self, ws: Worksheet):
        totals_ref = f"{get_column_letter(TOTALS_COL)}{TOTALS_ROW}"
        value_letter = get_column_letter(SUMMARY_VALUE_COL)

        ws.cell(row=TOTAL_EXPENSES_ROW, column=SUMMARY_LABEL_COL, value="TOTAL EXPENSES").font = self.bold
        self._money(ws.cell(row=TOTAL_EXPENSES_ROW, column=SUMMARY_VALUE_COL, value=f"={totals_ref}"), bold=True)

        # no advance tracking exists; the form line stays at zero
        ws.cell(row=NET_ADVANCES_ROW, column=SUMMARY_LABEL_COL, value="NET ADVANCES").font = self.bold
        self._money(ws.cell(row=NET_ADVANCES_ROW, column=SUMMARY_VALUE_COL, value=0))

        ws.cell(row=BALANCE_DUE_ROW, column=SUMMARY_LABEL_COL, value="BALANCE DUE EMPLOYEE").font = self.bold
        balance = f"={value_letter}{TOTAL_EXPENSES_ROW}-{value_letter}{NET_ADVANCES_ROW}"
        self._money(ws.cell(row=BALANCE_DUE_ROW, column=SUMMARY_VALUE_COL, value=balance), bold=True)

        ws.cell(row=TOTAL_EXPENSES_ROW, column=SIGNATURE_LABEL_COL, value="EMPLOYEE (SIGNATURE)").font = self.small_font
        ws.cell(row=TOTAL_EXPENSES_ROW, column=SIGNATURE_DATE_COL, value="DATE SIGNED").font = self.small_font
        ws.cell(row=APPROVAL_ROW, column=SIGNATURE_LABEL_COL, value="APPROVED BY:").font = self.small_font
        ws.cell(row=APPROVAL_ROW, column=SIGNATURE_DATE_COL, value="DATE SIGNED").font = self.small_font

        note = ws.cell(row=REVISION_ROW, column=1, value=self.config.get("revision_note", ""))
        note.font = Font(size=8, italic=True)

    def _setup_page(self, ws: Worksheet):
        ws.page_setup.orientation = "landscape"
        ws.page_setup.fitToWidth = 1
        ws.page_setup.fitToHeight = 0
        ws.sheet_properties.pageSetUpPr.fitToPage = True

    def _money(self, cell, bold: bool = False):
        cell.number_format = MONEY_FORMAT
        if bold:
            cell.font = self.bold
        return cell


def apply_column_widths(ws: Worksheet, widths: Sequence[float]):
    for index, width in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(index)].width = width
