import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.worksheet.worksheet import Worksheet

from .mileage import reconcile_entry
from .normalizer import format_date_for_display
from .report_models import MileageRecord

logger = logging.getLogger(__name__)

SHEET_TITLE = "Mileage Details"
TITLE_RANGE = "A1:F1"
EMPLOYEE_RANGE = "A2:F2"
HEADER_ROW = 4
FIRST_DATA_ROW = 5
HEADERS = ["Date", "From", "To", "Purpose", "Miles", "Amount"]
MILES_COL = 5
AMOUNT_COL = 6

MONEY_FORMAT = "$#,##0.00"
MILES_FORMAT = "#,##0.0"


@dataclass
class MileageSheetResult:
    entries: List[MileageRecord]
    total_distance: float
    total_amount: float
    totals_row: int

    @property
    def amount_ref(self) -> str:
        """Absolute reference to the amount total, for use from other sheets."""
        return f"'{SHEET_TITLE}'!$F${self.totals_row}"


def build_mileage_sheet(ws: Worksheet, employee_name: str, entries: Sequence[MileageRecord],
                        config: Dict) -> MileageSheetResult:
    """Mileage log: one line per trip in the order given, blank lines for
    handwritten additions, then a totals line."""
    rate = float(config.get("mileage_rate", 0.67))
    padding = int(config.get("mileage_padding_rows", 20))

    thin = Side(style="thin")
    double = Side(style="double")
    thin_border = Border(left=thin, right=thin, top=thin, bottom=thin)
    totals_border = Border(left=thin, right=thin, top=double, bottom=double)
    header_fill = PatternFill(start_color="FFE0E0E0", end_color="FFE0E0E0", fill_type="solid")

    ws.title = SHEET_TITLE
    ws.merge_cells(TITLE_RANGE)
    title = ws.cell(row=1, column=1, value="MILEAGE LOG")
    title.font = Font(bold=True, size=14)
    title.alignment = Alignment(horizontal="center")

    ws.merge_cells(EMPLOYEE_RANGE)
    ws.cell(row=2, column=1, value=f"Employee: {employee_name.strip()}").font = Font(bold=True)

    for col, header in enumerate(HEADERS, 1):
        cell = ws.cell(row=HEADER_ROW, column=col, value=header)
        cell.font = Font(bold=True)
        cell.fill = header_fill
        cell.border = thin_border

    reconciled = [reconcile_entry(e, rate) for e in entries]
    total_distance = 0.0
    total_amount = 0.0
    row = FIRST_DATA_ROW
    for entry in reconciled:
        ws.cell(row=row, column=1, value=format_date_for_display(entry.date))
        ws.cell(row=row, column=2, value=entry.start_address)
        ws.cell(row=row, column=3, value=entry.end_address)
        ws.cell(row=row, column=4, value=entry.business_purpose)
        ws.cell(row=row, column=MILES_COL, value=entry.reimbursable_distance).number_format = MILES_FORMAT
        ws.cell(row=row, column=AMOUNT_COL, value=entry.reimbursable_amount).number_format = MONEY_FORMAT
        for col in range(1, AMOUNT_COL + 1):
            ws.cell(row=row, column=col).border = thin_border
        total_distance += entry.reimbursable_distance or 0.0
        total_amount += entry.reimbursable_amount or 0.0
        row += 1

    for _ in range(padding):
        for col in range(1, AMOUNT_COL + 1):
            ws.cell(row=row, column=col).border = thin_border
        row += 1

    last_data_row = row - 1
    totals_row = row + 1
    ws.cell(row=totals_row, column=4, value="TOTAL").font = Font(bold=True)
    miles = ws.cell(row=totals_row, column=MILES_COL, value=f"=SUM(E{FIRST_DATA_ROW}:E{last_data_row})")
    miles.number_format = MILES_FORMAT
    miles.font = Font(bold=True)
    amount = ws.cell(row=totals_row, column=AMOUNT_COL, value=f"=SUM(F{FIRST_DATA_ROW}:F{last_data_row})")
    amount.number_format = MONEY_FORMAT
    amount.font = Font(bold=True)
    for col in range(1, AMOUNT_COL + 1):
        ws.cell(row=totals_row, column=col).border = totals_border

    logger.debug("mileage sheet: %d trips, %.1f miles, %.2f", len(reconciled), total_distance, total_amount)
    return MileageSheetResult(
        entries=reconciled,
        total_distance=total_distance,
        total_amount=total_amount,
        totals_row=totals_row,
    )
