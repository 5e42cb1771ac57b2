import logging

import pytest
from openpyxl import Workbook

from receipt_report.errors import ReportValidationError
from receipt_report.layout import (
    FIRST_DATA_ROW,
    LAST_DATA_ROW,
    TOTALS_ROW,
    ExpenseSheetBuilder,
)
from receipt_report.report_models import ExpenseCategory, ReceiptRecord, ReportRequest


def build(request, config, **kw):
    ws = Workbook().active
    result = ExpenseSheetBuilder(config).build(ws, request, **kw)
    return ws, result


def test_fixed_header_cells(jane_doe_request, config):
    request = ReportRequest(employee_name="Jane Doe", receipts=jane_doe_request.receipts,
                            week_ending_date="1/6/24")
    ws, _ = build(request, config)

    assert ws.title == "Expense Report"
    assert ws["C2"].value == "EXPENSE REPORT"
    assert ws["C2"].font.bold and ws["C2"].font.size == 14
    assert "C2:L2" in ws.merged_cells
    assert ws["A4"].value == "EMPLOYEE NAME"
    assert ws["B4"].value == "Jane Doe"
    assert ws["N4"].value == "Week Ending"
    assert ws["O4"].value == "01/06/2024"
    assert ws["A7"].value == "LISTING AND DESCRIPTION OF REIMBURSABLE EXPENSES"
    assert ws["A9"].value == "DATE"
    assert ws["C9"].value == "PURPOSE OF TRIP/EXPENDITURE"
    assert ws["P9"].value == "TOTALS"
    assert ws["D9"].fill.start_color.rgb == "FFE0E0E0"
    assert ws["P9"].border.left.style == "thin"


def test_week_ending_left_blank_when_not_supplied(jane_doe_request, config):
    ws, _ = build(jane_doe_request, config)
    assert ws["N4"].value is None
    assert ws["O4"].value is None


def test_receipts_placed_chronologically_in_category_columns(jane_doe_request, config):
    ws, result = build(jane_doe_request, config)

    assert ws["A10"].value == "01/03/2024"
    assert ws["B10"].value == "Staples"
    assert ws["C10"].value == "supplies"
    assert ws["N10"].value == 45.5
    assert ws["N10"].number_format == "$#,##0.00"
    assert ws["P10"].value == "=SUM(D10:O10)"

    assert ws["A11"].value == "01/05/2024"
    assert ws["B11"].value == "Hilton"
    assert ws["D11"].value == 120.0

    assert result.category_totals[ExpenseCategory.HOTEL_MOTEL] == 120.0
    assert result.category_totals[ExpenseCategory.OFFICE_SUPPLIES] == 45.5
    assert result.receipts_total == pytest.approx(165.5)
    assert result.rows_placed == 2
    assert result.rows_dropped == 0


def test_unused_rows_are_bordered_with_zero_total(jane_doe_request, config):
    ws, _ = build(jane_doe_request, config)
    for row in range(12, LAST_DATA_ROW + 1):
        assert ws.cell(row=row, column=16).value == 0
        assert ws.cell(row=row, column=1).border.top.style == "thin"
        assert ws.cell(row=row, column=1).value is None


def test_totals_row_and_summary_formulas(jane_doe_request, config):
    ws, _ = build(jane_doe_request, config)
    assert ws["C39"].value == "TOTALS"
    assert ws["D39"].value == "=SUM(D10:D37)"
    assert ws["J39"].value == "=SUM(J10:J37)"
    assert ws["O39"].value == "=SUM(O10:O37)"
    assert ws["P39"].value == "=SUM(P10:P37)"
    assert ws["P39"].border.top.style == "double"
    assert ws["P39"].border.bottom.style == "double"

    assert ws["E54"].value == "TOTAL EXPENSES"
    assert ws["K54"].value == "=P39"
    assert ws["E55"].value == "NET ADVANCES"
    assert ws["K55"].value == 0
    assert ws["E57"].value == "BALANCE DUE EMPLOYEE"
    assert ws["K57"].value == "=K54-K55"


def test_static_account_coding_and_certification(jane_doe_request, config):
    ws, _ = build(jane_doe_request, config)
    assert ws["G40"].value == "Account Coding"
    assert ws["F43"].value == "Hotel"
    assert ws["G43"].value == "5710"
    assert ws["J48"].value == "Postage"
    assert ws["K48"].value == "5590"
    assert ws["I51"].value.startswith("I HEREBY CERTIFY")
    assert ws["I53"].value == "COMPANY'S BUSINESS."
    assert ws["A59"].value == "revision 1/03/06"


def test_mileage_reference_overrides_gas_total(config):
    request = ReportRequest(employee_name="Jane Doe", receipts=[
        ReceiptRecord(date="1/2/24", merchant="Shell", total="$30.00", category="GAS", description="fuel"),
        ReceiptRecord(date="1/3/24", merchant="Subway", total="$9.00", category="Meals", description="lunch"),
    ])
    ref = "'Mileage Details'!$F$27"
    ws, result = build(request, config, mileage_ref=ref, mileage_total=90.0)

    assert ws["J39"].value == "='Mileage Details'!$F$27"
    assert ws["P39"].value == "=SUM(P10:P37)+'Mileage Details'!$F$27"
    # gas receipt still on its row and in the numeric receipts total
    assert ws["J10"].value == 30.0
    assert result.receipts_total == pytest.approx(39.0)
    assert any("GAS" in w for w in result.warnings)


def test_defective_records_degrade_instead_of_failing(config):
    request = ReportRequest(employee_name="Jane Doe", receipts=[
        ReceiptRecord(date="smudged", merchant=None, total="N/A", category="Widgets", description=""),
    ])
    ws, result = build(request, config)

    assert ws["A10"].value == "smudged"
    assert ws["B10"].value == ""
    assert ws["C10"].value == "Business Expense"
    assert ws["O10"].value == 0.0
    assert result.receipts_total == 0.0
    assert len(result.warnings) == 3


def test_blank_employee_name_writes_nothing(config):
    ws = Workbook().active
    with pytest.raises(ReportValidationError):
        ExpenseSheetBuilder(config).build(ws, ReportRequest(employee_name="  "))
    assert ws.max_row == 1
    assert ws.title != "Expense Report"


def test_capacity_truncates_to_28_rows_with_warning(config):
    receipts = [
        ReceiptRecord(date=f"1/{day}/24", merchant=f"m{day}", total="$10.00", category="MISC", description="x")
        for day in range(30, 0, -1)
    ]
    ws, result = build(ReportRequest(employee_name="Jane Doe", receipts=receipts), config)

    assert result.rows_placed == 28
    assert result.rows_dropped == 2
    assert ws.cell(row=FIRST_DATA_ROW, column=2).value == "m1"
    assert ws.cell(row=LAST_DATA_ROW, column=2).value == "m28"
    assert ws.cell(row=TOTALS_ROW - 1, column=2).value is None
    assert result.receipts_total == pytest.approx(280.0)
    assert any(w.startswith("capacity") for w in result.warnings)


def test_row_debug_log_explains_category(jane_doe_request, config, caplog):
    with caplog.at_level(logging.DEBUG, logger="receipt_report.layout"):
        build(jane_doe_request, config)
    assert "category label 'HOTEL/MOTEL' is HOTEL/MOTEL" in caplog.text
