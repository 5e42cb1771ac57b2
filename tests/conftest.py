import pytest

from receipt_report.config_loader import DEFAULTS
from receipt_report.report_models import MileageRecord, ReceiptRecord, ReportRequest


@pytest.fixture
def config():
    cfg = dict(DEFAULTS)
    cfg["generation_timeout_seconds"] = 30
    return cfg


@pytest.fixture
def jane_doe_request():
    return ReportRequest(
        employee_name="Jane Doe",
        receipts=[
            ReceiptRecord(date="1/5/24", merchant="Hilton", total="$120.00", category="HOTEL/MOTEL", description="stay"),
            ReceiptRecord(date="1/3/24", merchant="Staples", total="$45.50", category="OFFICE SUPPLIES",
                          description="supplies"),
        ],
        mileage_entries=[],
    )


@pytest.fixture
def mileage_entry():
    return MileageRecord(
        date="2024-01-04",
        start_address="100 Broad St, Columbus, OH",
        end_address="200 High St, Columbus, OH",
        business_purpose="client site visit",
        round_trip=True,
        personal_commute=20.0,
        calculated_distance=200.0,
        reimbursable_distance=180.0,
        reimbursable_amount=90.0,
    )
