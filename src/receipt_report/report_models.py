from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import ReportValidationError


class ExpenseCategory(Enum):
    """Expense buckets of the paper form, in column order."""

    HOTEL_MOTEL = "HOTEL/MOTEL"
    MEALS = "MEALS"
    ENTERTAINMENT = "ENTERTAINMENT"
    TRANSPORT_AIR_RAIL = "TRANSPORT/AIR-RAIL"
    COMPUTER_SUPPLIES = "COMPUTER SUPPLIES"
    CELL_PHONE = "CELL PHONE"
    GAS = "GAS"
    COPIES = "COPIES"
    DUES = "DUES"
    POSTAGE = "POSTAGE"
    OFFICE_SUPPLIES = "OFFICE SUPPLIES"
    MISC = "MISC"

    @property
    def column(self) -> int:
        return FIRST_CATEGORY_COLUMN + CATEGORY_ORDER.index(self)

    @classmethod
    def from_label(cls, label: Optional[str]) -> Optional["ExpenseCategory"]:
        if not label:
            return None
        key = label.strip().upper()
        for member in cls:
            if member.value == key:
                return member
        return None


CATEGORY_ORDER: Tuple[ExpenseCategory, ...] = tuple(ExpenseCategory)
# Column D; A-C hold date, location and purpose.
FIRST_CATEGORY_COLUMN = 4


@dataclass(frozen=True)
class OrdinalDate:
    year: int
    month: int
    day: int

    @property
    def key(self) -> int:
        return self.year * 10000 + self.month * 100 + self.day

    def display(self) -> str:
        return f"{self.month:02d}/{self.day:02d}/{self.year:04d}"


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ReportValidationError(f"expected a text value, got {type(value).__name__}")
    return str(value)


def _number(value: Any, name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ReportValidationError(f"{name} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ReportValidationError(f"{name} must be a number, got {value!r}") from None


def _flag(value: Any, name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ReportValidationError(f"{name} must be true or false, got {value!r}")
    return value


def _pick(d: Mapping, *keys: str) -> Any:
    for k in keys:
        if k in d and d[k] is not None:
            return d[k]
    return None


@dataclass(frozen=True)
class ReceiptRecord:
    date: Optional[str] = None
    merchant: Optional[str] = None
    description: str = ""
    total: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Any) -> "ReceiptRecord":
        if not isinstance(d, Mapping):
            raise ReportValidationError("each receipt must be an object")
        # the web client wraps edited fields as {"id": ..., "data": {...}}
        if isinstance(d.get("data"), Mapping):
            d = d["data"]
        return cls(
            date=_text(d.get("date")),
            merchant=_text(_pick(d, "merchant", "vendor", "store", "location")),
            description=_text(d.get("description")) or "",
            total=_text(d.get("total")),
            category=_text(d.get("category")),
        )


@dataclass(frozen=True)
class MileageRecord:
    date: Optional[str] = None
    start_address: str = ""
    end_address: str = ""
    business_purpose: str = ""
    round_trip: bool = False
    personal_commute: float = 0.0
    calculated_distance: Optional[float] = None
    reimbursable_distance: Optional[float] = None
    reimbursable_amount: Optional[float] = None

    @classmethod
    def from_dict(cls, d: Any) -> "MileageRecord":
        if not isinstance(d, Mapping):
            raise ReportValidationError("each mileage entry must be an object")
        return cls(
            date=_text(d.get("date")),
            start_address=_text(_pick(d, "startAddress", "start_address")) or "",
            end_address=_text(_pick(d, "endAddress", "end_address")) or "",
            business_purpose=_text(_pick(d, "businessPurpose", "business_purpose")) or "",
            round_trip=_flag(_pick(d, "roundTrip", "round_trip"), "roundTrip"),
            personal_commute=_number(_pick(d, "personalCommute", "personal_commute"), "personalCommute") or 0.0,
            calculated_distance=_number(
                _pick(d, "calculatedDistance", "calculated_distance", "mileage"), "calculatedDistance"
            ),
            reimbursable_distance=_number(
                _pick(d, "reimbursableDistance", "reimbursable_distance"), "reimbursableDistance"
            ),
            reimbursable_amount=_number(
                _pick(d, "reimbursableAmount", "reimbursable_amount"), "reimbursableAmount"
            ),
        )


@dataclass(frozen=True)
class ReportRequest:
    employee_name: str
    receipts: Tuple[ReceiptRecord, ...] = ()
    mileage_entries: Tuple[MileageRecord, ...] = ()
    week_ending_date: Optional[str] = None

    def __post_init__(self):
        # accept lists from callers but keep the snapshot immutable
        object.__setattr__(self, "receipts", tuple(self.receipts))
        object.__setattr__(self, "mileage_entries", tuple(self.mileage_entries))

    def validate(self):
        if not isinstance(self.employee_name, str) or not self.employee_name.strip():
            raise ReportValidationError("Employee name is required")

    @classmethod
    def from_dict(cls, d: Any) -> "ReportRequest":
        """Build a request from a decoded JSON body (camelCase or snake_case keys)."""
        if not isinstance(d, Mapping):
            raise ReportValidationError("request body must be an object")
        receipts = _pick(d, "receipts") or []
        mileage = _pick(d, "mileageEntries", "mileage_entries") or []
        if not isinstance(receipts, list):
            raise ReportValidationError("receipts must be a list")
        if not isinstance(mileage, list):
            raise ReportValidationError("mileageEntries must be a list")
        req = cls(
            employee_name=_text(_pick(d, "employeeName", "employee_name")) or "",
            receipts=tuple(ReceiptRecord.from_dict(r) for r in receipts),
            mileage_entries=tuple(MileageRecord.from_dict(m) for m in mileage),
            week_ending_date=_text(_pick(d, "weekEndingDate", "week_ending_date")),
        )
        req.validate()
        return req


@dataclass
class LineItem:
    description: Optional[str] = None
    price: Optional[str] = None
    quantity: Optional[str] = None


@dataclass
class ExtractedReceipt:
    """Best-effort field map returned by the OCR service."""

    merchant: Optional[str] = None
    total: Optional[str] = None
    date: Optional[str] = None
    tax: Optional[str] = None
    subtotal: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    line_items: List[LineItem] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any([self.merchant, self.total, self.date, self.tax, self.subtotal,
                        self.address, self.phone, self.line_items])

    def to_receipt_record(self, category: Optional[str] = None, description: str = "") -> ReceiptRecord:
        return ReceiptRecord(
            date=self.date,
            merchant=self.merchant,
            description=description,
            total=self.total,
            category=category,
        )


@dataclass
class ReportTotals:
    category_totals: Dict[ExpenseCategory, float]
    receipts_total: float
    mileage_total: float
    mileage_distance: float

    @property
    def grand_total(self) -> float:
        return self.receipts_total + self.mileage_total


@dataclass
class GeneratedReport:
    content: bytes
    filename: str
    totals: ReportTotals
    warnings: List[str] = field(default_factory=list)
