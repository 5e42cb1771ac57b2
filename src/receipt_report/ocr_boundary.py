"""
OCR and temporary-storage boundary.

The OCR service itself is external. This module fixes its contract
(ExtractedReceipt), maps an AnalyzeExpense-style JSON response onto it, and
wraps a call so that failures come back as "nothing extracted" plus the
error instead of an exception, and uploaded bytes are always cleaned up.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Protocol

from .errors import BoundaryError, ServiceUnavailable
from .report_models import ExtractedReceipt, LineItem

logger = logging.getLogger(__name__)

SUMMARY_FIELD_MAP = {
    "vendor_name": "merchant",
    "merchant_name": "merchant",
    "total": "total",
    "amount_paid": "total",
    "invoice_receipt_date": "date",
    "date": "date",
    "tax": "tax",
    "subtotal": "subtotal",
    "vendor_address": "address",
    "merchant_address": "address",
    "vendor_phone": "phone",
    "merchant_phone": "phone",
}

LINE_ITEM_FIELD_MAP = {
    "item": "description",
    "product_code": "description",
    "price": "price",
    "unit_price": "price",
    "quantity": "quantity",
}


class ReceiptAnalyzer(Protocol):
    def analyze(self, image_bytes: bytes) -> ExtractedReceipt:
        ...


class StoredReceiptAnalyzer(Protocol):
    def analyze_object(self, key: str) -> ExtractedReceipt:
        ...


class TemporaryStorage(Protocol):
    def put(self, data: bytes) -> str:
        ...

    def delete(self, key: str) -> None:
        ...


@dataclass
class ExtractionResult:
    receipt: ExtractedReceipt
    error: Optional[BoundaryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _field(entry: Dict):
    ftype = ((entry.get("Type") or {}).get("Text") or "").lower()
    value = (entry.get("ValueDetection") or {}).get("Text")
    return ftype, value


def parse_expense_documents(documents: List[Dict]) -> ExtractedReceipt:
    """Map the first document of an AnalyzeExpense response to ExtractedReceipt."""
    result = ExtractedReceipt()
    if not documents:
        return result

    doc = documents[0]
    for entry in doc.get("SummaryFields") or []:
        ftype, value = _field(entry)
        if not ftype or not value:
            continue
        attr = SUMMARY_FIELD_MAP.get(ftype)
        if attr:
            setattr(result, attr, value)
        else:
            logger.debug("ignoring summary field %s=%r", ftype, value)

    for group in doc.get("LineItemGroups") or []:
        for line in group.get("LineItems") or []:
            item = LineItem()
            found = False
            for entry in line.get("LineItemExpenseFields") or []:
                ftype, value = _field(entry)
                attr = LINE_ITEM_FIELD_MAP.get(ftype)
                if attr and value:
                    setattr(item, attr, value)
                    found = True
            if found:
                result.line_items.append(item)
    return result


def extract_receipt(analyzer, image_bytes: bytes, storage: Optional[TemporaryStorage] = None) -> ExtractionResult:
    """Run OCR once. Never retries and never raises a BoundaryError.

    With ``storage`` the bytes are uploaded first and the analyzer is
    given the object key; the object is deleted afterwards whatever happens.
    """
    key = None
    try:
        if storage is not None:
            key = storage.put(image_bytes)
            receipt = analyzer.analyze_object(key)
        else:
            receipt = analyzer.analyze(image_bytes)
        if receipt.is_empty():
            logger.warning("OCR returned no fields")
        return ExtractionResult(receipt=receipt)
    except BoundaryError as e:
        logger.warning("OCR failed: %s", e)
        return ExtractionResult(receipt=ExtractedReceipt(), error=e)
    except OSError as e:
        logger.warning("OCR service unreachable: %s", e)
        return ExtractionResult(receipt=ExtractedReceipt(), error=ServiceUnavailable(str(e)))
    finally:
        if key is not None:
            try:
                storage.delete(key)
            except Exception as e:
                logger.warning("could not delete temporary object %s: %s", key, e)
