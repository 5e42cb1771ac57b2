from typing import Iterable, List

from .normalizer import parse_date
from .report_models import ReceiptRecord


def sort_chronologically(records: Iterable[ReceiptRecord]) -> List[ReceiptRecord]:
    """Oldest first. Receipts without a usable date go last, in input order.

    sorted() is stable, so equal dates keep their input order too.
    """
    def sort_key(rec: ReceiptRecord):
        parsed = parse_date(rec.date)
        if parsed is None:
            return (1, 0)
        return (0, parsed.key)

    return sorted(records, key=sort_key)
