"""
Mileage reimbursement arithmetic and a caller-owned store for mileage entries.

Reimbursement figures are always recomputed from the trip distance, the
personal-commute deduction and the configured rate; values sent by a client
are never trusted for totals.
"""

import logging
import uuid
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from .errors import ReportValidationError
from .normalizer import parse_date
from .report_models import MileageRecord

logger = logging.getLogger(__name__)


def compute_reimbursement(distance: float, round_trip: bool, personal_commute: float,
                          rate: float) -> Tuple[float, float, float]:
    """Return (total_distance, reimbursable_distance, reimbursable_amount).

    Negative inputs are clamped to 0.
    """
    distance = max(0.0, float(distance or 0))
    personal_commute = max(0.0, float(personal_commute or 0))
    rate = max(0.0, float(rate or 0))

    total_distance = distance * (2 if round_trip else 1)
    reimbursable_distance = max(0.0, total_distance - personal_commute)
    return total_distance, reimbursable_distance, reimbursable_distance * rate


def reconcile_entry(entry: MileageRecord, rate: float) -> MileageRecord:
    """Return a copy of ``entry`` with reimbursement fields recomputed.

    ``calculated_distance`` is already doubled for round trips, so it is fed
    through as a one-way distance. Entries that only carry a reimbursable
    distance are re-priced from that.
    """
    if entry.calculated_distance is not None:
        total, distance, amount = compute_reimbursement(
            entry.calculated_distance, False, entry.personal_commute, rate
        )
    elif entry.reimbursable_distance is not None:
        total = None
        _, distance, amount = compute_reimbursement(entry.reimbursable_distance, False, 0, rate)
    else:
        total, distance, amount = None, 0.0, 0.0

    if entry.reimbursable_amount is not None and abs(entry.reimbursable_amount - amount) > 0.005:
        logger.warning(
            "mileage entry %s (%s -> %s): supplied amount %.2f differs from recomputed %.2f",
            entry.date, entry.start_address, entry.end_address, entry.reimbursable_amount, amount,
        )
    return replace(
        entry,
        calculated_distance=entry.calculated_distance if total is None else total,
        reimbursable_distance=distance,
        reimbursable_amount=amount,
    )


class MileageRepository:
    """In-memory mileage entries for one user session.

    Owned by the caller; the report generator only ever receives
    ``entries()`` as a plain list.
    """

    REQUIRED_FIELDS = ("date", "start_address", "end_address", "business_purpose")

    def __init__(self, rate: float):
        self.rate = rate
        self._entries: Dict[str, MileageRecord] = {}

    def add(self, entry: MileageRecord) -> str:
        missing = [f for f in self.REQUIRED_FIELDS if not str(getattr(entry, f) or "").strip()]
        if missing:
            raise ReportValidationError(f"Missing required fields: {', '.join(missing)}")
        if entry.calculated_distance is None:
            raise ReportValidationError("Distance calculation required before saving")

        entry_id = f"mileage_{uuid.uuid4().hex[:12]}"
        self._entries[entry_id] = reconcile_entry(entry, self.rate)
        logger.info("stored mileage entry %s (%s)", entry_id, entry.business_purpose)
        return entry_id

    def get(self, entry_id: str) -> Optional[MileageRecord]:
        return self._entries.get(entry_id)

    def delete(self, entry_id: str) -> bool:
        return self._entries.pop(entry_id, None) is not None

    def clear(self):
        self._entries.clear()

    def entries(self) -> List[MileageRecord]:
        """Entries in the order they were added."""
        return list(self._entries.values())

    def list(self) -> List[Tuple[str, MileageRecord]]:
        """(id, entry) pairs, newest trip date first; undated entries last."""
        def newest_first(item):
            parsed = parse_date(item[1].date)
            return (1, 0) if parsed is None else (0, -parsed.key)

        return sorted(self._entries.items(), key=newest_first)

    def __len__(self) -> int:
        return len(self._entries)
