"""
Expense category rules.

The category label picked (or typed) by the user is matched against the
keyword rules below in order; the first rule that hits wins. Keywords are
compared against whole words of the label so that e.g. "Office Supplies"
is not taken by the computer-supplies rule.
"""

import logging
import re
from typing import List, Optional, Tuple

from .report_models import ExpenseCategory, ReceiptRecord

logger = logging.getLogger(__name__)

# (category, label keywords) evaluated top to bottom
CATEGORY_RULES: List[Tuple[ExpenseCategory, Tuple[str, ...]]] = [
    (ExpenseCategory.HOTEL_MOTEL, ("hotel", "lodging", "motel")),
    (ExpenseCategory.MEALS, ("food", "meal", "restaurant")),
    (ExpenseCategory.ENTERTAINMENT, ("entertainment",)),
    (ExpenseCategory.TRANSPORT_AIR_RAIL, (
        "transport", "transportation", "uber", "lyft", "taxi", "air", "airfare", "airline", "airport", "rail",
    )),
    # bare "supplies" matches no rule
    (ExpenseCategory.COMPUTER_SUPPLIES, ("computer",)),
    (ExpenseCategory.CELL_PHONE, ("cell", "phone", "cellphone", "cellular", "telephone")),
    (ExpenseCategory.GAS, ("gas", "gasoline", "mileage", "fuel")),
    (ExpenseCategory.COPIES, ("copies", "printing")),
    (ExpenseCategory.DUES, ("dues", "membership")),
    (ExpenseCategory.POSTAGE, ("postage", "shipping")),
    (ExpenseCategory.OFFICE_SUPPLIES, ("office",)),
]

# merchant names that imply a meal when the label says nothing
MERCHANT_MEAL_HINTS = ("restaurant",)

WORD_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def _words(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [w for w in WORD_SPLIT_RE.split(text.lower()) if w]


def _word_hit(words: List[str], keywords: Tuple[str, ...]) -> Optional[str]:
    for w in words:
        for kw in keywords:
            if w == kw or w == kw + "s":
                return kw
    return None


def _match(record: ReceiptRecord) -> Tuple[ExpenseCategory, str]:
    exact = ExpenseCategory.from_label(record.category)
    if exact is not None:
        return exact, f"label:{exact.value}"

    words = _words(record.category)
    merchant = (record.merchant or "").lower()
    for category, keywords in CATEGORY_RULES:
        kw = _word_hit(words, keywords)
        if kw:
            return category, f"keyword:{kw}"
        if category is ExpenseCategory.MEALS:
            for hint in MERCHANT_MEAL_HINTS:
                if hint in merchant:
                    return category, f"merchant:{hint}"
    return ExpenseCategory.MISC, "fallback"


def classify(record: ReceiptRecord) -> Tuple[ExpenseCategory, int]:
    """Return the expense bucket for a receipt and its column on the form."""
    category, rule = _match(record)
    if rule == "fallback" and record.category:
        logger.warning(
            "unrecognized category %r for %s, using MISC", record.category, record.merchant or "unknown merchant"
        )
    return category, category.column


def is_fallback(record: ReceiptRecord) -> bool:
    return _match(record)[1] == "fallback"


def explain(record: ReceiptRecord) -> str:
    category, rule = _match(record)
    if rule.startswith("label:"):
        return f"category label '{record.category}' is {category.value}"
    if rule.startswith("keyword:"):
        return f"keyword '{rule.split(':', 1)[1]}' in '{record.category}' -> {category.value}"
    if rule.startswith("merchant:"):
        return f"merchant '{record.merchant}' looks like a restaurant -> {category.value}"
    return f"no rule matched '{record.category or ''}' -> {category.value}"
