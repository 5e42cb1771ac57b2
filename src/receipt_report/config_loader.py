import os
from typing import Dict, Optional

import yaml

from .errors import ReportValidationError


DEFAULTS = {
    "title": "EXPENSE REPORT",
    "site_label": "SITE: Columbus",
    "mileage_rate": 0.67,
    "timezone": "America/New_York",
    "generation_timeout_seconds": 30,
    "max_receipt_rows": 28,
    "mileage_padding_rows": 20,
    "revision_note": "revision 1/03/06",
    "account_coding": {
        "left": [
            ["Hotel", "5710"],
            ["Meals", "5714"],
            ["Entertainment", "5718"],
            ["Air", "5712"],
            ["Computer Sup", "5405"],
            ["Mileage/Gas", "5720"],
        ],
        "right": [
            ["Copies", "5560"],
            ["Other", "5718"],
            ["Dues&Sub", "5470"],
            ["Cell Phones", "5678"],
            ["Office Supplies", "5560"],
            ["Postage", "5590"],
        ],
    },
    "column_widths": {
        "expense": [12, 22, 30, 12, 10, 13, 12, 12, 10, 10, 10, 10, 10, 12, 10, 12],
        "mileage": [12, 35, 35, 30, 10, 12],
    },
}

# The paper form has exactly 28 entry lines (rows 10-37).
FORM_RECEIPT_ROWS = 28


def _default_path() -> str:
    env_path = os.getenv("EXPENSE_REPORT_CONFIG")
    if env_path:
        return env_path
    root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    return os.path.join(root, "config", "report.yml")


def load_report_config(path: Optional[str] = None) -> Dict:
    path = path or _default_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return dict(DEFAULTS)

    if not isinstance(cfg, dict):
        raise ReportValidationError(f"config file {path} must contain a mapping")

    # shallow merge defaults
    merged = dict(DEFAULTS)
    for k, v in cfg.items():
        if isinstance(v, dict) and isinstance(merged.get(k), dict):
            mv = dict(merged[k])
            mv.update(v)
            merged[k] = mv
        else:
            merged[k] = v

    if int(merged["max_receipt_rows"]) != FORM_RECEIPT_ROWS:
        raise ReportValidationError(
            f"max_receipt_rows is fixed by the form layout at {FORM_RECEIPT_ROWS}"
        )
    if float(merged["mileage_rate"]) < 0:
        raise ReportValidationError("mileage_rate must not be negative")
    return merged
