#!/usr/bin/env python
"""
Generate an expense report workbook from a JSON request file.

    expense-report --request report.json --out reports/

The request file has the same shape as the web client's POST body:
{"employeeName": ..., "receipts": [...], "mileageEntries": [...], "weekEndingDate": ...}
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config_loader import load_report_config
from .errors import ReportError, ReportValidationError
from .report_models import ReportRequest
from .workbook import generate_expense_report_workbook


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    ap = argparse.ArgumentParser(description="Build the expense report spreadsheet from receipts and mileage.")
    ap.add_argument("--request", required=True, help="JSON request file")
    ap.add_argument("--out", default=".", help="output directory or .xlsx path")
    ap.add_argument("--config", default=None, help="report config YAML (default: config/report.yml)")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        with open(args.request, "r", encoding="utf-8") as f:
            try:
                body = json.load(f)
            except json.JSONDecodeError as e:
                raise ReportValidationError(f"request file is not valid JSON: {e}") from e
        config = load_report_config(args.config)
        request = ReportRequest.from_dict(body)
        report = generate_expense_report_workbook(request, config)
    except ReportError as e:
        print(f"❌ {json.dumps(e.to_dict())}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    out_path = args.out
    if not out_path.lower().endswith(".xlsx"):
        os.makedirs(out_path, exist_ok=True)
        out_path = os.path.join(out_path, report.filename)
    else:
        parent = os.path.dirname(out_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
    with open(out_path, "wb") as f:
        f.write(report.content)

    totals = report.totals
    print(f"✅ {out_path}")
    print(f"   receipts: ${totals.receipts_total:,.2f}  mileage: ${totals.mileage_total:,.2f} "
          f"({totals.mileage_distance:,.1f} mi)  total: ${totals.grand_total:,.2f}")
    for w in report.warnings:
        print(f"   ⚠️ {w}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
