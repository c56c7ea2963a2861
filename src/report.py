import os
import json
import shutil
import tempfile
from typing import Dict, List, Optional

import pandas as pd

from amounts import format_amount, vat_percent_of
from records import Payment, Payout
from rules import ChannelRule

BASE_HEADER = ["Datum", "Kundenname", "USD", "VAT", "%", "Land", "EU", "Privat", "USt-ID"]
PAYOUT_HEADER = ["Transfer", "EUR"]
REFUND_HEADER = ["Rückerst"]

MARK = "x"
NOT_APPLICABLE = "-"


def header_for(channel_rule: ChannelRule) -> List[str]:
    if channel_rule.requires_payout:
        return BASE_HEADER + PAYOUT_HEADER + REFUND_HEADER
    return BASE_HEADER + REFUND_HEADER


def _flag(value: bool) -> str:
    return MARK if value else ""


def private_marker(payment: Payment) -> str:
    if not payment.is_eu:
        return NOT_APPLICABLE
    return _flag(payment.is_private)


def format_row(payment: Payment, payout: Optional[Payout], date_format: str) -> List[str]:
    row = [
        payment.timestamp.strftime(date_format),
        payment.customer_name,
        format_amount(payment.amount),
        format_amount(payment.tax_amount),
        vat_percent_of(payment.tax_amount, payment.amount),
        payment.country_code,
        _flag(payment.is_eu),
        private_marker(payment),
        payment.tax_number,
    ]
    if payout is not None:
        row += [
            payout.arrival_date.strftime(date_format) if payout.arrival_date else "",
            format_amount(payout.amount),
        ]
    row.append(_flag(payment.is_refund))
    return row


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def write_outputs(outputs_dir: str,
                  channel_reports: Dict[str, pd.DataFrame],
                  unmatched: pd.DataFrame,
                  suggestions: pd.DataFrame,
                  summary: Dict) -> List[str]:
    """
    Writes every report into a staging directory first and only moves them into
    place once all of them were written. If anything fails, reports already moved
    are removed again, so a failed run leaves no report behind.
    """
    ensure_dir(outputs_dir)

    frames = dict(channel_reports)
    frames["unmatched.csv"] = unmatched
    frames["suggestions.csv"] = suggestions

    staging = tempfile.mkdtemp(prefix=".staging-", dir=outputs_dir)
    moved = []
    try:
        for name, df in frames.items():
            df.to_csv(os.path.join(staging, name), index=False)
        with open(os.path.join(staging, "recon_summary.json"), "w") as f:
            json.dump(summary, f, indent=2, default=str)

        for name in list(frames) + ["recon_summary.json"]:
            final = os.path.join(outputs_dir, name)
            os.replace(os.path.join(staging, name), final)
            moved.append(final)
    except Exception:
        for final in moved:
            if os.path.exists(final):
                os.remove(final)
        raise
    finally:
        shutil.rmtree(staging, ignore_errors=True)
    return moved
