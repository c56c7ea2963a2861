from dataclasses import dataclass
from typing import Tuple

@dataclass(frozen=True)
class ReconConfig:
    # (path, export schema name) per payment export
    payment_exports: Tuple[Tuple[str, str], ...] = (("input/edd-export-payments.csv", "edd"),)
    payouts_path: str = "input/payouts.csv"
    payouts_schema: str = "stripe_payouts"
    payout_links_path: str = "input/payments.csv"
    payout_links_schema: str = "stripe_payments"
    outputs_dir: str = "output"

    rules_path: str = "config/recon_config.json"
    schemas_path: str = "config/export_schemas.json"
    resolver_url: str = "https://ipinfo.io/{ip}/json"
