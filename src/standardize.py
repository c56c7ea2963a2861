import re
from typing import List, Optional, Protocol

import pandas as pd

from amounts import parse_amount
from mapping import ExportSchema, apply_mapping
from recon_logger import ReconLogger
from records import Payment
from rules import Rules
from utils import coerce_timestamp, display_name

_COUNTRY_PREFIX = re.compile(r"^[A-Z]{2}")


class Resolver(Protocol):
    def resolve(self, ip_address: str) -> str: ...


def _infer_country(tax_number: str, default_country: str) -> str:
    m = _COUNTRY_PREFIX.match(tax_number)
    return m.group(0) if m else default_country


def normalize_payment(row: dict,
                      schema: ExportSchema,
                      rules: Rules,
                      resolver: Resolver,
                      log: Optional[ReconLogger] = None) -> Optional[Payment]:
    """
    Turns one mapped export row into a classified Payment.
    Returns None for rows that never become payments (status not accepted,
    payment method without a report channel).
    """
    log = log or ReconLogger()

    status = str(row["status"]).strip()
    if status not in schema.accepted_statuses:
        return None

    channel = rules.channel_for_method(str(row["payment_method"]).strip())
    if channel is None:
        log.row_skipped(schema.name, "unknown payment method", row["payment_method"])
        return None

    timestamp = coerce_timestamp(row["timestamp"], schema.timestamp_format)
    amount = parse_amount(row["amount"], schema.amount_convention)
    tax_amount = parse_amount(row["tax"], schema.amount_convention)

    name = display_name(row.get("first_name", ""), row.get("last_name", ""))
    customer_id = str(row.get("customer_email", "")).strip() or name

    tax_number = str(row.get("tax_number", "")).strip().upper()
    country_code = str(row.get("country_code", "")).strip().upper()
    if country_code == "":
        country_code = _infer_country(tax_number, rules.default_country)
    if schema.prefix_tax_number and tax_number and not tax_number.startswith(country_code):
        tax_number = country_code + tax_number

    marker = schema.vat_unknown_marker if schema.vat_unknown_marker is not None else rules.vat_unknown_marker
    vat_rate = str(row.get("vat_rate", "")).strip()

    if schema.eu_policy == "vat_rate":
        is_eu = vat_rate != marker
    else:
        is_eu = not tax_amount.is_absent or tax_number != ""

    # VAT was charged without a known rate: the IP decides the jurisdiction
    if vat_rate == marker and not tax_amount.is_absent:
        ip_address = str(row.get("ip_address", "")).strip()
        resolved = resolver.resolve(ip_address)
        log.country_resolved(ip_address, resolved, customer_id, timestamp)
        if resolved != country_code:
            log.country_overridden(country_code, resolved, customer_id)
            country_code = resolved

    return Payment(
        channel=channel,
        transaction_id=str(row.get("transaction_id", "")).strip(),
        timestamp=timestamp,
        customer_id=customer_id,
        customer_name=name,
        amount=amount,
        tax_amount=tax_amount,
        is_eu=is_eu,
        is_private=is_eu and tax_number == "",
        is_refund=status == schema.refund_status,
        country_code=country_code,
        tax_number=tax_number,
    )


def normalize_payments(df: pd.DataFrame,
                       schema: ExportSchema,
                       rules: Rules,
                       resolver: Resolver,
                       log: Optional[ReconLogger] = None) -> List[Payment]:
    if schema.kind != "payments":
        raise ValueError(f"Export schema '{schema.name}' does not describe payments")
    log = log or ReconLogger()

    mapped = apply_mapping(df, schema)
    payments = []
    for row in mapped.to_dict(orient="records"):
        payment = normalize_payment(row, schema, rules, resolver, log)
        if payment is not None:
            payments.append(payment)

    log.payments_loaded(schema.name, len(payments), len(mapped) - len(payments))
    return payments
