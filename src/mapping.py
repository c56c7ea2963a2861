import json
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

import pandas as pd

from amounts import Convention

REQUIRED = {
    "payments": ["status", "payment_method", "timestamp", "amount", "tax"],
    "payouts": ["payout_id", "status", "arrival_date", "amount"],
    "payout_links": ["payment_id", "customer_id", "payout_id", "status", "timestamp"],
}
OPTIONAL = {
    "payments": ["transaction_id", "customer_email", "first_name", "last_name",
                 "country_code", "tax_number", "vat_rate", "ip_address"],
    "payouts": [],
    "payout_links": [],
}

Candidate = Union[str, int]


@dataclass(frozen=True)
class ExportSchema:
    name: str
    kind: str
    columns: Dict[str, List[Candidate]]
    has_header: bool = True
    amount_convention: Convention = Convention.A
    timestamp_format: str = "%Y-%m-%d %H:%M:%S"
    accepted_statuses: tuple = ()
    refund_status: str = "refunded"
    eu_policy: str = "tax"
    vat_unknown_marker: Optional[str] = None
    prefix_tax_number: bool = False
    timestamp_precision_seconds: Optional[int] = None

    @property
    def precision_seconds(self) -> int:
        if self.timestamp_precision_seconds is not None:
            return self.timestamp_precision_seconds
        # minute-precision exports stamp the start of the minute
        if "%S" in self.timestamp_format or "%T" in self.timestamp_format:
            return 0
        return 59


def _norm(s: str) -> str:
    return str(s).strip().lower()


def _schema_from_dict(name: str, raw: Dict) -> ExportSchema:
    kind = raw.get("kind")
    if kind not in REQUIRED:
        raise ValueError(f"Export schema '{name}' has unknown kind {kind!r}")
    eu_policy = raw.get("eu_policy", "tax")
    if eu_policy not in ("tax", "vat_rate"):
        raise ValueError(f"Export schema '{name}' has unknown eu_policy {eu_policy!r}")
    return ExportSchema(
        name=name,
        kind=kind,
        columns={std: list(c) if isinstance(c, list) else [c] for std, c in raw.get("columns", {}).items()},
        has_header=bool(raw.get("has_header", True)),
        amount_convention=Convention(raw.get("amount_convention", "A")),
        timestamp_format=raw.get("timestamp_format", "%Y-%m-%d %H:%M:%S"),
        accepted_statuses=tuple(raw.get("accepted_statuses", ())),
        refund_status=raw.get("refund_status", "refunded"),
        eu_policy=eu_policy,
        vat_unknown_marker=raw.get("vat_unknown_marker"),
        prefix_tax_number=bool(raw.get("prefix_tax_number", False)),
        timestamp_precision_seconds=raw.get("timestamp_precision_seconds"),
    )


def load_export_schemas(path: str = "config/export_schemas.json") -> Dict[str, ExportSchema]:
    with open(path, "r") as f:
        raw = json.load(f)
    return {name: _schema_from_dict(name, cfg) for name, cfg in raw.items()}


def _find_column(df: pd.DataFrame, candidates: List[Candidate]) -> Optional[str]:
    cols = {_norm(c): c for c in df.columns}
    for cand in candidates:
        if isinstance(cand, int):
            if 0 <= cand < len(df.columns):
                return df.columns[cand]
            continue
        key = _norm(cand)
        if key in cols:
            return cols[key]
    return None


def apply_mapping(df: pd.DataFrame, schema: ExportSchema) -> pd.DataFrame:
    """
    Returns a new DF with standardized column names for the schema's kind,
    pulling each field from the first matching header (or position) in the export.
    Optional fields that are not present come back as empty strings.
    """
    out = pd.DataFrame(index=df.index)

    # required
    missing_required = []
    for std in REQUIRED[schema.kind]:
        found = _find_column(df, schema.columns.get(std, []))
        if found is None:
            missing_required.append(std)
        else:
            out[std] = df[found]
    if missing_required:
        raise ValueError(f"Missing required standardized fields for {schema.name}: {missing_required}. "
                         f"Check config/export_schemas.json and your input headers.")

    # optional
    for std in OPTIONAL[schema.kind]:
        found = _find_column(df, schema.columns.get(std, []))
        out[std] = df[found] if found is not None else ""

    return out


def get_schema(schemas: Dict[str, ExportSchema], name: str, kind: str) -> ExportSchema:
    schema = schemas.get(name)
    if schema is None:
        raise ValueError(f"No export schema named '{name}' in config/export_schemas.json")
    if schema.kind != kind:
        raise ValueError(f"Export schema '{name}' describes {schema.kind}, expected {kind}")
    return schema
