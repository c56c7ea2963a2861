import re
from datetime import datetime

import pandas as pd


def normalize_text(s: str) -> str:
    if s is None:
        return ""
    s = str(s).lower().strip()
    s = re.sub(r"\s+", " ", s).strip()
    return s


def coerce_timestamp(value: str, fmt: str) -> datetime:
    # raises on unparsable input; a bad timestamp aborts the run
    return pd.to_datetime(str(value).strip(), format=fmt).to_pydatetime()


def title_name(s: str) -> str:
    return normalize_text(s).title()


def display_name(first: str, last: str) -> str:
    parts = [p for p in (title_name(first), title_name(last)) if p]
    return " ".join(parts)
