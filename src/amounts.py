import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

_DIGITS = re.compile(r"\d+")


class MalformedAmount(ValueError):
    pass


class Convention(str, Enum):
    """Decimal convention of an export.

    A: "1,234.56" (comma thousands, dot decimal)
    B: "1.234,56" (dot thousands, comma decimal)
    """
    A = "A"
    B = "B"


@dataclass(frozen=True)
class Amount:
    units: int = 0
    minor_units: int = 0

    def __post_init__(self) -> None:
        if self.units < 0 or not 0 <= self.minor_units < 100:
            raise MalformedAmount(f"Amount out of range: {self.units}/{self.minor_units}")

    @property
    def is_absent(self) -> bool:
        # 0,00 means "not set" in every export we read
        return self.units == 0 and self.minor_units == 0

    @property
    def total_minor_units(self) -> int:
        return self.units * 100 + self.minor_units


ABSENT = Amount(0, 0)


def _to_int(side: str, raw: str) -> int:
    if not _DIGITS.fullmatch(side):
        raise MalformedAmount(f"Invalid amount found: {raw!r}")
    return int(side)


def parse_amount(raw: str, convention: Convention) -> Amount:
    """
    Parses an exported amount string into whole and minor units.
    Convention A scales a single fractional digit to tenths ("9.8" -> 9,80);
    Convention B takes the fraction literally.
    """
    s = str(raw).strip()
    if s == "":
        return ABSENT

    if Convention(convention) is Convention.A:
        parts = s.replace(",", "").split(".")
    else:
        parts = s.replace(".", "").split(",")
    if len(parts) > 2:
        raise MalformedAmount(f"Invalid amount found: {raw!r}")

    units = _to_int(parts[0], raw)
    minor = 0
    if len(parts) == 2:
        minor = _to_int(parts[1], raw)
        if Convention(convention) is Convention.A and len(parts[1]) == 1:
            minor *= 10
    if minor >= 100:
        raise MalformedAmount(f"Invalid amount found: {raw!r}")
    return Amount(units, minor)


def format_amount(amount: Amount) -> str:
    if amount.is_absent:
        return ""
    return f"{amount.units},{amount.minor_units:02d}"


def vat_percent_of(tax: Amount, gross: Amount) -> str:
    """VAT rate relative to the net base (gross is VAT-inclusive), e.g. 119,00/19,00 -> "19%"."""
    net = gross.total_minor_units - tax.total_minor_units
    if net == 0:
        return ""
    pct = (Decimal(tax.total_minor_units) * 100 / Decimal(net)).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    if pct == 0:
        return ""
    return f"{int(pct)}%"
