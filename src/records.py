from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import NamedTuple, Optional

from amounts import Amount, ABSENT


class Channel(str, Enum):
    CARD = "card"       # card-processing gateway, settled in payouts
    WALLET = "wallet"   # wallet processor, no payout data


@dataclass(frozen=True)
class Payment:
    channel: Channel
    transaction_id: str
    timestamp: datetime
    customer_id: str
    customer_name: str
    amount: Amount
    tax_amount: Amount
    is_eu: bool
    is_private: bool
    is_refund: bool
    country_code: str
    tax_number: str


@dataclass(frozen=True)
class Payout:
    payout_id: str = ""
    arrival_date: Optional[datetime] = None
    amount: Amount = ABSENT
    status: str = ""

    @property
    def is_empty(self) -> bool:
        return self.payout_id == "" and self.arrival_date is None


EMPTY_PAYOUT = Payout()


@dataclass(frozen=True)
class PayoutLink:
    payment_id: str
    customer_id: str
    timestamp: datetime
    payout_id: str
    status: str
    payout: Payout
    # the exported timestamp stands for [timestamp, timestamp + precision_seconds]
    precision_seconds: int = 0


class ReconciliationKey(NamedTuple):
    customer_id: str
    minute: datetime


def reconciliation_key(customer_id: str, timestamp: datetime, shift_minutes: int = 0) -> ReconciliationKey:
    minute = timestamp.replace(second=0, microsecond=0) + timedelta(minutes=shift_minutes)
    return ReconciliationKey(customer_id, minute)
