from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from payouts import ReconciliationIndex
from recon_logger import ReconLogger
from records import Payment, Payout, PayoutLink, reconciliation_key
from report import format_row, header_for
from rules import ChannelRule

NO_LINK = "no_link"
LINK_WITHOUT_PAYOUT = "link_without_payout"


@dataclass(frozen=True)
class Miss:
    payment: Payment
    reason: str


@dataclass(frozen=True)
class AmbiguousMatch:
    payment: Payment
    payout_ids: Tuple[str, ...]
    chosen: str


@dataclass
class ChannelResult:
    channel_rule: ChannelRule
    rows: pd.DataFrame
    misses: List[Miss] = field(default_factory=list)
    ambiguous: List[AmbiguousMatch] = field(default_factory=list)


def seconds_from_link(link: PayoutLink, timestamp: datetime) -> float:
    """Distance from the link's time slot; zero inside [timestamp, timestamp + precision]."""
    offset = (timestamp - link.timestamp).total_seconds()
    if offset < 0:
        return -offset
    return max(0.0, offset - link.precision_seconds)


def _nearest(links: List[PayoutLink], timestamp: datetime) -> Optional[PayoutLink]:
    best = None
    best_diff = None
    for link in links:
        diff = seconds_from_link(link, timestamp)
        if best_diff is None or diff <= best_diff:
            best, best_diff = link, diff
    return best


def find_payout_link(payment: Payment,
                     index: ReconciliationIndex,
                     window_seconds: int) -> Tuple[Optional[PayoutLink], List[PayoutLink]]:
    """
    Best-effort match of a payment to the link of the same customer within the
    time window. Returns the chosen link and every link that was in the window.
    Links with a known payout beat links without one; among those the nearest
    in time wins and later entries win ties.
    """
    key = reconciliation_key(payment.customer_id, payment.timestamp)
    in_window = [l for l in index.candidates(key)
                 if seconds_from_link(l, payment.timestamp) <= window_seconds]

    with_payout = [l for l in in_window if not l.payout.is_empty]
    return _nearest(with_payout or in_window, payment.timestamp), in_window


def in_period(date: Optional[datetime], month: Optional[int], year: Optional[int]) -> bool:
    if month and (date is None or date.month != month):
        return False
    if year and (date is None or date.year != year):
        return False
    return True


def reconcile_channel(payments: Sequence[Payment],
                      index: ReconciliationIndex,
                      channel_rule: ChannelRule,
                      window_seconds: int = 60,
                      date_format: str = "%d.%m.%Y",
                      month: Optional[int] = None,
                      year: Optional[int] = None,
                      log: Optional[ReconLogger] = None) -> ChannelResult:
    """
    Joins the channel's payments to their payouts and formats report rows in input order.
    Payout-bearing channels are filtered on the payout arrival date, the others
    on the payment date.
    """
    if month and not year:
        raise ValueError("A month filter requires a year filter")
    log = log or ReconLogger()

    rows = []
    misses: List[Miss] = []
    ambiguous: List[AmbiguousMatch] = []

    for payment in payments:
        if payment.channel != channel_rule.channel:
            continue

        payout: Optional[Payout] = None
        if channel_rule.requires_payout:
            link, in_window = find_payout_link(payment, index, window_seconds)
            if link is None:
                log.payout_missing(payment, NO_LINK)
                misses.append(Miss(payment, NO_LINK))
                continue

            payout_ids = tuple(dict.fromkeys(l.payout_id for l in in_window))
            if len(payout_ids) > 1:
                log.ambiguous_match(payment, list(payout_ids), link.payout_id)
                ambiguous.append(AmbiguousMatch(payment, payout_ids, link.payout_id))

            if link.payout.is_empty:
                log.payout_missing(payment, LINK_WITHOUT_PAYOUT)
                misses.append(Miss(payment, LINK_WITHOUT_PAYOUT))
                continue
            payout = link.payout
            period_date = payout.arrival_date
        else:
            period_date = payment.timestamp

        if not in_period(period_date, month, year):
            continue

        rows.append(format_row(payment, payout, date_format))

    return ChannelResult(
        channel_rule=channel_rule,
        rows=pd.DataFrame(rows, columns=header_for(channel_rule)),
        misses=misses,
        ambiguous=ambiguous,
    )


def misses_frame(results: Sequence[ChannelResult]) -> pd.DataFrame:
    records = []
    for result in results:
        for miss in result.misses:
            p = miss.payment
            records.append({
                "channel": p.channel.value,
                "timestamp": p.timestamp,
                "customer_id": p.customer_id,
                "customer_name": p.customer_name,
                "transaction_id": p.transaction_id,
                "reason": miss.reason,
            })
    return pd.DataFrame(records, columns=["channel", "timestamp", "customer_id", "customer_name",
                                          "transaction_id", "reason"])
