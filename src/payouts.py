from collections import defaultdict
from typing import Dict, Iterator, List, Optional

import pandas as pd

from amounts import parse_amount
from mapping import ExportSchema, apply_mapping
from recon_logger import ReconLogger
from records import EMPTY_PAYOUT, Payout, PayoutLink, ReconciliationKey, reconciliation_key
from utils import coerce_timestamp

# exports stamp the same event independently and may round across a minute boundary
FAN_OUT_MINUTES = (-1, 0, 1)


class ReconciliationIndex:
    """Payout links keyed by (customer, minute), each link filed under its minute and both neighbours."""

    def __init__(self, payouts: Dict[str, Payout], links: List[PayoutLink]) -> None:
        self._payouts = dict(payouts)
        self._links = tuple(links)
        self._by_key: Dict[ReconciliationKey, List[PayoutLink]] = defaultdict(list)
        for link in self._links:
            for shift in FAN_OUT_MINUTES:
                self._by_key[reconciliation_key(link.customer_id, link.timestamp, shift)].append(link)

    def candidates(self, key: ReconciliationKey) -> List[PayoutLink]:
        return list(self._by_key.get(key, ()))

    def links(self) -> Iterator[PayoutLink]:
        return iter(self._links)

    @property
    def payout_count(self) -> int:
        return len(self._payouts)

    @property
    def link_count(self) -> int:
        return len(self._links)

    @property
    def key_count(self) -> int:
        return len(self._by_key)


def read_payouts(df: pd.DataFrame, schema: ExportSchema) -> Dict[str, Payout]:
    mapped = apply_mapping(df, schema)
    payouts: Dict[str, Payout] = {}
    for row in mapped.to_dict(orient="records"):
        payout_id = str(row["payout_id"]).strip()
        # last row wins on duplicate ids
        payouts[payout_id] = Payout(
            payout_id=payout_id,
            arrival_date=coerce_timestamp(row["arrival_date"], schema.timestamp_format),
            amount=parse_amount(row["amount"], schema.amount_convention),
            status=str(row["status"]).strip(),
        )
    return payouts


def read_payout_links(df: pd.DataFrame,
                      schema: ExportSchema,
                      payouts: Dict[str, Payout],
                      log: Optional[ReconLogger] = None) -> List[PayoutLink]:
    log = log or ReconLogger()
    mapped = apply_mapping(df, schema)
    links = []
    for row in mapped.to_dict(orient="records"):
        payment_id = str(row["payment_id"]).strip()
        payout_id = str(row["payout_id"]).strip()
        timestamp = coerce_timestamp(row["timestamp"], schema.timestamp_format)

        status = str(row["status"]).strip()
        if status not in schema.accepted_statuses:
            continue

        payout = payouts.get(payout_id)
        if payout is None:
            log.link_without_payout(payout_id, payment_id, timestamp)
            payout = EMPTY_PAYOUT

        links.append(PayoutLink(
            payment_id=payment_id,
            customer_id=str(row["customer_id"]).strip(),
            timestamp=timestamp,
            payout_id=payout_id,
            status=status,
            payout=payout,
            precision_seconds=schema.precision_seconds,
        ))
    return links


def build_payout_index(payout_df: pd.DataFrame,
                       link_df: pd.DataFrame,
                       payout_schema: ExportSchema,
                       link_schema: ExportSchema,
                       log: Optional[ReconLogger] = None) -> ReconciliationIndex:
    log = log or ReconLogger()
    payouts = read_payouts(payout_df, payout_schema)
    links = read_payout_links(link_df, link_schema, payouts, log)
    index = ReconciliationIndex(payouts, links)
    log.index_built(index.payout_count, index.link_count, index.key_count)
    return index
