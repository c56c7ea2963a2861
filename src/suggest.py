from typing import Sequence

import pandas as pd
from rapidfuzz import fuzz

from match import ChannelResult, NO_LINK
from payouts import ReconciliationIndex
from utils import normalize_text

COLUMNS = ["payment_timestamp", "customer_id", "rank", "link_payment_id", "link_customer_id",
           "link_timestamp", "payout_id", "similarity", "time_diff_seconds", "reason"]


def build_suggestions(results: Sequence[ChannelResult],
                      index: ReconciliationIndex,
                      window_minutes: int,
                      min_similarity: int,
                      top_k: int) -> pd.DataFrame:
    """
    For payments that found no payout link, lists the closest link rows by
    customer similarity and time distance so a reviewer can pair them by hand.
    """
    misses = [m.payment for r in results for m in r.misses if m.reason == NO_LINK]
    links = list(index.links())
    if not misses or not links:
        return pd.DataFrame(columns=COLUMNS)

    cands = pd.DataFrame({
        "link_payment_id": [l.payment_id for l in links],
        "link_customer_id": [l.customer_id for l in links],
        "link_timestamp": [l.timestamp for l in links],
        "payout_id": [l.payout_id for l in links],
    })
    cands["customer_norm"] = cands["link_customer_id"].apply(normalize_text)

    rows = []
    for p in misses:
        candidates = cands.copy()

        # time window filter
        candidates["time_diff_seconds"] = (candidates["link_timestamp"] - p.timestamp).abs().dt.total_seconds()
        candidates = candidates.loc[candidates["time_diff_seconds"] <= window_minutes * 60].copy()
        if candidates.empty:
            continue

        # customer similarity
        customer_norm = normalize_text(p.customer_id)
        candidates["similarity"] = candidates["customer_norm"].apply(lambda s: fuzz.ratio(customer_norm, s))
        candidates = candidates.loc[candidates["similarity"] >= min_similarity].copy()
        if candidates.empty:
            continue

        candidates = candidates.sort_values(["similarity", "time_diff_seconds"],
                                            ascending=[False, True]).head(top_k)

        rank = 1
        for _, c in candidates.iterrows():
            rows.append({
                "payment_timestamp": p.timestamp,
                "customer_id": p.customer_id,
                "rank": rank,
                "link_payment_id": c["link_payment_id"],
                "link_customer_id": c["link_customer_id"],
                "link_timestamp": c["link_timestamp"],
                "payout_id": c["payout_id"],
                "similarity": int(round(c["similarity"])),
                "time_diff_seconds": int(c["time_diff_seconds"]),
                "reason": f"sim={int(round(c['similarity']))}; time_diff={int(c['time_diff_seconds'])}s",
            })
            rank += 1

    return pd.DataFrame(rows, columns=COLUMNS)
