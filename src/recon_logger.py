"""Logging for the reconciliation run.

Keeps every log statement of the pipeline in one place so the matching and
classification code only reports events.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

import loguru
from loguru import logger

if TYPE_CHECKING:
    from records import Payment


class ReconLogger:
    """Named log events of a reconciliation run."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def payments_loaded(self, source: str, kept: int, skipped: int) -> None:
        self._logger.bind(source=source, kept=kept, skipped=skipped).info(
            "Loaded {} payments from {} ({} rows skipped)", kept, source, skipped
        )

    def row_skipped(self, source: str, reason: str, value: str) -> None:
        self._logger.bind(source=source, reason=reason).debug(
            "Skipping {} row: {} {!r}", source, reason, value
        )

    def country_resolved(self, ip_address: str, country: str, customer_id: str, timestamp: datetime) -> None:
        self._logger.bind(ip=ip_address, country=country).debug(
            "Looked up country code {} from IP address {} for transaction {} {}",
            country,
            ip_address,
            customer_id,
            timestamp,
        )

    def country_overridden(self, billing_country: str, resolved_country: str, customer_id: str) -> None:
        self._logger.bind(billing=billing_country, resolved=resolved_country, customer=customer_id).info(
            "Changed from billing country {} to {} for {}", billing_country, resolved_country, customer_id
        )

    def link_without_payout(self, payout_id: str, payment_id: str, timestamp: datetime) -> None:
        self._logger.bind(payout_id=payout_id, payment_id=payment_id).warning(
            "Transfer id {} no transfer found for payment id {} from date {}", payout_id, payment_id, timestamp
        )

    def index_built(self, payout_count: int, link_count: int, key_count: int) -> None:
        self._logger.bind(payouts=payout_count, links=link_count, keys=key_count).info(
            "Payout index built: {} payouts, {} links, {} keys", payout_count, link_count, key_count
        )

    def payout_missing(self, payment: Payment, reason: str) -> None:
        self._logger.bind(customer=payment.customer_id, reason=reason).warning(
            "No transfer found for payment {} at {} ({}): {}",
            payment.customer_id,
            payment.timestamp,
            payment.channel.value,
            reason,
        )

    def ambiguous_match(self, payment: Payment, payout_ids: List[str], chosen: str) -> None:
        self._logger.bind(customer=payment.customer_id, candidates=payout_ids).warning(
            "Ambiguous transfer for payment {} at {}: candidates {}, using {}",
            payment.customer_id,
            payment.timestamp,
            payout_ids,
            chosen,
        )

    def period_filter(self, month: Optional[int], year: Optional[int]) -> None:
        if month:
            self._logger.info("Limiting output to month and year {} {}", month, year)
        elif year:
            self._logger.info("Limiting output to year {}", year)

    def reports_written(self, outputs_dir: str, files: List[str]) -> None:
        self._logger.bind(outputs_dir=outputs_dir).info("Wrote {} files to {}", len(files), outputs_dir)
