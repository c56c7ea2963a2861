import sys
from typing import List, Optional, Tuple

from config import ReconConfig
from geo import CountryResolver
from ingest import load_csv
from mapping import get_schema, load_export_schemas
from match import reconcile_channel, misses_frame
from payouts import build_payout_index
from recon_logger import ReconLogger
from report import write_outputs
from rules import load_rules
from standardize import normalize_payments
from suggest import build_suggestions


def parse_period(args: List[str]) -> Tuple[Optional[int], Optional[int]]:
    """No arguments: everything. One: year. Two: month then year."""
    if len(args) > 2:
        raise ValueError(f"Expected at most two arguments (month year), got {len(args)}")
    try:
        numbers = [int(a) for a in args]
    except ValueError:
        raise ValueError(f"Period arguments must be numeric: {args}") from None

    if len(numbers) == 0:
        return None, None
    if len(numbers) == 1:
        return None, numbers[0]
    month, year = numbers
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return month, year


def main(argv: Optional[List[str]] = None, cfg: Optional[ReconConfig] = None) -> None:
    cfg = cfg or ReconConfig()
    rules = load_rules(cfg.rules_path)
    schemas = load_export_schemas(cfg.schemas_path)
    log = ReconLogger()

    month, year = parse_period(sys.argv[1:] if argv is None else argv)
    log.period_filter(month, year)

    resolver = CountryResolver(cfg.resolver_url)
    payments = []
    for path, schema_name in cfg.payment_exports:
        schema = get_schema(schemas, schema_name, "payments")
        payments += normalize_payments(load_csv(path, schema), schema, rules, resolver, log)

    payout_schema = get_schema(schemas, cfg.payouts_schema, "payouts")
    link_schema = get_schema(schemas, cfg.payout_links_schema, "payout_links")
    index = build_payout_index(
        load_csv(cfg.payouts_path, payout_schema),
        load_csv(cfg.payout_links_path, link_schema),
        payout_schema,
        link_schema,
        log,
    )

    results = [
        reconcile_channel(
            payments, index, channel_rule,
            window_seconds=rules.match_window_seconds,
            date_format=rules.report_date_format,
            month=month,
            year=year,
            log=log,
        )
        for channel_rule in rules.channels.values()
    ]

    suggestions = build_suggestions(
        results,
        index,
        window_minutes=rules.suggestion_window_minutes,
        min_similarity=rules.min_similarity,
        top_k=rules.top_k_suggestions,
    )
    unmatched = misses_frame(results)

    summary = {
        "period": {"month": month, "year": year},
        "payments": len(payments),
        "channels": {
            r.channel_rule.channel.value: {
                "rows": int(len(r.rows)),
                "misses": len(r.misses),
                "ambiguous": len(r.ambiguous),
            }
            for r in results
        },
        "payouts": index.payout_count,
        "payout_links": index.link_count,
        "suggestions": int(len(suggestions)),
    }

    files = write_outputs(
        cfg.outputs_dir,
        {r.channel_rule.output_file: r.rows for r in results},
        unmatched,
        suggestions,
        summary,
    )
    log.reports_written(cfg.outputs_dir, files)

    print(f"Wrote outputs to {cfg.outputs_dir}/")
    for r in results:
        print(f"{r.channel_rule.output_file}: {len(r.rows)} rows | Misses: {len(r.misses)} | Ambiguous: {len(r.ambiguous)}")
    print(f"Suggestions: {len(suggestions)} rows")


if __name__ == "__main__":
    main()
