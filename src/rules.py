import json
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple

from records import Channel


@dataclass(frozen=True)
class ChannelRule:
    channel: Channel
    methods: Tuple[str, ...]
    requires_payout: bool
    output_file: str


@dataclass(frozen=True)
class Rules:
    match_window_seconds: int
    default_country: str
    vat_unknown_marker: str
    suggestion_window_minutes: int
    min_similarity: int
    top_k_suggestions: int
    report_date_format: str
    channels: Dict[Channel, ChannelRule]

    def channel_for_method(self, method: str) -> Optional[Channel]:
        for rule in self.channels.values():
            if method in rule.methods:
                return rule.channel
        return None


DEFAULT_CHANNELS = {
    "card": {"methods": ["Stripe"], "requires_payout": True, "output_file": "Stripe.csv"},
    "wallet": {"methods": ["PayPal Standard"], "requires_payout": False, "output_file": "Paypal.csv"},
}


def rules_from_dict(raw: Dict[str, Any]) -> Rules:
    channels = {}
    for name, c in raw.get("channels", DEFAULT_CHANNELS).items():
        channel = Channel(name)
        channels[channel] = ChannelRule(
            channel=channel,
            methods=tuple(c.get("methods", [])),
            requires_payout=bool(c.get("requires_payout", False)),
            output_file=c.get("output_file", f"{name}.csv"),
        )

    return Rules(
        match_window_seconds=int(raw.get("match_window_seconds", 60)),
        default_country=str(raw.get("default_country", "DE")),
        vat_unknown_marker=str(raw.get("vat_unknown_marker", "??")),
        suggestion_window_minutes=int(raw.get("suggestion_window_minutes", 10)),
        min_similarity=int(raw.get("min_similarity", 85)),
        top_k_suggestions=int(raw.get("top_k_suggestions", 3)),
        report_date_format=str(raw.get("report_date_format", "%d.%m.%Y")),
        channels=channels,
    )


def load_rules(path: str = "config/recon_config.json") -> Rules:
    with open(path, "r") as f:
        raw: Dict[str, Any] = json.load(f)
    return rules_from_dict(raw)
