import os
from datetime import datetime

import pytest

from amounts import Amount
from mapping import load_export_schemas
from records import Channel, Payment
from rules import rules_from_dict

CONFIG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config")


class StubResolver:
    def __init__(self, country: str = "AT"):
        self.country = country
        self.calls = []

    def resolve(self, ip_address: str) -> str:
        self.calls.append(ip_address)
        return self.country


@pytest.fixture
def rules():
    return rules_from_dict({})


@pytest.fixture
def schemas():
    return load_export_schemas(os.path.join(CONFIG_DIR, "export_schemas.json"))


@pytest.fixture
def resolver():
    return StubResolver()


@pytest.fixture
def make_payment():
    def _make(**overrides) -> Payment:
        values = dict(
            channel=Channel.CARD,
            transaction_id="",
            timestamp=datetime(2024, 2, 10, 10, 0, 0),
            customer_id="jane@example.com",
            customer_name="Jane Doe",
            amount=Amount(119, 0),
            tax_amount=Amount(19, 0),
            is_eu=True,
            is_private=True,
            is_refund=False,
            country_code="DE",
            tax_number="",
        )
        values.update(overrides)
        return Payment(**values)
    return _make
