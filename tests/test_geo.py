import pytest
import requests

from geo import CountryResolver, ResolverError


class FakeResponse:
    def __init__(self, payload=None, status=200, body_error=False):
        self._payload = payload
        self.status_code = status
        self._body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._body_error:
            raise ValueError("not json")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.response


def test_resolve_returns_country():
    session = FakeSession(FakeResponse({"ip": "81.10.0.1", "country": "AT"}))

    resolver = CountryResolver(session=session)

    assert resolver.resolve("81.10.0.1") == "AT"
    assert session.urls == ["https://ipinfo.io/81.10.0.1/json"]


def test_resolve_caches_per_ip():
    session = FakeSession(FakeResponse({"country": "FR"}))
    resolver = CountryResolver("http://geo.local/{ip}", session=session)

    resolver.resolve("1.1.1.1")
    resolver.resolve("1.1.1.1")

    assert session.urls == ["http://geo.local/1.1.1.1"]


@pytest.mark.parametrize("session", [
    FakeSession(error=requests.ConnectionError("down")),
    FakeSession(FakeResponse({"country": "AT"}, status=429)),
    FakeSession(FakeResponse(body_error=True)),
    FakeSession(FakeResponse({"ip": "1.1.1.1", "bogon": True})),
])
def test_resolve_failures_are_fatal(session):
    with pytest.raises(ResolverError):
        CountryResolver(session=session).resolve("1.1.1.1")


@pytest.mark.parametrize("ip_address", ["", "  "])
def test_blank_ip_is_fatal_without_lookup(ip_address):
    session = FakeSession(FakeResponse({"country": "DE"}))

    with pytest.raises(ResolverError):
        CountryResolver(session=session).resolve(ip_address)

    assert session.urls == []
