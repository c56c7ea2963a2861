from typing import Dict, Optional

import requests

IPINFO_URL = "https://ipinfo.io/{ip}/json"


class ResolverError(RuntimeError):
    pass


class CountryResolver:
    """Looks up the two-letter country code of an IP address (ipinfo-style JSON API)."""

    def __init__(self, url_template: str = IPINFO_URL, session: Optional[requests.Session] = None):
        self._url_template = url_template
        self._session = session or requests.Session()
        self._cache: Dict[str, str] = {}

    def resolve(self, ip_address: str) -> str:
        ip_address = str(ip_address).strip()
        if ip_address == "":
            # an empty path segment makes the service answer with the caller's own location
            raise ResolverError("No IP address to look up")
        if ip_address in self._cache:
            return self._cache[ip_address]

        url = self._url_template.format(ip=ip_address)
        try:
            resp = self._session.get(url)
            resp.raise_for_status()
            record = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise ResolverError(f"Country lookup for {ip_address!r} failed: {e}") from e

        country = record.get("country") if isinstance(record, dict) else None
        if not country:
            raise ResolverError(f"No country in lookup response for {ip_address!r}")

        self._cache[ip_address] = country
        return country
