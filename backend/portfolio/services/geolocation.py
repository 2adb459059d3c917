import ipaddress
import logging
from dataclasses import dataclass, field, asdict
from datetime import timedelta
from typing import Any, Dict, Optional

import httpx
from fastapi import Request

from portfolio.utils.cache import TTLCache

logger = logging.getLogger(__name__)

RESOLVED = "resolved"
CACHED = "cached"
SKIPPED = "skipped"
FAILED = "failed"

_LOCAL_NAMES = {"localhost", "127.0.0.1", "::1"}


@dataclass
class GeoData:
    country: Optional[str] = None
    country_code: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


@dataclass
class GeoLookup:
    """Outcome of a lookup: where the data came from, or why there is none."""
    status: str
    data: GeoData = field(default_factory=GeoData)
    error: Optional[str] = None


def is_private_ip(ip: Optional[str]) -> bool:
    """Loopback, RFC1918, unique-local and link-local addresses never leave the process."""
    if not ip or ip in _LOCAL_NAMES:
        return True
    try:
        addr = ipaddress.ip_address(ip.strip())
    except ValueError:
        # Not an address at all; nothing sensible to look up
        return True
    return addr.is_private or addr.is_loopback or addr.is_link_local or addr.is_unspecified


def _valid_ip(value: str) -> Optional[str]:
    try:
        return str(ipaddress.ip_address(value))
    except ValueError:
        return None


def get_client_ip(request: Request) -> str:
    """First hop of X-Forwarded-For (proxies, load balancers), else the socket peer.

    A first hop that is not an IP address is ignored, since the header is client controlled.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = _valid_ip(forwarded.split(",")[0].strip())
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "0.0.0.0"


class GeoResolver:
    """IP to coarse location, backed by ip-api.com and a TTL cache.

    Only successful lookups are cached, so a transient failure is retried on
    the next request for the same address.
    """

    def __init__(
        self,
        lookup_url: str = "http://ip-api.com/json/{ip}?fields=status,country,countryCode,regionName,city",
        cache_ttl: timedelta = timedelta(hours=24),
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache: Optional[TTLCache] = None,
    ):
        self.lookup_url = lookup_url
        self.timeout = timeout
        self._transport = transport
        self.cache: TTLCache = cache if cache is not None else TTLCache("geo", ttl=cache_ttl)

    async def _fetch(self, ip: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.lookup_url.format(ip=ip))
        response.raise_for_status()
        return response.json()

    async def lookup(self, ip: str) -> GeoLookup:
        if is_private_ip(ip):
            return GeoLookup(status=SKIPPED)

        cached = self.cache.get(ip)
        if cached is not None:
            return GeoLookup(status=CACHED, data=cached)

        try:
            payload = await self._fetch(ip)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Geolocation lookup failed for {ip}: {str(e)}")
            return GeoLookup(status=FAILED, error=str(e))

        if not isinstance(payload, dict):
            logger.warning(f"Geolocation lookup returned an unexpected body for {ip}")
            return GeoLookup(status=FAILED, error="unexpected response body")

        if payload.get("status") != "success":
            logger.warning(f"Geolocation lookup unsuccessful for {ip}: {payload.get('message', 'unknown')}")
            return GeoLookup(status=FAILED, error=payload.get("message") or "unsuccessful lookup")

        data = GeoData(
            country=payload.get("country"),
            country_code=payload.get("countryCode"),
            city=payload.get("city"),
            region=payload.get("regionName"),
        )
        self.cache.set(ip, data)
        return GeoLookup(status=RESOLVED, data=data)

    async def resolve(self, ip: str) -> GeoData:
        """Location for an address; all fields None when unknown for any reason."""
        return (await self.lookup(ip)).data

    def prune_expired(self) -> int:
        return self.cache.prune_expired()
