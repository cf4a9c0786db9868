"""
Target resolution for the site stress system.

Before load starts every domain gets a one-time check: a DNS lookup for
information and a probe of https:// then http:// to find a scheme that
answers. A domain where nothing answers is still attacked through a
fallback URL; the failure is recorded on the Domain instead of aborting.
"""

import asyncio
import socket
from typing import Awaitable, Callable, Optional

import httpx

from .models import Domain


LookupFunc = Callable[[str], Awaitable[list[str]]]


async def system_lookup(host: str) -> list[str]:
    """Resolve ``host`` with the system resolver; an empty list when it fails."""
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError):
        return []
    addresses: list[str] = []
    for _family, _type, _proto, _canonname, sockaddr in infos:
        address = sockaddr[0]
        if address not in addresses:
            addresses.append(address)
    return addresses


class TargetResolver:
    """
    Turns canonical domain names into immutable Domain records.

    The probe treats any HTTP response as a working scheme; only transport
    errors make it try the next scheme.
    """

    SCHEMES = ("https", "http")

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        lookup: Optional[LookupFunc] = None,
        simulation_mode: bool = False,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            client: HTTP client used for the scheme probe
            lookup: Async DNS lookup; defaults to the system resolver
            simulation_mode: If True, no DNS or HTTP traffic is generated
        """
        if client is None and not simulation_mode:
            raise ValueError("TargetResolver needs a client outside simulation mode")
        self._client = client
        self._lookup = lookup or system_lookup
        self._simulation_mode = simulation_mode

    async def lookup(self, name: str) -> list[str]:
        """Addresses for the host part of ``name`` (any port is ignored)."""
        if self._simulation_mode:
            return []
        host = name.rsplit(":", 1)[0] if name.count(":") == 1 else name
        return await self._lookup(host)

    async def resolve(self, name: str) -> Domain:
        """Resolve one canonical domain name."""
        if self._simulation_mode:
            return Domain(name=name, target_url=f"https://{name}")

        addresses = tuple(await self.lookup(name))
        errors: list[str] = []
        for scheme in self.SCHEMES:
            url = f"{scheme}://{name}"
            error = await self._probe(url)
            if error is None:
                return Domain(name=name, target_url=url, addresses=addresses)
            errors.append(f"{scheme}: {error}")

        return Domain(
            name=name,
            target_url=f"{self.SCHEMES[0]}://{name}",
            addresses=addresses,
            resolution_error="; ".join(errors),
        )

    async def resolve_all(self, names: list[str]) -> list[Domain]:
        """Resolve every name in order."""
        return [await self.resolve(name) for name in names]

    async def _probe(self, url: str) -> Optional[str]:
        """
        Issue one GET against ``url``.

        Returns:
            None if the server answered, otherwise a short error description
        """
        try:
            await self._client.get(url)
        except httpx.TimeoutException:
            return "timed out"
        except httpx.HTTPError as e:
            return f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
        return None
