"""
External-address resolution for callers.

The store never derives chain addresses itself; it asks a resolver, awaits the
answer, and only then mutates anything. Any resolver failure surfaces as
UpstreamError.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from app.config import ADDRESS_RESOLVER_TIMEOUT, ADDRESS_RESOLVER_URL, logger
from app.core.repositories.exceptions import UpstreamError
from app.core.repositories.models import Caller


class AddressResolver(ABC):
    @abstractmethod
    async def resolve(self, caller: Caller) -> str:
        """Return the caller's external-chain address or raise UpstreamError."""


class ClaimsAddressResolver(AddressResolver):
    """Uses the address asserted in the caller's verified identity token."""

    async def resolve(self, caller: Caller) -> str:
        if not caller.address:
            raise UpstreamError(f"No address linked to user {caller.uid}")
        return caller.address


class HttpAddressResolver(AddressResolver):
    """
    Asks a SIWE provider service for the address linked to a user id.

    Expects ``GET {base_url}/address/{uid}`` to answer ``{"address": "0x..."}``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = ADDRESS_RESOLVER_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def resolve(self, caller: Caller) -> str:
        url = f"{self.base_url}/address/{caller.uid}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.warning("Address lookup failed for %s: %s", caller.uid, e)
            raise UpstreamError(f"Address lookup failed: {e}") from e
        except ValueError as e:
            raise UpstreamError("Address provider returned invalid JSON") from e

        address = payload.get("address") if isinstance(payload, dict) else None
        if not address or not isinstance(address, str):
            raise UpstreamError(f"No address linked to user {caller.uid}")
        return address


def create_address_resolver() -> AddressResolver:
    if ADDRESS_RESOLVER_URL:
        return HttpAddressResolver(ADDRESS_RESOLVER_URL)
    return ClaimsAddressResolver()
