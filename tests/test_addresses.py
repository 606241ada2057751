"""
Tests for caller address resolution.

Run with: pytest tests/test_addresses.py -v
"""

import httpx
import pytest

from app.core.addresses import ClaimsAddressResolver, HttpAddressResolver
from app.core.repositories.exceptions import UpstreamError
from app.core.repositories.models import Caller

BASE_URL = "https://siwe.example.com/api"


def resolver_for(handler) -> HttpAddressResolver:
    return HttpAddressResolver(BASE_URL + "/", timeout=1.0, transport=httpx.MockTransport(handler))


class TestClaimsAddressResolver:
    @pytest.mark.asyncio
    async def test_uses_claim(self):
        caller = Caller(uid="alice", address="0xabc")
        assert await ClaimsAddressResolver().resolve(caller) == "0xabc"

    @pytest.mark.asyncio
    async def test_missing_claim(self):
        with pytest.raises(UpstreamError):
            await ClaimsAddressResolver().resolve(Caller(uid="alice"))


class TestHttpAddressResolver:
    @pytest.mark.asyncio
    async def test_success(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"address": "0xdef"})

        assert await resolver_for(handler).resolve(Caller(uid="alice")) == "0xdef"
        assert seen == [f"{BASE_URL}/address/alice"]

    @pytest.mark.asyncio
    async def test_http_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, json={"detail": "down"})

        with pytest.raises(UpstreamError):
            await resolver_for(handler).resolve(Caller(uid="alice"))

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamError):
            await resolver_for(handler).resolve(Caller(uid="alice"))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"address": ""}, {"address": 7}, ["0xdef"]])
    async def test_bad_payload(self, body):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=body)

        with pytest.raises(UpstreamError):
            await resolver_for(handler).resolve(Caller(uid="alice"))

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>")

        with pytest.raises(UpstreamError):
            await resolver_for(handler).resolve(Caller(uid="alice"))
