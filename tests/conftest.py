"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory store driven by a fake clock, so
timestamps are deterministic and nothing touches Firebase.
"""

import os
from typing import Dict, Optional

# Test environment (must be set before importing app modules)
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi import Header, HTTPException, status

from app.core.addresses import AddressResolver
from app.core.repositories.backends import InMemoryMapFactory
from app.core.repositories.exceptions import UpstreamError
from app.core.repositories.models import Caller
from app.core.store import SocialStore

ALICE_ADDRESS = "0xa11ce00000000000000000000000000000000001"
BOB_ADDRESS = "0xb0b0000000000000000000000000000000000002"

ADDRESSES = {
    "alice": ALICE_ADDRESS,
    "bob": BOB_ADDRESS,
}


class FakeClock:
    """Callable clock; returns ``now`` and optionally advances after each read."""

    def __init__(self, start: int = 1_700_000_000, step: int = 0):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value

    def set(self, value: int) -> None:
        self.now = value

    def advance(self, seconds: int = 1) -> None:
        self.now += seconds


class StaticAddressResolver(AddressResolver):
    """Resolves from a fixed uid -> address table and counts lookups."""

    def __init__(self, addresses: Optional[Dict[str, str]] = None):
        self.addresses = dict(addresses if addresses is not None else ADDRESSES)
        self.calls = 0

    async def resolve(self, caller: Caller) -> str:
        self.calls += 1
        try:
            return self.addresses[caller.uid]
        except KeyError:
            raise UpstreamError(f"No address linked to user {caller.uid}")


# ============== Store Fixtures ==============

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def resolver() -> StaticAddressResolver:
    return StaticAddressResolver()


@pytest.fixture
def maps() -> InMemoryMapFactory:
    return InMemoryMapFactory()


@pytest.fixture
def store(maps, clock, resolver) -> SocialStore:
    return SocialStore(maps=maps, clock=clock, address_resolver=resolver)


@pytest.fixture
def alice() -> Caller:
    return Caller(uid="alice", address=ALICE_ADDRESS)


@pytest.fixture
def bob() -> Caller:
    return Caller(uid="bob", address=BOB_ADDRESS)


@pytest.fixture
def carol() -> Caller:
    """A caller with no linked address."""
    return Caller(uid="carol")


# ============== API Fixtures ==============

async def fake_current_caller(authorization: Optional[str] = Header(None)) -> Caller:
    """Treats ``Authorization: Bearer <uid>`` as already verified."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Authorization header")
    uid = authorization.split(" ", 1)[1]
    return Caller(uid=uid, address=ADDRESSES.get(uid))


def auth(uid: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {uid}"}


@pytest.fixture
def client(store):
    """TestClient over an app serving the test store."""
    from fastapi.testclient import TestClient

    from app.core.firebase_client import get_current_caller
    from app.main import create_app

    app = create_app(store)
    app.dependency_overrides[get_current_caller] = fake_current_caller
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
