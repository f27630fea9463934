# tests/conftest.py
"""
Shared fixtures: a mock compute service (httpx.MockTransport) and a
throwaway SQLite log store, wired into a fresh app per test.
"""
import asyncio

import httpx
import pytest
from sqlalchemy import select

from relay.app import create_app
from relay.compute_client import ComputeClient
from relay.config import Settings
from relay.db import ProcessLogStore
from relay.models import ProcessLog

COMPUTE_URL = "http://go-server:8086/compute"


class FakeCompute:
    """Programmable compute service. Counts calls."""

    def __init__(self, body=None, status_code=200, delay=0.0, exc=None):
        self.body = {"time": 0.0123, "operation": "prime_calculation"} if body is None else body
        self.status_code = status_code
        self.delay = delay
        self.exc = exc
        self.calls = 0
        self.http_clients = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc(f"simulated {self.exc.__name__}", request=request)
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    def client(self) -> ComputeClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self))
        self.http_clients.append(http)
        return ComputeClient(COMPUTE_URL, http=http)

    async def aclose(self):
        for http in self.http_clients:
            await http.aclose()
        self.http_clients = []


async def fetch_logs(store: ProcessLogStore):
    """All process_logs rows as dicts, ordered by process_number."""
    async with store.sessionmaker() as session:
        result = await session.execute(select(ProcessLog).order_by(ProcessLog.process_number))
        logs = result.scalars().all()
    return [
        {
            "process_number": r.process_number,
            "time": r.time.isoformat(),
            "processing_time": r.processing_time,
        }
        for r in logs
    ]


@pytest.fixture
def store(tmp_path):
    return ProcessLogStore(f"sqlite+aiosqlite:///{tmp_path / 'relay_test.db'}")


@pytest.fixture
def compute():
    """Factory for FakeCompute instances; their HTTP clients are closed at teardown."""
    created = []

    def _make(**kwargs):
        fake = FakeCompute(**kwargs)
        created.append(fake)
        return fake

    yield _make

    async def _close_all():
        for fake in created:
            await fake.aclose()

    asyncio.run(_close_all())


@pytest.fixture
def make_app(store):
    """Factory: app wired to the given compute fake and (by default) the SQLite store."""
    def _make(compute: FakeCompute, log_store: ProcessLogStore = None, init_db: bool = True):
        return create_app(Settings(init_db=init_db), store=log_store or store, compute=compute.client())
    return _make


@pytest.fixture
def rows(store):
    """Read process_logs back. Call after the TestClient has shut down."""
    def _rows(log_store: ProcessLogStore = None):
        target = log_store or store

        async def _read():
            try:
                return await fetch_logs(target)
            finally:
                await target.dispose()

        return asyncio.run(_read())
    return _rows
