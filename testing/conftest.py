"""
Shared fixtures: isolated settings, in-memory storage, a controllable
clock and provider services wired to fakes.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.routes import scripts as scripts_routes
from app.calling.dialer import Dialer, get_dialer
from app.calling.script_cache import ScriptCache, get_script_cache
from app.config import get_settings
from app.db.client import get_supabase_client
from app.db.repository import (
    CandidateRepository,
    ConfigRepository,
    MemoryStore,
    get_candidate_repository,
)
from app.main import app
from app.telephony.config import TwilioConfig, get_twilio_config
from app.telephony.service import TwilioService, get_twilio_service
from app.vapi.config import VapiConfig, get_vapi_config
from app.vapi.service import VapiService, get_vapi_service

ENV_VARS = [
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "NEXT_PUBLIC_SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "NEXT_PUBLIC_SUPABASE_ANON_KEY",
    "VAPI_PRIVATE_KEY",
    "VAPI_PUBLIC_KEY",
    "VAPI_PHONE_NUMBER_ID",
    "VAPI_ASSISTANT_ID",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_PHONE_NUMBER",
    "WEBHOOK_SECRET",
]


def _clear_caches() -> None:
    get_settings.cache_clear()
    get_vapi_config.cache_clear()
    get_twilio_config.cache_clear()
    get_supabase_client.cache_clear()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """No credentials from the developer's environment or .env leak into tests."""
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
    _clear_caches()
    scripts_routes.reset_scripts()
    yield
    _clear_caches()
    app.dependency_overrides.clear()


# ══════════════════════════════════════════════════════════
# Storage and clock
# ══════════════════════════════════════════════════════════


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStore:
    """Config store that counts reads and can be told to fail (`fail_reads` fails only reads)."""

    def __init__(self, config=None):
        self.config = config
        self.reads = 0
        self.fail = False
        self.fail_reads = False

    def get(self):
        self.reads += 1
        if self.fail or self.fail_reads:
            raise ConnectionError("database unavailable")
        return self.config

    def save(self, config):
        if self.fail:
            raise ConnectionError("database unavailable")
        self.config = config
        return config


class FakeQuery:
    """One chained supabase query: table(...).select/insert/update/delete ... .execute()."""

    def __init__(self, client: "FakeSupabase", table: str):
        self.client = client
        self.rows = client.tables.setdefault(table, [])
        self.action = "select"
        self.payload = None
        self.filters = []
        self.order_by = None
        self.max_rows = None

    def select(self, *columns):
        self.action = "select"
        return self

    def insert(self, data):
        self.action, self.payload = "insert", data
        return self

    def update(self, data):
        self.action, self.payload = "update", data
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, count):
        self.max_rows = count
        return self

    def execute(self):
        matched = [row for row in self.rows if all(f(row) for f in self.filters)]

        if self.action == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [{**row, **self.client.next_row_fields()} for row in payload]
            self.rows.extend(created)
            return SimpleNamespace(data=created)

        if self.action == "update":
            # Only the given columns change, like PostgREST
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=matched)

        if self.action == "delete":
            self.rows[:] = [row for row in self.rows if row not in matched]
            return SimpleNamespace(data=matched)

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        if self.max_rows is not None:
            matched = matched[: self.max_rows]
        return SimpleNamespace(data=[dict(row) for row in matched])


class FakeSupabase:
    """Minimal stand-in for supabase.Client holding tables in memory."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.counter = 0

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def next_row_fields(self) -> dict:
        self.counter += 1
        return {"id": self.counter, "created_at": f"2026-01-01T00:00:{self.counter:02d}+00:00"}


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def memory() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def candidate_repo(memory) -> CandidateRepository:
    return CandidateRepository(memory=memory)


@pytest.fixture
def config_repo(memory) -> ConfigRepository:
    return ConfigRepository(memory=memory)


@pytest.fixture
def script_cache(config_repo, clock) -> ScriptCache:
    return ScriptCache(config_repo, clock=clock)


# ══════════════════════════════════════════════════════════
# Providers
# ══════════════════════════════════════════════════════════


class VapiRecorder:
    """httpx.MockTransport handler that records requests and replays canned responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 201
        self.body: object = {"id": "vapi_call_1", "status": "queued"}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def vapi_recorder() -> VapiRecorder:
    return VapiRecorder()


@pytest.fixture
def vapi_service(vapi_recorder) -> VapiService:
    config = VapiConfig(
        vapi_private_key="vapi-key",
        vapi_phone_number_id="phone_1",
        vapi_assistant_id="assistant_1",
    )
    return VapiService(config=config, transport=httpx.MockTransport(vapi_recorder))


@pytest.fixture
def twilio_client() -> MagicMock:
    client = MagicMock()
    client.calls.create.return_value = SimpleNamespace(sid="CA123", status="queued")
    return client


@pytest.fixture
def twilio_service(twilio_client) -> TwilioService:
    config = TwilioConfig(
        twilio_account_sid="AC123",
        twilio_auth_token="token",
        twilio_phone_number="+15005550006",
        public_base_url="https://calls.example.com",
    )
    return TwilioService(config=config, client=twilio_client)


@pytest.fixture
def dialer(vapi_service, twilio_service, script_cache) -> Dialer:
    return Dialer(vapi=vapi_service, twilio=twilio_service, script_cache=script_cache)


# ══════════════════════════════════════════════════════════
# API
# ══════════════════════════════════════════════════════════


@pytest.fixture
def client(script_cache, candidate_repo, dialer, vapi_service, twilio_service) -> TestClient:
    app.dependency_overrides[get_script_cache] = lambda: script_cache
    app.dependency_overrides[get_candidate_repository] = lambda: candidate_repo
    app.dependency_overrides[get_dialer] = lambda: dialer
    app.dependency_overrides[get_vapi_service] = lambda: vapi_service
    app.dependency_overrides[get_twilio_service] = lambda: twilio_service
    return TestClient(app)
