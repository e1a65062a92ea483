"""
Pytest configuration and fixtures for vaultstage tests.

Provides an in-memory fake vault behind httpx.MockTransport and wired-up
consoles.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from vaultstage.client import VaultStage
from vaultstage.config import StageConfig
from vaultstage.console import StagingConsole
from vaultstage.notifications import Notifier
from vaultstage.storage import TOKEN_KEY, URL_KEY, MemoryStorage

VAULT_URL = "https://pvwa.test"
TOKEN = "test-token-123"


class FakeVault:
    """
    Records every request and answers from configured routes.

    Unconfigured routes answer 200 with ``{}``.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, Any]] = []
        self.headers: List[httpx.Headers] = []
        self._routes: Dict[Tuple[str, str], List[Tuple[int, Any]]] = {}

    def respond(self, method: str, path: str, status: int = 200, json_body: Any = None) -> None:
        """Queue a response; the last one queued for a route repeats."""
        self._routes.setdefault((method.upper(), path), []).append((status, json_body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]
        body = json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, body))
        self.headers.append(request.headers)

        responses = self._routes.get((request.method, path))
        if not responses:
            return httpx.Response(200, json={})
        status, payload = responses.pop(0) if len(responses) > 1 else responses[0]
        if payload is None:
            return httpx.Response(status)
        if isinstance(payload, (bytes, str)):
            return httpx.Response(status, content=payload)
        return httpx.Response(status, json=payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self, method: Optional[str] = None) -> List[str]:
        return [p for m, p, _ in self.calls if method is None or m == method]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep VAULTSTAGE_* variables from the environment out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("VAULTSTAGE_"):
            monkeypatch.delenv(key)


@pytest.fixture
def fake_vault():
    """Create a fake vault."""
    return FakeVault()


@pytest.fixture
def stage_config(tmp_path):
    """Create a test StageConfig."""
    return StageConfig(_env_file=None, state_dir=tmp_path)


@pytest.fixture
def debug_config(tmp_path):
    """Create a StageConfig with debug mode on."""
    return StageConfig(_env_file=None, state_dir=tmp_path, debug=True)


@pytest.fixture
def storage():
    """Create empty in-memory client storage."""
    return MemoryStorage()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
async def stage(fake_vault, stage_config):
    """Create a VaultStage talking to the fake vault."""
    instance = await VaultStage.create(
        token=TOKEN,
        vault_url=VAULT_URL,
        transport=fake_vault.transport,
        _env_file=None,
        state_dir=stage_config.state_dir,
    )
    yield instance
    await instance.close()


@pytest.fixture
def console(stage_config, storage, notifier, fake_vault):
    """Create a logged-out console."""
    return StagingConsole(stage_config, storage, notifier, transport=fake_vault.transport)


@pytest.fixture
def connected_console(stage_config, notifier, fake_vault):
    """Create a console with a restored session."""
    storage = MemoryStorage({TOKEN_KEY: TOKEN, URL_KEY: VAULT_URL})
    instance = StagingConsole(stage_config, storage, notifier, transport=fake_vault.transport)
    assert instance.restore_session()
    return instance


@pytest.fixture
def server_safes():
    """Safes as the vault lists them."""
    return [
        {
            "safeName": "Finance-01",
            "managingCPM": "PasswordManager",
            "numberOfVersionsRetention": 10,
            "description": "Finance team",
        },
        {
            "safeName": "Legacy-02",
            "managingCPM": "PasswordManager",
            "numberOfDaysRetention": 30,
        },
        {"safeName": "Ops-03", "numberOfVersionsRetention": 5},
    ]


@pytest.fixture
def server_accounts():
    """Accounts as the vault lists them."""
    return [
        {
            "id": "12_3",
            "name": "db-admin",
            "userName": "dbadmin",
            "address": "db01.example.com",
            "platformId": "WinDomain",
            "safeName": "Finance-01",
            "secretManagement": {"automaticManagementEnabled": True},
        },
        {
            "id": "12_4",
            "name": "web-svc",
            "userName": "websvc",
            "address": "web01.example.com",
            "platformId": "UnixSSH",
            "safeName": "Ops-03",
            "secretManagement": {
                "automaticManagementEnabled": False,
                "manualManagementReason": "Legacy host",
            },
        },
    ]
