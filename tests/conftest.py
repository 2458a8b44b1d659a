"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings.
"""
import asyncio
import os
import tempfile
from pathlib import Path

_DB_DIR = tempfile.mkdtemp(prefix="cs2stats-tests-")

# Mandatory secret key for settings validation
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"
os.environ["DATABASE__URL"] = f"sqlite+aiosqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ["REALTIME_BROKER"] = "inmemory"
os.environ["REDIS__URL"] = ""
os.environ["NOTIFY_EMAILS"] = ""

import pytest  # noqa: E402
from starlette.websockets import WebSocketState  # noqa: E402


class FakeWebSocket:
    """Records text frames; ``fail=True`` makes every send raise."""

    def __init__(self, name: str = "ws", *, fail: bool = False, gate: asyncio.Event = None):
        self.name = name
        self.fail = fail
        self.gate = gate
        self.sent = []
        self.closed_with = None
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED

    async def send_text(self, data: str) -> None:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError(f"{self.name} is broken")
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed_with = code
        self.client_state = WebSocketState.DISCONNECTED
        self.application_state = WebSocketState.DISCONNECTED

    def messages(self):
        import json

        return [json.loads(item) for item in self.sent]

    def __repr__(self) -> str:
        return f"FakeWebSocket({self.name})"


@pytest.fixture
def fake_ws_factory():
    return FakeWebSocket


@pytest.fixture
def client():
    """TestClient against a freshly created schema."""
    from fastapi.testclient import TestClient

    from infrastructure.database import drop_tables
    from main import app

    asyncio.run(drop_tables())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_token():
    """Create a user with the given role and return a bearer token for it."""
    from application.services.token_service import TokenService
    from application.services.user_service import UserApplicationService
    from domain.user.entity import UserRole
    from infrastructure.unit_of_work import SQLAlchemyUnitOfWork

    def _make(user_id: str, role: str = "user") -> str:
        service = UserApplicationService(uow_factory=SQLAlchemyUnitOfWork)
        user = asyncio.run(service.upsert_user(user_id, email=f"{user_id}@example.com", role=UserRole(role)))
        return TokenService().create_access_token(user)

    return _make
