"""Pytest configuration and shared fixtures for StatusGate tests.

Fixtures:
- settings: Settings rooted in an isolated temporary data directory
- fake_client: In-memory StatusClient that records every send
- app / http_client: FastAPI app wired to the fake client, and a TestClient
- ready_app: app whose session is already linked with password "abc123"
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from statusgate.config import Settings
from statusgate.storage import ConfigStore, ManagerConfig
from statusgate.transport import ListenerRegistry, MediaPayload
from statusgate.web.app import create_app

MANAGER_PASSWORD = "abc123"


class FakeStatusClient:
    """StatusClient double: records sends, can be told to fail."""

    def __init__(self) -> None:
        self._listeners = ListenerRegistry()
        self.sent: list[tuple[str, MediaPayload | str, str | None]] = []
        self.fail_on_call: int | None = None
        self.started = False
        self.stopped = False

    def on_pairing_code(self, listener: Callable[[str], None]) -> None:
        self._listeners.on_pairing_code(listener)

    def on_ready(self, listener: Callable[[], None]) -> None:
        self._listeners.on_ready(listener)

    def on_pairing_failed(self, listener: Callable[[str], None]) -> None:
        self._listeners.on_pairing_failed(listener)

    def emit_pairing_code(self, code: str) -> None:
        self._listeners.emit_pairing_code(code)

    def emit_ready(self) -> None:
        self._listeners.emit_ready()

    def emit_pairing_failed(self, reason: str) -> None:
        self._listeners.emit_pairing_failed(reason)

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def send_message(
        self,
        target: str,
        content: MediaPayload | str,
        *,
        caption: str | None = None,
    ) -> None:
        if self.fail_on_call is not None and len(self.sent) == self.fail_on_call:
            raise RuntimeError("Evaluation failed: session closed")
        self.sent.append((target, content, caption))


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path / "data",
        log_to_file=False,
        print_qr_to_terminal=False,
        manager_password="",
        broadcast_target="me",
        max_files=15,
        max_file_mb=16,
    )


@pytest.fixture
def fake_client() -> FakeStatusClient:
    return FakeStatusClient()


@pytest.fixture
def app(settings: Settings, fake_client: FakeStatusClient) -> FastAPI:
    return create_app(settings=settings, client=fake_client)


@pytest.fixture
def http_client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as client:
        yield client


@pytest.fixture
def ready_app(settings: Settings, fake_client: FakeStatusClient) -> FastAPI:
    ConfigStore(settings.config_path).save(ManagerConfig(manager_password=MANAGER_PASSWORD))
    app = create_app(settings=settings, client=fake_client)
    fake_client.emit_ready()
    return app


@pytest.fixture
def ready_client(ready_app: FastAPI) -> Iterator[TestClient]:
    with TestClient(ready_app) as client:
        yield client

