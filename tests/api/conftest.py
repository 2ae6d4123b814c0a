"""Pytest fixtures for API tests.

The app is built with the fake verifier and recording sink so no request
leaves the process. The client is entered as a context manager: lifespan
runs, and background notification tasks share the portal's event loop.
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.config import AppConfig


@pytest.fixture
def app(app_config: AppConfig, fake_verifier, recording_sink) -> FastAPI:
    return create_app(app_config, verifier=fake_verifier, sink=recording_sink)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def drain_notifications(client: TestClient, app: FastAPI):
    """Callable that waits for background notification dispatches."""

    def _drain() -> None:
        client.portal.call(app.state.router.drain)

    return _drain
