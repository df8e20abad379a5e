"""Shared fixtures for the FileShare test suite."""

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes import init_routes, router, upload_router
from discovery.models import ServiceAnnouncement
from discovery.registry import PeerRegistry

LOCAL_NAME = "Alice-PC"
LOCAL_PORT = 5050


@pytest.fixture
def registry():
    """A fresh, empty registry per test."""
    return PeerRegistry()


@pytest.fixture
def announce():
    """Factory for announcements with sensible defaults."""

    def _announce(**fields) -> ServiceAnnouncement:
        payload = {
            "name": "Bob-PC",
            "host": "bob.local",
            "port": LOCAL_PORT,
            "addresses": ["10.0.0.5"],
            "txt": {"device": "Bob-PC"},
        }
        payload.update(fields)
        return ServiceAnnouncement.from_payload(payload)

    return _announce


@pytest.fixture
def make_client(registry, tmp_path):
    """Build a TestClient around the API routes.

    ``handler`` (optional) answers the outbound uploads made by /api/send,
    so no request ever leaves the test process.
    """

    def _make(handler=None) -> TestClient:
        transfer_client = None
        if handler is not None:
            transfer_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        init_routes(registry, LOCAL_NAME, LOCAL_PORT, str(tmp_path), transfer_client)

        app = FastAPI()
        app.include_router(router)
        app.include_router(upload_router)
        return TestClient(app)

    return _make
