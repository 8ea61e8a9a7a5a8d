import os
import sys

import httpx
import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from client import OutliersClient
from config import settings
from services.detect_service import detect_service

TEST_BASE_URL = "http://testserver"


def asgi_transport() -> httpx.ASGITransport:
    """In-process transport that serves requests straight from the FastAPI app."""
    import main

    return httpx.ASGITransport(app=main.app)


def make_client(**kwargs) -> OutliersClient:
    kwargs.setdefault("transport", asgi_transport())
    return OutliersClient(base_url=TEST_BASE_URL, **kwargs)


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Pin the knobs tests depend on, whatever the environment says."""
    monkeypatch.setattr(settings, "outlier_threshold_sigma", 2.0)
    monkeypatch.setattr(settings, "client_retry_attempts", 1)
    monkeypatch.setattr(settings, "client_retry_delay", 0.0)
    monkeypatch.setattr(detect_service, "threshold_sigma", 2.0)
    monkeypatch.setattr(detect_service, "max_request_bytes", 16 * 1024 * 1024)
    yield
