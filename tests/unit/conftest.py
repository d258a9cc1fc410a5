"""
Pytest configuration for unit tests.

Isolates tests from ARGOCHECK_* variables in the developer's environment
and provides shared Application / config fixtures.
"""
import os

import pytest

from argocheck.config import ServiceConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove ARGOCHECK_* variables so defaults are deterministic."""
    for key in list(os.environ):
        if key.startswith("ARGOCHECK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def service_config():
    """Config with indexing and webhook reconciliation enabled."""
    return ServiceConfig(
        monitor_all_applications=True,
        ensure_webhooks=True,
        webhook_url_base="https://ci.example.com",
        webhook_secret="s3cret",
        url_prefix=""
    )
