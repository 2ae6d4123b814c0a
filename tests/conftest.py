"""Root-level pytest fixtures for all tests.

Provides shared fixtures:
- Frozen configuration values
- Sample addresses
- Provider and sink doubles
"""

import pytest

from src.config import AppConfig, CorsConfig, NotificationConfig, ProviderConfig
from src.services.models import AddressRecord
from tests.helpers.fakes import PAGE_MARKER, PROVENANCE_VALUE, FakeVerifier, RecordingSink


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep developer env vars and config files out of tests."""
    for key in ("EASYPOST_API_KEY", "WEBHOOK_URL", "ALLOWED_ORIGINS", "RDIQUOTE_CONFIG_PATH"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def notification_config() -> NotificationConfig:
    return NotificationConfig(
        webhook_url="https://hooks.example.test/notify",
        referer_marker=PAGE_MARKER,
        provenance_header="X-Page-Context",
        provenance_value=PROVENANCE_VALUE,
    )


@pytest.fixture
def app_config(notification_config: NotificationConfig) -> AppConfig:
    return AppConfig(
        provider=ProviderConfig(api_key="EZTK-test-key", base_url="https://easypost.test"),
        notifications=notification_config,
        cors=CorsConfig(allowed_origins=("https://shop.example.com",)),
    )


@pytest.fixture
def residential_address() -> AddressRecord:
    return AddressRecord(street1="123 Main St Apt 4", city="Springfield", state="IL", zip="62701")


@pytest.fixture
def commercial_address() -> AddressRecord:
    return AddressRecord(street1="500 Commerce Blvd", city="Chicago", state="IL", zip="60601")


@pytest.fixture
def fake_verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()
