import pytest
from booking_admin.config import get_settings
from pydantic import ValidationError


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("BACKEND_URL", "BUSINESS_TIMEZONE", "DEFAULT_SLOT_CAPACITY", "HTTP_TIMEOUT_SECONDS", "CURRENCY", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.backend_url == "http://localhost:3002/api"
    assert settings.business_timezone == "Asia/Kuala_Lumpur"
    assert settings.default_slot_capacity == 15
    assert settings.currency == "MYR"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BACKEND_URL", "https://admin.example.com/api/")
    monkeypatch.setenv("DEFAULT_SLOT_CAPACITY", "20")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = get_settings()
    assert settings.backend_url == "https://admin.example.com/api"
    assert settings.default_slot_capacity == 20
    assert settings.log_level == "DEBUG"


def test_capacity_must_be_positive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEFAULT_SLOT_CAPACITY", "0")
    with pytest.raises(ValidationError):
        get_settings()
