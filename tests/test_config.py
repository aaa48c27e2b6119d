import httpx
import pytest
from pydantic import ValidationError

from emojisushi import EmojisushiApi
from emojisushi.core.config import EnvironmentMode, Settings, get_settings
from emojisushi.services.backend import get_transport

from tests.conftest import BASE_URL, RecordingHandler


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    monkeypatch.delenv("EMOJISUSHI_LANG", raising=False)
    monkeypatch.delenv("EMOJISUSHI_ENV_MODE", raising=False)

    settings = Settings(_env_file=None)

    assert settings.env_mode == EnvironmentMode.PRODUCTION
    assert get_transport(settings) is None
    assert settings.lang == "uk"
    assert settings.timeout_seconds is None
    assert settings.verify_ssl is True
    assert settings.menu_category_slug == "menu"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("EMOJISUSHI_ENV_MODE", "DEVELOPMENT")
    monkeypatch.setenv("EMOJISUSHI_LANG", "en")
    monkeypatch.setenv("EMOJISUSHI_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("EMOJISUSHI_API_KEY", "secret")

    settings = get_settings()

    assert settings.is_development
    assert not settings.use_real_services
    assert settings.lang == "en"
    assert settings.timeout_seconds == 2.5
    assert settings.api_key == "secret"


def test_invalid_env_mode_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, env_mode="qa")


def test_empty_lang_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, lang="  ")


def test_production_config_check():
    settings = Settings(_env_file=None, env_mode="production", verify_ssl=False)

    assert settings.validate_production_config() == ["EMOJISUSHI_VERIFY_SSL"]
    assert Settings(_env_file=None, env_mode="development", verify_ssl=False).validate_production_config() == []


def test_transport_follows_environment_mode():
    development = Settings(_env_file=None, env_mode="development")
    staging = Settings(_env_file=None, env_mode="staging")

    assert isinstance(get_transport(development), httpx.MockTransport)
    assert staging.is_staging
    assert get_transport(staging) is None


@pytest.mark.asyncio
async def test_from_settings_in_development_uses_mock_backend():
    settings = Settings(_env_file=None, env_mode="development")

    async with EmojisushiApi.from_settings(settings) as api:
        categories = await api.get_categories()

    assert [c.slug for c in categories.data][:2] == ["menu", "rolls"]


@pytest.mark.asyncio
async def test_from_settings_applies_api_key_and_lang():
    handler = RecordingHandler()
    settings = Settings(
        _env_file=None,
        env_mode="production",
        base_url=BASE_URL,
        lang="ru",
        api_key="secret",
    )

    async with EmojisushiApi.from_settings(settings, transport=httpx.MockTransport(handler)) as api:
        await api.get_spots()

    request = handler.requests[0]
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.url.params["lang"] == "ru"
    assert str(request.url).startswith(BASE_URL)
