from datetime import timedelta

from pydantic import ValidationError
import pytest

from authforge_api.core.config import CredentialPolicy, Settings, get_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("AF_AUTH_JWT_SECRET", "from-env-secret")
    monkeypatch.setenv("AF_AUTH_JWT_ALGORITHM", "hs384")
    monkeypatch.setenv("AF_AUTH_ACCESS_TOKEN_TTL_SECONDS", "900")
    monkeypatch.setenv("AF_PUBLIC_BASE_URL", "https://auth.example.com/")

    settings = get_settings()

    assert settings.auth_jwt_secret == "from-env-secret"
    assert settings.auth_jwt_algorithm == "HS384"
    assert settings.auth_access_token_ttl_seconds == 900
    assert settings.public_base_url == "https://auth.example.com"
    assert get_settings() is settings


def test_defaults_match_documented_lifetimes():
    settings = Settings()

    assert settings.auth_access_token_ttl_seconds == 24 * 3600
    assert settings.auth_refresh_token_ttl_seconds == 168 * 3600
    assert settings.api_prefix == "/api/v1"


@pytest.mark.parametrize("algorithm", ["RS256", "none", "ES256"])
def test_asymmetric_and_none_algorithms_rejected(algorithm):
    with pytest.raises(ValidationError):
        Settings(auth_jwt_algorithm=algorithm)


def test_non_positive_ttl_rejected():
    with pytest.raises(ValidationError):
        Settings(auth_access_token_ttl_seconds=0)


def test_credential_policy_is_immutable_snapshot():
    settings = Settings(
        auth_jwt_secret="k",
        auth_access_token_ttl_seconds=60,
        auth_refresh_token_ttl_seconds=120,
        auth_password_hash_iterations=10,
    )

    policy = settings.credential_policy()

    assert policy == CredentialPolicy(
        jwt_secret="k",
        jwt_algorithm="HS256",
        access_ttl=timedelta(seconds=60),
        refresh_ttl=timedelta(seconds=120),
        password_hash_iterations=10,
    )
    with pytest.raises(AttributeError):
        policy.jwt_secret = "changed"  # type: ignore[misc]
