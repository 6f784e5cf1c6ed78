from pathlib import Path

import pytest

import firebase_token_verification as m
from firebase_token_verification import config


def test_issuer_for_project():
    assert m.issuer_for_project("my-project") == "https://securetoken.google.com/my-project"

    with pytest.raises(m.ConfigurationError):
        m.issuer_for_project("")


def test_resolve_by_profile_or_name():
    cfg = m.IssuerConfig({"default": "https://a", "admin": "https://b"})

    assert cfg.resolve_issuer(m.DEFAULT_PROFILE) == "https://a"
    assert cfg.resolve_issuer(m.Profile("admin")) == "https://b"
    assert cfg.resolve_issuer("admin") == "https://b"
    assert cfg.profiles == ("admin", "default")


@pytest.mark.parametrize("profiles", [{}, {"default": ""}])
def test_unresolvable_profile_fails_loudly(profiles: dict[str, str]):
    cfg = m.IssuerConfig(profiles)

    with pytest.raises(m.ConfigurationError, match="default"):
        cfg.resolve_issuer(m.DEFAULT_PROFILE)


def test_from_mapping_reads_issuers_and_project_ids():
    cfg = m.IssuerConfig.from_mapping(
        {
            "FIREBASE_AUTH_PROJECT_ID": "main-project",
            "FIREBASE_AUTH_ADMIN_ISSUER": "https://securetoken.google.com/admin-project",
            "FIREBASE_AUTH_MY_APP_PROJECT_ID": "my-app",
            "FIREBASE_AUTH_KEY_STORE": object(),
            "FIREBASE_AUTH_EMPTY_ISSUER": "",
            "OTHER_SETTING": "ignored",
        }
    )

    assert cfg.resolve_issuer(m.DEFAULT_PROFILE) == "https://securetoken.google.com/main-project"
    assert cfg.resolve_issuer(m.Profile("admin")) == "https://securetoken.google.com/admin-project"
    assert cfg.resolve_issuer(m.Profile("my_app")) == "https://securetoken.google.com/my-app"
    assert cfg.profiles == ("admin", "default", "my_app")


def test_explicit_issuer_wins_over_project_id():
    cfg = m.IssuerConfig.from_mapping(
        {
            "FIREBASE_AUTH_ISSUER": "https://issuer.example.com",
            "FIREBASE_AUTH_PROJECT_ID": "ignored-project",
        }
    )

    assert cfg.resolve_issuer(m.DEFAULT_PROFILE) == "https://issuer.example.com"


@pytest.mark.parametrize("key", ["FIREBASE_AUTH_DEFAULT_ISSUER", "FIREBASE_AUTH_DEFAULT_PROJECT_ID"])
def test_default_is_reserved_in_key_names(key: str):
    with pytest.raises(m.ConfigurationError, match=key):
        m.IssuerConfig.from_mapping({"FIREBASE_AUTH_ISSUER": "https://issuer.example.com", key: "x"})


def test_from_env_reads_dotenv_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    # set-then-delete so teardown also removes what load_dotenv adds
    for name in ("FIREBASE_AUTH_ISSUER", "FIREBASE_AUTH_PROJECT_ID"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    env_file = tmp_path / ".env"
    env_file.write_text("FIREBASE_AUTH_PROJECT_ID=dotenv-project\n")

    cfg = m.IssuerConfig.from_env(env_file)

    assert cfg.resolve_issuer(m.DEFAULT_PROFILE) == "https://securetoken.google.com/dotenv-project"


def test_from_env_prefers_existing_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FIREBASE_AUTH_ISSUER", "https://from-env")
    env_file = tmp_path / ".env"
    env_file.write_text("FIREBASE_AUTH_ISSUER=https://from-file\n")

    cfg = config.IssuerConfig.from_env(env_file)

    assert cfg.resolve_issuer(m.DEFAULT_PROFILE) == "https://from-env"
