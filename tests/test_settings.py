import os

import pytest

import main
from app_settings import ConfigurationError, load_app_settings, parse_origins
from config import load_env_file, read_env_var, read_env_var_optional


def readers(values: dict[str, str]):
    def read(name: str) -> str:
        if name not in values:
            raise KeyError(name)
        if not values[name]:
            raise ValueError(f"{name} is empty")
        return values[name]

    def read_optional(name: str, default: str | None = None) -> str | None:
        try:
            return read(name)
        except (KeyError, ValueError):
            return default

    return read, read_optional


def test_defaults():
    settings = load_app_settings(*readers({"OPENAI_API_KEY": "sk-test"}))

    assert settings.port == 3001
    assert settings.allowed_origins == frozenset()
    assert settings.rate_window_seconds == 60
    assert settings.rate_max_requests == 30
    assert settings.max_body_bytes == 64 * 1024
    assert settings.llm.api_key == "sk-test"
    assert settings.llm.timeout_seconds == 12.0
    assert settings.llm.model == "gpt-5-mini"


def test_overrides():
    settings = load_app_settings(
        *readers(
            {
                "OPENAI_API_KEY": "sk-test",
                "PORT": "8080",
                "ALLOWED_ORIGINS": "https://a.example, https://b.example,,",
                "RATE_LIMIT_MAX_REQUESTS": "5",
                "RATE_LIMIT_WINDOW_SECONDS": "10",
                "LLM_TIMEOUT_SECONDS": "3.5",
                "OPENAI_MODEL": "gpt-4o-mini",
            }
        )
    )

    assert settings.port == 8080
    assert settings.allowed_origins == {"https://a.example", "https://b.example"}
    assert settings.rate_max_requests == 5
    assert settings.rate_window_seconds == 10
    assert settings.llm.timeout_seconds == 3.5
    assert settings.llm.model == "gpt-4o-mini"


@pytest.mark.parametrize("raw", ["abc", "-1", "0"])
def test_invalid_numbers_fall_back_to_defaults(raw):
    settings = load_app_settings(
        *readers({"OPENAI_API_KEY": "sk-test", "PORT": raw, "LLM_TIMEOUT_SECONDS": raw})
    )

    assert settings.port == 3001
    assert settings.llm.timeout_seconds == 12.0


@pytest.mark.parametrize("values", [{}, {"OPENAI_API_KEY": ""}])
def test_missing_api_key_is_fatal(values):
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        load_app_settings(*readers(values))


def test_settings_are_immutable():
    settings = load_app_settings(*readers({"OPENAI_API_KEY": "sk-test"}))

    with pytest.raises(AttributeError):
        settings.port = 1


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, frozenset()),
        ("", frozenset()),
        (" , ", frozenset()),
        ("https://a.example", frozenset({"https://a.example"})),
    ],
)
def test_parse_origins(raw, expected):
    assert parse_origins(raw) == expected


def test_env_readers(monkeypatch):
    monkeypatch.setenv("GATEWAY_TEST_VALUE", "  'quoted'  ")
    monkeypatch.setenv("GATEWAY_TEST_EMPTY", "")
    monkeypatch.delenv("GATEWAY_TEST_MISSING", raising=False)

    assert read_env_var("GATEWAY_TEST_VALUE") == "quoted"
    with pytest.raises(ValueError):
        read_env_var("GATEWAY_TEST_EMPTY")
    with pytest.raises(KeyError):
        read_env_var("GATEWAY_TEST_MISSING")
    assert read_env_var_optional("GATEWAY_TEST_MISSING", "fallback") == "fallback"
    assert read_env_var_optional("GATEWAY_TEST_EMPTY") is None


def test_env_file_does_not_override_environment(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("GATEWAY_TEST_A=from-file\nGATEWAY_TEST_B=from-file\n")
    monkeypatch.setenv("GATEWAY_TEST_A", "from-env")
    monkeypatch.delenv("GATEWAY_TEST_B", raising=False)

    assert load_env_file(env_file) is True

    assert read_env_var("GATEWAY_TEST_A") == "from-env"
    assert read_env_var("GATEWAY_TEST_B") == "from-file"
    os.environ.pop("GATEWAY_TEST_B", None)


def test_main_exits_without_api_key(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    with pytest.raises(SystemExit) as exc_info:
        main.main()

    assert exc_info.value.code == 1
