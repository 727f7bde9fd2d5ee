# tests/test_config.py

import pytest

from flowcraft.core.config import GeneratorConfig, has_usable_credential, resolve


def test_from_env_reads_every_setting():
    config = GeneratorConfig.from_env({
        "OPENAI_API_KEY": " sk-live ",
        "FLOWCRAFT_MODEL": "gpt-4o-mini",
        "FLOWCRAFT_TEMPERATURE": "0.7",
        "FLOWCRAFT_MAX_TOKENS": "2000",
        "FLOWCRAFT_USE_MOCK_DATA": "true",
        "FLOWCRAFT_LOG_LEVEL": "DEBUG",
    })

    assert config.credential == "sk-live"
    assert config.model == "gpt-4o-mini"
    assert config.temperature == 0.7
    assert config.max_tokens == 2000
    assert config.use_mock_data is True
    assert config.log_level == "DEBUG"


def test_defaults_when_environment_is_empty():
    config = GeneratorConfig.from_env({})

    assert config.credential == ""
    assert config.model == "gpt-4o"
    assert config.temperature == 0.3
    assert config.use_mock_data is False
    assert resolve(config).ai_available is False


def test_secret_is_not_in_repr():
    config = GeneratorConfig.from_env({"OPENAI_API_KEY": "sk-very-secret"})
    assert "sk-very-secret" not in repr(config)


def test_temperature_is_clamped():
    assert GeneratorConfig.from_env({"FLOWCRAFT_TEMPERATURE": "3"}).temperature == 1.0
    assert GeneratorConfig.from_env({"FLOWCRAFT_TEMPERATURE": "nan"}).temperature == 0.3


@pytest.mark.parametrize("name,value,field,default", [
    ("FLOWCRAFT_TEMPERATURE", "warm", "temperature", 0.3),
    ("FLOWCRAFT_MAX_TOKENS", "lots", "max_tokens", 4000),
    ("FLOWCRAFT_MAX_TOKENS", "0", "max_tokens", 4000),
    ("FLOWCRAFT_USE_MOCK_DATA", "maybe", "use_mock_data", False),
    ("FLOWCRAFT_MODEL", "  ", "model", "gpt-4o"),
])
def test_invalid_values_fall_back_to_defaults(name, value, field, default):
    config = GeneratorConfig.from_env({name: value})
    assert getattr(config, field) == default


def test_process_environment_is_read(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("FLOWCRAFT_TEMPERATURE", "warm")
    monkeypatch.setenv("FLOWCRAFT_MAX_TOKENS", "1500")

    config = GeneratorConfig.from_env()
    assert config.credential == "sk-env"
    assert config.temperature == 0.3
    assert config.max_tokens == 1500


def test_explicit_mapping_ignores_process_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    assert GeneratorConfig.from_env({}).credential == ""


@pytest.mark.parametrize("key,usable", [
    ("sk-real", True),
    ("", False),
    ("   ", False),
    ("your-openai-api-key-here", False),
])
def test_credential_usability(key, usable):
    config = GeneratorConfig.from_env({"OPENAI_API_KEY": key})
    assert has_usable_credential(config) is usable


def test_resolution_keeps_mock_flag_separate():
    resolution = resolve(GeneratorConfig.from_env({"FLOWCRAFT_USE_MOCK_DATA": "1"}))
    assert resolution.ai_available is False
    assert resolution.use_mock_data is True
