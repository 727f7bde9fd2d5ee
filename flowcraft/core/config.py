# flowcraft/core/config.py

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, ValidationError, ValidationInfo, ValidatorFunctionWrapHandler, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = logging.getLogger(__name__)

# Shipped in example .env files; never a real credential.
PLACEHOLDER_KEYS = {"your-openai-api-key-here", "your-api-key-here", "sk-..."}


class GeneratorConfig(BaseSettings):
    """
    Explicit configuration value handed to the orchestrator.
    Built once per request from the environment (or directly in tests);
    the orchestrator itself never reads os.environ.

    Environment variables:
      OPENAI_API_KEY          - credential for the OpenAI engine
      FLOWCRAFT_MODEL         - chat model (default: gpt-4o)
      FLOWCRAFT_TEMPERATURE   - sampling temperature 0.0-1.0 (default: 0.3)
      FLOWCRAFT_MAX_TOKENS    - completion limit (default: 4000)
      FLOWCRAFT_USE_MOCK_DATA - use the offline keyword engine (default: false)
      FLOWCRAFT_LOG_LEVEL     - root log level (default: INFO)

    Blank or unparseable values fall back to the default with a warning.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    openai_api_key: SecretStr = Field(default=SecretStr(""), validation_alias="OPENAI_API_KEY", repr=False)
    model: str = Field(default="gpt-4o", validation_alias="FLOWCRAFT_MODEL")
    temperature: float = Field(default=0.3, validation_alias="FLOWCRAFT_TEMPERATURE")
    max_tokens: int = Field(default=4000, gt=0, validation_alias="FLOWCRAFT_MAX_TOKENS")
    use_mock_data: bool = Field(default=False, validation_alias="FLOWCRAFT_USE_MOCK_DATA")
    log_level: str = Field(default="INFO", validation_alias="FLOWCRAFT_LOG_LEVEL")

    @field_validator("temperature")
    @classmethod
    def clamp_temperature(cls, v: float) -> float:
        if v != v:  # NaN
            return 0.3
        return max(0.0, min(1.0, v))

    @field_validator("model", "temperature", "max_tokens", "use_mock_data", "log_level", mode="wrap")
    @classmethod
    def fallback_to_default(cls, v: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        if v is None or (isinstance(v, str) and not v.strip()):
            return default
        try:
            return handler(v)
        except ValidationError:
            logger.warning("Ignoring invalid %s=%r; using default %r", info.field_name, v, default)
            return default

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "GeneratorConfig":
        """
        Read the process environment (and .env), or only `env` when given.
        model_validate skips the settings sources, so an explicit mapping is
        never mixed with the real environment.
        """
        if env is None:
            return cls()
        return cls.model_validate(dict(env))

    @property
    def credential(self) -> str:
        return self.openai_api_key.get_secret_value().strip()


@dataclass(frozen=True)
class ConfigResolution:
    ai_available: bool
    use_mock_data: bool


def has_usable_credential(config: GeneratorConfig) -> bool:
    key = config.credential
    return bool(key) and key.lower() not in PLACEHOLDER_KEYS


def resolve(config: GeneratorConfig) -> ConfigResolution:
    """Pure lookup: is the AI capability usable, and should synthetic data stand in for it."""
    return ConfigResolution(
        ai_available=has_usable_credential(config),
        use_mock_data=config.use_mock_data,
    )


# Ordered, human-readable setup steps for the remediation envelope.
SETUP_INSTRUCTIONS = [
    "1. Add OPENAI_API_KEY to your .env file",
    "2. Restart the FlowCraft server",
    "3. Try generating the workflow again",
]
