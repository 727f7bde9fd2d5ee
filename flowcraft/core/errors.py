# flowcraft/core/errors.py

from __future__ import annotations
from typing import Optional, Type, Union

import openai


class GenerationError(Exception):
    """Base class for every failure the generator knows how to name."""


class ValidationError(GenerationError):
    """Prompt (or edited blueprint) is missing or blank."""


class ConfigurationError(GenerationError):
    """Credential absent, or rejected by the engine."""


class EngineError(GenerationError):
    """Any other engine failure: timeout, malformed output, tool failure."""


class EnvelopeInvariantViolation(GenerationError):
    """Engine claimed success but the workflow graph is inconsistent."""


class ReviewStateError(GenerationError):
    """Blueprint review transition not allowed from the current state."""


# Text the engine (or SDK) produces when the credential is the problem.
CREDENTIAL_FAILURE_PATTERNS = (
    "openai api key",
    "api key not found",
    "token provider not found",
    "incorrect api key",
    "invalid_api_key",
    "api key not configured",
)

_KIND_TO_ERROR = {
    "configuration": ConfigurationError,
    "engine": EngineError,
}


def is_credential_failure(text: Optional[str]) -> bool:
    t = (text or "").lower()
    return any(p in t for p in CREDENTIAL_FAILURE_PATTERNS)


def classify_failure(
    error: Union[BaseException, str, None],
    kind: Optional[str] = None,
) -> Type[GenerationError]:
    """
    Decide whether a failure is a configuration problem or an engine problem.
    Typed signals win: an explicit `kind` tag from the engine, our own
    exception classes, then OpenAI's auth errors. Only plain text falls back
    to the pattern list above.
    """
    if kind in _KIND_TO_ERROR:
        return _KIND_TO_ERROR[kind]

    if isinstance(error, ConfigurationError):
        return ConfigurationError
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ConfigurationError
    if isinstance(error, EngineError):
        return EngineError

    text = error if isinstance(error, str) else (str(error) if error else "")
    if is_credential_failure(text):
        return ConfigurationError
    return EngineError
