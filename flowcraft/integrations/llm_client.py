# flowcraft/integrations/llm_client.py

import json
import logging
from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from flowcraft.core.errors import ConfigurationError, EngineError
from flowcraft.utils.helpers import extract_json_object

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Thin async wrapper around OpenAI chat completions.
    One instance per generation session; SDK errors propagate to the caller.
    """

    def __init__(self, api_key: str, model: str = "gpt-4o",
                 temperature: float = 0.3, max_tokens: int = 4000):
        if not api_key:
            raise ConfigurationError("OpenAI API key not configured")
        self._client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def chat(self, prompt: str, system: Optional[str] = None, json_mode: bool = False) -> str:
        """
        Send a single-turn chat completion and return the text.
        """
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(**kwargs)
        return (response.choices[0].message.content or "").strip()

    async def chat_json(self, prompt: str, system: Optional[str] = None) -> Dict[str, Any]:
        """
        Ask for a JSON object and parse it. Tolerates prose around the object.
        """
        content = await self.chat(prompt, system=system, json_mode=True)
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError:
            parsed = extract_json_object(content)
        if not isinstance(parsed, dict):
            logger.warning("Model returned no JSON object (%d chars)", len(content))
            raise EngineError("Malformed model output: expected a JSON object")
        return parsed
