"""AI provider client.

Uses LiteLLM to reach Gemini or Groq. The client returns raw text; turning
that text into structured data is the caller's job (see ``parsing``).
"""

from __future__ import annotations

import logging
import os
import warnings
from typing import Any

from litellm import acompletion
from litellm.exceptions import Timeout

from careerbridge.ai.config import AIConfig, get_ai_config
from careerbridge.config.settings import AIProvider
from careerbridge.errors import InvalidInput, UpstreamUnavailable, logged
from careerbridge.utils.validation import parse_choice

logger = logging.getLogger(__name__)

warnings.filterwarnings(
    "ignore",
    message=r"(?s)^Pydantic serializer warnings:.*",
    category=UserWarning,
)

# LiteLLM loads `.env` into the process environment in DEV mode; keep it out.
os.environ.setdefault("LITELLM_MODE", "PRODUCTION")


class AIClient:
    """Send a prompt to Gemini or Groq and return the response text.

    Failures (missing key, timeout, network, quota, empty answer) raise
    ``UpstreamUnavailable``. Calls are never retried here; retrying is the
    caller's decision.
    """

    def __init__(self, config: AIConfig | None = None) -> None:
        self.config = config or get_ai_config()

    def resolve_provider(self, provider: AIProvider | str) -> AIProvider:
        """Validate a provider name."""
        try:
            resolved = parse_choice(AIProvider, provider, "AI provider")
        except InvalidInput as e:
            raise logged(logger, e) from None
        if resolved is None:
            raise logged(logger, InvalidInput("AI provider is required"))
        return resolved

    def is_configured(self, provider: AIProvider | str) -> bool:
        """Return True if an API key is set for ``provider``."""
        return self._api_key(self.resolve_provider(provider)) is not None

    def _api_key(self, provider: AIProvider) -> str | None:
        if provider == AIProvider.GEMINI:
            return self.config.gemini_api_key
        return self.config.groq_api_key

    def _get_model_name(self, provider: AIProvider) -> str:
        """Return provider-qualified model name for LiteLLM routing."""
        model = (
            self.config.gemini_model
            if provider == AIProvider.GEMINI
            else self.config.groq_model
        )
        if model.startswith(f"{provider.value}/"):
            return model
        return f"{provider.value}/{model}"

    async def invoke(
        self,
        prompt: str,
        provider: AIProvider | str,
        *,
        temperature: float | None = None,
        json_mode: bool = True,
    ) -> str:
        """Send ``prompt`` to ``provider`` and return the raw response text."""
        resolved = self.resolve_provider(provider)
        api_key = self._api_key(resolved)
        if not api_key:
            raise logged(
                logger,
                UpstreamUnavailable(f"{resolved.value} API key not configured"),
            )

        logger.info("Calling %s (%s)", resolved.value, self._get_model_name(resolved))
        try:
            response = await self._call_completion(
                model=self._get_model_name(resolved),
                prompt=prompt,
                api_key=api_key,
                temperature=temperature,
                json_mode=json_mode,
            )
        except Timeout as e:
            raise logged(
                logger,
                UpstreamUnavailable(
                    f"{resolved.value} request timed out (timeout={self.config.timeout}s)",
                    e,
                ),
            ) from e
        except Exception as e:
            raise logged(
                logger, UpstreamUnavailable(f"{resolved.value} call failed: {e}", e)
            ) from e

        content = self._response_text(response)
        if not content or not content.strip():
            raise logged(
                logger, UpstreamUnavailable(f"{resolved.value} returned no content")
            )
        return content

    async def _call_completion(
        self,
        *,
        model: str,
        prompt: str,
        api_key: str,
        temperature: float | None,
        json_mode: bool,
    ):
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "timeout": self.config.timeout,
            "api_key": api_key,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        return await acompletion(**kwargs)

    def _response_text(self, response) -> str | None:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return None
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        return str(content) if content is not None else None
