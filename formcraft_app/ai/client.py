"""
Text generation providers for the hosted LLM.

One provider is selected per process from configuration:

    provider = get_text_provider()
    if provider is None:
        ...  # fallback mode, no credential configured

    payload = provider.complete_json(
        system_prompt="Return JSON.",
        user_prompt="Create a contact form",
    )
"""
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
import openai
from django.conf import settings

from formcraft.utils.enum_utils import safe_str_enum
from formcraft_app.ai.exceptions import APIError, ChatFunctionError, ProviderNotConfigured, ResponseParseError
from formcraft_app.ai.models import AIProvider, DEFAULT_MODELS
from formcraft_app.ai.types import ChatResult, LLMSettings, DEFAULT_LLM_SETTINGS, JSON_LLM_SETTINGS

logger = logging.getLogger(__name__)


def load_json_payload(content: str) -> Any:
    """Extract a JSON object or array from an LLM response string."""
    content = (content or "").strip()
    if content.startswith("```"):
        content = re.sub(r"^```(?:json)?\s*", "", content)
        content = re.sub(r"\s*```$", "", content)

    if not content:
        raise ResponseParseError("Empty response from model")

    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass

    json_match = re.search(r"[\[{].*[\]}]", content, re.DOTALL)
    if not json_match:
        logger.warning(f"No JSON found in LLM response: {content[:100]}")
        raise ResponseParseError("No JSON found in model response")

    try:
        return json.loads(json_match.group())
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse LLM response as JSON: {e}")
        raise ResponseParseError(f"Invalid JSON in model response: {e}") from e


class TextGenerationProvider(ABC):
    """
    Common interface over the hosted text generation backends.

    Subclasses implement ``run``; callers use ``complete_json`` for structured
    output and ``complete_text`` for prose.
    """

    provider: AIProvider

    def __init__(self, api_key: str, model: Optional[str] = None):
        if not api_key:
            raise ProviderNotConfigured(f"{self.provider} API key not configured")
        self.api_key = api_key
        self.model = model or DEFAULT_MODELS[self.provider]

    @abstractmethod
    def run(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        llm_settings: LLMSettings = DEFAULT_LLM_SETTINGS,
        json_mode: bool = False,
    ) -> ChatResult:
        """Execute a prompt and return the result."""

    def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        llm_settings: LLMSettings = JSON_LLM_SETTINGS,
    ) -> Any:
        """Run a prompt in JSON mode and return the decoded payload."""
        result = self.run(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            llm_settings=llm_settings,
            json_mode=True,
        )
        return load_json_payload(result.content)

    def complete_text(
        self,
        system_prompt: str,
        user_prompt: str,
        llm_settings: LLMSettings = DEFAULT_LLM_SETTINGS,
    ) -> str:
        """Run a prompt and return the trimmed prose."""
        result = self.run(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            llm_settings=llm_settings,
        )
        content = result.validated(str.strip, default="")
        if not content:
            raise ResponseParseError("Empty response from model")
        return content

    def _model_for(self, llm_settings: LLMSettings) -> str:
        return llm_settings.model or self.model

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"


class OpenAIProvider(TextGenerationProvider):
    """Chat completions through the official OpenAI SDK."""

    provider = AIProvider.OPENAI

    def __init__(self, api_key: str, model: Optional[str] = None):
        super().__init__(api_key, model)
        self.client = openai.OpenAI(api_key=self.api_key)

    def run(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        llm_settings: LLMSettings = DEFAULT_LLM_SETTINGS,
        json_mode: bool = False,
    ) -> ChatResult:
        model = self._model_for(llm_settings)
        kwargs: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": llm_settings.temperature,
            "timeout": llm_settings.timeout,
        }
        if llm_settings.max_tokens:
            kwargs["max_tokens"] = llm_settings.max_tokens
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        logger.debug("[OpenAIProvider] Running prompt - settings: %s", llm_settings)

        try:
            response = self.client.chat.completions.create(**kwargs)
        except openai.APIStatusError as e:
            logger.error("API error: %s with response: %s", e.status_code, e.response.text)
            raise APIError(
                f"API request failed: {e.status_code} with response: {e.response.text}",
                status_code=e.status_code,
                response_body=e.response.text,
            ) from e
        except openai.APIError as e:
            logger.error("OpenAI error: %s", e)
            raise APIError(f"OpenAI error: {str(e)}") from e
        except Exception as e:
            logger.error("Unexpected error: %s", e)
            raise ChatFunctionError(f"Unexpected error: {str(e)}") from e

        if not response.choices:
            raise ResponseParseError("Model returned no choices")

        choice = response.choices[0]
        return ChatResult(
            content=choice.message.content or "",
            model=response.model or model,
            finish_reason=choice.finish_reason or "stop",
            usage=response.usage.model_dump() if response.usage else None,
        )


class GeminiProvider(TextGenerationProvider):
    """generateContent calls against the Gemini REST API."""

    provider = AIProvider.GEMINI

    GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    def _build_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _build_body(
        self,
        system_prompt: str,
        user_prompt: str,
        llm_settings: LLMSettings,
        *,
        json_mode: bool = False,
    ) -> Dict[str, Any]:
        generation_config: Dict[str, Any] = {"temperature": llm_settings.temperature}
        if llm_settings.max_tokens:
            generation_config["maxOutputTokens"] = llm_settings.max_tokens
        if json_mode:
            generation_config["responseMimeType"] = "application/json"

        return {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": generation_config,
        }

    @staticmethod
    def _candidate_text(result: Dict[str, Any]) -> str:
        candidates: List[Dict[str, Any]] = result.get("candidates") or []
        if not candidates:
            raise ResponseParseError("Model returned no candidates")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    def run(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        llm_settings: LLMSettings = DEFAULT_LLM_SETTINGS,
        json_mode: bool = False,
    ) -> ChatResult:
        model = self._model_for(llm_settings)
        body = self._build_body(system_prompt, user_prompt, llm_settings, json_mode=json_mode)

        logger.debug("[GeminiProvider] Running prompt - settings: %s", llm_settings)

        try:
            with httpx.Client(timeout=llm_settings.timeout) as client:
                response = client.post(
                    self.GEMINI_API_URL.format(model=model),
                    headers=self._build_headers(),
                    json=body,
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("API error: %s with response: %s", e.response.status_code, e.response.text)
            raise APIError(
                f"API request failed: {e.response.status_code} with response: {e.response.text}",
                status_code=e.response.status_code,
                response_body=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            logger.error("HTTP error: %s", e)
            raise APIError(f"HTTP error: {str(e)}") from e
        except Exception as e:
            logger.error("Unexpected error: %s", e)
            raise ChatFunctionError(f"Unexpected error: {str(e)}") from e

        candidates = result.get("candidates") or [{}]
        return ChatResult(
            content=self._candidate_text(result),
            model=result.get("modelVersion") or model,
            finish_reason=(candidates[0].get("finishReason") or "STOP").lower(),
            usage=result.get("usageMetadata"),
            raw=result,
        )


PROVIDER_CLASSES = {
    AIProvider.GEMINI: GeminiProvider,
    AIProvider.OPENAI: OpenAIProvider,
}


def _credentials() -> Dict[AIProvider, tuple]:
    return {
        AIProvider.GEMINI: (getattr(settings, "GEMINI_API_KEY", ""), getattr(settings, "GEMINI_MODEL", None)),
        AIProvider.OPENAI: (getattr(settings, "OPENAI_API_KEY", ""), getattr(settings, "OPENAI_MODEL", None)),
    }


def build_text_provider() -> Optional[TextGenerationProvider]:
    """
    Build the provider for the current configuration.

    ``AI_PROVIDER`` pins the backend when its key is present; otherwise Gemini is
    preferred over OpenAI. Returns None when no credential is configured.
    """
    credentials = _credentials()
    order = [AIProvider.GEMINI, AIProvider.OPENAI]

    pinned = safe_str_enum(getattr(settings, "AI_PROVIDER", ""), None, AIProvider)
    if pinned:
        if credentials[pinned][0]:
            order = [pinned]
        else:
            logger.warning(f"AI_PROVIDER={pinned} but its API key is not set - ignoring the pin")

    for provider in order:
        api_key, model = credentials[provider]
        if api_key:
            logger.info(f"Using {provider} text generation provider")
            return PROVIDER_CLASSES[provider](api_key, model)

    logger.warning("GEMINI_API_KEY / OPENAI_API_KEY not set - AI features will use fallback data")
    return None


_text_provider: Optional[TextGenerationProvider] = None
_text_provider_resolved = False


def get_text_provider() -> Optional[TextGenerationProvider]:
    """Get the process-wide provider, resolving it on first use."""
    global _text_provider, _text_provider_resolved
    if not _text_provider_resolved:
        _text_provider = build_text_provider()
        _text_provider_resolved = True
    return _text_provider
