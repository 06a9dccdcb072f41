from .models import AIProvider, DEFAULT_MODELS
from .types import LLMSettings, DEFAULT_LLM_SETTINGS, JSON_LLM_SETTINGS, ChatResult
from .client import (
    TextGenerationProvider,
    OpenAIProvider,
    GeminiProvider,
    build_text_provider,
    get_text_provider,
    load_json_payload,
)
from .exceptions import ChatFunctionError, APIError, ProviderNotConfigured, ResponseParseError

__all__ = [
    "AIProvider",
    "DEFAULT_MODELS",
    "LLMSettings",
    "DEFAULT_LLM_SETTINGS",
    "JSON_LLM_SETTINGS",
    "ChatResult",
    "TextGenerationProvider",
    "OpenAIProvider",
    "GeminiProvider",
    "build_text_provider",
    "get_text_provider",
    "load_json_payload",
    "ChatFunctionError",
    "APIError",
    "ProviderNotConfigured",
    "ResponseParseError",
]
