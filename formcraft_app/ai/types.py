"""
Core types for the ai module.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class LLMSettings:
    """Runtime settings for LLM calls. ``model`` falls back to the provider's configured model."""
    model: Optional[str] = None
    temperature: float = 0.7
    max_tokens: Optional[int] = None
    timeout: float = 120.0


DEFAULT_LLM_SETTINGS = LLMSettings()

# Structured output is requested with a lower temperature
JSON_LLM_SETTINGS = LLMSettings(temperature=0.3)


@dataclass
class ChatResult:
    """Result from a single completion."""
    content: str
    model: str
    finish_reason: str = "stop"
    usage: Optional[Dict[str, int]] = None
    raw: Optional[Dict[str, Any]] = None

    def validated(self, formatter=None, default=None):
        """
        Get the content, optionally applying a formatter.

        Args:
            formatter: Optional callable to transform the content (e.g., json.loads).
            default: Value to return if content is empty or the formatter raises.
        """
        if not self.content:
            return default

        formatter = formatter or (lambda x: x)
        try:
            return formatter(self.content)
        except Exception:
            return default
