from enum import StrEnum
from typing import Dict


class AIProvider(StrEnum):
    """Hosted text generation backends. Exactly one is active per process."""
    GEMINI = "gemini"
    OPENAI = "openai"


DEFAULT_MODELS: Dict[AIProvider, str] = {
    AIProvider.GEMINI: "gemini-2.5-flash",
    AIProvider.OPENAI: "gpt-4o-mini",
}
