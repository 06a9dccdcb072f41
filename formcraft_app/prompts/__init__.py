"""
Centralized prompt templates for the AI service.
"""

from .forms import (  # noqa: F401
    build_generate_system_prompt,
    build_generate_user_prompt,
    build_refine_system_prompt,
    build_refine_user_prompt,
    build_translate_system_prompt,
    build_translate_user_prompt,
)
from .analytics import (  # noqa: F401
    ANALYSIS_SYSTEM_PROMPT,
    INSIGHTS_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_insights_prompt,
)
