"""
Analytics Prompts

Free-text prompts over a form and its submissions.
"""

ANALYSIS_SYSTEM_PROMPT = """You are a data analyst expert. Analyze the form submission data and provide insights in simple, understandable language.
Analyze:
- Submission patterns
- User behavior
- Form performance
- Potential improvements
Provide insights that are actionable and easy to understand for non-technical users.
Return your insights as a numbered list of short, distinct sentences, each on a new line."""

INSIGHTS_SYSTEM_PROMPT = (
    "You are a helpful AI assistant that explains form analytics in simple terms. "
    "Answer user questions about their form data in a clear, conversational way."
)


def build_analysis_prompt(form_data_json: str) -> str:
    return f"""Analyze this form data and provide insights:
{form_data_json}"""


def build_insights_prompt(question: str, form_data_json: str) -> str:
    return f"""Question: {question}
Form Data: {form_data_json}
Please provide a clear, simple explanation."""
