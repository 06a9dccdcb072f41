"""
Form Prompts

Prompts for generating, refining and translating form documents.
"""
import json

FORM_SHAPE = """{
  "title": "string",
  "description": "string",
  "theme": "modern | classic | minimal | colorful",
  "fields": [
    {
      "id": "string",
      "type": "text | email | number | textarea | select | radio | checkbox | date | file | password | slider | switch | rating",
      "label": "string",
      "placeholder": "string (optional)",
      "required": true,
      "options": ["string"],
      "validation": {"min": 0, "max": 10, "step": 1, "pattern": "regex (optional)"}
    }
  ]
}"""

GENERATE_SYSTEM_PROMPT_TEMPLATE = """You are an expert form designer. Generate 2 different form designs based on the user's description. Each form should be well-structured, user-friendly, and optimized for the specified language.
Requirements:
- Create 2 distinct form designs.
- Each form should have 5-10 relevant fields.
- Use appropriate field types: text, email, number, textarea, select, radio, checkbox, date, file, password, slider, switch, rating.
- Only select, radio and checkbox fields have 'options', and they must have at least one.
- For 'rating' fields, use a 'max' validation between 3 and 10.
- For 'slider' fields, define 'min', 'max', and 'step' validation properties.
- Include proper validation rules where appropriate (e.g., min/max length for text).
- Make fields required when necessary.
- Use clear, concise labels and placeholders.
- Generate all text content in the specified language: {language}.

Each form object has this shape:
{form_shape}

Return the response as a valid JSON object: {{"forms": [form, form]}}"""

REFINE_SYSTEM_PROMPT_TEMPLATE = """You are an expert form editor. The user will provide an existing form as a JSON object and a prompt with instructions to modify it. Your task is to apply the requested changes and return the single, updated form as a valid JSON object.
Requirements:
- Only return ONE updated form object. Do not return an array.
- The returned JSON object must be a complete and valid form structure.
- Do not change the 'id' of the form or the 'id' of existing fields.
- When adding new fields, generate a new unique UUID for the 'id' for them.
- Interpret the user's request and modify the form accordingly (e.g., add, remove, or change fields, update labels, change validation).
- Keep all text content in the form's original language ({language}) unless the instruction explicitly asks for a language change. In that case write the text in the requested language and set the 'language' property to it."""

TRANSLATE_SYSTEM_PROMPT_TEMPLATE = """You are a professional translator. Translate the form content to {language} while maintaining the form structure and functionality.
Translate:
- Form title
- Form description
- Field labels
- Placeholders
- Option values (for select, radio, checkbox fields)
Keep the technical structure (ids, field types, validation rules, etc.) unchanged.
Return the complete translated form as a single valid JSON object."""


def build_generate_system_prompt(language: str) -> str:
    return GENERATE_SYSTEM_PROMPT_TEMPLATE.format(language=language, form_shape=FORM_SHAPE)


def build_generate_user_prompt(prompt: str) -> str:
    return f"Create 2 different forms for: {prompt}"


def build_refine_system_prompt(language: str) -> str:
    return REFINE_SYSTEM_PROMPT_TEMPLATE.format(language=language)


def build_refine_user_prompt(form_document: dict, instruction: str) -> str:
    return (
        f"Here is the current form:\n{json.dumps(form_document, indent=2)}\n\n"
        f'Please apply this change: "{instruction}"'
    )


def build_translate_system_prompt(language: str) -> str:
    return TRANSLATE_SYSTEM_PROMPT_TEMPLATE.format(language=language)


def build_translate_user_prompt(form_document: dict, language: str) -> str:
    return f"""Translate this form to {language}:
{json.dumps(form_document, indent=2)}"""
