"""
AI Label Matcher
LLM-assisted suggestions for labels the auto-mapper could not place.
Results only feed the manual mapping queue; they are never auto-applied.
"""

import json
import logging

from config import AI_MATCH_CONFIDENCE, DEFAULT_TEMPERATURE, GROQ_MODEL, KNOWN_VENDORS
from mappers.models import MappingSuggestion
from utils.api_client import create_groq_client_with_fallback, is_rate_limit_error

logger = logging.getLogger(__name__)


def build_prompt(labels: list, canonical_names: list, kind: str = "specialty") -> str:
    return f"""You are a healthcare compensation survey expert. Map each raw {kind} label from List A
(as written by survey vendors such as {', '.join(KNOWN_VENDORS)})
to the single best standardized name in List B.
Labels may use abbreviations, vendor-specific wording or different word order
(e.g., "Cardiovascular Disease" vs "Cardiology", "OB/GYN" vs "Obstetrics & Gynecology").

List A (Raw Labels):
{json.dumps(labels, indent=2)}

List B (Standardized Names):
{json.dumps(canonical_names, indent=2)}

Return a JSON object mapping each label from List A to its match in List B.
If no standardized name clearly fits, map to null. Never invent names outside List B.

Return ONLY valid JSON in this format:
{{
  "matches": {{
    "Raw Label 1": "Standardized Name or null",
    "Raw Label 2": "Standardized Name or null"
  }}
}}"""


def _strip_markdown(response_text):
    if "```json" in response_text:
        return response_text.split("```json")[1].split("```")[0]
    if "```" in response_text:
        return response_text.split("```")[1].split("```")[0]
    return response_text


def ai_match_labels(client, labels: list, canonical_names: list, kind: str = "specialty") -> dict:
    """
    Ask the model to map raw labels onto existing canonical names.

    Returns:
        dict of label -> canonical name (or None). Empty on any model or
        parsing failure so the caller keeps the labels in the manual queue.
    """
    if not labels or not canonical_names:
        return {}

    try:
        response = client.chat.completions.create(
            model=GROQ_MODEL,
            messages=[{"role": "user", "content": build_prompt(labels, canonical_names, kind)}],
            temperature=DEFAULT_TEMPERATURE,
            max_tokens=4000
        )
        response_text = _strip_markdown(response.choices[0].message.content)
        result = json.loads(response_text.strip())
        return result.get("matches", {}) or {}
    except Exception as e:
        if is_rate_limit_error(e):
            raise
        logger.warning("AI label matching failed: %s", e)
        return {}


def ai_suggest_mappings(labels, categories, api_keys, kind: str = "specialty", **kwargs) -> dict:
    """
    LLM suggestions for a batch of unmapped labels.

    Args:
        labels: UnmappedLabel objects (or plain strings)
        categories: CategoryMappingStore or sequence of CanonicalCategory
        api_keys: Groq API keys, tried in order on rate limits

    Returns:
        dict of label name -> [MappingSuggestion], only for answers naming an
        existing category
    """
    if hasattr(categories, 'categories'):
        categories = categories.categories()
    by_key = {category.key: category.standardized_name for category in categories}
    names = [getattr(label, 'name', label) for label in labels]

    matches = create_groq_client_with_fallback(
        api_keys, ai_match_labels, names, list(by_key.values()), kind, **kwargs
    )

    suggestions = {}
    for name in names:
        answer = matches.get(name)
        if not isinstance(answer, str):
            continue
        standardized = by_key.get(answer.strip().lower())
        if standardized is None:
            logger.debug("Discarding AI answer '%s' for '%s': not an existing category", answer, name)
            continue
        suggestions[name] = [MappingSuggestion(standardized, AI_MATCH_CONFIDENCE)]
    return suggestions
