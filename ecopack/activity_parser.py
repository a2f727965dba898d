# ecopack/activity_parser.py
# Splits a free-text diary line into structured activities with Gemini.
import json
from typing import List, Optional

from pydantic import ValidationError

from . import gemini_client
from .config import get_settings
from .gemini_client import GeminiError
from .logging_config import get_logger
from .schemas import ActivityIn
from .utils import strip_json_fences

logger = get_logger(__name__)


class ActivityParseError(Exception):
    pass


PROMPT = """Parse this activity description and extract ALL activities as structured data in JSON format.

Description: "{raw_input}"

If the description contains multiple activities, extract EACH ONE as a separate entry.

Return ONLY valid JSON with this exact structure (no markdown):
{{
  "activities": [
    {{
      "category": "TRANSPORT" | "FOOD" | "ENERGY" | "PACKAGING" | "WASTE",
      "activity": "descriptive activity name",
      "amount": <number>,
      "unit": "KM" | "KG" | "G" | "KWH" | "LITER" | "DOZEN"
    }}
  ]
}}

Examples:
- "I drove 15 km to work" -> {{"activities":[{{"category":"TRANSPORT","activity":"Petrol Car","amount":15,"unit":"KM"}}]}}
- "I drove 15 km today and ate 250g oats" -> {{"activities":[{{"category":"TRANSPORT","activity":"Petrol Car","amount":15,"unit":"KM"}},{{"category":"FOOD","activity":"Oats","amount":250,"unit":"G"}}]}}
- "I used 5 kWh of electricity and 2 kg plastic packaging" -> {{"activities":[{{"category":"ENERGY","activity":"Grid Mix","amount":5,"unit":"KWH"}},{{"category":"PACKAGING","activity":"Plastic Packaging","amount":2,"unit":"KG"}}]}}"""


def extract_activities(text: str) -> List[ActivityIn]:
    try:
        parsed = json.loads(strip_json_fences(text))
    except ValueError as e:
        raise ActivityParseError(f"model did not return JSON: {e}") from e

    if isinstance(parsed, dict):
        items = parsed.get("activities", [parsed])
    else:
        items = parsed
    if not isinstance(items, list):
        raise ActivityParseError("activities must be a list")

    activities = []
    for item in items:
        if not isinstance(item, dict):
            continue
        if not (item.get("category") and item.get("activity") and item.get("amount") and item.get("unit")):
            continue
        try:
            activities.append(ActivityIn(
                category=str(item["category"]).upper(),
                activity=item["activity"],
                amount=item["amount"],
                unit=str(item["unit"]).upper(),
            ))
        except ValidationError:
            logger.warning("dropping malformed activity", item=item)

    if not activities:
        raise ActivityParseError("no valid activities found in parsed data")
    return activities


def parse_activities(raw_input: str, client=None, model: Optional[str] = None) -> List[ActivityIn]:
    client = client or gemini_client.default_client()
    if not client.configured:
        raise ActivityParseError("activity parsing needs GEMINI_API_KEY")
    model = model or next(iter(get_settings().gemini_model_ids), None)
    if not model:
        raise ActivityParseError("no Gemini model configured")

    try:
        text = client.generate_text(PROMPT.format(raw_input=raw_input), model, temperature=0.2)
    except GeminiError as e:
        raise ActivityParseError(str(e)) from e

    activities = extract_activities(text)
    logger.info("activities parsed", count=len(activities), model=model)
    return activities
