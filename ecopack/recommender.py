# ecopack/recommender.py
"""Packaging recommendations: Gemini models in order, then the local decision table."""
import json
import math
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Tuple

from pydantic import ValidationError

from . import gemini_client
from .config import get_settings
from .fallback import Attempt, attempt, first_success
from .logging_config import get_logger
from .schemas import CostComparison, EnvironmentalImpact, RecommendationResult
from .utils import (format_number, parse_leading_float, parse_leading_int, round_half_up,
                    strip_json_fences)

logger = get_logger(__name__)

DEFAULT_BUDGET = 50.0
DEFAULT_PRIORITY = 3
BULK_VOLUME_THRESHOLD = 5000

SUSTAINABLE_PREFIX = "100% certified sustainable"
STANDARD_PROTECTION_SUFFIX = "with standard protection"
MOISTURE_LINING = "Moisture barrier lining"
REINFORCED_MATERIALS = (
    "Reinforced corrugated cardboard",
    "Molded pulp inserts",
    "Eco-friendly cushion foam",
)


class RecommendationParseError(ValueError):
    pass


class ProductClass(str, Enum):
    ELECTRONICS = "electronics"
    FOOD = "food"
    COSMETICS = "cosmetics"
    CLOTHING = "clothing"
    BOOKS = "books"
    GENERIC = "generic"


# checked in order; first substring hit wins
_CATEGORY_KEYWORDS = (
    (ProductClass.ELECTRONICS, ("electronic", "device", "tech")),
    (ProductClass.FOOD, ("food", "beverage", "snack")),
    (ProductClass.COSMETICS, ("cosmetic", "beauty", "personal care")),
    (ProductClass.CLOTHING, ("clothing", "textile", "apparel")),
    (ProductClass.BOOKS, ("book", "media")),
)


def classify_category(product_category):
    text = (product_category or "").lower()
    for product_class, keywords in _CATEGORY_KEYWORDS:
        if any(word in text for word in keywords):
            return product_class
    return ProductClass.GENERIC


@dataclass(frozen=True)
class MaterialProfile:
    materials: Tuple[str, ...]
    multiplier: float
    details: str


MATERIAL_PROFILES = {
    ProductClass.ELECTRONICS: MaterialProfile(
        ("Cornstarch-based foam", "Mushroom mycelium packaging", "Recycled cellulose padding"),
        0.88,
        "Specially designed for {category} items with protective cushioning properties.",
    ),
    ProductClass.FOOD: MaterialProfile(
        ("PLA bioplastics", "Compostable cellulose", "Paper with plant-based coating"),
        0.82,
        "Food-safe and FDA-approved sustainable packaging for {category} products.",
    ),
    ProductClass.COSMETICS: MaterialProfile(
        ("Recycled PET containers", "Bio-based tubes", "FSC certified paper tubes"),
        0.85,
        "Elegant sustainable packaging for {category} items with premium appearance.",
    ),
    ProductClass.CLOTHING: MaterialProfile(
        ("Recycled cardboard", "Compostable mailers", "Plastic-free polybags"),
        0.76,
        "Lightweight and space-efficient packaging for {category} items.",
    ),
    ProductClass.BOOKS: MaterialProfile(
        ("Recycled paperboard", "Cardboard sleeves", "100% post-consumer recycled materials"),
        0.78,
        "Traditional yet sustainable packaging for {category} with excellent protection.",
    ),
    ProductClass.GENERIC: MaterialProfile(
        ("Recycled cardboard box", "Biodegradable mailer bags", "Recycled plastic alternatives"),
        0.83,
        "Versatile sustainable packaging solution for {category} products.",
    ),
}

HIGH_PRIORITY_IMPACT = EnvironmentalImpact(
    co2_reduction="Reduces CO2 emissions by 55-65% and eliminates single-use plastic waste",
    disposal_method="Fully compostable or recyclable through municipal waste programs and industrial composting",
    recyclability="100% recyclable through standard cardboard/mixed material recycling streams",
    biodegradability="Biodegrades naturally within 90-180 days in commercial composting "
                     "or 1-2 years in standard landfill conditions",
)
STANDARD_IMPACT = HIGH_PRIORITY_IMPACT.model_copy(update={
    "co2_reduction": "Reduces CO2 emissions by 35-45% compared to virgin plastic packaging",
})


def _budget(request):
    budget = parse_leading_float(request.budget_per_unit)
    if not budget or not math.isfinite(budget):
        return DEFAULT_BUDGET
    return budget


def generate_smart_recommendation(request):
    base_cost = _budget(request)
    category = request.product_category.lower()
    fragility = request.fragility_level.strip().lower()
    shipping = request.shipping_distance.strip().lower()
    volume = parse_leading_int(request.monthly_shipping_volume)
    priority = parse_leading_int(request.sustainability_priority) or DEFAULT_PRIORITY

    profile = MATERIAL_PROFILES[classify_category(category)]
    materials = list(profile.materials)
    multiplier = profile.multiplier
    details = profile.details.format(category=category)

    if fragility == "high":
        materials = list(REINFORCED_MATERIALS)
        multiplier = 0.95
        details += " Enhanced protective features for fragile items."
    elif fragility == "medium":
        materials = [m if "Reinforced" in m else f"{m} {STANDARD_PROTECTION_SUFFIX}" for m in materials]
        multiplier = 0.87

    shipping_note = ""
    if shipping == "international":
        multiplier += 0.05
        shipping_note = " International-grade durable packaging for long-distance shipping."
    elif shipping == "national":
        multiplier += 0.02
        shipping_note = " Designed for domestic shipping networks."

    sustainability_note = ""
    if priority >= 4:
        multiplier -= 0.05
        sustainability_note = " Premium eco-friendly options prioritizing maximum environmental benefit."
        materials = [f"{SUSTAINABLE_PREFIX} {m}" for m in materials]
    elif priority <= 2:
        multiplier += 0.03
        sustainability_note = " Cost-optimized sustainable packaging options."

    if volume is not None and volume > BULK_VOLUME_THRESHOLD:
        multiplier -= 0.05

    if request.moisture_temp_sensitive:
        materials.append(MOISTURE_LINING)
        multiplier += 0.08
        details += " Includes moisture and temperature protection."

    sustainable_cost = int(max(1, round_half_up(base_cost * multiplier)))
    cost_diff_percent = int(round_half_up((sustainable_cost - base_cost) / base_cost * 100))
    cost_diff = int(round_half_up(sustainable_cost - base_cost))

    rationale = _rationale(
        request, category=category, shipping=shipping, priority=priority, volume=volume,
        materials=materials, details=details, base_cost=base_cost,
        sustainable_cost=sustainable_cost, cost_diff=cost_diff, cost_diff_percent=cost_diff_percent,
        shipping_note=shipping_note, sustainability_note=sustainability_note,
    )

    return RecommendationResult(
        recommended_materials=materials[:3],
        estimated_cost=sustainable_cost,
        cost_comparison=CostComparison(
            plastic_cost=base_cost,
            sustainable_cost=sustainable_cost,
            cost_difference_percent=cost_diff_percent,
            cost_difference_absolute=cost_diff,
        ),
        environmental_impact=HIGH_PRIORITY_IMPACT if priority >= 4 else STANDARD_IMPACT,
        recommendations=rationale,
    )


def _rationale(request, *, category, shipping, priority, volume, materials, details, base_cost,
               sustainable_cost, cost_diff, cost_diff_percent, shipping_note, sustainability_note):
    dims = request.dimensions
    dimensions = f"{dims.length} x {dims.width} x {dims.height} cm"
    volume_text = format_number(request.monthly_shipping_volume) if request.monthly_shipping_volume != "" else "0"

    if cost_diff < 0:
        cost_text = (f"Saves ₹{abs(cost_diff)} per unit "
                     f"({abs(cost_diff_percent)}% lower cost than traditional plastic)")
        monthly_saving = abs(cost_diff * (volume or 0))
        implementation = (f"For your volume of {volume_text} units/month, you can save approximately "
                          f"₹{monthly_saving} per month in packaging costs.")
    else:
        cost_text = f"₹{cost_diff} per unit more ({cost_diff_percent}% additional cost for sustainability benefits)"
        implementation = (f"For your volume of {volume_text} units/month, you can save approximately "
                          f"₹0 per month in packaging costs while achieving significant environmental benefits.")

    if priority >= 4:
        co2_line = "• Reduces CO2 emissions by up to 65% compared to virgin plastic"
    else:
        co2_line = "• Reduces CO2 emissions by 35-45% compared to virgin plastic"

    lines = [
        f"Based on your {category} product specifications:",
        f"- Product: {request.product_category} ({format_number(request.product_weight)}, {dimensions})",
        f"- Current material: {request.current_material_used}",
        f"- Monthly volume: {volume_text} units",
        f"- Shipping: {shipping}",
        f"- Sustainability priority: {priority}/5",
        "",
        f"RECOMMENDATION: {' or '.join(materials[:2])} packaging",
        "",
        details,
        "",
        "COST ANALYSIS:",
        f"- Current plastic cost: ₹{format_number(base_cost)}/unit",
        f"- Sustainable packaging: ₹{sustainable_cost}/unit",
        f"- {cost_text}",
        "",
        "ENVIRONMENTAL BENEFITS:",
        co2_line,
        "• 100% recyclable and compostable",
        "• Avoids microplastics and environmental contamination",
        "• Supports circular economy principles",
        "",
        "IMPLEMENTATION SUGGESTION:",
        f"{implementation} Consider bulk ordering for additional cost optimization.",
        f"{shipping_note}{sustainability_note}".strip(),
        "",
        "All recommended materials meet international sustainability standards and are certified for "
        f"{request.regulatory_compliance or 'general commercial use'}.",
    ]
    return "\n".join(lines).strip()


def build_recommendation_prompt(request):
    dims = request.dimensions
    return f"""As a sustainable packaging expert, provide a concise JSON response for:
Product: {request.product_weight} {request.product_category} ({dims.length}x{dims.width}x{dims.height}cm)
Fragility: {request.fragility_level}
Distance: {request.shipping_distance}
Monthly volume: {request.monthly_shipping_volume} units
Budget: ₹{request.budget_per_unit}
Priority: {request.sustainability_priority}/5
Current: {request.current_material_used}
Moisture/temperature sensitive: {"yes" if request.moisture_temp_sensitive else "no"}
Compliance: {request.regulatory_compliance or "general commercial use"}

Return ONLY this JSON structure:
{{
  "recommended_materials": ["material1"],
  "estimated_cost": 45,
  "cost_comparison": {{"plastic_cost": 30, "sustainable_cost": 45, "cost_difference_percent": 50, "cost_difference_absolute": 15}},
  "environmental_impact": {{
    "co2_reduction": "75% less CO2 than plastic alternatives",
    "disposal_method": "Fully recyclable or compostable",
    "recyclability": "100% recyclable through standard channels",
    "biodegradability": "Breaks down naturally in 90-180 days"
  }},
  "recommendations": "Use molded pulp for protection + recycled cardboard for outer box"
}}"""


def parse_ai_recommendation(text):
    cleaned = strip_json_fences(text)
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        raise RecommendationParseError(f"not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise RecommendationParseError("expected a JSON object")

    missing = [k for k in ("recommended_materials", "estimated_cost") if data.get(k) in (None, "", [])]
    if missing:
        raise RecommendationParseError(f"missing fields: {', '.join(missing)}")

    try:
        return RecommendationResult.model_validate(data)
    except ValidationError as e:
        raise RecommendationParseError(f"unexpected shape: {e.error_count()} validation errors") from e


def _ask_model(client, prompt, model):
    return parse_ai_recommendation(client.generate_text(prompt, model))


def recommend(request, client=None, models=None):
    """Walk the fallback chain and return the winning Attempt (``source`` says who answered)."""
    client = client or gemini_client.default_client()
    if client.configured:
        models = list(models) if models is not None else get_settings().gemini_model_ids
        prompt = build_recommendation_prompt(request)
        steps = [partial(attempt, f"gemini:{model}", _ask_model, client, prompt, model) for model in models]
        outcome = first_success(steps)
        if outcome.ok:
            logger.info("ai recommendation generated", source=outcome.source)
            return outcome
        logger.warning("all models failed, using local engine", last_error=outcome.error)
    else:
        logger.info("no Gemini API key, using local engine")

    return Attempt("local", value=generate_smart_recommendation(request))


def generate_recommendation(request, client=None, models=None):
    return recommend(request, client=client, models=models).value
