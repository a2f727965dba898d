# ecopack/carbon.py
# Rough cradle-to-grave footprint of a packaging choice, weight in grams.
from typing import List

from .schemas import CarbonFootprint, EmissionBreakdown
from .utils import round_half_up

# kg CO2e per kg of material
MATERIAL_FACTORS = {
    "plastic": 2.5,
    "cardboard": 0.5,
    "paper": 0.8,
    "glass": 1.2,
    "aluminum": 6.0,
    "bioplastic": 1.0,
    "mushroom": 0.3,
    "bamboo": 0.4,
    "hemp": 0.5,
}

# kg CO2e per kg shipped
TRANSPORT_FACTORS = {
    "local": 0.1,
    "national": 0.5,
    "international": 2.0,
}

DEFAULT_MATERIAL_FACTOR = 1.0
DEFAULT_TRANSPORT_FACTOR = 0.5


def material_factor(material_type: str) -> float:
    name = (material_type or "").lower()
    if name in MATERIAL_FACTORS:
        return MATERIAL_FACTORS[name]
    # "Reinforced corrugated cardboard" -> cardboard; longest key first so bioplastic beats plastic
    for key in sorted(MATERIAL_FACTORS, key=len, reverse=True):
        if key in name:
            return MATERIAL_FACTORS[key]
    return DEFAULT_MATERIAL_FACTOR


def calculate_carbon_footprint(material_weight: float, material_type: str,
                               shipping_distance: str, fragility_level: str) -> CarbonFootprint:
    if not material_weight or material_weight <= 0:
        return CarbonFootprint(
            total_carbon_score=0,
            emission_breakdown=EmissionBreakdown(material=0, transport=0, disposal=0),
            total_kg_co2=0.0,
            suggestions=_suggestions(0.0, material_type, shipping_distance),
        )

    weight_kg = material_weight / 1000
    material_emissions = weight_kg * material_factor(material_type)
    transport_emissions = TRANSPORT_FACTORS.get((shipping_distance or "").lower(), DEFAULT_TRANSPORT_FACTOR) * weight_kg
    disposal_emissions = material_emissions * (0.2 if (fragility_level or "").lower() == "high" else 0.1)
    total = material_emissions + transport_emissions + disposal_emissions

    # 0-100, lower is better
    score = max(0.0, min(100.0, (total / (material_weight / 100)) * 10))

    return CarbonFootprint(
        total_carbon_score=int(round_half_up(score)),
        emission_breakdown=EmissionBreakdown(
            material=int(round_half_up(material_emissions / total * 100)),
            transport=int(round_half_up(transport_emissions / total * 100)),
            disposal=int(round_half_up(disposal_emissions / total * 100)),
        ),
        total_kg_co2=round_half_up(total, 2),
        suggestions=_suggestions(total, material_type, shipping_distance),
    )


def _suggestions(total: float, material_type: str, shipping_distance: str) -> List[str]:
    out = []
    if total > 5:
        out.append("Consider lighter-weight alternatives")
    if shipping_distance == "international" and total > 3:
        out.append("Optimize packaging dimensions to reduce volumetric weight")
    if (material_type or "").lower() == "plastic":
        out.append("Explore biodegradable or recyclable material alternatives")
    if total > 10:
        out.append("Consider reducing packaging size or eliminating unnecessary layers")
    out.append("Source materials from local suppliers to reduce transport emissions")
    return out[:3]
