import json

import pytest

from ecopack.gemini_client import GeminiError
from ecopack.recommender import (MOISTURE_LINING, REINFORCED_MATERIALS, SUSTAINABLE_PREFIX,
                                 ProductClass, RecommendationParseError, classify_category,
                                 generate_recommendation, generate_smart_recommendation,
                                 parse_ai_recommendation, recommend)
from ecopack.schemas import RecommendationRequest

from conftest import FakeGemini


def make_request(**overrides):
    base = {
        "product_weight": "500g",
        "product_category": "Electronics",
        "dimensions": {"length": "20", "width": "15", "height": "10"},
        "fragility_level": "Low",
        "shipping_distance": "local",
        "monthly_shipping_volume": "1000",
        "current_material_used": "Bubble wrap",
        "budget_per_unit": "50",
        "sustainability_priority": "3",
        "moisture_temp_sensitive": False,
    }
    base.update(overrides)
    return RecommendationRequest(**base)


AI_JSON = {
    "recommended_materials": ["Molded pulp"],
    "estimated_cost": 45,
    "cost_comparison": {"plastic_cost": 30, "sustainable_cost": 45,
                        "cost_difference_percent": 50, "cost_difference_absolute": 15},
    "environmental_impact": {"co2_reduction": "75% less CO2", "disposal_method": "Compost",
                             "recyclability": "100%", "biodegradability": "90 days"},
    "recommendations": "Use molded pulp",
}


@pytest.mark.parametrize("category,expected", [
    ("Consumer Electronics", ProductClass.ELECTRONICS),
    ("smart DEVICE", ProductClass.ELECTRONICS),
    ("FinTech gadgets", ProductClass.ELECTRONICS),
    ("Snacks", ProductClass.FOOD),
    ("Beverages", ProductClass.FOOD),
    ("Personal Care", ProductClass.COSMETICS),
    ("beauty kits", ProductClass.COSMETICS),
    ("Apparel", ProductClass.CLOTHING),
    ("Books", ProductClass.BOOKS),
    ("social media merch", ProductClass.BOOKS),
    ("Furniture", ProductClass.GENERIC),
    ("", ProductClass.GENERIC),
])
def test_classify_category(category, expected):
    assert classify_category(category) is expected


def test_electronics_high_fragility_high_priority_scenario():
    result = generate_smart_recommendation(make_request(
        fragility_level="High", sustainability_priority="5", shipping_distance="national",
    ))
    assert len(result.recommended_materials) == 3
    for material, reinforced in zip(result.recommended_materials, REINFORCED_MATERIALS):
        assert material == f"{SUSTAINABLE_PREFIX} {reinforced}"
    assert result.estimated_cost <= 50
    # 50 * (0.95 + 0.02 - 0.05)
    assert result.estimated_cost == 46
    assert result.cost_comparison.plastic_cost == 50
    assert result.cost_comparison.cost_difference_absolute == -4
    assert result.cost_comparison.cost_difference_percent == -8
    assert "55-65%" in result.environmental_impact.co2_reduction


def test_category_profile_without_modifiers():
    result = generate_smart_recommendation(make_request(product_category="Clothing"))
    assert result.recommended_materials == ["Recycled cardboard", "Compostable mailers", "Plastic-free polybags"]
    assert result.estimated_cost == 38  # 50 * 0.76
    assert "35-45%" in result.environmental_impact.co2_reduction


def test_medium_fragility_qualifies_existing_materials():
    result = generate_smart_recommendation(make_request(product_category="Food", fragility_level="Medium"))
    assert result.recommended_materials == [
        "PLA bioplastics with standard protection",
        "Compostable cellulose with standard protection",
        "Paper with plant-based coating with standard protection",
    ]
    assert result.estimated_cost == 44  # 50 * 0.87 = 43.5


def test_low_priority_raises_cost_and_keeps_plain_names():
    result = generate_smart_recommendation(make_request(sustainability_priority="1"))
    assert not any(m.startswith(SUSTAINABLE_PREFIX) for m in result.recommended_materials)
    assert result.estimated_cost == 46  # 50 * (0.88 + 0.03) = 45.5
    assert "Cost-optimized" in result.recommendations


def test_raising_priority_never_raises_cost():
    for category in ("Electronics", "Food", "Beauty", "Apparel", "Books", "Toys"):
        for fragility in ("Low", "Medium", "High"):
            for shipping in ("local", "national", "international"):
                mid = generate_smart_recommendation(make_request(
                    product_category=category, fragility_level=fragility,
                    shipping_distance=shipping, sustainability_priority="3"))
                high = generate_smart_recommendation(make_request(
                    product_category=category, fragility_level=fragility,
                    shipping_distance=shipping, sustainability_priority="5"))
                assert high.estimated_cost <= mid.estimated_cost
                assert all(m.startswith(SUSTAINABLE_PREFIX) for m in high.recommended_materials)


def test_bulk_volume_discount():
    small = generate_smart_recommendation(make_request(monthly_shipping_volume="5000"))
    bulk = generate_smart_recommendation(make_request(monthly_shipping_volume="5001"))
    assert small.estimated_cost == 44  # 50 * 0.88
    assert bulk.estimated_cost == 42  # 50 * 0.83 = 41.5


def test_moisture_lining_is_appended_after_other_rules():
    result = generate_smart_recommendation(make_request(
        product_category="Widgets", moisture_temp_sensitive=True, sustainability_priority="5"))
    # the lining is a fourth material, so it falls outside the top three
    assert MOISTURE_LINING not in result.recommended_materials
    assert "moisture and temperature protection" in result.recommendations
    assert result.estimated_cost == 43  # 50 * (0.83 - 0.05 + 0.08)


def test_moisture_protection_adds_to_cost():
    request = make_request(moisture_temp_sensitive=True)
    result = generate_smart_recommendation(request)
    assert len(result.recommended_materials) == 3
    assert result.estimated_cost == 48  # 50 * 0.96


def test_estimated_cost_never_below_one():
    result = generate_smart_recommendation(make_request(
        budget_per_unit="0.5", sustainability_priority="5", monthly_shipping_volume="99999",
        product_category="Clothing"))
    assert result.estimated_cost == 1


def test_unparseable_budget_and_priority_use_defaults():
    result = generate_smart_recommendation(make_request(budget_per_unit="cheap", sustainability_priority="n/a"))
    assert result.cost_comparison.plastic_cost == 50
    assert "Sustainability priority: 3/5" in result.recommendations


def test_numeric_inputs_are_accepted():
    result = generate_smart_recommendation(make_request(
        budget_per_unit=80, sustainability_priority=4, monthly_shipping_volume=6000))
    # 80 * (0.88 - 0.05 - 0.05)
    assert result.estimated_cost == 62


def test_smart_recommendation_is_pure():
    request = make_request(fragility_level="Medium", shipping_distance="international",
                           moisture_temp_sensitive=True, regulatory_compliance="EU PPWR")
    first = generate_smart_recommendation(request)
    second = generate_smart_recommendation(request)
    assert first == second
    assert "EU PPWR" in first.recommendations
    assert "International-grade" in first.recommendations


def test_parse_ai_recommendation_strips_fences():
    text = "```json\n" + json.dumps(AI_JSON) + "\n```"
    result = parse_ai_recommendation(text)
    assert result.recommended_materials == ["Molded pulp"]
    assert result.estimated_cost == 45


@pytest.mark.parametrize("text", [
    "not json at all",
    "[1, 2, 3]",
    json.dumps({"recommended_materials": ["x"]}),
    json.dumps({"estimated_cost": 10}),
    json.dumps({"recommended_materials": "x", "estimated_cost": 10}),
])
def test_parse_ai_recommendation_rejects_bad_payloads(text):
    with pytest.raises(RecommendationParseError):
        parse_ai_recommendation(text)


def test_without_api_key_uses_local_engine():
    gemini = FakeGemini(configured=False)
    request = make_request()
    outcome = recommend(request, client=gemini, models=["m1"])
    assert outcome.source == "local"
    assert outcome.value == generate_smart_recommendation(request)
    assert gemini.calls == []


def test_first_model_with_valid_json_wins():
    gemini = FakeGemini({
        "m1": GeminiError("m1: HTTP 429"),
        "m2": "I think you should use cardboard.",
        "m3": json.dumps(AI_JSON),
        "m4": json.dumps(AI_JSON),
    })
    outcome = recommend(make_request(), client=gemini, models=["m1", "m2", "m3", "m4"])
    assert outcome.source == "gemini:m3"
    assert outcome.value.recommended_materials == ["Molded pulp"]
    assert gemini.calls == ["m1", "m2", "m3"]


def test_all_models_failing_falls_back_to_local():
    gemini = FakeGemini({"m1": GeminiError("down"), "m2": "{broken"})
    request = make_request(product_category="Books")
    result = generate_recommendation(request, client=gemini, models=["m1", "m2"])
    assert result == generate_smart_recommendation(request)
    assert gemini.calls == ["m1", "m2"]


def test_configured_client_with_no_models_falls_back():
    outcome = recommend(make_request(), client=FakeGemini(), models=[])
    assert outcome.source == "local"
