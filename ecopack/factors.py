# ecopack/factors.py
# Emission factors in kg CO2e per unit. The unit is the key suffix.
# Loaded once; the frozen copies below are what the resolver reads.
from types import MappingProxyType

DEFAULT_FACTOR = 1.0

_FACTORS = {
    "TRANSPORT": {
        "PETROL_CAR_KM": 0.171,
        "DIESEL_CAR_KM": 0.195,
        "EV_CAR_KM": 0.048,
        "HYBRID_CAR_KM": 0.12,
        "MOTORBIKE_KM": 0.099,
        "BUS_KM": 0.085,
        "TRAIN_KM": 0.038,
        "FLIGHT_SHORT_KM": 0.255,
        "FLIGHT_LONG_KM": 0.195,
        "WALKING_KM": 0.0,
        "CYCLING_KM": 0.0,
        "PETROL_CAR_LITER": 2.31,
        "DIESEL_CAR_LITER": 2.68,
    },
    "FOOD": {
        "BEEF_KG": 27.0,
        "LAMB_KG": 24.0,
        "PORK_KG": 7.0,
        "CHICKEN_KG": 6.9,
        "FISH_FARMED_KG": 4.0,
        "EGGS_DOZEN": 1.6,
        "EGGS_KG": 2.3,
        "MILK_LITER": 1.9,
        "CHEESE_KG": 13.5,
        "RICE_KG": 2.5,
        "WHEAT_KG": 0.8,
        "VEGETABLES_KG": 0.5,
        "FRUITS_KG": 0.7,
        "BREAD_KG": 0.8,
        "POTATO_KG": 0.5,
    },
    "ENERGY": {
        "GRID_MIX_KWH": 0.45,
        "GRID_COAL_KWH": 0.95,
        "RENEWABLES_KWH": 0.05,
        "SOLAR_KWH": 0.02,
        "WIND_KWH": 0.012,
        "NATURAL_GAS_KWH": 0.2,
        "LPG_KWH": 0.23,
    },
    "PACKAGING": {
        "PLASTIC_PACKAGING_KG": 3.5,
        "SINGLE_USE_PLASTIC_KG": 4.0,
        "RECYCLED_PLASTIC_KG": 1.5,
        "CARDBOARD_KG": 0.8,
        "RECYCLED_CARDBOARD_KG": 0.4,
        "PAPER_KG": 0.4,
        "GLASS_BOTTLE_KG": 1.2,
        "ALUMINUM_CAN_KG": 2.4,
        "METAL_PACKAGING_KG": 2.5,
        "BIODEGRADABLE_KG": 0.3,
        "REUSABLE_KG": 0.1,
    },
    "WASTE": {
        "PLASTIC_WASTE_KG": 3.0,
        "PAPER_WASTE_KG": 0.2,
        "GLASS_WASTE_KG": 0.6,
        "METAL_WASTE_KG": 2.5,
        "ORGANIC_WASTE_KG": 0.5,
        "ELECTRONIC_WASTE_KG": 10.0,
        "LANDFILL_KG": 0.5,
    },
}

FACTOR_TABLE = MappingProxyType(
    {category: MappingProxyType(dict(entries)) for category, entries in _FACTORS.items()}
)

# Free text (lowercased, trimmed) -> canonical activity key, per category
_SYNONYMS = {
    "TRANSPORT": {
        "petrol car": "PETROL_CAR_KM",
        "diesel car": "DIESEL_CAR_KM",
        "electric car": "EV_CAR_KM",
        "ev": "EV_CAR_KM",
        "hybrid car": "HYBRID_CAR_KM",
        "motorbike": "MOTORBIKE_KM",
        "motorcycle": "MOTORBIKE_KM",
        "bus": "BUS_KM",
        "train": "TRAIN_KM",
        "flight": "FLIGHT_SHORT_KM",
        "long flight": "FLIGHT_LONG_KM",
        "walking": "WALKING_KM",
        "cycling": "CYCLING_KM",
        "car": "PETROL_CAR_KM",
    },
    "FOOD": {
        "beef": "BEEF_KG",
        "lamb": "LAMB_KG",
        "pork": "PORK_KG",
        "chicken": "CHICKEN_KG",
        "fish": "FISH_FARMED_KG",
        "eggs": "EGGS_DOZEN",
        "milk": "MILK_LITER",
        "cheese": "CHEESE_KG",
        "rice": "RICE_KG",
        "wheat": "WHEAT_KG",
        "bread": "BREAD_KG",
        "potato": "POTATO_KG",
        "vegetables": "VEGETABLES_KG",
        "fruits": "FRUITS_KG",
        "veg meal": "VEGETABLES_KG",
        "vegetable meal": "VEGETABLES_KG",
        "vegetarian": "VEGETABLES_KG",
        "oats": "WHEAT_KG",
    },
    "ENERGY": {
        "grid": "GRID_MIX_KWH",
        "grid mix": "GRID_MIX_KWH",
        "electricity": "GRID_MIX_KWH",
        "grid coal": "GRID_COAL_KWH",
        "renewables": "RENEWABLES_KWH",
        "solar": "SOLAR_KWH",
        "wind": "WIND_KWH",
        "natural gas": "NATURAL_GAS_KWH",
        "lpg": "LPG_KWH",
    },
    "PACKAGING": {
        "plastic": "PLASTIC_PACKAGING_KG",
        "plastic packaging": "PLASTIC_PACKAGING_KG",
        "single-use plastic": "SINGLE_USE_PLASTIC_KG",
        "recycled plastic": "RECYCLED_PLASTIC_KG",
        "cardboard": "CARDBOARD_KG",
        "recycled cardboard": "RECYCLED_CARDBOARD_KG",
        "paper": "PAPER_KG",
        "glass": "GLASS_BOTTLE_KG",
        "aluminum": "ALUMINUM_CAN_KG",
        "metal": "METAL_PACKAGING_KG",
        "biodegradable": "BIODEGRADABLE_KG",
        "reusable": "REUSABLE_KG",
    },
    "WASTE": {
        "plastic": "PLASTIC_WASTE_KG",
        "paper": "PAPER_WASTE_KG",
        "glass": "GLASS_WASTE_KG",
        "metal": "METAL_WASTE_KG",
        "organic": "ORGANIC_WASTE_KG",
        "electronic": "ELECTRONIC_WASTE_KG",
        "e-waste": "ELECTRONIC_WASTE_KG",
        "landfill": "LANDFILL_KG",
    },
}

ACTIVITY_SYNONYMS = MappingProxyType(
    {category: MappingProxyType(dict(entries)) for category, entries in _SYNONYMS.items()}
)

# Loose food phrasings, only consulted when the food estimate falls back locally
FOOD_FALLBACK_SYNONYMS = MappingProxyType({
    "veg meal": "vegetables",
    "vegetable meal": "vegetables",
    "vegetarian meal": "vegetables",
    "oats": "wheat",
})

# Keys the transport personalisation rule may substitute
EV_CAR_KEY = "EV_CAR_KM"
DIESEL_CAR_KEY = "DIESEL_CAR_KM"
PETROL_CAR_KEY = "PETROL_CAR_KM"
