# ecopack/schemas.py
from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, EmailStr

# Form values arrive as strings from the web client and as numbers from API callers
Scalar = Union[str, int, float]


class SignupIn(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    password: str


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class TokenOut(BaseModel):
    token: str
    user_id: str
    first_name: str
    last_name: str
    email: EmailStr


class UserProfile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    primary_vehicle_type: Optional[str] = None
    fuel_type: Optional[str] = None
    household_size: Optional[int] = None
    diet_type: Optional[str] = None
    home_energy_source: Optional[str] = None
    commute_distance: Optional[float] = None
    commute_mode: Optional[str] = None


class ActivityIn(BaseModel):
    category: str
    activity: str
    amount: float
    unit: str


class AiActivityIn(BaseModel):
    raw_input: str


class ActionLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    category: str
    activity: str
    amount: float
    unit: str
    calculated_co2e: float
    raw_input: Optional[str] = None
    logged_at: datetime


class DashboardStats(BaseModel):
    total_co2e: float
    total_actions: int
    this_month_co2e: float
    this_month_actions: int
    category_breakdown: Dict[str, float]
    average_per_action: float


class Dimensions(BaseModel):
    length: Scalar = ""
    width: Scalar = ""
    height: Scalar = ""


class RecommendationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_weight: Scalar = ""
    product_category: str = ""
    dimensions: Dimensions = Dimensions()
    fragility_level: str = ""
    shipping_distance: str = ""
    monthly_shipping_volume: Scalar = ""
    current_material_used: str = ""
    budget_per_unit: Optional[Scalar] = None
    sustainability_priority: Optional[Scalar] = None
    moisture_temp_sensitive: bool = False
    regulatory_compliance: Optional[str] = None


class CostComparison(BaseModel):
    plastic_cost: Optional[float] = None
    sustainable_cost: Optional[float] = None
    cost_difference_percent: Optional[float] = None
    cost_difference_absolute: Optional[float] = None


class EnvironmentalImpact(BaseModel):
    co2_reduction: str = ""
    disposal_method: str = ""
    recyclability: str = ""
    biodegradability: str = ""


class RecommendationResult(BaseModel):
    recommended_materials: List[str]
    estimated_cost: float
    cost_comparison: Optional[CostComparison] = None
    environmental_impact: Optional[EnvironmentalImpact] = None
    recommendations: str = ""


class EmissionBreakdown(BaseModel):
    material: int
    transport: int
    disposal: int


class CarbonFootprint(BaseModel):
    total_carbon_score: int
    emission_breakdown: EmissionBreakdown
    total_kg_co2: float
    suggestions: List[str]


class RecommendationOut(BaseModel):
    id: str
    source: str
    data: Dict
    processing_time: Dict[str, float]
