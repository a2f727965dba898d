# ecopack/resolver.py
from .factors import DEFAULT_FACTOR, DIESEL_CAR_KEY, EV_CAR_KEY, FACTOR_TABLE, PETROL_CAR_KEY
from .logging_config import get_logger

logger = get_logger(__name__)


def _transport_car_rule(activity_key, profile):
    # returns a replacement key, or None when the rule does not apply
    if not activity_key.endswith("CAR_KM"):
        return None
    vehicle = getattr(profile, "primary_vehicle_type", None)
    fuel = (getattr(profile, "fuel_type", None) or "").strip().upper()
    if not vehicle and not fuel:
        return None
    if fuel == "ELECTRIC":
        return EV_CAR_KEY
    if fuel == "DIESEL":
        return DIESEL_CAR_KEY
    return PETROL_CAR_KEY


PERSONALIZATION_RULES = {
    "TRANSPORT": _transport_car_rule,
}


class EmissionFactorResolver:
    """(category, key, profile) -> kg CO2e per unit. Misses return the default factor."""

    def __init__(self, table=FACTOR_TABLE, default_factor=DEFAULT_FACTOR, rules=None):
        self.table = table
        self.default_factor = default_factor
        self.rules = PERSONALIZATION_RULES if rules is None else rules

    def resolve(self, category, activity_key, profile=None):
        category_factors = self.table.get(category)
        if category_factors is not None:
            rule = self.rules.get(category)
            if rule is not None and profile is not None:
                personal_key = rule(activity_key, profile)
                if personal_key is not None:
                    factor = category_factors.get(personal_key)
                    if factor is not None:
                        logger.debug("personalised factor", category=category,
                                     activity_key=activity_key, resolved_key=personal_key)
                        return float(factor)
                    return self._miss(category, personal_key)

            factor = category_factors.get(activity_key)
            if factor is not None:
                return float(factor)

        return self._miss(category, activity_key)

    def _miss(self, category, activity_key):
        logger.warning("emission factor not found, using default",
                       category=category, activity_key=activity_key,
                       default_factor=self.default_factor)
        return self.default_factor


resolver = EmissionFactorResolver()
