# ecopack/calculator.py
from functools import lru_cache
from typing import Optional

from starlette.concurrency import run_in_threadpool

from .climate_client import default_client
from .factors import ACTIVITY_SYNONYMS, FOOD_FALLBACK_SYNONYMS
from .fallback import Attempt, attempt_async
from .logging_config import get_logger
from .resolver import EmissionFactorResolver
from .schemas import ActivityIn
from .utils import Unit, rekey, round_half_up, split_unit_suffix

logger = get_logger(__name__)


def activity_key(category: str, activity: str, unit_token: str, synonyms=ACTIVITY_SYNONYMS) -> str:
    """Canonical table key for free-text activity in a given unit.

    Known phrasings go through the category's synonym map and have their unit
    suffix swapped when the caller's unit differs; anything else becomes
    ``<ACTIVITY>_<UNIT>``.
    """
    mapped = synonyms.get(category, {}).get(activity.lower().strip())
    if mapped:
        unit = Unit.parse(unit_token)
        stem, mapped_unit = split_unit_suffix(mapped)
        if unit is None:
            return f"{stem}_{unit_token}" if unit_token else mapped
        if unit is mapped_unit:
            return mapped
        return rekey(mapped, unit)
    return f"{activity.strip().upper().replace(' ', '_')}_{unit_token}"


class Co2eCalculator:
    def __init__(self, resolver: Optional[EmissionFactorResolver] = None, emission_service=None):
        self.resolver = resolver or EmissionFactorResolver()
        self.emission_service = emission_service

    def calculate(self, data: ActivityIn, profile=None) -> float:
        category = (data.category or "").strip().upper()
        unit_token = (data.unit or "").strip().upper()
        amount = float(data.amount)

        if category == "FOOD" and Unit.parse(unit_token) is Unit.G:
            amount = amount / 1000
            unit_token = Unit.KG.value

        key = activity_key(category, data.activity or "", unit_token)
        factor = self.resolver.resolve(category, key, profile)
        co2e = round_half_up(amount * factor, 3)
        logger.debug("co2e calculated", category=category, key=key, amount=amount,
                     factor=factor, co2e=co2e)
        return co2e

    async def _remote(self, category: str, activity: str, amount: float, unit: str) -> Attempt:
        service = self.emission_service
        if service is None or not getattr(service, "configured", True):
            return Attempt("emission-service", error="not configured")
        return await attempt_async("emission-service", run_in_threadpool,
                                   service.estimate, category, activity, amount, unit)

    async def _estimate(self, category: str, activity: str, amount: float, unit: str, profile=None) -> float:
        remote = await self._remote(category, activity, amount, unit)
        if remote.ok:
            return remote.value
        logger.info("using local emission factors", category=category, activity=activity, reason=remote.error)
        return self.calculate(ActivityIn(category=category, activity=activity, amount=amount, unit=unit), profile)

    async def calculate_transport(self, activity: str, amount: float, unit: str, profile=None) -> float:
        return await self._estimate("TRANSPORT", activity, amount, unit, profile)

    async def calculate_energy(self, activity: str, amount: float, unit: str, profile=None) -> float:
        return await self._estimate("ENERGY", activity, amount, unit, profile)

    async def calculate_packaging(self, activity: str, amount: float, unit: str, profile=None) -> float:
        return await self._estimate("PACKAGING", activity, amount, unit, profile)

    async def calculate_food(self, activity: str, amount: float, unit: str, profile=None) -> float:
        remote = await self._remote("FOOD", activity, amount, unit)
        if remote.ok:
            return remote.value

        local_amount = float(amount)
        local_unit = (unit or "").strip().upper()
        if Unit.parse(local_unit) is Unit.G:
            local_amount = local_amount / 1000
            local_unit = Unit.KG.value
        local_activity = FOOD_FALLBACK_SYNONYMS.get(activity.lower().strip(), activity)

        logger.info("using local emission factors", category="FOOD", activity=local_activity, reason=remote.error)
        return self.calculate(
            ActivityIn(category="FOOD", activity=local_activity, amount=local_amount, unit=local_unit), profile
        )

    async def calculate_for(self, category: str, activity: str, amount: float, unit: str, profile=None) -> float:
        handlers = {
            "TRANSPORT": self.calculate_transport,
            "FOOD": self.calculate_food,
            "ENERGY": self.calculate_energy,
            "PACKAGING": self.calculate_packaging,
        }
        handler = handlers.get((category or "").strip().upper())
        if handler is None:
            return self.calculate(ActivityIn(category=category, activity=activity, amount=amount, unit=unit), profile)
        return await handler(activity, amount, unit, profile)


@lru_cache()
def get_calculator() -> Co2eCalculator:
    return Co2eCalculator(emission_service=default_client())
