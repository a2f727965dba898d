# ecopack/climate_client.py
# Best-effort client for the hosted emissions estimation API.
from datetime import datetime, timezone
from typing import Optional

import requests

from .config import get_settings
from .logging_config import get_logger

logger = get_logger(__name__)


class EmissionServiceError(Exception):
    pass


class ClimateServiceClient:
    def __init__(self, api_key: Optional[str], base_url: str, timeout: float = 10.0, session=None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def estimate(self, category: str, activity: str, amount: float, unit: str) -> float:
        payload = {
            "category": category.lower(),
            "activity": activity,
            "amount": amount,
            "unit": unit,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        logger.info("emission service request", category=payload["category"], activity=activity)
        try:
            r = self.session.post(
                f"{self.base_url}/v1/calculate",
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise EmissionServiceError(f"request failed: {e}") from e

        if not r.ok:
            raise EmissionServiceError(f"HTTP {r.status_code}: {r.text[:200]}")

        try:
            data = r.json()
        except ValueError as e:
            raise EmissionServiceError("response is not JSON") from e

        co2e = data.get("co2e") if isinstance(data, dict) else None
        if isinstance(co2e, bool) or not isinstance(co2e, (int, float)):
            raise EmissionServiceError(f"response has no numeric co2e: {data!r}"[:200])
        return co2e


def default_client() -> ClimateServiceClient:
    settings = get_settings()
    return ClimateServiceClient(settings.climate_api_key, settings.climate_api_url, settings.climate_timeout)
