# ecopack/fallback.py
# Each step of a fallback chain reports an Attempt instead of raising.
from dataclasses import dataclass
from typing import Any, Optional

from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Attempt:
    source: str
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


def attempt(source, func, *args, **kwargs):
    try:
        return Attempt(source, value=func(*args, **kwargs))
    except Exception as e:
        logger.warning("attempt failed", source=source, error=str(e))
        return Attempt(source, error=f"{type(e).__name__}: {e}")


async def attempt_async(source, func, *args, **kwargs):
    try:
        return Attempt(source, value=await func(*args, **kwargs))
    except Exception as e:
        logger.warning("attempt failed", source=source, error=str(e))
        return Attempt(source, error=f"{type(e).__name__}: {e}")


def first_success(steps):
    """Run steps in order; first ok Attempt wins, otherwise the last failure."""
    last = Attempt("none", error="no attempts configured")
    for step in steps:
        last = step()
        if last.ok:
            return last
    return last
