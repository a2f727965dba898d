# ecopack/utils.py
import math
import re
from enum import Enum
from typing import Optional, Union

Number = Union[int, float]


class Unit(str, Enum):
    KG = "KG"
    KM = "KM"
    KWH = "KWH"
    LITER = "LITER"
    DOZEN = "DOZEN"
    G = "G"

    @classmethod
    def parse(cls, token) -> Optional["Unit"]:
        if token is None:
            return None
        key = str(token).strip().upper()
        key = _UNIT_ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            return None


_UNIT_ALIASES = {
    "L": "LITER",
    "LITRE": "LITER",
    "LITERS": "LITER",
    "LITRES": "LITER",
}


def split_unit_suffix(key: str):
    """Return (stem, Unit) when key ends in a known unit token, else (key, None)."""
    stem, sep, suffix = key.rpartition("_")
    if not sep:
        return key, None
    unit = Unit.parse(suffix)
    if unit is None or suffix != unit.value:
        return key, None
    return stem, unit


def rekey(canonical_key: str, unit: Unit) -> str:
    """Swap the unit suffix of a canonical activity key, e.g. EGGS_DOZEN -> EGGS_KG."""
    stem, _ = split_unit_suffix(canonical_key)
    return f"{stem}_{unit.value}"


def round_half_up(value: Number, ndigits: int = 0) -> float:
    # ties round toward +infinity, same as the JS engine the figures were tuned on
    if not math.isfinite(value):
        return float(value)
    scaled = value * 10 ** ndigits
    if not math.isfinite(scaled):
        return float(value)
    return math.floor(scaled + 0.5) / 10 ** ndigits


_FENCE = re.compile(r"```(?:json)?\n?")
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def strip_json_fences(text: str) -> str:
    """Drop markdown code fences and any chatter around the outermost JSON object."""
    cleaned = _FENCE.sub("", text or "").strip()
    m = _JSON_OBJECT.search(cleaned)
    return m.group(0) if m else cleaned


def format_number(value: Number) -> str:
    """50.0 -> '50', 49.5 -> '49.5'."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


_LEADING_FLOAT = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_leading_float(value, default: Optional[float] = None) -> Optional[float]:
    """Lenient float parse: "50", "49.5 INR" and 49.5 all work; junk gives default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return default if math.isnan(value) else float(value)
    if value is None:
        return default
    m = _LEADING_FLOAT.match(str(value))
    return float(m.group(1)) if m else default


def parse_leading_int(value, default: Optional[int] = None) -> Optional[int]:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return default if math.isnan(value) else int(value)
    if value is None:
        return default
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else default
