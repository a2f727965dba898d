from types import SimpleNamespace

import pytest

from ecopack.factors import DEFAULT_FACTOR, FACTOR_TABLE
from ecopack.resolver import EmissionFactorResolver

FIXTURE_TABLE = {
    "TRANSPORT": {"PETROL_CAR_KM": 0.2, "DIESEL_CAR_KM": 0.3, "EV_CAR_KM": 0.05, "BUS_KM": 0.1},
    "FOOD": {"RICE_KG": 2.0},
}


@pytest.fixture
def resolver():
    return EmissionFactorResolver(table=FIXTURE_TABLE, default_factor=9.0)


def test_direct_lookup(resolver):
    assert resolver.resolve("FOOD", "RICE_KG") == 2.0
    assert resolver.resolve("TRANSPORT", "BUS_KM") == 0.1


def test_unknown_category_or_key_uses_default(resolver):
    assert resolver.resolve("SHOPPING", "SHOES_KG") == 9.0
    assert resolver.resolve("FOOD", "TOFU_KG") == 9.0
    assert resolver.resolve("", "") == 9.0


@pytest.mark.parametrize("fuel,expected", [
    ("Electric", 0.05),
    ("electric", 0.05),
    ("DIESEL", 0.3),
    ("Petrol", 0.2),
    ("LPG", 0.2),
])
def test_car_factor_follows_profile_fuel(resolver, fuel, expected):
    profile = SimpleNamespace(primary_vehicle_type="Car", fuel_type=fuel)
    assert resolver.resolve("TRANSPORT", "DIESEL_CAR_KM", profile) == expected


def test_electric_fuel_alone_is_enough_for_override(resolver):
    profile = SimpleNamespace(fuel_type="Electric")
    assert resolver.resolve("TRANSPORT", "PETROL_CAR_KM", profile) == 0.05
    assert resolver.resolve("TRANSPORT", "SOMETHING_ODD_CAR_KM", profile) == 0.05


def test_empty_profile_does_not_override(resolver):
    profile = SimpleNamespace(primary_vehicle_type=None, fuel_type=None)
    assert resolver.resolve("TRANSPORT", "DIESEL_CAR_KM", profile) == 0.3


def test_override_only_for_car_km_keys(resolver):
    profile = SimpleNamespace(primary_vehicle_type="Car", fuel_type="Electric")
    assert resolver.resolve("TRANSPORT", "BUS_KM", profile) == 0.1
    assert resolver.resolve("FOOD", "RICE_KG", profile) == 2.0


def test_override_target_missing_from_table_degrades_to_default():
    resolver = EmissionFactorResolver(table={"TRANSPORT": {"PETROL_CAR_KM": 0.2}}, default_factor=9.0)
    profile = SimpleNamespace(fuel_type="Electric")
    assert resolver.resolve("TRANSPORT", "PETROL_CAR_KM", profile) == 9.0


def test_default_resolver_reads_static_table():
    resolver = EmissionFactorResolver()
    assert resolver.resolve("TRANSPORT", "EV_CAR_KM") == FACTOR_TABLE["TRANSPORT"]["EV_CAR_KM"]
    assert resolver.resolve("NOPE", "NOPE_KM") == DEFAULT_FACTOR


def test_static_table_is_read_only():
    with pytest.raises(TypeError):
        FACTOR_TABLE["FOOD"]["BEEF_KG"] = 0.0
    with pytest.raises(TypeError):
        FACTOR_TABLE["NEW"] = {}
