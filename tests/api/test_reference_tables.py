"""
Tests for the two reference tables:

- finance.irradiation.yield_factor exact matches and the 4.5 default.
- finance.policies.policy_for exact matches and the telangana fallback.
"""

from __future__ import annotations

import pytest

from finance.irradiation import DEFAULT_YIELD_FACTOR, IRRADIATION_DATA, yield_factor
from finance.policies import DEFAULT_REGION, REGION_POLICIES, list_regions, policy_for


@pytest.mark.parametrize(
    "pin_code, expected",
    [("500081", 5.2), ("517501", 5.5), ("560001", 5.0), ("400001", 5.1)],
)
def test_yield_factor_known_codes(pin_code, expected):
    assert yield_factor(pin_code) == expected


def test_yield_factor_unknown_code_uses_default():
    assert DEFAULT_YIELD_FACTOR == 4.5
    assert yield_factor("999999") == 4.5
    assert yield_factor("") == 4.5
    assert yield_factor(None) == 4.5


def test_yield_factor_never_partial_matches():
    assert yield_factor("5000") == DEFAULT_YIELD_FACTOR
    assert yield_factor("5000811") == DEFAULT_YIELD_FACTOR


def test_yield_factor_ignores_surrounding_whitespace():
    assert yield_factor(" 600001 ") == 5.3


def test_irradiation_table_is_read_only():
    with pytest.raises(TypeError):
        IRRADIATION_DATA["110001"] = 5.0  # type: ignore[index]


def test_policy_for_known_regions():
    telangana = policy_for("telangana")
    assert telangana.contract_demand_multiplier == 0.80
    assert telangana.transformer_multiplier == 0.50

    karnataka = policy_for("karnataka")
    assert karnataka.contract_demand_multiplier == 1.00
    assert karnataka.transformer_multiplier is None


def test_policy_for_unknown_region_falls_back_without_raising():
    assert DEFAULT_REGION == "telangana"
    assert policy_for("atlantis") is REGION_POLICIES["telangana"]
    assert policy_for("") is REGION_POLICIES["telangana"]
    # lookups are exact, including case
    assert policy_for("Karnataka") is REGION_POLICIES["telangana"]


def test_list_regions_in_table_order():
    regions = list_regions()
    assert regions[0] == ("telangana", "Telangana")
    assert [key for key, _ in regions] == list(REGION_POLICIES)
    assert ("tamilNadu", "Tamil Nadu") in regions
