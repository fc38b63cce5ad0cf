"""Solar irradiation reference data.

Expected generation per installed kW per day, keyed by PIN code. Lookups are
exact-match only; unknown codes use the national default rather than a
nearby code.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

DEFAULT_YIELD_FACTOR = 4.5  # kWh per kW per day

IRRADIATION_DATA: Mapping[str, float] = MappingProxyType(
    {
        # Telangana
        "500001": 5.2,  # Hyderabad
        "500003": 5.2,
        "500016": 5.2,
        "500081": 5.2,
        # Andhra Pradesh
        "520001": 5.4,  # Vijayawada
        "530001": 5.3,  # Visakhapatnam
        "517501": 5.5,  # Tirupati
        # Karnataka
        "560001": 5.0,  # Bangalore
        "560066": 5.0,
        # Tamil Nadu
        "600001": 5.3,  # Chennai
        "641001": 5.4,  # Coimbatore
        # Maharashtra
        "400001": 5.1,  # Mumbai
        "411001": 5.2,  # Pune
    }
)


def yield_factor(pin_code: str) -> float:
    """Return kWh/kW/day for ``pin_code``, or DEFAULT_YIELD_FACTOR on a miss."""
    key = str(pin_code).strip() if pin_code is not None else ""
    return IRRADIATION_DATA.get(key, DEFAULT_YIELD_FACTOR)


__all__ = ["DEFAULT_YIELD_FACTOR", "IRRADIATION_DATA", "yield_factor"]
