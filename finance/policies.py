"""Regional net-metering policies.

Each regulator caps solar capacity as a fraction of the site's contract
demand and, in some states, of the distribution transformer rating.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class RegionPolicy:
    name: str
    contract_demand_multiplier: float
    transformer_multiplier: Optional[float] = None
    description: str = ""


DEFAULT_REGION = "telangana"

REGION_POLICIES: Mapping[str, RegionPolicy] = MappingProxyType(
    {
        "telangana": RegionPolicy(
            name="Telangana",
            contract_demand_multiplier=0.80,
            transformer_multiplier=0.50,
            description="Min of 80% CMD or 50% transformer capacity",
        ),
        "andhraPradesh": RegionPolicy(
            name="Andhra Pradesh",
            contract_demand_multiplier=1.00,
            description="100% of CMD allowed",
        ),
        "karnataka": RegionPolicy(
            name="Karnataka",
            contract_demand_multiplier=1.00,
            description="100% of CMD allowed",
        ),
        "tamilNadu": RegionPolicy(
            name="Tamil Nadu",
            contract_demand_multiplier=1.00,
            description="100% of CMD allowed",
        ),
        "maharashtra": RegionPolicy(
            name="Maharashtra",
            contract_demand_multiplier=1.00,
            description="100% of CMD allowed",
        ),
    }
)


def policy_for(region_key: str) -> RegionPolicy:
    """Exact-match policy lookup; unknown keys get the default region's policy."""
    return REGION_POLICIES.get(region_key, REGION_POLICIES[DEFAULT_REGION])


def list_regions() -> List[Tuple[str, str]]:
    """(key, display name) pairs in table order, for region pickers."""
    return [(key, policy.name) for key, policy in REGION_POLICIES.items()]


__all__ = [
    "RegionPolicy",
    "DEFAULT_REGION",
    "REGION_POLICIES",
    "policy_for",
    "list_regions",
]
