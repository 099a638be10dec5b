"""
Permit Policy Engine: Dimension Resolution
=============================================
Size limits per configuration and region, default weight tables,
and per-axle-unit weight selection.
"""

from permit_policy.dimensions.size import (
    apply_region_limits,
    get_size_dimension,
    select_size_dimension,
)
from permit_policy.dimensions.weight import (
    VehicleRelatives,
    get_default_weights,
    get_vehicle_relatives,
    select_weight_dimension,
)

__all__ = [
    "apply_region_limits",
    "get_size_dimension",
    "select_size_dimension",
    "VehicleRelatives",
    "get_default_weights",
    "get_vehicle_relatives",
    "select_weight_dimension",
]
