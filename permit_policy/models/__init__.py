"""
Permit Policy Engine: Data Model
===================================
Immutable records for the policy configuration document, axle
configurations and special authorizations. Pure data, no behaviour
beyond lookups and field selection.
"""

from permit_policy.models.authorizations import SpecialAuthorizations
from permit_policy.models.axles import AxleUnit, as_axle_units
from permit_policy.models.definition import (
    BridgeCalculationConstants,
    CostRule,
    GeographicRegion,
    MatrixRange,
    PermitCondition,
    PermitConditionDefinition,
    PermitType,
    PolicyDefinition,
    RangeMatrix,
    StandardTireSize,
    VehicleDisplayCodeDefaults,
)
from permit_policy.models.dimensions import (
    DimensionModifier,
    PowerUnitWeightDimension,
    RegionSizeOverride,
    RelativePosition,
    SingleAxleDimension,
    SizeDimension,
    TrailerWeightDimension,
    WeightDimension,
)
from permit_policy.models.vehicles import (
    AccessoryVehicleType,
    Commodity,
    ConditionRequirement,
    PowerUnitEntry,
    PowerUnitType,
    TrailerEntry,
    TrailerType,
    VehicleCategory,
    VehicleCategoryDefinition,
    VehicleType,
)

__all__ = [
    # ── Document ──────────────────────────────────────────────
    "PolicyDefinition",
    "PermitType",
    "CostRule",
    "GeographicRegion",
    "RangeMatrix",
    "MatrixRange",
    "BridgeCalculationConstants",
    "StandardTireSize",
    "VehicleDisplayCodeDefaults",
    "PermitConditionDefinition",
    "PermitCondition",
    # ── Vehicles ──────────────────────────────────────────────
    "VehicleType",
    "PowerUnitType",
    "TrailerType",
    "VehicleCategory",
    "VehicleCategoryDefinition",
    "AccessoryVehicleType",
    "Commodity",
    "PowerUnitEntry",
    "TrailerEntry",
    "ConditionRequirement",
    # ── Dimensions ────────────────────────────────────────────
    "DimensionModifier",
    "RelativePosition",
    "RegionSizeOverride",
    "SizeDimension",
    "SingleAxleDimension",
    "PowerUnitWeightDimension",
    "TrailerWeightDimension",
    "WeightDimension",
    # ── Axles & authorizations ────────────────────────────────
    "AxleUnit",
    "as_axle_units",
    "SpecialAuthorizations",
]
