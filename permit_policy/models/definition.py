"""
Permit Policy Engine: Policy Definition
==========================================
The whole policy configuration document, parsed once into
immutable records. Rule condition trees are kept as the plain
mappings the document carries; they are compiled separately
(see permit_policy.rules.engine).

Cross-references (vehicle ids, commodity ids, matrix ids) are
NOT validated here. Unknown ids surface lazily as lookup misses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from permit_policy.models.dimensions import (
    PowerUnitWeightDimension,
    SizeDimension,
    TrailerWeightDimension,
)
from permit_policy.models.vehicles import (
    Commodity,
    ConditionRequirement,
    PowerUnitType,
    TrailerType,
    VehicleCategoryDefinition,
    VehicleType,
)


# ══════════════════════════════════════════════════════════════
# SMALL RECORDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GeographicRegion:
    id: str
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeographicRegion":
        return cls(id=data.get("id"), name=data.get("name", ""))


@dataclass(frozen=True)
class CostRule:
    """Named cost fact plus the parameters it is invoked with."""

    fact: str
    params: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CostRule":
        return cls(fact=data.get("fact", ""), params=dict(data.get("params") or {}))


@dataclass(frozen=True)
class PermitConditionDefinition:
    """A permit condition that may be attached to issued permits."""

    condition: str
    description: str = ""
    condition_link: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PermitConditionDefinition":
        return cls(
            condition=data.get("condition", ""),
            description=data.get("description", ""),
            condition_link=data.get("conditionLink", ""),
        )


@dataclass(frozen=True)
class PermitCondition:
    """A condition definition merged with the requirement that selected it."""

    condition: str
    description: str
    condition_link: str
    mandatory: Optional[bool] = None

    def to_dict(self) -> dict:
        data = {
            "condition": self.condition,
            "description": self.description,
            "conditionLink": self.condition_link,
        }
        if self.mandatory is not None:
            data["mandatory"] = self.mandatory
        return data


@dataclass(frozen=True)
class MatrixRange:
    """One row of a range matrix; missing bounds are unbounded."""

    value: float
    min: Optional[float] = None
    max: Optional[float] = None

    def contains(self, value: float) -> bool:
        lower = self.min if isinstance(self.min, (int, float)) else float("-inf")
        upper = self.max if isinstance(self.max, (int, float)) else float("inf")
        return lower <= value <= upper


@dataclass(frozen=True)
class RangeMatrix:
    id: str
    name: str = ""
    matrix: Tuple[MatrixRange, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RangeMatrix":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            matrix=tuple(
                MatrixRange(value=m.get("value"), min=m.get("min"), max=m.get("max"))
                for m in data.get("matrix") or ()
            ),
        )

    def lookup(self, value) -> Optional[MatrixRange]:
        """First row whose [min, max] range contains value."""
        if not isinstance(value, (int, float)):
            return None
        for row in self.matrix:
            if row.contains(value):
                return row
        return None


@dataclass(frozen=True)
class BridgeCalculationConstants:
    """maxBridge = multiplier * wheelbase + min_weight"""

    multiplier: float
    min_weight: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "BridgeCalculationConstants":
        return cls(
            multiplier=data.get("multiplier", 0),
            min_weight=data.get("minWeight", 0),
        )


@dataclass(frozen=True)
class StandardTireSize:
    name: str
    size: float

    def to_dict(self) -> dict:
        return {"name": self.name, "size": self.size}


@dataclass(frozen=True)
class VehicleDisplayCodeDefaults:
    """Glyphs and thresholds for the display-code codec."""

    prefix_standard: str = ""
    prefix_universal: str = ""
    padding_standard: str = ""
    padding_universal: str = ""
    spacing_universal_default: str = ""
    spacing_universal_small: str = ""
    spacing_universal_large: str = ""
    spacing_universal_small_max: float = 0
    spacing_universal_large_min: float = 0
    extra_axle_universal: str = ""
    end_axle_universal: str = ""
    max_axles_standard: int = 0
    threshold_axles_universal: int = 0
    over_axles_code_universal: str = ""
    universal_axle_code: str = ""
    multi_digit_prefix: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VehicleDisplayCodeDefaults":
        return cls(
            prefix_standard=data.get("prefixStandard") or "",
            prefix_universal=data.get("prefixUniversal") or "",
            padding_standard=data.get("paddingStandard") or "",
            padding_universal=data.get("paddingUniversal") or "",
            spacing_universal_default=data.get("spacingUniversalDefault") or "",
            spacing_universal_small=data.get("spacingUniversalSmall") or "",
            spacing_universal_large=data.get("spacingUniversalLarge") or "",
            spacing_universal_small_max=data.get("spacingUniversalSmallMax", 0),
            spacing_universal_large_min=data.get("spacingUniversalLargeMin", 0),
            extra_axle_universal=data.get("extraAxleUniversal") or "",
            end_axle_universal=data.get("endAxleUniversal") or "",
            max_axles_standard=data.get("maxAxlesStandard") or 0,
            threshold_axles_universal=data.get("thresholdAxlesUniversal") or 0,
            over_axles_code_universal=data.get("overAxlesCodeUniversal") or "",
            universal_axle_code=data.get("universalAxleCode") or "",
            multi_digit_prefix=data.get("multiDigitPrefix") or "",
        )


# ══════════════════════════════════════════════════════════════
# PERMIT TYPE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PermitType:
    """
    A permit product and everything needed to validate it.

    allowed_vehicles is only consulted when commodity_required is
    False; commodity-driven types derive vehicles from commodities.
    """

    id: str
    name: str
    routing_required: bool = False
    weight_dimension_required: bool = False
    size_dimension_required: bool = False
    commodity_required: bool = False
    allowed_vehicles: Tuple[str, ...] = ()
    allowed_commodities: Tuple[str, ...] = ()
    rules: Tuple[Mapping[str, Any], ...] = ()
    cost_rules: Tuple[CostRule, ...] = ()
    conditions: Tuple[ConditionRequirement, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PermitType":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            routing_required=bool(data.get("routingRequired", False)),
            weight_dimension_required=bool(
                data.get("weightDimensionRequired", False)
            ),
            size_dimension_required=bool(
                data.get("sizeDimensionRequired", False)
            ),
            commodity_required=bool(data.get("commodityRequired", False)),
            allowed_vehicles=tuple(data.get("allowedVehicles") or ()),
            allowed_commodities=tuple(data.get("allowedCommodities") or ()),
            rules=tuple(data.get("rules") or ()),
            cost_rules=tuple(
                CostRule.from_dict(c) for c in data.get("costRules") or ()
            ),
            conditions=tuple(
                ConditionRequirement.from_dict(c)
                for c in data.get("conditions") or ()
            ),
        )


# ══════════════════════════════════════════════════════════════
# POLICY DEFINITION
# ══════════════════════════════════════════════════════════════

def _index(records) -> Dict[str, Any]:
    # First definition wins when a document repeats an id.
    index: Dict[str, Any] = {}
    for record in records:
        index.setdefault(record.id, record)
    return index


@dataclass(frozen=True)
class PolicyDefinition:
    """
    Immutable policy configuration document.

    Lookups by id are O(1) through indexes built at construction.
    """

    min_pe_version: Optional[str]
    geographic_regions: Tuple[GeographicRegion, ...] = ()
    permit_types: Tuple[PermitType, ...] = ()
    common_rules: Tuple[Mapping[str, Any], ...] = ()
    global_power_unit_weights: Tuple[PowerUnitWeightDimension, ...] = ()
    global_trailer_weights: Tuple[TrailerWeightDimension, ...] = ()
    global_size_defaults: Optional[SizeDimension] = None
    power_unit_categories: Tuple[VehicleCategoryDefinition, ...] = ()
    trailer_categories: Tuple[VehicleCategoryDefinition, ...] = ()
    power_unit_types: Tuple[PowerUnitType, ...] = ()
    trailer_types: Tuple[TrailerType, ...] = ()
    commodities: Tuple[Commodity, ...] = ()
    range_matrices: Tuple[RangeMatrix, ...] = ()
    bridge_calculation_constants: Optional[BridgeCalculationConstants] = None
    conditions: Tuple[PermitConditionDefinition, ...] = ()
    standard_tire_sizes: Optional[Tuple[StandardTireSize, ...]] = None
    vehicle_display_code_defaults: Optional[VehicleDisplayCodeDefaults] = None

    _permit_type_index: Dict[str, PermitType] = field(
        default=None, init=False, repr=False, compare=False
    )
    _power_unit_index: Dict[str, PowerUnitType] = field(
        default=None, init=False, repr=False, compare=False
    )
    _trailer_index: Dict[str, TrailerType] = field(
        default=None, init=False, repr=False, compare=False
    )
    _commodity_index: Dict[str, Commodity] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        object.__setattr__(self, "_permit_type_index", _index(self.permit_types))
        object.__setattr__(self, "_power_unit_index", _index(self.power_unit_types))
        object.__setattr__(self, "_trailer_index", _index(self.trailer_types))
        object.__setattr__(self, "_commodity_index", _index(self.commodities))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PolicyDefinition":
        weights = data.get("globalWeightDefaults") or {}
        categories = data.get("vehicleCategories") or {}
        vehicle_types = data.get("vehicleTypes") or {}
        size_defaults = data.get("globalSizeDefaults")
        bridge = data.get("bridgeCalculationConstants")
        display = data.get("vehicleDisplayCodeDefaults")
        tire_sizes = data.get("standardTireSizes")

        return cls(
            min_pe_version=data.get("minPEVersion"),
            geographic_regions=tuple(
                GeographicRegion.from_dict(g)
                for g in data.get("geographicRegions") or ()
            ),
            permit_types=tuple(
                PermitType.from_dict(p) for p in data.get("permitTypes") or ()
            ),
            common_rules=tuple(data.get("commonRules") or ()),
            global_power_unit_weights=tuple(
                PowerUnitWeightDimension.from_dict(w)
                for w in weights.get("powerUnits") or ()
            ),
            global_trailer_weights=tuple(
                TrailerWeightDimension.from_dict(w)
                for w in weights.get("trailers") or ()
            ),
            global_size_defaults=(
                SizeDimension.from_dict(size_defaults) if size_defaults else None
            ),
            power_unit_categories=tuple(
                VehicleCategoryDefinition.from_dict(c, PowerUnitWeightDimension)
                for c in categories.get("powerUnitCategories") or ()
            ),
            trailer_categories=tuple(
                VehicleCategoryDefinition.from_dict(c, TrailerWeightDimension)
                for c in categories.get("trailerCategories") or ()
            ),
            power_unit_types=tuple(
                PowerUnitType.from_dict(v)
                for v in vehicle_types.get("powerUnitTypes") or ()
            ),
            trailer_types=tuple(
                TrailerType.from_dict(v)
                for v in vehicle_types.get("trailerTypes") or ()
            ),
            commodities=tuple(
                Commodity.from_dict(c) for c in data.get("commodities") or ()
            ),
            range_matrices=tuple(
                RangeMatrix.from_dict(m) for m in data.get("rangeMatrices") or ()
            ),
            bridge_calculation_constants=(
                BridgeCalculationConstants.from_dict(bridge) if bridge else None
            ),
            conditions=tuple(
                PermitConditionDefinition.from_dict(c)
                for c in data.get("conditions") or ()
            ),
            standard_tire_sizes=(
                tuple(
                    StandardTireSize(name=t.get("name", ""), size=t.get("size"))
                    for t in tire_sizes
                )
                if tire_sizes is not None
                else None
            ),
            vehicle_display_code_defaults=(
                VehicleDisplayCodeDefaults.from_dict(display) if display else None
            ),
        )

    @classmethod
    def coerce(cls, definition) -> "PolicyDefinition":
        if isinstance(definition, PolicyDefinition):
            return definition
        if isinstance(definition, Mapping):
            return cls.from_dict(definition)
        raise TypeError(
            f"Expected PolicyDefinition or mapping, "
            f"got {type(definition).__name__}."
        )

    # ══════════════════════════════════════════════════════════
    # LOOKUPS (None when not configured)
    # ══════════════════════════════════════════════════════════

    def permit_type(self, permit_type_id) -> Optional[PermitType]:
        return self._permit_type_index.get(permit_type_id)

    def power_unit_type(self, type_id) -> Optional[PowerUnitType]:
        return self._power_unit_index.get(type_id)

    def trailer_type(self, type_id) -> Optional[TrailerType]:
        return self._trailer_index.get(type_id)

    def vehicle_type(self, type_id) -> Optional[VehicleType]:
        return self.power_unit_type(type_id) or self.trailer_type(type_id)

    def commodity(self, commodity_id) -> Optional[Commodity]:
        return self._commodity_index.get(commodity_id)

    def range_matrix(self, matrix_id) -> Optional[RangeMatrix]:
        for matrix in self.range_matrices:
            if matrix.id == matrix_id:
                return matrix
        return None

    def power_unit_category(self, category_id) -> Optional[VehicleCategoryDefinition]:
        for category in self.power_unit_categories:
            if category.id == category_id:
                return category
        return None

    def trailer_category(self, category_id) -> Optional[VehicleCategoryDefinition]:
        for category in self.trailer_categories:
            if category.id == category_id:
                return category
        return None

    def condition_definition(self, condition) -> Optional[PermitConditionDefinition]:
        for definition in self.conditions:
            if definition.condition == condition:
                return definition
        return None

    @property
    def region_ids(self) -> Tuple[str, ...]:
        return tuple(region.id for region in self.geographic_regions)

    @property
    def vehicle_types(self) -> Tuple[VehicleType, ...]:
        return self.power_unit_types + self.trailer_types
