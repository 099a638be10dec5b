"""
Permit Policy Engine: Dimension Records
==========================================
Size and weight dimension tables from the policy document.

Weight dimensions are a tagged variant:
    PowerUnitWeightDimension  → steer/drive (sa*/da*) fields
    TrailerWeightDimension    → plain legal/permittable fields

Both expose for_axle_unit(axle_index), so callers never pick
fields by hand based on position in the axle configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union


# ══════════════════════════════════════════════════════════════
# RELATIVE POSITIONS
# ══════════════════════════════════════════════════════════════

class RelativePosition:
    """Positions a modifier may test, relative to the subject vehicle."""
    FIRST = "first"
    LAST = "last"
    BEFORE = "before"
    AFTER = "after"

    ALL = frozenset({"first", "last", "before", "after"})


# ══════════════════════════════════════════════════════════════
# MODIFIERS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DimensionModifier:
    """
    Relative-position predicate guarding a dimension candidate.

    Fields:
        position:              first | last | before | after
        type:                  vehicle type id to match
        category:              vehicle category to match (if no type)
        axles:                 required axle count of the neighbour unit
        min_interaxle_spacing: lower spacing bound (inclusive)
        max_interaxle_spacing: upper spacing bound (inclusive)
    """

    position: str
    type: Optional[str] = None
    category: Optional[str] = None
    axles: Optional[int] = None
    min_interaxle_spacing: Optional[float] = None
    max_interaxle_spacing: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DimensionModifier":
        return cls(
            position=data.get("position", ""),
            type=data.get("type"),
            category=data.get("category"),
            axles=data.get("axles"),
            min_interaxle_spacing=data.get("minInterAxleSpacing"),
            max_interaxle_spacing=data.get("maxInterAxleSpacing"),
        )


# ══════════════════════════════════════════════════════════════
# SIZE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RegionSizeOverride:
    """Region-specific replacement for one or more size axes."""

    region: str
    w: Optional[float] = None
    h: Optional[float] = None
    l: Optional[float] = None  # noqa: E741

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RegionSizeOverride":
        return cls(
            region=data.get("region", ""),
            w=data.get("w"),
            h=data.get("h"),
            l=data.get("l"),
        )


@dataclass(frozen=True)
class SizeDimension:
    """
    Size limits: front/rear projection, width, height, length.

    A candidate with no modifiers is the default for its trailer.
    """

    fp: Optional[float] = None
    rp: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None
    l: Optional[float] = None  # noqa: E741
    modifiers: Tuple[DimensionModifier, ...] = ()
    regions: Tuple[RegionSizeOverride, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SizeDimension":
        modifiers = data.get("modifiers")
        return cls(
            fp=data.get("fp"),
            rp=data.get("rp"),
            w=data.get("w"),
            h=data.get("h"),
            l=data.get("l"),
            modifiers=tuple(
                DimensionModifier.from_dict(m) for m in modifiers or ()
            ),
            regions=tuple(
                RegionSizeOverride.from_dict(r)
                for r in data.get("regions") or ()
            ),
        )

    @property
    def has_modifiers(self) -> bool:
        return len(self.modifiers) > 0

    def region_override(self, region: str) -> Optional[RegionSizeOverride]:
        for override in self.regions:
            if override.region == region:
                return override
        return None

    def to_dict(self) -> dict:
        return {
            "fp": self.fp,
            "rp": self.rp,
            "w": self.w,
            "h": self.h,
            "l": self.l,
        }


# ══════════════════════════════════════════════════════════════
# WEIGHT (tagged variant)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SingleAxleDimension:
    """Resolved legal/permittable weight for one axle unit."""

    legal: Optional[float] = None
    permittable: Optional[float] = None


@dataclass(frozen=True)
class PowerUnitWeightDimension:
    """
    Weight candidate for a power unit.

    axles is a two-digit key: steer axle count * 10 + drive axle count.
    """

    axles: int
    sa_legal: Optional[float] = None
    sa_permittable: Optional[float] = None
    da_legal: Optional[float] = None
    da_permittable: Optional[float] = None
    modifier: Optional[DimensionModifier] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PowerUnitWeightDimension":
        modifier = data.get("modifier")
        return cls(
            axles=data.get("axles"),
            sa_legal=data.get("saLegal"),
            sa_permittable=data.get("saPermittable"),
            da_legal=data.get("daLegal"),
            da_permittable=data.get("daPermittable"),
            modifier=DimensionModifier.from_dict(modifier) if modifier else None,
        )

    def for_axle_unit(self, axle_index: int) -> SingleAxleDimension:
        # Axle unit 0 is the steer unit, every other unit of a
        # power unit is the drive unit.
        if axle_index == 0:
            return SingleAxleDimension(self.sa_legal, self.sa_permittable)
        return SingleAxleDimension(self.da_legal, self.da_permittable)


@dataclass(frozen=True)
class TrailerWeightDimension:
    """Weight candidate for a trailer, jeep or booster axle unit."""

    axles: int
    legal: Optional[float] = None
    permittable: Optional[float] = None
    modifier: Optional[DimensionModifier] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrailerWeightDimension":
        modifier = data.get("modifier")
        return cls(
            axles=data.get("axles"),
            legal=data.get("legal"),
            permittable=data.get("permittable"),
            modifier=DimensionModifier.from_dict(modifier) if modifier else None,
        )

    def for_axle_unit(self, axle_index: int) -> SingleAxleDimension:
        return SingleAxleDimension(self.legal, self.permittable)


WeightDimension = Union[PowerUnitWeightDimension, TrailerWeightDimension]
