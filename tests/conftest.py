"""
Permit Policy Engine: Shared Test Fixtures
=============================================
A small but complete policy configuration document, built in code
so every test can see exactly what it is validating against.

Permit types:
    TROS   term oversize, fixed allow-list, cost per month
    TROW   term overweight, fixed allow-list, policy check rule
    STOS   single trip oversize, commodity driven (size)
    STOW   single trip overweight, commodity driven (weight)
    STWS   single trip oversize/overweight (size AND weight)
    NRSCV  commodity driven, no dimensions (allow-lists)

Commodities:
    LAMBEAM  size and weight tables, jeep/booster combinations
    BRGBEAM  overweight only
"""

from __future__ import annotations

import copy
from datetime import date

import pytest

from permit_policy import FixedClock, Policy


TODAY = date(2025, 1, 15)


def _trailer(type_id, **flags):
    entry = {
        "type": type_id,
        "jeep": False,
        "booster": False,
        "selfIssue": True,
        "sizePermittable": False,
        "weightPermittable": False,
    }
    entry.update(flags)
    return entry


NOT_IN_PAST = {
    "conditions": {
        "all": [
            {
                "fact": "permitData",
                "path": "$.startDate",
                "operator": "dateLessThan",
                "value": {"fact": "validationDate"},
            }
        ]
    },
    "event": {
        "type": "violation",
        "params": {
            "message": "Permit start date cannot be in the past",
            "code": "field-validation-error",
            "fieldReference": "permitData.startDate",
        },
    },
}

VEHICLE_ALLOWED = {
    "conditions": {
        "not": {
            "fact": "permitData",
            "path": "$.vehicleDetails.vehicleSubType",
            "operator": "in",
            "value": {"fact": "allowedVehicles"},
        }
    },
    "event": {
        "type": "violation",
        "params": {
            "message": "Vehicle type not permittable for this permit type",
            "code": "field-validation-error",
            "fieldReference": "permitData.vehicleDetails.vehicleSubType",
        },
    },
}

CONFIGURATION_VALID = {
    "conditions": {
        "all": [{"fact": "configurationIsValid", "operator": "equal", "value": False}]
    },
    "event": {
        "type": "violation",
        "params": {
            "message": "Vehicle configuration is not permittable",
            "code": "configuration-invalid",
        },
    },
}


def build_policy_document() -> dict:
    return {
        "minPEVersion": "1.0.0",
        "geographicRegions": [
            {"id": "LMN", "name": "Lower Mainland"},
            {"id": "KTN", "name": "Kootenay"},
            {"id": "PCE", "name": "Peace"},
        ],
        "permitTypes": [
            {
                "id": "TROS",
                "name": "Term Oversize",
                "routingRequired": False,
                "weightDimensionRequired": False,
                "sizeDimensionRequired": False,
                "commodityRequired": False,
                "allowedVehicles": ["TRKTRAC", "CRANEAT", "LCVRMDB", "SEMITRL"],
                "rules": [
                    NOT_IN_PAST,
                    {
                        "conditions": {
                            "fact": "permitData",
                            "path": "$.permitDuration",
                            "operator": "notIn",
                            "value": [30, 60, 90, 120, 150, 180, 210, 240,
                                      270, 300, 330, 365],
                        },
                        "event": {
                            "type": "violation",
                            "params": {
                                "message": "Duration must be in 30 day increments or a full year",
                                "code": "field-validation-error",
                                "fieldReference": "permitData.permitDuration",
                            },
                        },
                    },
                    VEHICLE_ALLOWED,
                ],
                "costRules": [{"fact": "costPerMonth", "params": {"cost": 30}}],
                "conditions": [
                    {"condition": "CVSE-1000"},
                    {"condition": "CVSE-1070", "mandatory": True},
                    {"condition": "NOT-DEFINED"},
                ],
            },
            {
                "id": "TROW",
                "name": "Term Overweight",
                "weightDimensionRequired": True,
                "commodityRequired": False,
                "allowedVehicles": ["TRKTRAC", "SEMITRL"],
                "rules": [
                    {
                        "conditions": {
                            "fact": "policyCheckPassed",
                            "params": {"policyId": "number-of-wheels"},
                            "operator": "equal",
                            "value": False,
                        },
                        "event": {
                            "type": "violation",
                            "params": {
                                "message": "Number of wheels is not permittable",
                                "code": "number-of-wheels",
                            },
                        },
                    }
                ],
                "costRules": [
                    {"fact": "fixedCost", "params": {"cost": 100}},
                    {
                        "fact": "conditionalFixedCost",
                        "params": {
                            "fact": "$.vehicleDetails.countryCode",
                            "value": "US",
                            "cost": 15,
                        },
                    },
                ],
            },
            {
                "id": "STOS",
                "name": "Single Trip Oversize",
                "sizeDimensionRequired": True,
                "commodityRequired": True,
                "rules": [CONFIGURATION_VALID],
                "costRules": [
                    {
                        "fact": "costPerKilometre",
                        "params": {"cost": 0.1, "minValue": 15, "maxValue": 300},
                    }
                ],
            },
            {
                "id": "STOW",
                "name": "Single Trip Overweight",
                "weightDimensionRequired": True,
                "commodityRequired": True,
                "rules": [CONFIGURATION_VALID],
                "costRules": [
                    {
                        "fact": "rangeMatrixCostLookup",
                        "params": {
                            "rangeLookupKey": "$.vehicleDetails.usage",
                            "matrixMap": [
                                {"key": "commercial", "value": "annualFeeCommercial"},
                                {"key": "farm", "value": "annualFeeFarm"},
                            ],
                            "matrixFactValue": "$.vehicleDetails.licensedGVW",
                            "divisor": 4,
                        },
                    }
                ],
            },
            {
                "id": "STWS",
                "name": "Single Trip Oversize Overweight",
                "sizeDimensionRequired": True,
                "weightDimensionRequired": True,
                "commodityRequired": True,
            },
            {
                "id": "NRSCV",
                "name": "Non-Resident Single Trip",
                "commodityRequired": True,
                "allowedCommodities": ["LAMBEAM"],
                "allowedVehicles": ["TRKTRAC", "SEMITRL"],
            },
        ],
        "commonRules": [
            {
                "conditions": {
                    "not": {
                        "fact": "permitData",
                        "path": "$.companyName",
                        "operator": "stringMinimumLength",
                        "value": 1,
                    }
                },
                "event": {
                    "type": "violation",
                    "params": {
                        "message": "Company name is required",
                        "code": "field-validation-error",
                        "fieldReference": "permitData.companyName",
                    },
                },
            },
            {
                "conditions": {
                    "not": {
                        "fact": "permitData",
                        "path": "$.vehicleDetails.vin",
                        "operator": "regex",
                        "value": "^[a-zA-Z0-9]{6}$",
                    }
                },
                "event": {
                    "type": "violation",
                    "params": {
                        "message": "Vehicle Identification Number (vin) must be 6 alphanumeric characters",
                        "code": "field-validation-error",
                        "fieldReference": "permitData.vehicleDetails.vin",
                    },
                },
            },
        ],
        "globalWeightDefaults": {
            "powerUnits": [
                {"axles": 11, "saLegal": 6000, "saPermittable": 9100,
                 "daLegal": 9100, "daPermittable": 11000},
                {"axles": 12, "saLegal": 6000, "saPermittable": 9100,
                 "daLegal": 17000, "daPermittable": 23000},
                {"axles": 13, "saLegal": 6000, "saPermittable": 9100,
                 "daLegal": 24000, "daPermittable": 28000},
            ],
            "trailers": [
                {"axles": 1, "legal": 9100, "permittable": 11000},
                {"axles": 2, "legal": 17000, "permittable": 23000},
                {"axles": 3, "legal": 24000, "permittable": 28000},
            ],
        },
        "vehicleCategories": {
            "powerUnitCategories": [
                {
                    "id": "grader",
                    "name": "Graders",
                    "defaultWeightDimensions": [
                        {"axles": 12, "saLegal": 9512, "saPermittable": 9512,
                         "daLegal": 17512, "daPermittable": 23512},
                    ],
                },
            ],
            "trailerCategories": [
                {
                    "id": "wheeler",
                    "name": "Wheelers",
                    "defaultWeightDimensions": [
                        {"axles": 2, "legal": 17402, "permittable": 31402},
                    ],
                },
            ],
        },
        "vehicleTypes": {
            "powerUnitTypes": [
                {
                    "id": "TRKTRAC",
                    "name": "Truck Tractors",
                    "category": "powerunit",
                    "displayCodePrefix": "TT",
                    "displayCodeSteerAxle": "S",
                    "displayCodeDriveAxle": "D",
                    "conditions": [{"condition": "CVSE-1010"}],
                },
                {
                    "id": "CRANEAT",
                    "name": "Cranes, All Terrain",
                    "category": "powerunit",
                    "additionalAxleSubType": "ATCAXLE",
                    "displayCodePrefix": "MC",
                    "displayCodeSteerAxle": "S",
                    "displayCodeDriveAxle": "A",
                },
                {
                    "id": "GRADERS",
                    "name": "Graders",
                    "category": "grader",
                    "defaultWeightDimensions": [
                        {"axles": 11, "saLegal": 9611, "saPermittable": 9611,
                         "daLegal": 9611, "daPermittable": 11611},
                    ],
                },
                {
                    "id": "LCVRMDB",
                    "name": "Rocky Mountain Double",
                    "category": "powerunit",
                    "isLcv": True,
                },
            ],
            "trailerTypes": [
                {
                    "id": "SEMITRL",
                    "name": "Semi-Trailers",
                    "category": "trailer",
                    "displayCode": "T",
                    "defaultWeightDimensions": [
                        {"axles": 3, "legal": 24000, "permittable": 28000},
                        {
                            "axles": 3, "legal": 24000, "permittable": 30000,
                            "modifier": {
                                "position": "after",
                                "type": "BOOSTER",
                                "axles": 2,
                                "minInterAxleSpacing": 300,
                            },
                        },
                    ],
                },
                {"id": "POLETRL", "name": "Pole Trailers", "category": "trailer",
                 "displayCode": "P"},
                {"id": "HIBOEXP", "name": "Semi-Trailers - Hiboy/Expandos",
                 "category": "trailer", "displayCode": "T"},
                {"id": "PLATFRM", "name": "Platform Trailers", "category": "trailer",
                 "displayCode": "T", "additionalAxleSubType": "PFMAXLE"},
                {"id": "FEWHELR", "name": "Fixed Equipment - Wheeler",
                 "category": "wheeler", "displayCode": "W"},
                {"id": "JEEPSRG", "name": "Jeep", "category": "accessory",
                 "displayCode": "J", "ignoreForSizeDimensions": True},
                {
                    "id": "BOOSTER",
                    "name": "Booster",
                    "category": "accessory",
                    "displayCode": "B",
                    "ignoreForSizeDimensions": True,
                    "defaultWeightDimensions": [
                        {"axles": 1, "legal": 9100, "permittable": 11000},
                        {
                            "axles": 1, "legal": 9198, "permittable": 9199,
                            "modifier": {
                                "position": "before",
                                "type": "SEMITRL",
                                "maxInterAxleSpacing": 410,
                            },
                        },
                    ],
                },
                {"id": "DOLLIES", "name": "Dollies", "category": "trailer",
                 "displayCode": "B"},
                {"id": "PFMAXLE", "name": "Platform Additional Axle",
                 "category": "pseudo", "ignoreForSizeDimensions": True,
                 "ignoreForAxleCalculation": True},
                {"id": "ATCAXLE", "name": "Crane Additional Axle",
                 "category": "pseudo", "ignoreForSizeDimensions": True,
                 "ignoreForAxleCalculation": True},
                {"id": "XXXXXXX", "name": "None", "category": "pseudo",
                 "ignoreForAxleCalculation": True},
                {"id": "LCVTRPL", "name": "Long Combination Triple",
                 "category": "trailer", "isLcv": True, "displayCode": "T"},
            ],
        },
        "commodities": [
            {
                "id": "LAMBEAM",
                "name": "Laminated Beams",
                "powerUnits": [
                    {
                        "type": "TRKTRAC",
                        "trailers": [
                            _trailer("POLETRL", jeep=True, booster=True,
                                     sizePermittable=True),
                            _trailer("HIBOEXP", jeep=True, booster=True,
                                     sizePermittable=True, weightPermittable=True),
                            _trailer("PLATFRM", weightPermittable=True),
                            _trailer("LCVTRPL", sizePermittable=True, selfIssue=False),
                        ],
                    },
                    {
                        "type": "CRANEAT",
                        "trailers": [
                            _trailer("XXXXXXX", sizePermittable=True,
                                     weightPermittable=True),
                        ],
                    },
                ],
                "size": {
                    "powerUnits": [
                        {
                            "type": "TRKTRAC",
                            "trailers": [
                                {
                                    "type": "POLETRL",
                                    "sizeDimensions": [
                                        {
                                            "fp": 3, "rp": 6.5, "w": 2.6,
                                            "h": 4.15, "l": 31,
                                            "regions": [
                                                {"region": "PCE", "w": 2.55, "h": 4.0},
                                                {"region": "KTN", "w": 2.5, "l": 27.5},
                                            ],
                                        },
                                        {
                                            "fp": 3, "rp": 6.9, "w": 3.2,
                                            "h": 4.4, "l": 36,
                                            "modifiers": [
                                                {"position": "before", "type": "JEEPSRG"},
                                            ],
                                        },
                                        {
                                            "fp": 3, "rp": 6.9, "w": 3.0,
                                            "h": 4.4, "l": 40,
                                            "modifiers": [
                                                {"position": "after", "type": "BOOSTER"},
                                                {"position": "first", "type": "TRKTRAC"},
                                            ],
                                        },
                                    ],
                                },
                                {"type": "HIBOEXP"},
                            ],
                        },
                    ]
                },
            },
            {
                "id": "BRGBEAM",
                "name": "Bridge Beams",
                "powerUnits": [
                    {
                        "type": "TRKTRAC",
                        "trailers": [_trailer("PLATFRM", weightPermittable=True)],
                    },
                ],
            },
        ],
        "rangeMatrices": [
            {
                "id": "annualFeeCommercial",
                "name": "Annual Fee Commercial",
                "matrix": [
                    {"min": 0, "max": 6000, "value": 42},
                    {"min": 6001, "max": 10000, "value": 90},
                    {"min": 10001, "value": 200},
                ],
            },
            {
                "id": "annualFeeFarm",
                "name": "Annual Fee Farm",
                "matrix": [
                    {"max": 10000, "value": 10},
                    {"min": 10001, "value": 20},
                ],
            },
        ],
        "bridgeCalculationConstants": {"multiplier": 30, "minWeight": 18000},
        "conditions": [
            {"condition": "CVSE-1000", "description": "General Permit Conditions",
             "conditionLink": "https://example.org/cvse-1000.pdf"},
            {"condition": "CVSE-1010", "description": "Truck Tractor Conditions",
             "conditionLink": "https://example.org/cvse-1010.pdf"},
            {"condition": "CVSE-1070", "description": "Overload Conditions",
             "conditionLink": "https://example.org/cvse-1070.pdf"},
        ],
        "standardTireSizes": [
            {"name": "11R22.5", "size": 279},
            {"name": "445/65R22.5", "size": 445},
        ],
        "vehicleDisplayCodeDefaults": {
            "prefixStandard": "",
            "prefixUniversal": "=",
            "paddingStandard": "-",
            "paddingUniversal": "=",
            "spacingUniversalDefault": "MU",
            "spacingUniversalSmall": "SU",
            "spacingUniversalLarge": "LU",
            "spacingUniversalSmallMax": 2,
            "spacingUniversalLargeMin": 5,
            "extraAxleUniversal": "XU",
            "endAxleUniversal": "EU",
            "maxAxlesStandard": 4,
            "thresholdAxlesUniversal": 4,
            "overAxlesCodeUniversal": "+",
            "universalAxleCode": "U",
            "multiDigitPrefix": ".",
        },
    }


def make_document(**overrides) -> dict:
    """Deep copy of the test document with top-level keys replaced."""
    document = copy.deepcopy(build_policy_document())
    document.update(overrides)
    return document


def axle(number_of_axles, weight=None, spread=None, spacing=None, tires=None, tire_size=None):
    return {
        "numberOfAxles": number_of_axles,
        "axleUnitWeight": weight,
        "axleSpread": spread,
        "interaxleSpacing": spacing,
        "numberOfTires": tires,
        "tireSize": tire_size,
    }


# ══════════════════════════════════════════════════════════════
# FIXTURES
# ══════════════════════════════════════════════════════════════

@pytest.fixture
def policy_document():
    return build_policy_document()


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def policy(policy_document, clock):
    return Policy(policy_document, clock=clock)


@pytest.fixture
def lcv_policy(policy_document, clock):
    return Policy(
        policy_document,
        authorizations={"companyId": 74, "isLcvAllowed": True},
        clock=clock,
    )
