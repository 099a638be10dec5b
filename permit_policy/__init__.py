"""
Permit Policy Engine
=======================
Evaluates commercial-vehicle permit applications against a
declarative policy configuration document.

    from permit_policy import Policy

    policy = Policy(policy_document)
    results = policy.validate(permit_application)
"""

from permit_policy.clock import FixedClock, SystemClock
from permit_policy.exceptions import (
    AxleConfigurationError,
    CommodityNotRequiredError,
    ConfigurationQueryError,
    PermitPolicyError,
    PolicyConfigurationError,
    PolicyVersionError,
    UnknownCommodityError,
    UnknownPermitTypeError,
)
from permit_policy.policy import Policy
from permit_policy.results import (
    ValidationResult,
    ValidationResultCode,
    ValidationResults,
    ValidationResultType,
)
from permit_policy.version import ENGINE_VERSION

__version__ = ENGINE_VERSION

__all__ = [
    "Policy",
    "ENGINE_VERSION",
    "FixedClock",
    "SystemClock",
    "ValidationResult",
    "ValidationResultCode",
    "ValidationResults",
    "ValidationResultType",
    "PermitPolicyError",
    "PolicyVersionError",
    "PolicyConfigurationError",
    "ConfigurationQueryError",
    "UnknownPermitTypeError",
    "UnknownCommodityError",
    "CommodityNotRequiredError",
    "AxleConfigurationError",
]
