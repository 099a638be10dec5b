"""
Permit Policy Engine: Result Models
======================================
ValidationResult: a single typed finding.
ValidationResults: accumulator partitioned by severity.

Result types:
    violation    → application cannot be issued as submitted
    warning      → application may be issued, attention needed
    requirement  → something the applicant must also provide
    information  → note for the reviewer or applicant
    cost         → a computed fee line

Unrecognized types are coerced to violation so that a slightly
malformed rule still produces a visible finding.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


# ══════════════════════════════════════════════════════════════
# RESULT TYPES & CODES
# ══════════════════════════════════════════════════════════════

class ValidationResultType:
    VIOLATION = "violation"
    WARNING = "warning"
    REQUIREMENT = "requirement"
    INFORMATION = "information"
    COST = "cost"

    ALL = frozenset({
        "violation", "warning", "requirement", "information", "cost",
    })

    @classmethod
    def normalize(cls, result_type) -> str:
        if result_type in cls.ALL:
            return result_type
        return cls.VIOLATION


class ValidationResultCode:
    PERMIT_TYPE_UNKNOWN = "permit-type-unknown"
    FIELD_VALIDATION_ERROR = "field-validation-error"
    CONFIGURATION_INVALID = "configuration-invalid"
    GENERAL_RESULT = "general-result"
    COST_VALUE = "cost-value"
    LCV_CARRIER = "lcv-carrier"
    NO_FEE_CLIENT = "no-fee-client"


DEFAULT_MESSAGE = "Policy validation rule triggered without a message"


# ══════════════════════════════════════════════════════════════
# VALIDATION RESULT (single finding)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ValidationResult:
    """
    One finding from a validate() run.

    Fields:
        type:            violation | warning | requirement | information | cost
        code:            machine-readable code (ValidationResultCode or rule-defined)
        message:         human-readable explanation
        field_reference: dotted path of the application field, if any
        cost:            amount, for cost findings only
    """

    type: str
    code: str
    message: str
    field_reference: Optional[str] = None
    cost: Optional[float] = None

    def __post_init__(self):
        if self.type not in ValidationResultType.ALL:
            raise ValueError(
                f"type '{self.type}' not valid. "
                f"Must be one of: {sorted(ValidationResultType.ALL)}"
            )

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

    def to_dict(self) -> dict:
        data = {"type": self.type, "code": self.code, "message": self.message}
        if self.field_reference is not None:
            data["fieldReference"] = self.field_reference
        if self.cost is not None:
            data["cost"] = self.cost
        return data


# ══════════════════════════════════════════════════════════════
# VALIDATION RESULTS (accumulator)
# ══════════════════════════════════════════════════════════════

@dataclass
class ValidationResults:
    """
    Findings of one validate() call, partitioned by type.

    original_cost holds the cost lines as calculated before a no-fee
    authorization replaced them; it is empty otherwise.
    """

    violations: List[ValidationResult] = field(default_factory=list)
    requirements: List[ValidationResult] = field(default_factory=list)
    warnings: List[ValidationResult] = field(default_factory=list)
    information: List[ValidationResult] = field(default_factory=list)
    cost: List[ValidationResult] = field(default_factory=list)
    original_cost: List[ValidationResult] = field(default_factory=list)

    def _bucket(self, result_type: str) -> List[ValidationResult]:
        return {
            ValidationResultType.VIOLATION: self.violations,
            ValidationResultType.REQUIREMENT: self.requirements,
            ValidationResultType.WARNING: self.warnings,
            ValidationResultType.INFORMATION: self.information,
            ValidationResultType.COST: self.cost,
        }[result_type]

    def add(self, result: ValidationResult) -> None:
        self._bucket(result.type).append(result)

    @property
    def has_violations(self) -> bool:
        return len(self.violations) > 0

    @property
    def total_cost(self) -> float:
        return sum(c.cost or 0 for c in self.cost)

    def waive_cost(self) -> float:
        """
        Replace all cost lines with a single zero-cost line.

        Returns the total that would otherwise have been charged.
        """
        original_total = self.total_cost
        self.original_cost = list(self.cost)
        self.cost.clear()
        self.cost.append(
            ValidationResult(
                type=ValidationResultType.COST,
                code=ValidationResultCode.COST_VALUE,
                message="Calculated permit cost",
                cost=0,
            )
        )
        return original_total

    def to_dict(self) -> dict:
        """Result document: {violations, requirements, warnings, information, cost}."""
        return {
            "violations": [r.to_dict() for r in self.violations],
            "requirements": [r.to_dict() for r in self.requirements],
            "warnings": [r.to_dict() for r in self.warnings],
            "information": [r.to_dict() for r in self.information],
            "cost": [r.to_dict() for r in self.cost],
        }
