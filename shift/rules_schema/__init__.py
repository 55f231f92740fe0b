"""Rule schema - loading and validation of declared rules."""

from .validation import (
    RuleValidationError,
    ValidationResult,
    validate_rule,
    validate_rules,
)
from .loader import (
    effect_from_dict,
    rule_from_dict,
    rules_from_list,
    load_rules_file,
)

__all__ = [
    "RuleValidationError",
    "ValidationResult",
    "validate_rule",
    "validate_rules",
    "effect_from_dict",
    "rule_from_dict",
    "rules_from_list",
    "load_rules_file",
]
