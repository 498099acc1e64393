"""Economic validation package for the oligopoly laboratory.

This package checks game configurations before they take effect and
screens round outcomes for implausible results.
"""

from .economic_validation import (
    EconomicValidationError,
    EconomicValidationResult,
    log_economic_warnings,
    parse_configuration,
    validate_configuration,
    validate_cost_structure,
    validate_demand_parameters,
    validate_game_limits,
    validate_round_result,
)

__all__ = [
    "EconomicValidationError",
    "EconomicValidationResult",
    "log_economic_warnings",
    "parse_configuration",
    "validate_configuration",
    "validate_cost_structure",
    "validate_demand_parameters",
    "validate_game_limits",
    "validate_round_result",
]
