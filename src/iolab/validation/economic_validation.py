"""Economic validation for game configurations and round outcomes.

Configurations are checked before a game changes state; a failed check
raises EconomicValidationError and leaves the game untouched. Round outcomes
are screened for implausible results, which are reported as warnings only.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..config import Settings, get_settings
from ..models.demand import DemandType
from ..models.game_config import GameConfiguration, central_value
from ..models.results import RoundResult


@dataclass
class EconomicValidationResult:
    """Result of economic validation with warnings and errors."""

    is_valid: bool
    warnings: List[str]
    errors: List[str]
    metrics: Dict[str, float]


class EconomicValidationError(Exception):
    """Exception raised when economic validation fails."""

    pass


def parse_configuration(
    data: Union[GameConfiguration, Mapping[str, Any]],
) -> GameConfiguration:
    """Build a GameConfiguration, reporting schema problems as validation errors.

    Raises:
        EconomicValidationError: If the data does not describe a valid game
    """
    if isinstance(data, GameConfiguration):
        return data
    try:
        return GameConfiguration.model_validate(dict(data))
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise EconomicValidationError(details) from e


def validate_demand_parameters(config: GameConfiguration) -> None:
    """Validate demand coefficients for economic realism.

    Every coefficient of the configured demand form (or the central value of
    its distribution) must be strictly positive, and per-firm demand curves
    are only supported on linear markets.

    Raises:
        EconomicValidationError: If parameters are economically invalid
    """
    errors = []

    for name in config.demand.coefficient_names():
        value = central_value(getattr(config.demand, name))
        if value <= 0:
            errors.append(
                f"Demand {name} must be positive for {config.demand.type} demand, got {value}"
            )

    if config.has_firm_demand_overrides:
        if config.demand_type != DemandType.LINEAR:
            errors.append("Per-firm demand curves require linear demand")
        for firm_id in config.firm_ids:
            firm = config.firm(firm_id)
            for label, spec in (
                ("intercept", firm.demand_intercept),
                ("slope", firm.demand_slope),
            ):
                if spec is not None and central_value(spec) <= 0:
                    errors.append(
                        f"Firm {firm_id} demand {label} must be positive, got {central_value(spec)}"
                    )

    if errors:
        raise EconomicValidationError("; ".join(errors))


def validate_cost_structure(config: GameConfiguration) -> None:
    """Validate firm cost structures.

    Raises:
        EconomicValidationError: If cost structure is invalid
    """
    errors = []

    for firm_id in config.firm_ids:
        firm = config.firm(firm_id)
        if firm.quadratic_cost_spec is not None and central_value(firm.quadratic_cost_spec) < 0:
            errors.append(f"Firm {firm_id} quadratic cost must be non-negative")
        if firm.linear_cost_spec is not None and central_value(firm.linear_cost_spec) < 0:
            errors.append(f"Firm {firm_id} linear cost must be non-negative")

    if errors:
        raise EconomicValidationError("; ".join(errors))


def validate_game_limits(
    config: GameConfiguration, settings: Optional[Settings] = None
) -> None:
    """Check the game size against the process limits.

    Raises:
        EconomicValidationError: If the game exceeds a configured limit
    """
    settings = settings or get_settings()
    errors = []

    if config.num_firms > settings.max_firms:
        errors.append(f"At most {settings.max_firms} firms are supported, got {config.num_firms}")
    if config.total_rounds > settings.max_rounds:
        errors.append(f"At most {settings.max_rounds} rounds are supported, got {config.total_rounds}")
    if config.num_replications > settings.max_replications:
        errors.append(
            f"At most {settings.max_replications} replications are supported, "
            f"got {config.num_replications}"
        )
    if config.gamma_spec is not None and not 0 <= central_value(config.gamma_spec) <= 1:
        errors.append("Differentiation gamma must be centred within [0, 1]")

    if errors:
        raise EconomicValidationError("; ".join(errors))


def validate_configuration(
    config: GameConfiguration, settings: Optional[Settings] = None
) -> None:
    """Run every configuration check.

    Raises:
        EconomicValidationError: On the first failing group of checks
    """
    validate_demand_parameters(config)
    validate_cost_structure(config)
    validate_game_limits(config, settings)


def validate_round_result(result: RoundResult) -> EconomicValidationResult:
    """Screen a round outcome for economically implausible results.

    Returns:
        EconomicValidationResult with warnings and market metrics
    """
    warnings_list: List[str] = []
    errors_list: List[str] = []

    quantities = result.quantities
    if any(q < 0 for q in quantities):
        errors_list.append("Negative quantities in round result")

    total_quantity = sum(quantities)
    shares = [q / total_quantity if total_quantity > 0 else 0.0 for q in quantities]
    hhi = sum(s**2 for s in shares)

    negative_profit_firms = [r.firm_id for r in result.firm_results if r.profit < 0]
    if negative_profit_firms:
        warnings_list.append(f"Firms {negative_profit_firms} have negative profits")

    if total_quantity == 0:
        warnings_list.append("No output was produced")
    elif hhi > 0.8 and len(quantities) > 1:
        warnings_list.append(f"Market highly concentrated: HHI = {hhi:.3f}")

    failed = [r.firm_id for r in result.firm_results if r.decision_failed]
    if failed:
        warnings_list.append(f"Firms {failed} played the default decision")

    metrics = {
        "total_quantity": total_quantity,
        "market_price": result.market_price,
        "hhi": hhi,
        "total_profit": sum(result.profits),
    }
    return EconomicValidationResult(
        is_valid=not errors_list,
        warnings=warnings_list,
        errors=errors_list,
        metrics=metrics,
    )


def log_economic_warnings(result: EconomicValidationResult, logger: Any) -> None:
    """Log economic validation warnings and errors.

    Args:
        result: EconomicValidationResult to log
        logger: Logger instance
    """
    for warning in result.warnings:
        logger.warning(f"Economic validation warning: {warning}")

    for error in result.errors:
        logger.error(f"Economic validation error: {error}")

    if not result.is_valid:
        logger.error("Round failed economic validation")
    elif not result.warnings:
        logger.debug("Round passed economic validation")
