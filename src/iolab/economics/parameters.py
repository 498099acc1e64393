"""Realization of randomized structural parameters.

Draws use the process-wide ``random`` module, so ``random.seed`` makes a game
reproducible. Each call to ``draw_all_parameters`` realizes a complete,
immutable parameter set in one step.
"""

import math
import random
from typing import List, Optional, Tuple

from ..models.demand import (
    DemandCurve,
    ExponentialDemand,
    IsoelasticDemand,
    LinearDemand,
    LogitDemand,
)
from ..models.game_config import (
    ConstantElasticityDemandSpec,
    ExponentialDemandSpec,
    FixedSpec,
    GameConfiguration,
    LinearDemandSpec,
    LogitDemandSpec,
    LognormalSpec,
    NormalSpec,
    ParameterSpec,
    UniformSpec,
    central_value,
    is_random,
)
from ..models.results import FirmCost, RealizedParameters

# Smallest value a realized demand coefficient may take
MIN_DEMAND_COEFFICIENT = 1e-6


def _standard_normal() -> float:
    """Box-Muller transform on two non-zero uniforms."""
    u1 = 0.0
    u2 = 0.0
    while u1 == 0.0:
        u1 = random.random()
    while u2 == 0.0:
        u2 = random.random()
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def _lognormal(mean: float, std_dev: float) -> float:
    # Convert the target mean/std of X into the parameters of ln(X)
    sigma2 = math.log(1 + (std_dev * std_dev) / (mean * mean))
    mu = math.log(mean) - sigma2 / 2
    return math.exp(mu + math.sqrt(sigma2) * _standard_normal())


def draw_parameter(spec: ParameterSpec) -> float:
    """Draw one value from a parameter specification.

    Args:
        spec: Fixed, uniform, normal or lognormal specification

    Returns:
        The fixed value, or a random draw from the distribution
    """
    if isinstance(spec, FixedSpec):
        return spec.value
    if isinstance(spec, UniformSpec):
        return spec.min + random.random() * (spec.max - spec.min)
    if isinstance(spec, NormalSpec):
        return spec.mean + spec.std_dev * _standard_normal()
    if isinstance(spec, LognormalSpec):
        return _lognormal(spec.mean, spec.std_dev)
    raise TypeError(f"Unknown parameter specification: {spec!r}")


def _positive_draw(draw):
    def positive(spec: ParameterSpec) -> float:
        return max(MIN_DEMAND_COEFFICIENT, draw(spec))

    return positive


def _realize_demand(config: GameConfiguration, draw) -> DemandCurve:
    spec = config.demand
    draw = _positive_draw(draw)
    if isinstance(spec, LinearDemandSpec):
        return LinearDemand(intercept=draw(spec.intercept), slope=draw(spec.slope))
    if isinstance(spec, ConstantElasticityDemandSpec):
        return IsoelasticDemand(scale=draw(spec.scale), elasticity=draw(spec.elasticity))
    if isinstance(spec, LogitDemandSpec):
        return LogitDemand(
            intercept=draw(spec.intercept),
            price_coefficient=draw(spec.price_coefficient),
        )
    if isinstance(spec, ExponentialDemandSpec):
        return ExponentialDemand(scale=draw(spec.scale), decay_rate=draw(spec.decay_rate))
    raise TypeError(f"Unknown demand specification: {spec!r}")


def _realize(config: GameConfiguration, draw) -> RealizedParameters:
    demand = _realize_demand(config, draw)

    if config.gamma_spec is not None:
        gamma = max(0.0, min(1.0, draw(config.gamma_spec)))
    else:
        gamma = config.gamma

    firm_costs: List[FirmCost] = []
    for firm_id in config.firm_ids:
        firm = config.firm(firm_id)
        linear_cost = (
            max(0.0, draw(firm.linear_cost_spec))
            if firm.linear_cost_spec is not None
            else firm.linear_cost
        )
        quadratic_cost = (
            max(0.0, draw(firm.quadratic_cost_spec))
            if firm.quadratic_cost_spec is not None
            else firm.quadratic_cost
        )
        firm_costs.append(FirmCost(firm_id, linear_cost, quadratic_cost))

    firm_demands: Optional[Tuple[LinearDemand, ...]] = None
    if isinstance(demand, LinearDemand) and config.has_firm_demand_overrides:
        draw_curve = _positive_draw(draw)
        curves = []
        for firm_id in config.firm_ids:
            firm = config.firm(firm_id)
            intercept = (
                draw_curve(firm.demand_intercept)
                if firm.demand_intercept is not None
                else demand.intercept
            )
            slope = (
                draw_curve(firm.demand_slope)
                if firm.demand_slope is not None
                else demand.slope
            )
            curves.append(LinearDemand(intercept=intercept, slope=slope))
        firm_demands = tuple(curves)

    return RealizedParameters(
        demand=demand,
        gamma=gamma,
        firm_costs=tuple(firm_costs),
        firm_demands=firm_demands,
    )


def draw_all_parameters(config: GameConfiguration) -> RealizedParameters:
    """Realize every structural parameter of a configuration in one draw.

    Demand coefficients follow the configured functional form and are kept
    at or above ``MIN_DEMAND_COEFFICIENT``. γ is clamped to [0, 1] and drawn
    costs are clamped to be non-negative.
    """
    return _realize(config, draw_parameter)


def realized_from_config(config: GameConfiguration) -> RealizedParameters:
    """Deterministic parameter snapshot using each specification's central value.

    For a configuration without random parameters this equals every result of
    ``draw_all_parameters``.
    """
    return _realize(config, central_value)


def has_random_parameters(config: GameConfiguration) -> bool:
    """Whether any demand, γ, cost or per-firm demand specification is random."""
    specs: List[Optional[ParameterSpec]] = list(config.demand.parameter_specs())
    specs.append(config.gamma_spec)
    for firm in config.firms:
        specs.extend(
            [
                firm.linear_cost_spec,
                firm.quadratic_cost_spec,
                firm.demand_intercept,
                firm.demand_slope,
            ]
        )
    return any(is_random(spec) for spec in specs)
