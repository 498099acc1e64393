"""Analytical equilibrium benchmarks for oligopoly markets.

This module computes the theoretical outcomes that played rounds are compared
against: the two-firm Cournot-Nash equilibrium, the cooperative (multiplant
monopoly) outcome, N-firm Cournot and Bertrand equilibria under product
differentiation, and the limit-pricing classification of a duopoly.

All functions are pure. They take a GameConfiguration and optionally the
RealizedParameters to evaluate; without realized parameters the configuration's
deterministic snapshot is used. Closed forms exist only for linear demand, so
other demand forms yield results flagged as not calculable.
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..models.demand import DemandType, LinearDemand, differentiated_prices
from ..models.equilibria import (
    Benchmarks,
    CooperativeEquilibrium,
    FirmEquilibrium,
    LimitPricingAnalysis,
    NashEquilibrium,
    NPolyEquilibrium,
)
from ..models.game_config import CompetitionMode, GameConfiguration
from ..models.results import RealizedParameters
from .linear_system import SINGULARITY_TOLERANCE, invert_matrix, solve_linear_system
from .parameters import realized_from_config

HOMOGENEOUS_GAMMA = 1 - 1e-4

_DEMAND_LABELS = {
    DemandType.CONSTANT_ELASTICITY: "CES",
    DemandType.LOGIT: "logit",
    DemandType.EXPONENTIAL: "exponential",
}


class InvalidParametersError(ValueError):
    """Raised when market parameters admit no well-defined equilibrium."""

    pass


def _realized(
    config: GameConfiguration, realized: Optional[RealizedParameters]
) -> RealizedParameters:
    return realized if realized is not None else realized_from_config(config)


def _linear_demand(realized: RealizedParameters) -> LinearDemand:
    if not isinstance(realized.demand, LinearDemand):
        raise InvalidParametersError(
            f"Closed-form equilibrium requires linear demand, got {realized.demand.type.value}"
        )
    return realized.demand


def _firm_demands(realized: RealizedParameters) -> List[LinearDemand]:
    shared = _linear_demand(realized)
    if realized.firm_demands is not None:
        return list(realized.firm_demands)
    return [shared] * realized.num_firms


def two_firm_nash(
    config: GameConfiguration, realized: Optional[RealizedParameters] = None
) -> NashEquilibrium:
    """Cournot-Nash equilibrium of a homogeneous linear duopoly.

    With α_i = a - c_i and β_i = 2(b + d_i), the first-order conditions give
    q1* = (α1β2 - bα2)/det and q2* = (α2β1 - bα1)/det, det = β1β2 - b².

    Args:
        config: Game configuration (firms 1 and 2 are used)
        realized: Parameters to evaluate, defaults to the configuration's

    Returns:
        Equilibrium quantities, price and profits

    Raises:
        InvalidParametersError: If demand is not linear or det <= 0
    """
    params = _realized(config, realized)
    demand = _linear_demand(params)
    a, b = demand.intercept, demand.slope
    cost1, cost2 = params.cost(1), params.cost(2)

    alpha1 = a - cost1.linear_cost
    alpha2 = a - cost2.linear_cost
    beta1 = 2 * (b + cost1.quadratic_cost)
    beta2 = 2 * (b + cost2.quadratic_cost)

    det = beta1 * beta2 - b * b
    if det <= 0:
        raise InvalidParametersError("Invalid parameters: determinant is non-positive")

    q1 = max(0.0, (alpha1 * beta2 - b * alpha2) / det)
    q2 = max(0.0, (alpha2 * beta1 - b * alpha1) / det)

    total = q1 + q2
    price = demand.price(total)
    return NashEquilibrium(
        firm1_quantity=q1,
        firm2_quantity=q2,
        total_quantity=total,
        market_price=price,
        firm1_profit=price * q1 - cost1.total(q1),
        firm2_profit=price * q2 - cost2.total(q2),
    )


def cooperative_equilibrium(
    config: GameConfiguration, realized: Optional[RealizedParameters] = None
) -> CooperativeEquilibrium:
    """Joint-profit maximizing outcome of a homogeneous linear duopoly.

    The cartel sets marginal revenue a - 2bQ equal to each plant's marginal
    cost c_i + 2d_i q_i. Plants with constant marginal cost are handled as
    corner solutions.

    Raises:
        InvalidParametersError: If demand is not linear
    """
    params = _realized(config, realized)
    demand = _linear_demand(params)
    a, b = demand.intercept, demand.slope
    cost1, cost2 = params.cost(1), params.cost(2)
    c1, d1 = cost1.linear_cost, cost1.quadratic_cost
    c2, d2 = cost2.linear_cost, cost2.quadratic_cost

    if d1 > 0 and d2 > 0:
        g1 = 1 / (2 * d1)
        g2 = 1 / (2 * d2)
        total = max(0.0, ((g1 + g2) * a - g1 * c1 - g2 * c2) / (1 + 2 * b * (g1 + g2)))
        q1 = max(0.0, (a - 2 * b * total - c1) / (2 * d1))
        q2 = max(0.0, (a - 2 * b * total - c2) / (2 * d2))
    elif d1 > 0:
        q1, q2 = _one_quadratic_plant(a, b, c1, d1, c2)
    elif d2 > 0:
        q2, q1 = _one_quadratic_plant(a, b, c2, d2, c1)
    elif c1 < c2:
        q1, q2 = (a - c1) / (2 * b), 0.0
    elif c2 < c1:
        q1, q2 = 0.0, (a - c2) / (2 * b)
    else:
        q1 = q2 = (a - c1) / (2 * b) / 2

    total = max(0.0, q1 + q2)
    price = demand.price(total)
    profit1 = price * q1 - cost1.total(q1)
    profit2 = price * q2 - cost2.total(q2)
    return CooperativeEquilibrium(
        firm1_quantity=q1,
        firm2_quantity=q2,
        total_quantity=total,
        market_price=price,
        firm1_profit=profit1,
        firm2_profit=profit2,
        total_profit=profit1 + profit2,
    )


def _one_quadratic_plant(
    a: float, b: float, c_quad: float, d_quad: float, c_const: float
) -> Tuple[float, float]:
    """Cartel quantities when only one plant has quadratic costs.

    Returns:
        (quantity of the quadratic-cost plant, quantity of the constant-cost plant)
    """
    standalone = (a - c_const) / (2 * b)
    marginal_revenue = a - 2 * b * standalone
    if marginal_revenue >= c_quad:
        return 0.0, standalone
    return (a - c_quad) / (2 * (b + d_quad)), 0.0


def n_firm_cournot(
    config: GameConfiguration, realized: Optional[RealizedParameters] = None
) -> NPolyEquilibrium:
    """N-firm Cournot-Nash equilibrium with differentiated linear demand.

    Firm i faces p_i = a_i - b_i(q_i + γΣ_{j≠i} q_j), giving the linear
    system 2(b_i + d_i) q_i + γ b_i Σ_{j≠i} q_j = a_i - c_i.
    """
    params = _realized(config, realized)
    n = params.num_firms
    mode = CompetitionMode.COURNOT

    if params.demand.type != DemandType.LINEAR:
        return NPolyEquilibrium.not_calculable(mode, n, _not_calculable_message(params))

    gamma = params.gamma
    demands = _firm_demands(params)

    matrix = np.zeros((n, n))
    rhs = np.zeros(n)
    for i in range(n):
        cost = params.cost(i + 1)
        b_i = demands[i].slope
        matrix[i, :] = gamma * b_i
        matrix[i, i] = 2 * (b_i + cost.quadratic_cost)
        rhs[i] = demands[i].intercept - cost.linear_cost

    solution = solve_linear_system(matrix, rhs)
    if solution is None:
        return NPolyEquilibrium.not_calculable(
            mode, n, "Could not solve N-firm Cournot equilibrium system"
        )

    quantities = [max(0.0, float(q)) for q in solution]
    prices = differentiated_prices(
        quantities, params.demand, gamma, params.firm_demands
    )
    firms = [
        FirmEquilibrium(
            firm_id=i + 1,
            quantity=quantities[i],
            profit=prices[i] * quantities[i] - params.cost(i + 1).total(quantities[i]),
        )
        for i in range(n)
    ]
    return _n_poly(mode, firms, prices)


def n_firm_bertrand(
    config: GameConfiguration, realized: Optional[RealizedParameters] = None
) -> NPolyEquilibrium:
    """N-firm Bertrand-Nash equilibrium with differentiated linear demand.

    Homogeneous products (γ ≈ 1) price at the lowest marginal cost. With
    differentiation the price first-order conditions form a linear system,
    solved through the inverse of the demand matrix when firms have their own
    demand curves and through the symmetric closed form otherwise. Quadratic
    costs make the system non-linear, so such markets are not calculable.
    """
    params = _realized(config, realized)
    n = params.num_firms
    mode = CompetitionMode.BERTRAND

    if params.demand.type != DemandType.LINEAR:
        return NPolyEquilibrium.not_calculable(mode, n, _not_calculable_message(params))

    if any(cost.quadratic_cost > 0 for cost in params.firm_costs):
        return NPolyEquilibrium.not_calculable(
            mode,
            n,
            "Nash-Bertrand equilibrium is not analytically tractable with quadratic costs (d_i > 0)",
        )

    if params.gamma >= HOMOGENEOUS_GAMMA:
        return _homogeneous_bertrand(params)
    if params.firm_demands is not None:
        return _per_firm_bertrand(params)
    return _symmetric_bertrand(params)


def _homogeneous_bertrand(params: RealizedParameters) -> NPolyEquilibrium:
    demand = _linear_demand(params)
    costs = [cost.linear_cost for cost in params.firm_costs]
    price = min(costs)
    total = (demand.intercept - price) / demand.slope
    num_lowest = sum(1 for c in costs if c == price)

    firms = []
    for i, c in enumerate(costs):
        q = total / num_lowest if c == price else 0.0
        firms.append(
            FirmEquilibrium(
                firm_id=i + 1,
                quantity=q,
                price=price,
                profit=(price - c) * q - params.cost(i + 1).quadratic_cost * q * q,
            )
        )
    return _n_poly(CompetitionMode.BERTRAND, firms, [price] * len(costs))


def _per_firm_bertrand(params: RealizedParameters) -> NPolyEquilibrium:
    n = params.num_firms
    mode = CompetitionMode.BERTRAND
    demands = _firm_demands(params)
    intercepts = np.array([d.intercept for d in demands])

    demand_matrix = np.array(
        [
            [demands[i].slope if i == j else params.gamma * demands[i].slope for j in range(n)]
            for i in range(n)
        ]
    )
    inverse = invert_matrix(demand_matrix)
    if inverse is None:
        return NPolyEquilibrium.not_calculable(
            mode, n, "Could not invert demand matrix for per-firm Bertrand"
        )

    # q_i = Σ_j Minv_ij (a_j - p_j); FOC q_i = Minv_ii (p_i - c_i)
    matrix = inverse.copy()
    rhs = inverse @ intercepts
    for i in range(n):
        matrix[i, i] = 2 * inverse[i, i]
        rhs[i] += inverse[i, i] * params.cost(i + 1).linear_cost

    solution = solve_linear_system(matrix, rhs)
    if solution is None:
        return NPolyEquilibrium.not_calculable(
            mode, n, "Could not solve per-firm Bertrand Nash system"
        )

    prices = [max(0.0, float(p)) for p in solution]
    quantities = inverse @ (intercepts - np.array(prices))
    firms = []
    for i in range(n):
        q = max(0.0, float(quantities[i]))
        firms.append(
            FirmEquilibrium(
                firm_id=i + 1,
                quantity=q,
                price=prices[i],
                profit=prices[i] * q - params.cost(i + 1).total(q),
            )
        )
    return _n_poly(mode, firms, prices)


def _symmetric_bertrand(params: RealizedParameters) -> NPolyEquilibrium:
    n = params.num_firms
    mode = CompetitionMode.BERTRAND
    demand = _linear_demand(params)
    a, gamma = demand.intercept, params.gamma
    kappa = 1 + (n - 2) * gamma

    matrix = np.full((n, n), -gamma)
    np.fill_diagonal(matrix, 2 * kappa)
    rhs = np.array(
        [a * (1 - gamma) + kappa * cost.linear_cost for cost in params.firm_costs]
    )

    solution = solve_linear_system(matrix, rhs)
    if solution is None:
        return NPolyEquilibrium.not_calculable(
            mode, n, "Could not solve N-firm Bertrand equilibrium system"
        )

    prices = [max(0.0, float(p)) for p in solution]
    quantities = symmetric_bertrand_quantities(prices, demand, gamma)
    firms = [
        FirmEquilibrium(
            firm_id=i + 1,
            quantity=quantities[i],
            price=prices[i],
            profit=prices[i] * quantities[i] - params.cost(i + 1).total(quantities[i]),
        )
        for i in range(n)
    ]
    return _n_poly(mode, firms, prices)


def symmetric_bertrand_quantities(
    prices: Sequence[float], demand: LinearDemand, gamma: float
) -> List[float]:
    """Direct demand of a symmetric differentiated linear market.

    q_i = [a(1-γ) - κp_i + γΣ_{j≠i} p_j] / [b(1-γ)(1+(n-1)γ)], κ = 1+(n-2)γ,
    clamped to be non-negative. A vanishing denominator yields zero demand.
    """
    n = len(prices)
    a, b = demand.intercept, demand.slope
    kappa = 1 + (n - 2) * gamma
    denominator = b * (1 - gamma) * (1 + (n - 1) * gamma)
    total_price = sum(prices)

    quantities = []
    for p_i in prices:
        if denominator <= SINGULARITY_TOLERANCE:
            quantities.append(0.0)
            continue
        rival_prices = total_price - p_i
        q_i = (a * (1 - gamma) - kappa * p_i + gamma * rival_prices) / denominator
        quantities.append(max(0.0, q_i))
    return quantities


def _n_poly(
    mode: CompetitionMode, firms: List[FirmEquilibrium], prices: List[float]
) -> NPolyEquilibrium:
    return NPolyEquilibrium(
        competition_mode=mode,
        firms=firms,
        total_quantity=sum(f.quantity for f in firms),
        market_prices=prices,
        avg_market_price=sum(prices) / len(prices),
        total_profit=sum(f.profit for f in firms),
        calculable=True,
    )


def _not_calculable_message(params: RealizedParameters) -> str:
    label = _DEMAND_LABELS.get(params.demand.type, params.demand.type.value)
    return f"Nash equilibrium not analytically calculable for {label} demand"


def n_poly_equilibrium(
    config: GameConfiguration, realized: Optional[RealizedParameters] = None
) -> NPolyEquilibrium:
    """N-firm equilibrium for the configured competition mode."""
    if config.competition_mode == CompetitionMode.BERTRAND:
        return n_firm_bertrand(config, realized)
    return n_firm_cournot(config, realized)


def limit_pricing_analysis(
    config: GameConfiguration, realized: Optional[RealizedParameters] = None
) -> LimitPricingAnalysis:
    """Classify a duopoly by how far one firm's cost advantage reaches.

    With α_i = a - c_i the asymmetry index is (α1 - α2)/α2. Below
    1 - γ/(2 - γ²) both firms compete, up to 1 - γ/2 the stronger firm can
    limit-price, and beyond it the weaker firm exits.
    """
    params = _realized(config, realized)
    if params.num_firms != 2:
        return _inapplicable("Limit-pricing analysis only applicable for duopoly (n=2)")
    if not isinstance(params.demand, LinearDemand):
        return _inapplicable("Limit-pricing analysis requires linear demand")

    a = params.demand.intercept
    gamma = params.gamma
    alpha1 = a - params.cost(1).linear_cost
    alpha2 = a - params.cost(2).linear_cost

    index = (alpha1 - alpha2) / alpha2 if alpha2 != 0 else 0.0
    low = 1 - gamma / (2 - gamma * gamma)
    high = 1 - gamma / 2

    is_monopoly = index >= high
    is_limit_pricing = low <= index < high
    dominant: Optional[int] = None

    if is_monopoly:
        dominant = 1 if alpha1 > alpha2 else 2
        message = (
            f"Monopoly region: Firm {dominant} has sufficient cost advantage "
            "to monopolize the market (weak firm exits)."
        )
    elif is_limit_pricing:
        dominant = 1 if alpha1 > alpha2 else 2
        message = (
            f"Limit-pricing region: Firm {dominant} can engage in limit pricing "
            f"to constrain Firm {2 if dominant == 1 else 1}."
        )
    else:
        message = "Interior duopoly region: Both firms compete actively in the market."

    return LimitPricingAnalysis(
        asymmetry_index=index,
        threshold_low=low,
        threshold_high=high,
        is_limit_pricing_region=is_limit_pricing,
        is_monopoly_region=is_monopoly,
        dominant_firm=dominant,
        message=message,
    )


def _inapplicable(message: str) -> LimitPricingAnalysis:
    return LimitPricingAnalysis(
        asymmetry_index=0.0,
        threshold_low=0.0,
        threshold_high=0.0,
        is_limit_pricing_region=False,
        is_monopoly_region=False,
        message=message,
        applicable=False,
    )


def best_response(
    config: GameConfiguration,
    firm_id: int,
    quantities: Sequence[float],
    realized: Optional[RealizedParameters] = None,
) -> float:
    """Cournot best response of a firm to its rivals' quantities.

    q_i = max(0, (a_i - c_i - γ b_i Σ_{j≠i} q_j) / (2(b_i + d_i)))

    Args:
        config: Game configuration
        firm_id: 1-based id of the responding firm
        quantities: Current quantities of all firms (the firm's own is ignored)
        realized: Parameters to evaluate, defaults to the configuration's

    Raises:
        InvalidParametersError: If demand is not linear
    """
    params = _realized(config, realized)
    demand = _firm_demands(params)[firm_id - 1]
    cost = params.cost(firm_id)
    rivals = sum(quantities) - quantities[firm_id - 1]
    numerator = demand.intercept - cost.linear_cost - params.gamma * demand.slope * rivals
    return max(0.0, numerator / (2 * (demand.slope + cost.quadratic_cost)))


def compute_benchmarks(
    config: GameConfiguration, realized: Optional[RealizedParameters] = None
) -> Benchmarks:
    """Every benchmark for a configuration, computed once per game.

    The two-firm Nash and cooperative benchmarks only exist for linear
    duopolies; otherwise they are None and ``nash_error`` says why.
    """
    params = _realized(config, realized)
    nash = None
    cooperative = None
    nash_error = None

    if params.num_firms != 2:
        nash_error = "Two-firm benchmarks only apply to duopolies"
    else:
        try:
            nash = two_firm_nash(config, params)
            cooperative = cooperative_equilibrium(config, params)
        except InvalidParametersError as e:
            nash_error = str(e)

    return Benchmarks(
        nash=nash,
        cooperative=cooperative,
        n_poly=n_poly_equilibrium(config, params),
        limit_pricing=limit_pricing_analysis(config, params),
        nash_error=nash_error,
    )
