"""Round accounting: turning firm decisions into market outcomes.

In Cournot rounds firms choose quantities and the demand system sets each
firm's price. In Bertrand rounds firms choose prices and demand allocates
quantities. Profits are p*q - C(q) in both modes.
"""

from typing import Dict, List, Optional, Sequence

import numpy as np

from ..logging import get_logger
from ..models.demand import LinearDemand, differentiated_prices
from ..models.game_config import CompetitionMode, GameConfiguration
from ..models.results import (
    CommunicationMessage,
    FirmDecision,
    FirmRoundResult,
    FirmSummary,
    RealizedParameters,
    RoundResult,
    Summary,
)
from .equilibrium import HOMOGENEOUS_GAMMA, symmetric_bertrand_quantities
from .linear_system import solve_linear_system
from .parameters import realized_from_config

logger = get_logger(__name__)

PRICE_TIE_TOLERANCE = 1e-6


def _clamp(value: float, lower: Optional[float], upper: Optional[float]) -> float:
    if lower is not None:
        value = max(lower, value)
    if upper is not None:
        value = min(upper, value)
    return value


def calculate_round_result(
    round_number: int,
    decisions: Sequence[FirmDecision],
    config: GameConfiguration,
    realized: Optional[RealizedParameters] = None,
    communication: Optional[List[CommunicationMessage]] = None,
) -> RoundResult:
    """Compute every firm's quantity, price and profit for one round.

    Args:
        round_number: 1-based round number within the replication
        decisions: Firm decisions (quantities or prices); missing firms
            default to zero quantity or a price at marginal cost
        config: Game configuration
        realized: Parameters in force this round, defaults to the
            configuration's deterministic snapshot
        communication: Messages exchanged before the decisions

    Returns:
        Round result with firm results ordered by firm id
    """
    params = realized if realized is not None else realized_from_config(config)
    by_firm: Dict[int, FirmDecision] = {d.firm_id: d for d in decisions}
    firm_ids = config.firm_ids

    if config.competition_mode == CompetitionMode.COURNOT:
        quantities = [
            _clamp(
                by_firm[firm_id].value if firm_id in by_firm else 0.0,
                config.min_quantity,
                config.max_quantity,
            )
            for firm_id in firm_ids
        ]
        prices = differentiated_prices(
            quantities, params.demand, params.gamma, params.firm_demands
        )
    else:
        prices = [
            _clamp(by_firm[firm_id].value, config.min_price, config.max_price)
            if firm_id in by_firm
            else params.cost(firm_id).linear_cost
            for firm_id in firm_ids
        ]
        quantities = bertrand_quantities(prices, params)

    firm_results = []
    for i, firm_id in enumerate(firm_ids):
        decision = by_firm.get(firm_id)
        cost = params.cost(firm_id)
        profit = prices[i] * quantities[i] - cost.total(quantities[i])
        firm_results.append(
            FirmRoundResult(
                firm_id=firm_id,
                quantity=quantities[i],
                price=prices[i],
                profit=profit,
                rationale=decision.rationale if decision else None,
                prompt_audit=decision.prompt_audit if decision else None,
                decision_failed=decision.failed if decision else False,
            )
        )

    return RoundResult(
        round_number=round_number,
        firm_results=firm_results,
        total_quantity=sum(quantities),
        market_prices=prices,
        market_price=sum(prices) / len(prices),
        realized_parameters=params,
        communication=list(communication or []),
    )


def bertrand_quantities(prices: Sequence[float], params: RealizedParameters) -> List[float]:
    """Quantities demanded from each firm at the posted prices.

    Homogeneous linear markets send all demand to the lowest price, split
    evenly among ties. Differentiated linear markets use the direct demand
    system. Non-linear forms invert each firm's own curve at its own price.
    """
    n = len(prices)
    if not isinstance(params.demand, LinearDemand):
        return [max(0.0, params.demand_for(i + 1).quantity(prices[i])) for i in range(n)]

    if params.gamma >= HOMOGENEOUS_GAMMA:
        lowest = min(prices)
        tied = [abs(p - lowest) < PRICE_TIE_TOLERANCE for p in prices]
        num_tied = sum(tied)
        quantities = []
        for i in range(n):
            demand = params.demand_for(i + 1)
            total = max(0.0, (demand.intercept - lowest) / demand.slope)  # type: ignore[union-attr]
            quantities.append(total / num_tied if tied[i] else 0.0)
        return quantities

    if params.firm_demands is not None:
        return _per_firm_bertrand_quantities(prices, params)

    return symmetric_bertrand_quantities(prices, params.demand, params.gamma)


def _per_firm_bertrand_quantities(
    prices: Sequence[float], params: RealizedParameters
) -> List[float]:
    # Inverse demand P = A - M Q with M_ii = b_i, M_ij = γ b_i
    demands = params.firm_demands or ()
    n = len(prices)
    matrix = np.array(
        [
            [demands[i].slope if i == j else params.gamma * demands[i].slope for j in range(n)]
            for i in range(n)
        ]
    )
    rhs = np.array([demands[i].intercept - prices[i] for i in range(n)])
    solution = solve_linear_system(matrix, rhs)
    if solution is None:
        logger.warning("Per-firm demand system is singular; allocating zero quantities")
        return [0.0] * n
    return [max(0.0, float(q)) for q in solution]


def replication_summary(rounds: Sequence[RoundResult]) -> Summary:
    """Per-firm totals and averages over a sequence of rounds."""
    return _summarize(rounds, None)


def game_summary(
    rounds: Sequence[RoundResult], reference_quantities: Optional[Sequence[float]] = None
) -> Summary:
    """Summary over all rounds of all replications.

    Args:
        rounds: Every round played in the game
        reference_quantities: Equilibrium quantities per firm; when given,
            each firm's summary carries |average quantity - equilibrium quantity|
    """
    return _summarize(rounds, reference_quantities)


def _summarize(
    rounds: Sequence[RoundResult], reference_quantities: Optional[Sequence[float]]
) -> Summary:
    num_rounds = len(rounds)
    num_firms = len(rounds[0].firm_results) if rounds else len(reference_quantities or [])

    firms = []
    for i in range(num_firms):
        results = [r.firm_results[i] for r in rounds]
        total_profit = sum(r.profit for r in results)
        avg_quantity = sum(r.quantity for r in results) / num_rounds if num_rounds else 0.0
        avg_price = sum(r.price for r in results) / num_rounds if num_rounds else 0.0
        deviation = None
        if reference_quantities is not None and i < len(reference_quantities):
            deviation = abs(avg_quantity - reference_quantities[i]) if num_rounds else 0.0
        firms.append(
            FirmSummary(
                firm_id=i + 1,
                total_profit=total_profit,
                avg_quantity=avg_quantity,
                avg_price=avg_price,
                nash_quantity_deviation=deviation,
            )
        )

    avg_market_price = (
        sum(r.market_price for r in rounds) / num_rounds if num_rounds else 0.0
    )
    return Summary(num_rounds=num_rounds, firms=firms, avg_market_price=avg_market_price)
