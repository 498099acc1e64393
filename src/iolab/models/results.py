"""Computed values produced while a game is played.

Everything here is a plain dataclass. Firm collections are always ordered by
firm id and of length N; the two-firm ``firm1_*``/``firm2_*`` fields exist
only as a projection produced by ``legacy_fields()`` at serialization time.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from .demand import DemandCurve, LinearDemand, demand_to_dict


def json_safe(value: Any) -> Any:
    """Replace NaN and infinite floats, which JSON cannot carry, with None."""
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


@dataclass(frozen=True)
class FirmCost:
    """Cost structure C(q) = c*q + d*q^2 of one firm."""

    firm_id: int
    linear_cost: float
    quadratic_cost: float = 0.0

    def total(self, quantity: float) -> float:
        return self.linear_cost * quantity + self.quadratic_cost * quantity * quantity

    def marginal(self, quantity: float) -> float:
        return self.linear_cost + 2 * self.quadratic_cost * quantity


@dataclass(frozen=True)
class RealizedParameters:
    """Concrete structural parameters used to compute a round.

    Attributes:
        demand: Shared inverse demand curve
        gamma: Differentiation coefficient in [0, 1]
        firm_costs: Cost structure of every firm, ordered by firm id
        firm_demands: Optional per-firm linear demand curves, ordered by firm id
    """

    demand: DemandCurve
    gamma: float
    firm_costs: Tuple[FirmCost, ...]
    firm_demands: Optional[Tuple[LinearDemand, ...]] = None

    @property
    def num_firms(self) -> int:
        return len(self.firm_costs)

    def cost(self, firm_id: int) -> FirmCost:
        return self.firm_costs[firm_id - 1]

    def demand_for(self, firm_id: int) -> DemandCurve:
        """Demand curve faced by a firm, falling back to the shared curve."""
        if self.firm_demands is not None:
            return self.firm_demands[firm_id - 1]
        return self.demand

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "demand": demand_to_dict(self.demand),
            "gamma": self.gamma,
            "firm_costs": [
                {
                    "firm_id": cost.firm_id,
                    "linear_cost": cost.linear_cost,
                    "quadratic_cost": cost.quadratic_cost,
                }
                for cost in self.firm_costs
            ],
        }
        if self.firm_demands is not None:
            data["firm_demands"] = [
                {"firm_id": i + 1, "intercept": d.intercept, "slope": d.slope}
                for i, d in enumerate(self.firm_demands)
            ]
        return data


@dataclass
class FirmDecision:
    """A single firm's choice for a round.

    ``value`` is a quantity in Cournot games and a price in Bertrand games.
    ``failed`` marks decisions that were replaced by the default after the
    provider raised.
    """

    firm_id: int
    value: float
    rationale: Optional[str] = None
    prompt_audit: Optional[Dict[str, str]] = None
    failed: bool = False


@dataclass
class FirmRoundResult:
    """Outcome of a round for one firm."""

    firm_id: int
    quantity: float
    price: float
    profit: float
    rationale: Optional[str] = None
    prompt_audit: Optional[Dict[str, str]] = None
    decision_failed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firm_id": self.firm_id,
            "quantity": self.quantity,
            "price": self.price,
            "profit": self.profit,
            "rationale": self.rationale,
            "prompt_audit": self.prompt_audit,
            "decision_failed": self.decision_failed,
        }


@dataclass
class CommunicationMessage:
    """One message sent during a round's communication phase."""

    firm_id: int
    message: str
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firm_id": self.firm_id,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class RoundResult:
    """Outcome of one round for all firms."""

    round_number: int
    firm_results: List[FirmRoundResult]
    total_quantity: float
    market_prices: List[float]
    market_price: float
    realized_parameters: Optional[RealizedParameters] = None
    communication: List[CommunicationMessage] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def firm(self, firm_id: int) -> FirmRoundResult:
        return self.firm_results[firm_id - 1]

    @property
    def quantities(self) -> List[float]:
        return [r.quantity for r in self.firm_results]

    @property
    def profits(self) -> List[float]:
        return [r.profit for r in self.firm_results]

    def legacy_fields(self) -> Dict[str, Any]:
        """Two-firm mirror fields derived from the first two firms."""
        first = self.firm_results[0] if self.firm_results else None
        second = self.firm_results[1] if len(self.firm_results) > 1 else None
        return {
            "firm1_quantity": first.quantity if first else 0.0,
            "firm2_quantity": second.quantity if second else 0.0,
            "firm1_price": first.price if first else 0.0,
            "firm2_price": second.price if second else 0.0,
            "firm1_profit": first.profit if first else 0.0,
            "firm2_profit": second.profit if second else 0.0,
            "firm1_reasoning": first.rationale if first else None,
            "firm2_reasoning": second.rationale if second else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "round_number": self.round_number,
            "firm_results": [r.to_dict() for r in self.firm_results],
            "total_quantity": self.total_quantity,
            "market_prices": list(self.market_prices),
            "market_price": self.market_price,
            "realized_parameters": (
                self.realized_parameters.to_dict() if self.realized_parameters else None
            ),
            "communication": [m.to_dict() for m in self.communication],
            "timestamp": self.timestamp.isoformat(),
        }
        data.update(self.legacy_fields())
        return data


@dataclass
class FirmSummary:
    """Aggregate performance of one firm over a set of rounds."""

    firm_id: int
    total_profit: float
    avg_quantity: float
    avg_price: float
    nash_quantity_deviation: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firm_id": self.firm_id,
            "total_profit": self.total_profit,
            "avg_quantity": self.avg_quantity,
            "avg_price": self.avg_price,
            "nash_quantity_deviation": self.nash_quantity_deviation,
        }


@dataclass
class Summary:
    """Aggregate statistics over a replication or a whole game."""

    num_rounds: int
    firms: List[FirmSummary]
    avg_market_price: float

    def firm(self, firm_id: int) -> FirmSummary:
        return self.firms[firm_id - 1]

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "num_rounds": self.num_rounds,
            "firms": [f.to_dict() for f in self.firms],
            "avg_market_price": self.avg_market_price,
        }
        if len(self.firms) >= 2:
            data.update(
                {
                    "total_firm1_profit": self.firms[0].total_profit,
                    "total_firm2_profit": self.firms[1].total_profit,
                    "avg_firm1_quantity": self.firms[0].avg_quantity,
                    "avg_firm2_quantity": self.firms[1].avg_quantity,
                }
            )
        return data


@dataclass
class ReplicationResult:
    """All rounds of one replication plus their summary."""

    replication_number: int
    rounds: List[RoundResult]
    summary: Summary
    realized_parameters: Optional[RealizedParameters] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "replication_number": self.replication_number,
            "rounds": [r.to_dict() for r in self.rounds],
            "summary": self.summary.to_dict(),
            "realized_parameters": (
                self.realized_parameters.to_dict() if self.realized_parameters else None
            ),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
