"""Inverse demand curves for oligopoly markets.

Each curve maps an (effective) quantity to a market price. Four functional
forms are supported: linear, isoelastic (constant elasticity), logit-like and
exponential. In differentiated markets every firm faces its own price, driven
by its effective quantity q_i + γ * Σ_{j≠i} q_j.

Only the linear curve admits closed-form equilibria; the other forms are used
for realized-round accounting.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Sequence, Union

# Upper bound on quantities recovered from prices near a curve's asymptote
MAX_QUANTITY = 1e12
_LOG_MAX_QUANTITY = math.log(MAX_QUANTITY)


class DemandType(str, Enum):
    """Supported inverse demand functional forms."""

    LINEAR = "linear"
    CONSTANT_ELASTICITY = "constant_elasticity"
    LOGIT = "logit"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class LinearDemand:
    """Linear inverse demand curve: P(Q) = max(0, a - b*Q)."""

    type: ClassVar[DemandType] = DemandType.LINEAR

    intercept: float  # a, maximum price when quantity is zero
    slope: float  # b, price sensitivity to quantity

    def price(self, quantity: float) -> float:
        """Calculate market price for given quantity."""
        return max(0.0, self.intercept - self.slope * quantity)

    def quantity(self, price: float) -> float:
        """Quantity demanded at a given price (direct demand)."""
        return max(0.0, (self.intercept - price) / self.slope)

    def __repr__(self) -> str:
        return f"LinearDemand(a={self.intercept}, b={self.slope})"


@dataclass(frozen=True)
class IsoelasticDemand:
    """Constant-elasticity inverse demand curve: P(Q) = A * Q^(-1/σ).

    Non-positive quantities map to the sentinel price A * 1000 rather than
    infinity.
    """

    type: ClassVar[DemandType] = DemandType.CONSTANT_ELASTICITY
    ZERO_QUANTITY_MULTIPLIER: ClassVar[float] = 1000.0

    scale: float  # A
    elasticity: float  # σ

    def price(self, quantity: float) -> float:
        if quantity <= 0:
            return self.scale * self.ZERO_QUANTITY_MULTIPLIER
        return float(self.scale * quantity ** (-1.0 / self.elasticity))

    def quantity(self, price: float) -> float:
        if price <= 0:
            return 0.0
        exponent = -self.elasticity * math.log(price / self.scale)
        return _bounded_exp(exponent)

    def __repr__(self) -> str:
        return f"IsoelasticDemand(A={self.scale}, elasticity={self.elasticity})"


@dataclass(frozen=True)
class LogitDemand:
    """Logit-like inverse demand curve: P(Q) = max(0, a - b*ln(Q)).

    Non-positive quantities map to the sentinel price 10 * a.
    """

    type: ClassVar[DemandType] = DemandType.LOGIT
    ZERO_QUANTITY_MULTIPLIER: ClassVar[float] = 10.0

    intercept: float  # a
    price_coefficient: float  # b

    def price(self, quantity: float) -> float:
        if quantity <= 0:
            return self.intercept * self.ZERO_QUANTITY_MULTIPLIER
        return max(0.0, self.intercept - self.price_coefficient * math.log(quantity))

    def quantity(self, price: float) -> float:
        return _bounded_exp((self.intercept - price) / self.price_coefficient)

    def __repr__(self) -> str:
        return f"LogitDemand(a={self.intercept}, b={self.price_coefficient})"


@dataclass(frozen=True)
class ExponentialDemand:
    """Exponential inverse demand curve: P(Q) = A * e^(-b*Q)."""

    type: ClassVar[DemandType] = DemandType.EXPONENTIAL

    scale: float  # A
    decay_rate: float  # b

    def price(self, quantity: float) -> float:
        return float(self.scale * math.exp(-self.decay_rate * quantity))

    def quantity(self, price: float) -> float:
        if price <= 0 or price >= self.scale:
            return 0.0
        return max(0.0, -math.log(price / self.scale) / self.decay_rate)

    def __repr__(self) -> str:
        return f"ExponentialDemand(A={self.scale}, b={self.decay_rate})"


def _bounded_exp(exponent: float) -> float:
    if exponent >= _LOG_MAX_QUANTITY:
        return MAX_QUANTITY
    return math.exp(exponent)


DemandCurve = Union[LinearDemand, IsoelasticDemand, LogitDemand, ExponentialDemand]


def effective_quantity(firm_index: int, quantities: Sequence[float], gamma: float) -> float:
    """Quantity that drives firm i's price: q_i + γ * Σ_{j≠i} q_j.

    Args:
        firm_index: Zero-based index of the firm
        quantities: Quantities of all firms
        gamma: Differentiation coefficient (1 = homogeneous, 0 = independent)

    Returns:
        Effective quantity for the firm's inverse demand
    """
    own_quantity = quantities[firm_index]
    rival_quantity = sum(quantities) - own_quantity
    return own_quantity + gamma * rival_quantity


def differentiated_price(
    firm_index: int,
    quantities: Sequence[float],
    demand: DemandCurve,
    gamma: float,
) -> float:
    """Price faced by firm i in a differentiated market.

    With γ = 1 every firm faces the homogeneous market price P(Q).
    """
    return demand.price(effective_quantity(firm_index, quantities, gamma))


def differentiated_prices(
    quantities: Sequence[float],
    demand: DemandCurve,
    gamma: float,
    firm_demands: Optional[Sequence[DemandCurve]] = None,
) -> List[float]:
    """Prices faced by every firm, optionally with firm-specific demand curves."""
    prices = []
    for i in range(len(quantities)):
        curve = firm_demands[i] if firm_demands else demand
        prices.append(differentiated_price(i, quantities, curve, gamma))
    return prices


def demand_to_dict(demand: DemandCurve) -> Dict[str, float]:
    """Serialize a demand curve to a plain dictionary."""
    data: Dict[str, Union[str, float]] = {"type": demand.type.value}
    data.update(vars(demand))
    return data  # type: ignore[return-value]
