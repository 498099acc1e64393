"""Analytical benchmark results.

These value objects are what the equilibrium solver returns and what a game
stores as its benchmarks. Results that cannot be computed analytically carry
``calculable=False`` and an explanatory ``message`` instead of raising.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .game_config import CompetitionMode


@dataclass(frozen=True)
class NashEquilibrium:
    """Two-firm Cournot-Nash equilibrium on a homogeneous linear market."""

    firm1_quantity: float
    firm2_quantity: float
    total_quantity: float
    market_price: float
    firm1_profit: float
    firm2_profit: float

    @property
    def quantities(self) -> List[float]:
        return [self.firm1_quantity, self.firm2_quantity]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firm1_quantity": self.firm1_quantity,
            "firm2_quantity": self.firm2_quantity,
            "total_quantity": self.total_quantity,
            "market_price": self.market_price,
            "firm1_profit": self.firm1_profit,
            "firm2_profit": self.firm2_profit,
        }


@dataclass(frozen=True)
class CooperativeEquilibrium:
    """Joint-profit maximizing (multiplant monopoly) outcome for two firms."""

    firm1_quantity: float
    firm2_quantity: float
    total_quantity: float
    market_price: float
    firm1_profit: float
    firm2_profit: float
    total_profit: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "firm1_quantity": self.firm1_quantity,
            "firm2_quantity": self.firm2_quantity,
            "total_quantity": self.total_quantity,
            "market_price": self.market_price,
            "firm1_profit": self.firm1_profit,
            "firm2_profit": self.firm2_profit,
            "total_profit": self.total_profit,
        }


@dataclass(frozen=True)
class FirmEquilibrium:
    """Equilibrium outcome for one firm in an N-firm market."""

    firm_id: int
    quantity: float
    profit: float
    price: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "firm_id": self.firm_id,
            "quantity": self.quantity,
            "profit": self.profit,
        }
        if self.price is not None:
            data["price"] = self.price
        return data


@dataclass(frozen=True)
class NPolyEquilibrium:
    """N-firm Nash equilibrium in either competition mode.

    Attributes:
        competition_mode: Cournot (quantities) or Bertrand (prices)
        firms: Per-firm outcomes ordered by firm id (empty or NaN-valued when
            not calculable)
        total_quantity: Sum of equilibrium quantities
        market_prices: Price faced by each firm
        avg_market_price: Mean of market_prices
        total_profit: Industry profit
        calculable: False when no analytical solution exists
        message: Reason the equilibrium is not calculable
    """

    competition_mode: CompetitionMode
    firms: List[FirmEquilibrium] = field(default_factory=list)
    total_quantity: float = 0.0
    market_prices: List[float] = field(default_factory=list)
    avg_market_price: float = 0.0
    total_profit: float = 0.0
    calculable: bool = True
    message: Optional[str] = None

    @classmethod
    def not_calculable(
        cls, competition_mode: CompetitionMode, num_firms: int, message: str
    ) -> "NPolyEquilibrium":
        """Placeholder result for markets without an analytical solution."""
        nan = float("nan")
        firms = [
            FirmEquilibrium(
                firm_id=i + 1,
                quantity=nan,
                profit=nan,
                price=nan if competition_mode == CompetitionMode.BERTRAND else None,
            )
            for i in range(num_firms)
        ]
        return cls(
            competition_mode=competition_mode,
            firms=firms,
            total_quantity=nan,
            market_prices=[],
            avg_market_price=nan,
            total_profit=nan,
            calculable=False,
            message=message,
        )

    @property
    def quantities(self) -> List[float]:
        return [f.quantity for f in self.firms]

    @property
    def prices(self) -> List[float]:
        return list(self.market_prices)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "competition_mode": self.competition_mode.value,
            "firms": [f.to_dict() for f in self.firms],
            "total_quantity": self.total_quantity,
            "market_prices": list(self.market_prices),
            "avg_market_price": self.avg_market_price,
            "total_profit": self.total_profit,
            "calculable": self.calculable,
            "message": self.message,
        }


@dataclass(frozen=True)
class LimitPricingAnalysis:
    """Classification of a duopoly by its cost asymmetry.

    The asymmetry index (α1 - α2)/α2 with α_i = a - c_i is compared against
    the thresholds 1 - γ/(2 - γ²) and 1 - γ/2.
    """

    asymmetry_index: float
    threshold_low: float
    threshold_high: float
    is_limit_pricing_region: bool
    is_monopoly_region: bool
    message: str
    dominant_firm: Optional[int] = None
    applicable: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asymmetry_index": self.asymmetry_index,
            "threshold_low": self.threshold_low,
            "threshold_high": self.threshold_high,
            "is_limit_pricing_region": self.is_limit_pricing_region,
            "is_monopoly_region": self.is_monopoly_region,
            "dominant_firm": self.dominant_firm,
            "message": self.message,
            "applicable": self.applicable,
        }


@dataclass(frozen=True)
class Benchmarks:
    """All analytical benchmarks computed for a configuration.

    ``nash`` and ``cooperative`` are None when the market is not a
    two-parameter linear one they can be computed for.
    """

    n_poly: NPolyEquilibrium
    limit_pricing: LimitPricingAnalysis
    nash: Optional[NashEquilibrium] = None
    cooperative: Optional[CooperativeEquilibrium] = None
    nash_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nash": self.nash.to_dict() if self.nash else None,
            "cooperative": self.cooperative.to_dict() if self.cooperative else None,
            "n_poly": self.n_poly.to_dict(),
            "limit_pricing": self.limit_pricing.to_dict(),
            "nash_error": self.nash_error,
        }
