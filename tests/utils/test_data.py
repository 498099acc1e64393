"""Test data generation utilities.

This module provides common game configurations for consistent testing
across the codebase.
"""

from typing import Any, Dict, List, Optional


def create_sample_cournot_config(**overrides: Any) -> Dict[str, Any]:
    """Create the standard symmetric Cournot duopoly.

    With a=100, b=1 and c=10 for both firms the Nash equilibrium is
    q=30 per firm at P=40 with profits of 900 each.

    Returns:
        Dictionary accepted by GameConfiguration
    """
    config: Dict[str, Any] = {
        "competition_mode": "cournot",
        "num_firms": 2,
        "gamma": 1.0,
        "demand": {"type": "linear", "intercept": 100.0, "slope": 1.0},
        "firms": [{"linear_cost": 10.0}, {"linear_cost": 10.0}],
        "total_rounds": 3,
        "num_replications": 1,
    }
    config.update(overrides)
    return config


def create_sample_bertrand_config(
    costs: Optional[List[float]] = None, gamma: float = 0.5, **overrides: Any
) -> Dict[str, Any]:
    """Create a differentiated Bertrand market.

    Returns:
        Dictionary accepted by GameConfiguration
    """
    costs = costs or [10.0, 10.0]
    config: Dict[str, Any] = {
        "competition_mode": "bertrand",
        "num_firms": len(costs),
        "gamma": gamma,
        "demand": {"type": "linear", "intercept": 100.0, "slope": 1.0},
        "firms": [{"linear_cost": c} for c in costs],
        "total_rounds": 3,
        "num_replications": 1,
    }
    config.update(overrides)
    return config


def create_sample_nfirm_config(
    costs: List[float], mode: str = "cournot", gamma: float = 1.0, **overrides: Any
) -> Dict[str, Any]:
    """Create a linear market with one firm per marginal cost.

    Returns:
        Dictionary accepted by GameConfiguration
    """
    config: Dict[str, Any] = {
        "competition_mode": mode,
        "num_firms": len(costs),
        "gamma": gamma,
        "demand": {"type": "linear", "intercept": 100.0, "slope": 1.0},
        "firms": [{"linear_cost": c} for c in costs],
        "total_rounds": 2,
        "num_replications": 1,
    }
    config.update(overrides)
    return config


def create_sample_random_config(scope: str = "per_round", **overrides: Any) -> Dict[str, Any]:
    """Create a Cournot duopoly whose demand and costs are randomized.

    Returns:
        Dictionary accepted by GameConfiguration
    """
    config: Dict[str, Any] = {
        "competition_mode": "cournot",
        "num_firms": 2,
        "demand": {
            "type": "linear",
            "intercept": {"type": "uniform", "min": 90.0, "max": 110.0},
            "slope": {"type": "lognormal", "mean": 1.0, "std_dev": 0.1},
        },
        "firms": [
            {"linear_cost_spec": {"type": "normal", "mean": 10.0, "std_dev": 2.0}},
            {"linear_cost_spec": {"type": "uniform", "min": 8.0, "max": 12.0}},
        ],
        "total_rounds": 3,
        "num_replications": 2,
        "variation_scope": scope,
    }
    config.update(overrides)
    return config
