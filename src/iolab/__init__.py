"""Oligopoly laboratory: repeated market games against analytical benchmarks.

This package computes Cournot, Bertrand, cooperative and limit-pricing
benchmarks for differentiated oligopolies, and runs round-based games in
which decision providers compete under randomized market parameters.
"""

from .economics.equilibrium import (
    InvalidParametersError,
    compute_benchmarks,
    n_poly_equilibrium,
)
from .game.orchestrator import GameOrchestrator
from .models.game_config import CompetitionMode, GameConfiguration, VariationScope

__all__ = [
    "CompetitionMode",
    "GameConfiguration",
    "GameOrchestrator",
    "InvalidParametersError",
    "VariationScope",
    "compute_benchmarks",
    "n_poly_equilibrium",
]
