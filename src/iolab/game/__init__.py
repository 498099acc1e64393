"""Game lifecycle, decision providers and the round-based orchestrator."""

from .orchestrator import GameOrchestrator
from .providers import (
    BestResponseProvider,
    CallPacer,
    DecisionProvider,
    DecisionResponse,
    EquilibriumProvider,
    PacedProvider,
    ScriptedProvider,
)
from .state import GameState, GameStateError, GameStatus, PauseToken, RoundError

__all__ = [
    "BestResponseProvider",
    "CallPacer",
    "DecisionProvider",
    "DecisionResponse",
    "EquilibriumProvider",
    "GameOrchestrator",
    "GameState",
    "GameStateError",
    "GameStatus",
    "PacedProvider",
    "PauseToken",
    "RoundError",
    "ScriptedProvider",
]
