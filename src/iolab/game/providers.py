"""Decision providers: the agents that play the game.

The orchestrator only depends on the DecisionProvider protocol. The built-in
providers here play analytical strategies and are used for simulations
without external agents, for the command line, and in tests.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from ..economics.equilibrium import best_response, n_poly_equilibrium
from ..models.demand import LinearDemand
from ..models.game_config import CompetitionMode, GameConfiguration
from ..models.results import CommunicationMessage, RealizedParameters, RoundResult


@dataclass
class DecisionResponse:
    """A provider's answer for one firm and round."""

    value: float
    rationale: Optional[str] = None
    prompt_audit: Optional[Dict[str, str]] = None


class DecisionProvider(Protocol):
    """Anything that can decide for a firm and talk on its behalf."""

    async def get_decision(
        self,
        config: GameConfiguration,
        firm_id: int,
        round_number: int,
        history: Sequence[RoundResult],
        realized: RealizedParameters,
    ) -> DecisionResponse:
        ...

    async def get_communication_message(
        self,
        config: GameConfiguration,
        firm_id: int,
        round_number: int,
        history: Sequence[RoundResult],
        transcript: Sequence[CommunicationMessage],
    ) -> str:
        ...


class CallPacer:
    """Spaces out calls to an external service.

    Each ``wait()`` returns no sooner than ``min_interval`` seconds after the
    previous one returned. Concurrent callers are served one at a time.
    """

    def __init__(self, min_interval: float):
        if min_interval < 0:
            raise ValueError(f"min_interval must be non-negative, got {min_interval}")
        self.min_interval = min_interval
        self._lock = asyncio.Lock()
        self._last_call: Optional[float] = None
        self.calls = 0

    async def wait(self) -> None:
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_call is not None:
                remaining = self._last_call + self.min_interval - loop.time()
                if remaining > 0:
                    await asyncio.sleep(remaining)
            self._last_call = loop.time()
            self.calls += 1


class PacedProvider:
    """Wraps a provider so every call first waits on a CallPacer."""

    def __init__(self, provider: DecisionProvider, pacer: CallPacer):
        self.provider = provider
        self.pacer = pacer

    async def get_decision(self, config, firm_id, round_number, history, realized):
        await self.pacer.wait()
        return await self.provider.get_decision(
            config, firm_id, round_number, history, realized
        )

    async def get_communication_message(
        self, config, firm_id, round_number, history, transcript
    ):
        await self.pacer.wait()
        return await self.provider.get_communication_message(
            config, firm_id, round_number, history, transcript
        )


class EquilibriumProvider:
    """Plays the N-firm Nash equilibrium of the parameters in force."""

    async def get_decision(
        self,
        config: GameConfiguration,
        firm_id: int,
        round_number: int,
        history: Sequence[RoundResult],
        realized: RealizedParameters,
    ) -> DecisionResponse:
        equilibrium = n_poly_equilibrium(config, realized)
        if not equilibrium.calculable:
            raise ValueError(equilibrium.message or "Equilibrium not calculable")

        firm = equilibrium.firms[firm_id - 1]
        if config.competition_mode == CompetitionMode.BERTRAND:
            value = equilibrium.market_prices[firm_id - 1]
        else:
            value = firm.quantity
        return DecisionResponse(
            value=value,
            rationale=f"Nash equilibrium {config.competition_mode.value} play",
        )

    async def get_communication_message(
        self,
        config: GameConfiguration,
        firm_id: int,
        round_number: int,
        history: Sequence[RoundResult],
        transcript: Sequence[CommunicationMessage],
    ) -> str:
        return f"Firm {firm_id} will play its equilibrium strategy."


class BestResponseProvider:
    """Myopic best response to the rivals' choices in the previous round.

    In the first round of a replication the firm plays ``initial_value``.
    Cournot firms respond with quantities, Bertrand firms with prices on a
    symmetric linear market.
    """

    def __init__(self, initial_value: float = 0.0):
        self.initial_value = initial_value

    async def get_decision(
        self,
        config: GameConfiguration,
        firm_id: int,
        round_number: int,
        history: Sequence[RoundResult],
        realized: RealizedParameters,
    ) -> DecisionResponse:
        if not history:
            return DecisionResponse(value=self.initial_value, rationale="Opening move")

        last = history[-1]
        if config.competition_mode == CompetitionMode.COURNOT:
            value = best_response(config, firm_id, last.quantities, realized)
        else:
            value = _best_response_price(firm_id, last.market_prices, realized)
        return DecisionResponse(
            value=value,
            rationale=f"Best response to round {last.round_number}",
        )

    async def get_communication_message(
        self,
        config: GameConfiguration,
        firm_id: int,
        round_number: int,
        history: Sequence[RoundResult],
        transcript: Sequence[CommunicationMessage],
    ) -> str:
        return f"Firm {firm_id} will respond to last round's market."


def _best_response_price(
    firm_id: int, prices: Sequence[float], realized: RealizedParameters
) -> float:
    # From the Bertrand first-order condition 2κ p_i - γ Σ p_j = a(1-γ) + κ c_i
    if not isinstance(realized.demand, LinearDemand):
        raise ValueError("Best-response pricing requires linear demand")
    n = len(prices)
    gamma = realized.gamma
    c_i = realized.cost(firm_id).linear_cost
    if gamma >= 1 - 1e-4:
        # Homogeneous goods: undercut to marginal cost
        return c_i
    kappa = 1 + (n - 2) * gamma
    rivals = sum(prices) - prices[firm_id - 1]
    a = realized.demand.intercept
    return max(0.0, (a * (1 - gamma) + kappa * c_i + gamma * rivals) / (2 * kappa))


class ScriptedProvider:
    """Replays fixed per-firm decision sequences.

    Round r of every replication uses the r-th value of the firm's script;
    the last value repeats once the script runs out.
    """

    def __init__(
        self,
        decisions: Mapping[int, Sequence[float]],
        messages: Optional[Mapping[int, Sequence[str]]] = None,
    ):
        self.decisions = {firm_id: list(values) for firm_id, values in decisions.items()}
        self.messages = {firm_id: list(m) for firm_id, m in (messages or {}).items()}
        self.calls: List[tuple] = []

    async def get_decision(
        self,
        config: GameConfiguration,
        firm_id: int,
        round_number: int,
        history: Sequence[RoundResult],
        realized: RealizedParameters,
    ) -> DecisionResponse:
        self.calls.append(("decision", firm_id, round_number))
        script = self.decisions[firm_id]
        value = script[min(round_number, len(script)) - 1]
        return DecisionResponse(value=value, rationale=f"Scripted move {round_number}")

    async def get_communication_message(
        self,
        config: GameConfiguration,
        firm_id: int,
        round_number: int,
        history: Sequence[RoundResult],
        transcript: Sequence[CommunicationMessage],
    ) -> str:
        self.calls.append(("message", firm_id, round_number))
        scripted = self.messages.get(firm_id)
        if not scripted:
            return f"Firm {firm_id}, round {round_number}."
        sent = sum(1 for m in transcript if m.firm_id == firm_id)
        return scripted[min(sent, len(scripted) - 1)]
