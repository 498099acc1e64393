"""Round-based game orchestrator.

Drives a configured game through its replications and rounds: realizes
parameters for the configured variation scope, runs the communication
phase, collects firm decisions concurrently, computes round results and
summaries, and notifies observers. One game loop runs at a time; pausing is
cooperative and takes effect between rounds or replications.
"""

import asyncio
from datetime import datetime
from typing import Any, List, Mapping, Optional, Union

from ..config import Settings, get_settings
from ..economics.equilibrium import compute_benchmarks
from ..economics.parameters import (
    draw_all_parameters,
    has_random_parameters,
    realized_from_config,
)
from ..economics.round_result import (
    calculate_round_result,
    game_summary,
    replication_summary,
)
from ..events.event_types import GameEventType
from ..events.notifier import EventNotifier
from ..logging import get_logger, log_execution_time
from ..models.game_config import CompetitionMode, GameConfiguration, VariationScope
from ..models.results import (
    CommunicationMessage,
    FirmDecision,
    RealizedParameters,
    ReplicationResult,
    json_safe,
)
from ..validation.economic_validation import (
    EconomicValidationError,
    log_economic_warnings,
    parse_configuration,
    validate_configuration,
    validate_round_result,
)
from .providers import DecisionProvider, DecisionResponse
from .state import GameState, GameStateError, GameStatus, PauseToken, RoundError

logger = get_logger(__name__)


class GameOrchestrator:
    """Plays one game at a time against a set of decision providers.

    Args:
        providers: A single provider for every firm, or a mapping from firm
            id to provider. Firms missing from the mapping use ``default``
        notifier: Receives game events, a fresh notifier by default
        repository: Optional persistence collaborator with ``save_game``
        settings: Process settings, used for pacing delays
        default: Fallback provider for firms absent from a mapping
    """

    def __init__(
        self,
        providers: Union[DecisionProvider, Mapping[int, DecisionProvider]],
        notifier: Optional[EventNotifier] = None,
        repository: Optional[Any] = None,
        settings: Optional[Settings] = None,
        default: Optional[DecisionProvider] = None,
    ):
        if isinstance(providers, Mapping):
            self.providers = dict(providers)
            self.default_provider = default
        else:
            self.providers = {}
            self.default_provider = providers
        self.notifier = notifier or EventNotifier()
        self.repository = repository
        self.settings = settings or get_settings()
        self.state: Optional[GameState] = None
        self.pause_token = PauseToken()
        self._loop_active = False

    # Lifecycle

    @property
    def status(self) -> GameStatus:
        return self.state.status if self.state else GameStatus.IDLE

    @property
    def is_running(self) -> bool:
        return self._loop_active

    def configure(
        self, config: Union[GameConfiguration, Mapping[str, Any]]
    ) -> GameState:
        """Validate a configuration and prepare a new game from it.

        Raises:
            EconomicValidationError: If the configuration is invalid; the
                current state is left unchanged
            GameStateError: If a game loop is running
        """
        if self._loop_active:
            raise GameStateError("Cannot configure while a game is running")

        game_id = self.state.game_id if self.state else None
        try:
            parsed = parse_configuration(config)
            validate_configuration(parsed, self.settings)
        except EconomicValidationError as e:
            logger.warning(f"Rejected configuration: {e}")
            self.notifier.emit(GameEventType.ERROR, game_id, message=str(e))
            raise

        self.state = self._new_state(parsed)
        self.pause_token.clear()
        logger.info(
            f"Configured game {self.state.game_id}: {parsed.num_firms} firms, "
            f"{parsed.competition_mode.value}, {parsed.num_replications}x{parsed.total_rounds} rounds"
        )
        self._emit_state()
        return self.state

    def _new_state(self, config: GameConfiguration) -> GameState:
        game_parameters = None
        if config.variation_scope == VariationScope.FIXED and has_random_parameters(config):
            game_parameters = draw_all_parameters(config)
        with log_execution_time(logger, "benchmark computation"):
            benchmarks = compute_benchmarks(
                config, game_parameters or realized_from_config(config)
            )
        return GameState(
            config=config,
            benchmarks=benchmarks,
            game_parameters=game_parameters,
        )

    async def start(self) -> GameState:
        """Start a configured game and play it until it completes or pauses.

        Raises:
            GameStateError: If there is no configured game waiting to start
            RoundError: If a round fails; the game is left paused
        """
        state = self._require_state()
        if state.status != GameStatus.CONFIGURING or self._loop_active:
            raise GameStateError(f"Cannot start a game that is {state.status.value}")

        state.status = GameStatus.RUNNING
        state.started_at = datetime.utcnow()
        self._emit_state()
        return await self._run(state)

    def pause(self) -> GameState:
        """Ask the running game to stop at the next round boundary.

        Raises:
            GameStateError: If the game is not running
        """
        state = self._require_state()
        if state.status != GameStatus.RUNNING:
            raise GameStateError(f"Cannot pause a game that is {state.status.value}")
        self.pause_token.request()
        logger.info(f"Pause requested for game {state.game_id}")
        return state

    async def resume(self) -> GameState:
        """Continue a paused game from its next unplayed round.

        Raises:
            GameStateError: If the game is not paused
            RoundError: If a round fails; the game is left paused
        """
        state = self._require_state()
        if state.status != GameStatus.PAUSED or self._loop_active:
            raise GameStateError(f"Cannot resume a game that is {state.status.value}")

        state.status = GameStatus.RUNNING
        self._emit_state()
        return await self._run(state)

    def reset(self) -> GameState:
        """Discard all progress and prepare the same configuration under a new id.

        Raises:
            GameStateError: If nothing is configured or a game loop is running
        """
        state = self._require_state()
        if self._loop_active:
            raise GameStateError("Pause the game before resetting it")
        self.state = self._new_state(state.config)
        self.pause_token.clear()
        logger.info(f"Reset game {state.game_id} as {self.state.game_id}")
        self._emit_state()
        return self.state

    def _require_state(self) -> GameState:
        if self.state is None:
            raise GameStateError("No game has been configured")
        return self.state

    # Game loop

    async def _run(self, state: GameState) -> GameState:
        self._loop_active = True
        self.pause_token.clear()
        config = state.config
        try:
            while state.current_replication <= config.num_replications:
                if state.replication_started_at is None:
                    self._start_replication(state)

                while state.current_round <= config.total_rounds:
                    if self.pause_token.requested:
                        return self._pause(state)
                    await self._play_round(state)
                    state.current_round += 1
                    if self.settings.round_delay_seconds:
                        await asyncio.sleep(self.settings.round_delay_seconds)

                self._finish_replication(state)
                if (
                    state.current_replication <= config.num_replications
                    and self.settings.replication_delay_seconds
                ):
                    await asyncio.sleep(self.settings.replication_delay_seconds)

            self._complete(state)
            return state
        except RoundError as e:
            self._halt(state, e)
            raise
        except Exception as e:
            error = RoundError(
                f"Round {state.current_round} failed: {e}",
                state.current_replication,
                state.current_round,
            )
            self._halt(state, error)
            raise error from e
        finally:
            self._loop_active = False
            self.pause_token.clear()

    def _halt(self, state: GameState, error: RoundError) -> None:
        logger.error(f"Game {state.game_id} stopped: {error}")
        state.status = GameStatus.PAUSED
        self.notifier.emit(
            GameEventType.ERROR,
            state.game_id,
            message=str(error),
            replication=error.replication_number,
            round=error.round_number,
        )
        self._emit_state()

    def _pause(self, state: GameState) -> GameState:
        state.status = GameStatus.PAUSED
        logger.info(
            f"Game {state.game_id} paused before replication "
            f"{state.current_replication}, round {state.current_round}"
        )
        self._emit_state()
        return state

    def _start_replication(self, state: GameState) -> None:
        config = state.config
        state.replication_started_at = datetime.utcnow()
        state.rounds = []
        if config.variation_scope == VariationScope.PER_REPLICATION:
            state.replication_parameters = draw_all_parameters(config)
        logger.info(
            f"Starting replication {state.current_replication} of {config.num_replications}"
        )
        self.notifier.emit(
            GameEventType.REPLICATION_STARTED,
            state.game_id,
            number=state.current_replication,
            total=config.num_replications,
        )

    def _finish_replication(self, state: GameState) -> None:
        result = ReplicationResult(
            replication_number=state.current_replication,
            rounds=list(state.rounds),
            summary=replication_summary(state.rounds),
            realized_parameters=state.replication_parameters or state.game_parameters,
            started_at=state.replication_started_at,
            completed_at=datetime.utcnow(),
        )
        state.replications.append(result)
        state.rounds = []
        state.replication_started_at = None
        state.replication_parameters = None
        state.current_replication += 1
        state.current_round = 1
        logger.info(f"Replication {result.replication_number} complete")
        self.notifier.emit(
            GameEventType.REPLICATION_COMPLETE,
            state.game_id,
            number=result.replication_number,
            summary=result.summary.to_dict(),
            result=json_safe(result.to_dict()),
        )

    def _complete(self, state: GameState) -> None:
        all_rounds = [r for rep in state.replications for r in rep.rounds]
        state.summary = game_summary(all_rounds, self._reference_quantities(state))
        state.status = GameStatus.COMPLETED
        state.completed_at = datetime.utcnow()
        logger.info(f"Game {state.game_id} completed after {len(all_rounds)} rounds")

        if self.repository is not None and self.settings.persist_results:
            try:
                self.repository.save_game(state)
            except Exception as e:
                logger.error(f"Failed to persist game {state.game_id}: {e}")

        self.notifier.emit(
            GameEventType.GAME_OVER,
            state.game_id,
            summary=state.summary.to_dict(),
            state=json_safe(state.to_dict()),
        )
        self._emit_state()

    @staticmethod
    def _reference_quantities(state: GameState) -> Optional[List[float]]:
        n_poly = state.benchmarks.n_poly
        if n_poly.calculable:
            return n_poly.quantities
        if state.benchmarks.nash is not None:
            return state.benchmarks.nash.quantities
        return None

    def _round_parameters(self, state: GameState) -> RealizedParameters:
        config = state.config
        if config.variation_scope == VariationScope.PER_ROUND:
            return draw_all_parameters(config)
        if state.replication_parameters is not None:
            return state.replication_parameters
        if state.game_parameters is not None:
            return state.game_parameters
        return realized_from_config(config)

    async def _play_round(self, state: GameState) -> None:
        replication = state.current_replication
        round_number = state.current_round
        realized = self._round_parameters(state)

        self.notifier.emit(
            GameEventType.ROUND_STARTED,
            state.game_id,
            number=round_number,
            replication=replication,
        )

        transcript: List[CommunicationMessage] = []
        if state.config.communication.active:
            try:
                transcript = await self._communicate(state, realized)
            except Exception as e:
                raise RoundError(
                    f"Communication failed in round {round_number}: {e}",
                    replication,
                    round_number,
                ) from e

        decisions = await self._collect_decisions(state, realized)
        try:
            result = calculate_round_result(
                round_number, decisions, state.config, realized, transcript
            )
            log_economic_warnings(validate_round_result(result), logger)
        except Exception as e:
            raise RoundError(
                f"Could not compute round {round_number}: {e}",
                replication,
                round_number,
            ) from e
        state.rounds.append(result)

        self.notifier.emit(
            GameEventType.ROUND_COMPLETE,
            state.game_id,
            number=round_number,
            replication=replication,
            result=result.to_dict(),
        )

    async def _communicate(
        self, state: GameState, realized: RealizedParameters
    ) -> List[CommunicationMessage]:
        config = state.config
        round_number = state.current_round
        transcript: List[CommunicationMessage] = []

        self.notifier.emit(
            GameEventType.COMMUNICATION_STARTED, state.game_id, round=round_number
        )
        for i in range(config.communication.messages_per_round):
            firm_id = (i % config.num_firms) + 1
            provider = self._provider_for(firm_id)
            text = await provider.get_communication_message(
                config, firm_id, round_number, list(state.rounds), list(transcript)
            )
            transcript.append(CommunicationMessage(firm_id=firm_id, message=text))
            self.notifier.emit(
                GameEventType.COMMUNICATION_MESSAGE,
                state.game_id,
                firm=firm_id,
                text=text,
            )
            if self.settings.message_delay_seconds:
                await asyncio.sleep(self.settings.message_delay_seconds)

        self.notifier.emit(
            GameEventType.COMMUNICATION_COMPLETE,
            state.game_id,
            transcript=[m.to_dict() for m in transcript],
        )
        return transcript

    async def _collect_decisions(
        self, state: GameState, realized: RealizedParameters
    ) -> List[FirmDecision]:
        config = state.config
        history = list(state.rounds)

        for firm_id in config.firm_ids:
            self.notifier.emit(GameEventType.DECISION_PENDING, state.game_id, firm=firm_id)

        async def decide(firm_id: int) -> DecisionResponse:
            return await self._provider_for(firm_id).get_decision(
                config, firm_id, state.current_round, history, realized
            )

        responses = await asyncio.gather(
            *(decide(firm_id) for firm_id in config.firm_ids),
            return_exceptions=True,
        )

        decisions = []
        for firm_id, response in zip(config.firm_ids, responses):
            if isinstance(response, BaseException):
                if not isinstance(response, Exception):
                    raise response
                decision = self._default_decision(firm_id, realized)
                logger.error(
                    f"Decision for firm {firm_id} in round {state.current_round} failed: "
                    f"{response}; using default {decision.value}"
                )
            else:
                decision = FirmDecision(
                    firm_id=firm_id,
                    value=response.value,
                    rationale=response.rationale,
                    prompt_audit=response.prompt_audit,
                )
            decisions.append(decision)
            self.notifier.emit(
                GameEventType.FIRM_DECISION,
                state.game_id,
                firm=firm_id,
                value=decision.value,
                rationale=decision.rationale,
                failed=decision.failed,
            )
        return decisions

    def _default_decision(self, firm_id: int, realized: RealizedParameters) -> FirmDecision:
        if self.state and self.state.config.competition_mode == CompetitionMode.BERTRAND:
            value = realized.cost(firm_id).linear_cost
            rationale = "Default: price at marginal cost"
        else:
            value = 0.0
            rationale = "Default: no production"
        return FirmDecision(firm_id=firm_id, value=value, rationale=rationale, failed=True)

    def _provider_for(self, firm_id: int) -> DecisionProvider:
        provider = self.providers.get(firm_id, self.default_provider)
        if provider is None:
            raise GameStateError(f"No decision provider for firm {firm_id}")
        return provider

    def _emit_state(self) -> None:
        if self.state is None:
            return
        self.notifier.emit(
            GameEventType.GAME_STATE,
            self.state.game_id,
            status=self.state.status.value,
            current_replication=self.state.current_replication,
            current_round=self.state.current_round,
        )

    # Convenience

    async def play(
        self, config: Union[GameConfiguration, Mapping[str, Any]]
    ) -> GameState:
        """Configure and run a game to completion in one call."""
        self.configure(config)
        return await self.start()
