"""FastAPI control surface for the oligopoly laboratory.

Exposes the game lifecycle (configure, start, pause, resume, reset), the
current game state, stored games, and an endpoint computing the analytical
benchmarks of any configuration.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional, Set

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .database import create_db_engine, create_session_factory, init_db
from .economics.equilibrium import compute_benchmarks
from .game.orchestrator import GameOrchestrator
from .game.providers import EquilibriumProvider
from .game.state import GameStateError, RoundError
from .logging import (
    get_logger,
    handle_generic_error,
    handle_state_error,
    handle_validation_error,
)
from .models.results import json_safe
from .persistence import GameRepository
from .validation.economic_validation import (
    EconomicValidationError,
    parse_configuration,
    validate_configuration,
)

logger = get_logger(__name__)


def create_app(
    orchestrator: Optional[GameOrchestrator] = None,
    repository: Optional[GameRepository] = None,
) -> FastAPI:
    """Build the application around an orchestrator.

    Without an orchestrator, one playing the equilibrium strategy for every
    firm is created, persisting to the configured database when enabled.
    """
    settings = get_settings()
    engine = None
    if repository is None and orchestrator is None and settings.persist_results:
        engine = create_db_engine()
        repository = GameRepository(create_session_factory(engine))
    if orchestrator is None:
        orchestrator = GameOrchestrator(EquilibriumProvider(), repository=repository)

    background: Set["asyncio.Task[Any]"] = set()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if engine is not None:
            init_db(engine)
        yield
        for task in list(background):
            task.cancel()

    app = FastAPI(
        title=settings.app_name,
        description="Repeated oligopoly games against analytical benchmarks",
        version=settings.version,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.orchestrator = orchestrator
    app.state.repository = repository

    def state_payload() -> Dict[str, Any]:
        if orchestrator.state is None:
            return {"status": orchestrator.status.value}
        return json_safe(orchestrator.state.to_dict())

    def on_loop_done(task: "asyncio.Task[Any]") -> None:
        background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if isinstance(error, RoundError):
            logger.warning(f"Game loop stopped: {error}")
        elif error is not None:
            logger.error(f"Game loop crashed: {error}")

    async def run_loop(coro: Any, wait: bool) -> Dict[str, Any]:
        if wait:
            try:
                await coro
            except RoundError as e:
                raise HTTPException(status_code=502, detail=str(e))
        else:
            task = asyncio.create_task(coro)
            background.add(task)
            task.add_done_callback(on_loop_done)
        return state_payload()

    @app.get("/healthz")
    async def health_check() -> JSONResponse:
        """Health check endpoint for monitoring and load balancers."""
        return JSONResponse(content={"ok": True})

    @app.get("/game")
    async def get_game() -> Dict[str, Any]:
        """Current game state."""
        return state_payload()

    @app.post("/game/configure")
    async def configure_game(config: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a configuration and prepare a new game from it."""
        try:
            orchestrator.configure(config)
        except EconomicValidationError as e:
            raise handle_validation_error(logger, e)
        except GameStateError as e:
            raise handle_state_error(logger, e)
        return state_payload()

    @app.post("/game/start")
    async def start_game(wait: bool = False) -> Dict[str, Any]:
        """Start the configured game, optionally waiting until it stops."""
        try:
            _require_status(orchestrator, "configuring")
        except GameStateError as e:
            raise handle_state_error(logger, e)
        return await run_loop(orchestrator.start(), wait)

    @app.post("/game/pause")
    async def pause_game() -> Dict[str, Any]:
        """Pause the running game at the next round boundary."""
        try:
            orchestrator.pause()
        except GameStateError as e:
            raise handle_state_error(logger, e)
        return state_payload()

    @app.post("/game/resume")
    async def resume_game(wait: bool = False) -> Dict[str, Any]:
        """Resume a paused game, optionally waiting until it stops."""
        try:
            _require_status(orchestrator, "paused")
        except GameStateError as e:
            raise handle_state_error(logger, e)
        return await run_loop(orchestrator.resume(), wait)

    @app.post("/game/reset")
    async def reset_game() -> Dict[str, Any]:
        """Restart the current configuration as a new game."""
        try:
            orchestrator.reset()
        except GameStateError as e:
            raise handle_state_error(logger, e)
        return state_payload()

    @app.get("/games/{game_id}")
    async def get_stored_game(game_id: str) -> Dict[str, Any]:
        """A finished game from the database."""
        if repository is None:
            raise HTTPException(status_code=404, detail="Persistence is disabled")
        try:
            stored = repository.load_game(game_id)
        except Exception as e:
            raise handle_generic_error(logger, e)
        if stored is None:
            raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
        return json_safe(stored)

    @app.post("/equilibrium")
    async def equilibrium(config: Dict[str, Any]) -> Dict[str, Any]:
        """Analytical benchmarks for an arbitrary configuration."""
        try:
            parsed = parse_configuration(config)
            validate_configuration(parsed)
        except EconomicValidationError as e:
            raise handle_validation_error(logger, e)
        return json_safe(compute_benchmarks(parsed).to_dict())

    return app


def _require_status(orchestrator: GameOrchestrator, status: str) -> None:
    if orchestrator.status.value != status or orchestrator.is_running:
        raise GameStateError(
            f"Cannot do this while the game is {orchestrator.status.value}"
        )


app = create_app()
