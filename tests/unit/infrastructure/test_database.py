"""Tests for database setup and game persistence."""

import pytest
from sqlalchemy import inspect

from src.iolab.config import Settings
from src.iolab.database import create_db_engine, create_session_factory, init_db
from src.iolab.game.orchestrator import GameOrchestrator
from src.iolab.game.providers import EquilibriumProvider
from src.iolab.models.records import FirmResultRecord, GameRecord, RoundRecord
from src.iolab.persistence import GameRepository
from tests.utils import (
    create_sample_cournot_config,
    create_sample_random_config,
    create_test_database,
    create_test_repository,
)


async def _play(config):
    orchestrator = GameOrchestrator(
        EquilibriumProvider(), settings=Settings(persist_results=False)
    )
    return await orchestrator.play(config)


class TestDatabaseConfiguration:
    """Test engine creation and schema setup."""

    def test_engine_uses_given_url(self) -> None:
        """Test that an explicit URL overrides the configured one."""
        engine = create_db_engine("sqlite:///:memory:")

        assert engine.url.drivername == "sqlite"
        assert engine.url.database == ":memory:"

    def test_init_db_creates_tables(self) -> None:
        """Test that init_db creates every table."""
        engine = create_db_engine("sqlite:///:memory:")

        init_db(engine)

        tables = set(inspect(engine).get_table_names())
        assert {"games", "replications", "rounds", "firm_results"} <= tables

    def test_session_factory(self) -> None:
        """Test that the session factory opens sessions on the engine."""
        engine = create_db_engine("sqlite:///:memory:")
        session_factory = create_session_factory(engine)

        session = session_factory()
        try:
            assert session.get_bind() is engine
        finally:
            session.close()


class TestGameRepository:
    """Test saving and loading games."""

    @pytest.mark.asyncio
    async def test_save_and_load(self) -> None:
        """Test that a saved game loads back with all rounds."""
        repository = create_test_repository()
        state = await _play(create_sample_cournot_config(num_replications=2))

        repository.save_game(state)
        stored = repository.load_game(state.game_id)

        assert stored is not None
        assert stored["game_id"] == state.game_id
        assert stored["status"] == "completed"
        assert stored["competition_mode"] == "cournot"
        assert stored["num_firms"] == 2
        assert stored["config"]["total_rounds"] == 3
        assert stored["benchmarks"]["nash"]["firm1_quantity"] == pytest.approx(30.0)
        assert stored["summary"]["num_rounds"] == 6
        assert [r["replication_number"] for r in stored["replications"]] == [1, 2]

        first_round = stored["replications"][0]["rounds"][0]
        assert first_round["round_number"] == 1
        assert first_round["market_price"] == pytest.approx(40.0)
        assert [f["quantity"] for f in first_round["firm_results"]] == pytest.approx(
            [30.0, 30.0]
        )
        assert first_round["firm_results"][0]["decision_failed"] is False

    @pytest.mark.asyncio
    async def test_realized_parameters_are_stored(self) -> None:
        """Test that per-replication draws are kept with the replication."""
        repository = create_test_repository()
        state = await _play(create_sample_random_config("per_replication"))

        repository.save_game(state)
        stored = repository.load_game(state.game_id)

        for replication, saved in zip(state.replications, stored["replications"]):
            assert saved["realized_parameters"] == replication.realized_parameters.to_dict()

    @pytest.mark.asyncio
    async def test_resave_replaces_snapshot(self) -> None:
        """Test that saving a game twice keeps a single snapshot."""
        _, session_factory = create_test_database()
        repository = GameRepository(session_factory)
        state = await _play(create_sample_cournot_config(total_rounds=2))

        repository.save_game(state)
        repository.save_game(state)

        session = session_factory()
        try:
            assert session.query(GameRecord).count() == 1
            assert session.query(RoundRecord).count() == 2
            assert session.query(FirmResultRecord).count() == 4
        finally:
            session.close()

    def test_load_missing_game(self) -> None:
        """Test that an unknown id loads as None."""
        repository = create_test_repository()

        assert repository.load_game("no-such-game") is None

    @pytest.mark.asyncio
    async def test_list_games(self) -> None:
        """Test the brief listing of stored games."""
        repository = create_test_repository()
        first = await _play(create_sample_cournot_config(total_rounds=1))
        second = await _play(create_sample_cournot_config(total_rounds=1))

        repository.save_game(first)
        repository.save_game(second)
        games = repository.list_games()

        assert {g["game_id"] for g in games} == {first.game_id, second.game_id}
        assert all(g["status"] == "completed" for g in games)
        assert all(g["completed_at"] is not None for g in games)
