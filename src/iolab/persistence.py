"""Persistence of finished games.

GameRepository writes one snapshot per game id. Saving the same game again
replaces the earlier snapshot. Failures are rolled back and re-raised; the
orchestrator decides whether a failed save matters.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from .game.state import GameState
from .logging import get_logger
from .models.records import FirmResultRecord, GameRecord, ReplicationRecord, RoundRecord

logger = get_logger(__name__)


class GameRepository:
    """Stores and loads game snapshots through SQLAlchemy sessions."""

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def save_game(self, state: GameState) -> None:
        """Write a snapshot of the game, replacing any earlier one."""
        db: Session = self.session_factory()
        try:
            existing = db.get(GameRecord, state.game_id)
            if existing is not None:
                db.delete(existing)
                db.flush()

            db.add(self._to_record(state))
            db.commit()
            logger.info(f"Saved game {state.game_id}")
        except Exception as e:
            db.rollback()
            logger.error(f"Could not save game {state.game_id}: {e}")
            raise
        finally:
            db.close()

    def load_game(self, game_id: str) -> Optional[Dict[str, Any]]:
        """Load a stored game as a dictionary, or None if it does not exist."""
        db: Session = self.session_factory()
        try:
            record = db.get(GameRecord, game_id)
            if record is None:
                return None
            return self._to_dict(record)
        finally:
            db.close()

    def list_games(self) -> List[Dict[str, Any]]:
        """Brief description of every stored game, newest first."""
        db: Session = self.session_factory()
        try:
            records = db.query(GameRecord).order_by(GameRecord.created_at.desc()).all()
            return [
                {
                    "game_id": r.id,
                    "status": r.status,
                    "competition_mode": r.competition_mode,
                    "num_firms": r.num_firms,
                    "completed_at": r.completed_at.isoformat() if r.completed_at else None,
                }
                for r in records
            ]
        finally:
            db.close()

    @staticmethod
    def _to_record(state: GameState) -> GameRecord:
        config = state.config
        record = GameRecord(
            id=state.game_id,
            status=state.status.value,
            competition_mode=config.competition_mode.value,
            num_firms=config.num_firms,
            config=config.model_dump(mode="json"),
            benchmarks=state.benchmarks.to_dict(),
            summary=state.summary.to_dict() if state.summary else None,
            started_at=state.started_at,
            completed_at=state.completed_at,
        )

        for replication in state.replications:
            rep_record = ReplicationRecord(
                number=replication.replication_number,
                summary=replication.summary.to_dict(),
                realized_parameters=(
                    replication.realized_parameters.to_dict()
                    if replication.realized_parameters
                    else None
                ),
                started_at=replication.started_at,
                completed_at=replication.completed_at,
            )
            for round_result in replication.rounds:
                round_record = RoundRecord(
                    number=round_result.round_number,
                    total_quantity=round_result.total_quantity,
                    market_price=round_result.market_price,
                    realized_parameters=(
                        round_result.realized_parameters.to_dict()
                        if round_result.realized_parameters
                        else None
                    ),
                    communication=[m.to_dict() for m in round_result.communication],
                    timestamp=round_result.timestamp,
                )
                for firm in round_result.firm_results:
                    round_record.firm_results.append(
                        FirmResultRecord(
                            firm_id=firm.firm_id,
                            quantity=firm.quantity,
                            price=firm.price,
                            profit=firm.profit,
                            rationale=firm.rationale,
                            decision_failed=int(firm.decision_failed),
                        )
                    )
                rep_record.rounds.append(round_record)
            record.replications.append(rep_record)

        return record

    @staticmethod
    def _to_dict(record: GameRecord) -> Dict[str, Any]:
        return {
            "game_id": record.id,
            "status": record.status,
            "competition_mode": record.competition_mode,
            "num_firms": record.num_firms,
            "config": record.config,
            "benchmarks": record.benchmarks,
            "summary": record.summary,
            "started_at": record.started_at.isoformat() if record.started_at else None,
            "completed_at": record.completed_at.isoformat() if record.completed_at else None,
            "replications": [
                {
                    "replication_number": rep.number,
                    "summary": rep.summary,
                    "realized_parameters": rep.realized_parameters,
                    "rounds": [
                        {
                            "round_number": rnd.number,
                            "total_quantity": rnd.total_quantity,
                            "market_price": rnd.market_price,
                            "communication": rnd.communication,
                            "firm_results": [
                                {
                                    "firm_id": f.firm_id,
                                    "quantity": f.quantity,
                                    "price": f.price,
                                    "profit": f.profit,
                                    "rationale": f.rationale,
                                    "decision_failed": bool(f.decision_failed),
                                }
                                for f in rnd.firm_results
                            ],
                        }
                        for rnd in rep.rounds
                    ],
                }
                for rep in record.replications
            ],
        }
