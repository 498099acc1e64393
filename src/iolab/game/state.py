"""Game lifecycle state.

A game moves through ``idle -> configuring -> running <-> paused ->
completed``. GameState holds everything needed to resume a paused game at
the next unplayed round: the configuration, benchmarks, finished
replications and the rounds of the replication in progress.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..models.equilibria import Benchmarks
from ..models.game_config import GameConfiguration
from ..models.results import RealizedParameters, ReplicationResult, RoundResult, Summary


class GameStatus(str, Enum):
    """Lifecycle status of a game."""

    IDLE = "idle"
    CONFIGURING = "configuring"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class GameStateError(Exception):
    """Raised on an illegal lifecycle transition."""

    pass


class RoundError(Exception):
    """Raised when a round cannot be completed.

    Attributes:
        replication_number: Replication the failed round belongs to
        round_number: Round that failed
    """

    def __init__(self, message: str, replication_number: int, round_number: int):
        super().__init__(message)
        self.replication_number = replication_number
        self.round_number = round_number


class PauseToken:
    """Cooperative pause signal checked between rounds and replications."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def request(self) -> None:
        self._event.set()

    def clear(self) -> None:
        self._event.clear()

    @property
    def requested(self) -> bool:
        return self._event.is_set()


def new_game_id() -> str:
    return str(uuid.uuid4())


@dataclass
class GameState:
    """Complete state of one game."""

    config: GameConfiguration
    benchmarks: Benchmarks
    game_id: str = field(default_factory=new_game_id)
    status: GameStatus = GameStatus.CONFIGURING

    # 1-based position of the next round/replication to play
    current_replication: int = 1
    current_round: int = 1

    rounds: List[RoundResult] = field(default_factory=list)
    replications: List[ReplicationResult] = field(default_factory=list)

    game_parameters: Optional[RealizedParameters] = None
    replication_parameters: Optional[RealizedParameters] = None
    replication_started_at: Optional[datetime] = None

    summary: Optional[Summary] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def all_rounds(self) -> List[RoundResult]:
        """Rounds of finished replications followed by the current one."""
        played = [r for rep in self.replications for r in rep.rounds]
        return played + list(self.rounds)

    @property
    def rounds_played(self) -> int:
        return len(self.all_rounds)

    @property
    def is_finished(self) -> bool:
        return self.current_replication > self.config.num_replications

    def to_dict(self) -> Dict[str, Any]:
        return {
            "game_id": self.game_id,
            "status": self.status.value,
            "config": self.config.model_dump(mode="json"),
            "current_replication": self.current_replication,
            "current_round": self.current_round,
            "rounds": [r.to_dict() for r in self.rounds],
            "replications": [r.to_dict() for r in self.replications],
            "benchmarks": self.benchmarks.to_dict(),
            "game_parameters": (
                self.game_parameters.to_dict() if self.game_parameters else None
            ),
            "summary": self.summary.to_dict() if self.summary else None,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
