"""Database records for finished games.

A completed game is stored as one ``games`` row holding its configuration,
benchmarks and summary as JSON, with its replications, rounds and per-firm
results in child tables for querying.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class GameRecord(Base):  # type: ignore
    """Snapshot of a game keyed by its id."""

    __tablename__ = "games"

    id = Column(String(36), primary_key=True)
    status = Column(String(20), nullable=False)
    competition_mode = Column(String(20), nullable=False)
    num_firms = Column(Integer, nullable=False)
    config = Column(JSON, nullable=False)
    benchmarks = Column(JSON, nullable=False)
    summary = Column(JSON, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    replications = relationship(
        "ReplicationRecord",
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="ReplicationRecord.number",
    )


class ReplicationRecord(Base):  # type: ignore
    """One replication of a stored game."""

    __tablename__ = "replications"

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False)
    number = Column(Integer, nullable=False)
    summary = Column(JSON, nullable=False)
    realized_parameters = Column(JSON, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    game = relationship("GameRecord", back_populates="replications")
    rounds = relationship(
        "RoundRecord",
        back_populates="replication",
        cascade="all, delete-orphan",
        order_by="RoundRecord.number",
    )


class RoundRecord(Base):  # type: ignore
    """One round of a stored replication."""

    __tablename__ = "rounds"

    id = Column(Integer, primary_key=True, index=True)
    replication_id = Column(Integer, ForeignKey("replications.id"), nullable=False)
    number = Column(Integer, nullable=False)
    total_quantity = Column(Float, nullable=False)
    market_price = Column(Float, nullable=False)
    realized_parameters = Column(JSON, nullable=True)
    communication = Column(JSON, nullable=True)
    timestamp = Column(DateTime, nullable=True)

    # Relationships
    replication = relationship("ReplicationRecord", back_populates="rounds")
    firm_results = relationship(
        "FirmResultRecord",
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="FirmResultRecord.firm_id",
    )


class FirmResultRecord(Base):  # type: ignore
    """A firm's outcome in a stored round."""

    __tablename__ = "firm_results"

    id = Column(Integer, primary_key=True, index=True)
    round_id = Column(Integer, ForeignKey("rounds.id"), nullable=False)
    firm_id = Column(Integer, nullable=False)
    quantity = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    profit = Column(Float, nullable=False)
    rationale = Column(Text, nullable=True)
    decision_failed = Column(Integer, nullable=False, default=0)

    # Relationships
    round = relationship("RoundRecord", back_populates="firm_results")
