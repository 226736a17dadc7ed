from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Draw(Base):
    __tablename__ = "draws"

    id = Column(Integer, primary_key=True)
    strategy = Column(String, nullable=False)
    seed = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    pairs = relationship(
        "DrawPair",
        back_populates="draw",
        cascade="all, delete-orphan",
        order_by="DrawPair.id",
    )

    def __repr__(self) -> str:
        return f"<Draw(id={self.id}, strategy={self.strategy}, seed={self.seed})>"


class DrawPair(Base):
    __tablename__ = "draw_pairs"

    id = Column(Integer, primary_key=True)
    draw_id = Column(Integer, ForeignKey("draws.id", ondelete="CASCADE"), nullable=False)
    giver = Column(String, nullable=False)
    receiver = Column(String, nullable=False)

    draw = relationship("Draw", back_populates="pairs")

    __table_args__ = (
        UniqueConstraint("draw_id", "giver", name="uq_draw_pairs_draw_giver"),
    )
