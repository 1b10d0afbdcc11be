"""Roll Usage Event Domain Entity

Append-only audit trail of every deduction, install and reset of a roll.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, ForeignKey, Index, Integer, Numeric, String
from src.domain.base import BaseModel, BigIntegerKey


class UsageEventKind(str, Enum):
    """Roll usage event kinds"""
    CONSUMPTION = "CONSUMPTION"  # Length deducted for an order
    INSTALL = "INSTALL"          # Roll installed or replaced
    RESET = "RESET"              # Roll restored to full capacity


class RollUsageEvent(BaseModel, table=True):
    """
    Roll Usage Event - Immutable record of what happened to a roll

    Domain Rules:
    - Created exactly once per allocation / install / reset
    - Never mutated or deleted
    - amount is 0 for INSTALL and RESET
    - available_after snapshots the roll right after the event
    """

    __tablename__ = "roll_usage_events"
    __table_args__ = (
        Index("ix_roll_usage_events_roll", "roll_id", "occurred_at"),
        Index("ix_roll_usage_events_order", "order_id"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerKey, primary_key=True, autoincrement=True),
    )

    roll_id: int = Field(
        sa_column=Column(BigInteger, ForeignKey("rolls.id"), nullable=False),
    )

    roll_number: int = Field(sa_column=Column(Integer, nullable=False))

    material_type: str = Field(sa_column=Column(String(50), nullable=False))

    event_kind: UsageEventKind

    amount: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False, default=0),
        description="Length consumed (0 for installs and resets)",
    )

    available_after: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Roll available_length after this event",
    )

    order_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
    )

    actor: Optional[str] = Field(default=None, sa_column=Column(String(100), nullable=True))

    notes: Optional[str] = Field(default=None, sa_column=Column(String(500), nullable=True))

    occurred_at: datetime = Field(default_factory=datetime.utcnow)
