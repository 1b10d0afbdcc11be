"""Roll Domain Entity

A physical spool of one material type, consumed by length as orders are
produced. Identified by (roll_number, material_type).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import CheckConstraint, Index, Integer, Numeric, String, UniqueConstraint
from src.domain.base import BaseModel, BigIntegerKey


class Roll(BaseModel, table=True):
    """
    Roll - Material spool with remaining length

    Domain Rules:
    - (roll_number, material_type) is unique
    - 0 <= available_length <= total_length
    - used_length == total_length - available_length
    - Mutated only by allocation (decrement) and install/reset (reinitialise)
    - Never deleted; retired with is_active = False
    - version is bumped by every mutation (compare-and-swap guard)
    """

    __tablename__ = "rolls"
    __table_args__ = (
        UniqueConstraint("roll_number", "material_type", name="uq_rolls_number_material"),
        CheckConstraint("available_length >= 0", name="available_length_non_negative"),
        CheckConstraint("available_length <= total_length", name="available_within_total"),
        Index("ix_rolls_material_active", "material_type", "is_active", "roll_number"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigIntegerKey, primary_key=True, autoincrement=True),
    )

    roll_number: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Roll number within its material type",
    )

    material_type: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Material type (e.g. DTF, SUBLIM)",
    )

    total_length: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Installed capacity",
    )

    available_length: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False),
        description="Remaining usable length",
    )

    used_length: Decimal = Field(
        sa_column=Column(Numeric(10, 2), nullable=False, default=0),
        description="Cached total_length - available_length",
    )

    is_active: bool = Field(default=True)

    notes: Optional[str] = Field(default=None, sa_column=Column(String(500), nullable=True))

    version: int = Field(
        default=1,
        sa_column=Column(Integer, nullable=False, default=1),
    )

    installed_at: datetime = Field(default_factory=datetime.utcnow)

    last_updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def available_percentage(self) -> Decimal:
        if not self.total_length:
            return Decimal("0.00")
        return (Decimal(self.available_length) / Decimal(self.total_length) * 100).quantize(Decimal("0.01"))
