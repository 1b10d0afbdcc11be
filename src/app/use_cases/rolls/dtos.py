"""Data Transfer Objects for Roll Use Cases

Pydantic models for command inputs and response outputs. Lengths are
decimals with two fractional digits.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field
from src.domain.roll import Roll
from src.domain.roll_usage_event import RollUsageEvent


class InstallRollCommandDTO(BaseModel):
    """
    Command DTO for installing (or replacing) a roll

    total_length defaults to the configured standard roll length.
    """

    roll_number: int = Field(..., ge=1, description="Roll number within the material type")
    material_type: str = Field(..., min_length=1, description="Material type (e.g. DTF)")
    total_length: Optional[Decimal] = Field(
        default=None, ge=0, decimal_places=2, description="Installed capacity"
    )
    notes: Optional[str] = Field(default=None, description="Free-text notes")
    actor: Optional[str] = Field(default=None, description="Who installed the roll")

    class Config:
        json_schema_extra = {
            "example": {
                "roll_number": 3,
                "material_type": "DTF",
                "total_length": "105.00",
                "notes": "New roll from supplier batch 12",
                "actor": "maria",
            }
        }


class ResetRollCommandDTO(BaseModel):
    """Command DTO for restoring a roll to full capacity (total_length keeps the current one)"""

    roll_number: int = Field(..., ge=1)
    material_type: str = Field(..., min_length=1)
    total_length: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    notes: Optional[str] = Field(default=None)
    actor: Optional[str] = Field(default=None)


class SetRollActiveCommandDTO(BaseModel):
    roll_number: int = Field(..., ge=1)
    material_type: str = Field(..., min_length=1)
    is_active: bool = Field(..., description="False retires the roll from allocation")


class UpdateRollNotesCommandDTO(BaseModel):
    roll_number: int = Field(..., ge=1)
    material_type: str = Field(..., min_length=1)
    notes: Optional[str] = Field(default=None)


class AllocateCommandDTO(BaseModel):
    """
    Command DTO for FIFO allocation

    Used as input to AllocateMaterial: the lowest-numbered active roll with
    enough length is used.
    """

    material_type: str = Field(..., min_length=1)
    required_length: Decimal = Field(..., gt=0, decimal_places=2)
    order_id: Optional[int] = Field(default=None, description="Order consuming the material")
    actor: Optional[str] = Field(default=None)
    notes: Optional[str] = Field(default=None)

    class Config:
        json_schema_extra = {
            "example": {
                "material_type": "DTF",
                "required_length": "2.50",
                "order_id": 41,
                "actor": "maria",
            }
        }


class AllocateFromRollCommandDTO(AllocateCommandDTO):
    """Command DTO for allocation from an operator-chosen roll"""

    roll_number: int = Field(..., ge=1)


class CheckAvailabilityCommandDTO(BaseModel):
    roll_number: int = Field(..., ge=1)
    material_type: str = Field(..., min_length=1)
    required_length: Decimal = Field(..., ge=0, decimal_places=2)


class RollDTO(BaseModel):
    """Response DTO describing a roll"""

    roll_number: int
    material_type: str
    total_length: Decimal
    available_length: Decimal
    used_length: Decimal
    available_percentage: Decimal
    is_active: bool
    notes: Optional[str] = None
    installed_at: datetime
    last_updated_at: datetime

    @classmethod
    def from_entity(cls, roll: Roll) -> "RollDTO":
        return cls(
            roll_number=roll.roll_number,
            material_type=roll.material_type,
            total_length=roll.total_length,
            available_length=roll.available_length,
            used_length=roll.used_length,
            available_percentage=roll.available_percentage,
            is_active=roll.is_active,
            notes=roll.notes,
            installed_at=roll.installed_at,
            last_updated_at=roll.last_updated_at,
        )


class ListRollsResponseDTO(BaseModel):
    rolls: List[RollDTO]
    total: int


class AllocationResponseDTO(BaseModel):
    """Response DTO for a successful allocation"""

    roll_number: int
    material_type: str
    allocated_length: Decimal
    remaining_length: Decimal
    event_id: int

    class Config:
        json_schema_extra = {
            "example": {
                "roll_number": 1,
                "material_type": "DTF",
                "allocated_length": "2.50",
                "remaining_length": "47.50",
                "event_id": 311,
            }
        }


class AvailabilityResponseDTO(BaseModel):
    """
    Response DTO for an availability check

    Advisory only: a later allocation can still fail if another order
    consumes the length first.
    """

    roll_number: int
    material_type: str
    is_active: bool
    required_length: Decimal
    available_length: Decimal
    sufficient: bool
    shortfall: Decimal
    message: str


class RollUsageEventDTO(BaseModel):
    id: int
    roll_number: int
    material_type: str
    event_kind: str
    amount: Decimal
    available_after: Decimal
    order_id: Optional[int] = None
    actor: Optional[str] = None
    notes: Optional[str] = None
    occurred_at: datetime

    @classmethod
    def from_entity(cls, event: RollUsageEvent) -> "RollUsageEventDTO":
        return cls(
            id=event.id,
            roll_number=event.roll_number,
            material_type=event.material_type,
            event_kind=event.event_kind.value if hasattr(event.event_kind, "value") else event.event_kind,
            amount=event.amount,
            available_after=event.available_after,
            order_id=event.order_id,
            actor=event.actor,
            notes=event.notes,
            occurred_at=event.occurred_at,
        )


class RollHistoryResponseDTO(BaseModel):
    roll: RollDTO
    events: List[RollUsageEventDTO]
