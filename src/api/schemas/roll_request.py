"""Request schemas for Roll API

Roll identity (material type, roll number) comes from the path.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class InstallRollRequestSchema(BaseModel):
    """
    Request schema for installing a roll

    Used for PUT /rolls/{material_type}/{roll_number}. Omitting total_length
    installs a standard-length roll.
    """

    total_length: Optional[Decimal] = Field(
        default=None,
        ge=0,
        decimal_places=2,
        description="Installed capacity in metres",
    )
    notes: Optional[str] = Field(default=None, max_length=500)
    actor: Optional[str] = Field(default=None, description="Who installed the roll")


class ResetRollRequestSchema(BaseModel):
    total_length: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    notes: Optional[str] = Field(default=None, max_length=500)
    actor: Optional[str] = None


class SetRollActiveRequestSchema(BaseModel):
    is_active: bool


class UpdateRollNotesRequestSchema(BaseModel):
    notes: Optional[str] = Field(default=None, max_length=500)


class AllocateRequestSchema(BaseModel):
    """
    Request schema for consuming material

    Used for POST /rolls/{material_type}/allocate (FIFO) and
    POST /rolls/{material_type}/{roll_number}/allocate (specific roll).
    """

    required_length: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Length to consume in metres (must be > 0)",
    )
    order_id: Optional[int] = None
    actor: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=500)
