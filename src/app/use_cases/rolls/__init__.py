"""Roll ledger use cases"""
from .install_roll import InstallRoll, ResetRoll, DEFAULT_ROLL_LENGTH
from .set_roll_active import SetRollActive, UpdateRollNotes
from .get_roll import GetRoll, ListRolls, GetRollHistory
from .allocate_material import AllocateMaterial, AllocateFromRoll
from .check_availability import CheckAvailability
from .dtos import (
    InstallRollCommandDTO,
    ResetRollCommandDTO,
    SetRollActiveCommandDTO,
    UpdateRollNotesCommandDTO,
    AllocateCommandDTO,
    AllocateFromRollCommandDTO,
    CheckAvailabilityCommandDTO,
    RollDTO,
    ListRollsResponseDTO,
    AllocationResponseDTO,
    AvailabilityResponseDTO,
    RollUsageEventDTO,
    RollHistoryResponseDTO,
)

__all__ = [
    "InstallRoll",
    "ResetRoll",
    "DEFAULT_ROLL_LENGTH",
    "SetRollActive",
    "UpdateRollNotes",
    "GetRoll",
    "ListRolls",
    "GetRollHistory",
    "AllocateMaterial",
    "AllocateFromRoll",
    "CheckAvailability",
    "InstallRollCommandDTO",
    "ResetRollCommandDTO",
    "SetRollActiveCommandDTO",
    "UpdateRollNotesCommandDTO",
    "AllocateCommandDTO",
    "AllocateFromRollCommandDTO",
    "CheckAvailabilityCommandDTO",
    "RollDTO",
    "ListRollsResponseDTO",
    "AllocationResponseDTO",
    "AvailabilityResponseDTO",
    "RollUsageEventDTO",
    "RollHistoryResponseDTO",
]
