"""Roll API Routes

FastAPI routes for the material roll ledger. Rolls are addressed by
material type and roll number.
"""

from decimal import Decimal
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.roll_request import (
    AllocateRequestSchema,
    InstallRollRequestSchema,
    ResetRollRequestSchema,
    SetRollActiveRequestSchema,
    UpdateRollNotesRequestSchema,
)
from src.app.use_cases.rolls import (
    AllocateCommandDTO,
    AllocateFromRoll,
    AllocateFromRollCommandDTO,
    AllocateMaterial,
    AllocationResponseDTO,
    AvailabilityResponseDTO,
    CheckAvailability,
    CheckAvailabilityCommandDTO,
    GetRoll,
    GetRollHistory,
    InstallRoll,
    InstallRollCommandDTO,
    ListRolls,
    ListRollsResponseDTO,
    ResetRoll,
    ResetRollCommandDTO,
    RollDTO,
    RollHistoryResponseDTO,
    SetRollActive,
    SetRollActiveCommandDTO,
    UpdateRollNotes,
    UpdateRollNotesCommandDTO,
)
from src.adapter.repositories import SqlAlchemyRollRepository, SqlAlchemyRollUsageRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.transaction_runner import RetryPolicy
from src.depends import get_default_roll_length, get_retry_policy, get_session
from src.api.error import ClientError

router = APIRouter(prefix="/rolls", tags=["Rolls"])

RollNumber = Annotated[int, Path(ge=1, description="Roll number within the material type")]

INSUFFICIENT_STOCK_RESPONSE = {
    409: {
        "description": "Insufficient stock",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INSUFFICIENT_STOCK",
                        "message": "No active DTF roll has 12.00 available. Largest available on a single roll: 4.50",
                        "details": {"available_length": "4.50", "shortfall": "7.50"},
                    }
                }
            }
        },
    }
}


@router.get("", response_model=ListRollsResponseDTO)
async def list_rolls(
    material_type: Optional[str] = Query(default=None, description="Only rolls of this material type"),
    session: AsyncSession = Depends(get_session),
):
    """List rolls ordered by material type and roll number, with available percentage."""
    result = await ListRolls(SqlAlchemyRollRepository(session)).execute(material_type)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/{material_type}/{roll_number}", response_model=RollDTO)
async def get_roll(material_type: str, roll_number: RollNumber, session: AsyncSession = Depends(get_session)):
    result = await GetRoll(SqlAlchemyRollRepository(session)).execute(material_type, roll_number)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.put("/{material_type}/{roll_number}", response_model=RollDTO, status_code=status.HTTP_200_OK)
async def install_roll(
    material_type: str,
    roll_number: RollNumber,
    request: InstallRollRequestSchema,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
    default_length: Decimal = Depends(get_default_roll_length),
):
    """
    Install a roll, or replace the spool of an existing one.

    The roll is reinitialised to full capacity (available = total, used = 0),
    marked active, and an INSTALL event is appended to its history. Earlier
    consumption events are kept.

    **Example request:**
    ```json
    {"total_length": "105.00", "notes": "Supplier batch 12", "actor": "maria"}
    ```
    """
    uow = SqlAlchemyUnitOfWork(session)
    command = InstallRollCommandDTO(
        roll_number=roll_number,
        material_type=material_type,
        total_length=request.total_length,
        notes=request.notes,
        actor=request.actor,
    )

    use_case = InstallRoll(
        uow,
        SqlAlchemyRollRepository(session),
        SqlAlchemyRollUsageRepository(session),
        default_length=default_length,
        policy=policy,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/{material_type}/{roll_number}/reset", response_model=RollDTO)
async def reset_roll(
    material_type: str,
    roll_number: RollNumber,
    request: ResetRollRequestSchema,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    """Restore a roll to full capacity and append a RESET event."""
    uow = SqlAlchemyUnitOfWork(session)
    command = ResetRollCommandDTO(
        roll_number=roll_number,
        material_type=material_type,
        total_length=request.total_length,
        notes=request.notes,
        actor=request.actor,
    )
    use_case = ResetRoll(uow, SqlAlchemyRollRepository(session), SqlAlchemyRollUsageRepository(session), policy)
    result = await use_case.execute(command)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch("/{material_type}/{roll_number}/active", response_model=RollDTO)
async def set_roll_active(
    material_type: str,
    roll_number: RollNumber,
    request: SetRollActiveRequestSchema,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    uow = SqlAlchemyUnitOfWork(session)
    command = SetRollActiveCommandDTO(
        roll_number=roll_number, material_type=material_type, is_active=request.is_active
    )
    result = await SetRollActive(uow, SqlAlchemyRollRepository(session), policy).execute(command)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch("/{material_type}/{roll_number}/notes", response_model=RollDTO)
async def update_roll_notes(
    material_type: str,
    roll_number: RollNumber,
    request: UpdateRollNotesRequestSchema,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    uow = SqlAlchemyUnitOfWork(session)
    command = UpdateRollNotesCommandDTO(roll_number=roll_number, material_type=material_type, notes=request.notes)
    result = await UpdateRollNotes(uow, SqlAlchemyRollRepository(session), policy).execute(command)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/{material_type}/{roll_number}/history", response_model=RollHistoryResponseDTO)
async def get_roll_history(
    material_type: str,
    roll_number: RollNumber,
    limit: int = Query(default=50, ge=1, le=500),
    session: AsyncSession = Depends(get_session),
):
    """Usage events of a roll, newest first."""
    use_case = GetRollHistory(SqlAlchemyRollRepository(session), SqlAlchemyRollUsageRepository(session))
    result = await use_case.execute(material_type, roll_number, limit=limit)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/{material_type}/{roll_number}/availability", response_model=AvailabilityResponseDTO)
async def check_availability(
    material_type: str,
    roll_number: RollNumber,
    required_length: Decimal = Query(..., ge=0, decimal_places=2),
    session: AsyncSession = Depends(get_session),
):
    """
    Check whether a roll can cover a length.

    Advisory only: nothing is reserved, so a later allocation may still fail.
    """
    command = CheckAvailabilityCommandDTO(
        roll_number=roll_number, material_type=material_type, required_length=required_length
    )
    result = await CheckAvailability(SqlAlchemyRollRepository(session)).execute(command)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/{material_type}/allocate", response_model=AllocationResponseDTO, responses=INSUFFICIENT_STOCK_RESPONSE)
async def allocate_material(
    material_type: str,
    request: AllocateRequestSchema,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    """
    Consume material from the lowest-numbered active roll that has enough length.

    **Returns:**
    - 200: Material allocated
    - 409: No single roll has enough length (INSUFFICIENT_STOCK) or the
      allocation kept losing races (CONFLICT)
    """
    uow = SqlAlchemyUnitOfWork(session)
    command = AllocateCommandDTO(
        material_type=material_type,
        required_length=request.required_length,
        order_id=request.order_id,
        actor=request.actor,
        notes=request.notes,
    )
    use_case = AllocateMaterial(
        uow, SqlAlchemyRollRepository(session), SqlAlchemyRollUsageRepository(session), policy
    )
    result = await use_case.execute(command)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post(
    "/{material_type}/{roll_number}/allocate",
    response_model=AllocationResponseDTO,
    responses=INSUFFICIENT_STOCK_RESPONSE,
)
async def allocate_from_roll(
    material_type: str,
    roll_number: RollNumber,
    request: AllocateRequestSchema,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    uow = SqlAlchemyUnitOfWork(session)
    command = AllocateFromRollCommandDTO(
        roll_number=roll_number,
        material_type=material_type,
        required_length=request.required_length,
        order_id=request.order_id,
        actor=request.actor,
        notes=request.notes,
    )
    use_case = AllocateFromRoll(
        uow, SqlAlchemyRollRepository(session), SqlAlchemyRollUsageRepository(session), policy
    )
    result = await use_case.execute(command)
    if result.is_err():
        raise ClientError(result.error)
    return result.value
