"""Order API Routes

FastAPI routes for the order ledger. Creating an order issues its receipt
number, then consumes its material and optionally records its full payment
in one transaction.
"""

from datetime import date
from typing import Dict, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.order_request import CreateOrderRequestSchema, UpdateOrderRequestSchema
from src.app.use_cases.orders import (
    CancelOrder,
    CompleteOrder,
    CreateOrder,
    CreateOrderCommandDTO,
    GetOrder,
    GetOrderByReceipt,
    ListOrders,
    ListOrdersResponseDTO,
    OrderDTO,
    UpdateOrder,
    UpdateOrderCommandDTO,
)
from src.adapter.repositories import (
    SqlAlchemyOrderRepository,
    SqlAlchemyPartialPaymentRepository,
    SqlAlchemyReceiptSequenceRepository,
    SqlAlchemyRollRepository,
    SqlAlchemyRollUsageRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.material_policy import MaterialPolicy
from src.app.services.payment_reconciler import PaymentReconciler
from src.app.services.receipt_sequencer import ReceiptSequencer
from src.app.services.roll_allocator import RollAllocator
from src.app.services.transaction_runner import RetryPolicy
from src.depends import get_material_policies, get_retry_policy, get_session
from src.api.error import ClientError

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post(
    "",
    response_model=OrderDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "Insufficient stock or concurrent modification",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INSUFFICIENT_STOCK",
                            "message": "No active DTF roll has 12.00 available. Largest available on a single roll: 4.50",
                        }
                    }
                }
            },
        },
        400: {"description": "Validation error"},
        503: {"description": "Receipt sequencer or storage unavailable"},
    },
)
async def create_order(
    request: CreateOrderRequestSchema,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
    material_policies: Dict[str, MaterialPolicy] = Depends(get_material_policies),
):
    """
    Create an order.

    **Request body:**
    - `client_name`, `work_type` (required)
    - `items` (required): line items with optional `printing`, `pressing`
      and `badge` components, each `{quantity, unit_cost}`
    - `paid_in_full` + `payment_method`: record the whole total as paid
    - `roll_number`: roll to consume from (required for manually selected
      work types)

    **Returns:**
    - 201: Order created with its receipt number
    - 400: Invalid request
    - 409: Not enough material on any single roll
    - 503: Storage unavailable
    """
    uow = SqlAlchemyUnitOfWork(session)
    order_repo = SqlAlchemyOrderRepository(session)

    use_case = CreateOrder(
        uow,
        order_repo,
        sequencer=ReceiptSequencer(SqlAlchemyReceiptSequenceRepository(session), order_repo),
        allocator=RollAllocator(SqlAlchemyRollRepository(session), SqlAlchemyRollUsageRepository(session)),
        reconciler=PaymentReconciler(order_repo, SqlAlchemyPartialPaymentRepository(session)),
        material_policies=material_policies,
        policy=policy,
    )
    result = await use_case.execute(CreateOrderCommandDTO(**request.model_dump()))

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("", response_model=ListOrdersResponseDTO)
async def list_orders(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    payment_status: Optional[str] = Query(default=None),
    date_from: Optional[date] = Query(default=None, description="First creation day, inclusive (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(default=None, description="Last creation day, inclusive (YYYY-MM-DD)"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    result = await ListOrders(SqlAlchemyOrderRepository(session)).execute(
        status=status_filter,
        payment_status=payment_status,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/receipt/{receipt_number}", response_model=OrderDTO)
async def get_order_by_receipt(receipt_number: str, session: AsyncSession = Depends(get_session)):
    result = await GetOrderByReceipt(SqlAlchemyOrderRepository(session)).execute(receipt_number)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/{order_id}", response_model=OrderDTO)
async def get_order(order_id: int, session: AsyncSession = Depends(get_session)):
    result = await GetOrder(SqlAlchemyOrderRepository(session)).execute(order_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.patch("/{order_id}", response_model=OrderDTO)
async def update_order(
    order_id: int,
    request: UpdateOrderRequestSchema,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    """
    Edit an order.

    New items replace the existing ones and recompute the total; the
    payment status is re-derived against the new total. A total below the
    amount already paid is rejected.
    """
    uow = SqlAlchemyUnitOfWork(session)
    order_repo = SqlAlchemyOrderRepository(session)
    reconciler = PaymentReconciler(order_repo, SqlAlchemyPartialPaymentRepository(session))

    command = UpdateOrderCommandDTO(order_id=order_id, **request.model_dump())
    result = await UpdateOrder(uow, order_repo, reconciler, policy).execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/{order_id}/cancel", response_model=OrderDTO)
async def cancel_order(
    order_id: int,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    uow = SqlAlchemyUnitOfWork(session)
    result = await CancelOrder(uow, SqlAlchemyOrderRepository(session), policy).execute(order_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.post("/{order_id}/complete", response_model=OrderDTO)
async def complete_order(
    order_id: int,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    uow = SqlAlchemyUnitOfWork(session)
    result = await CompleteOrder(uow, SqlAlchemyOrderRepository(session), policy).execute(order_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value
