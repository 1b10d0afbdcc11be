"""Payment API Routes

Partial payments of an order. Registering or removing a payment always
re-derives the order's amount_paid and payment_status in the same
transaction.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.schemas.payment_request import RecordPaymentRequestSchema
from src.app.use_cases.payments import (
    GetPaymentSummary,
    ListPayments,
    ListPaymentsResponseDTO,
    PaymentResultDTO,
    PaymentSummaryDTO,
    RecordPayment,
    RecordPaymentCommandDTO,
    ReversePayment,
)
from src.adapter.repositories import SqlAlchemyOrderRepository, SqlAlchemyPartialPaymentRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.transaction_runner import RetryPolicy
from src.depends import get_retry_policy, get_session
from src.api.error import ClientError

router = APIRouter(tags=["Payments"])


@router.post(
    "/orders/{order_id}/payments",
    response_model=PaymentResultDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "description": "Invalid amount or overpayment",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "PAYMENT_EXCEEDS_BALANCE",
                            "message": "Payment of 30.00 exceeds the outstanding balance. Maximum acceptable amount is 20.00",
                            "details": {"max_amount": "20.00"},
                        }
                    }
                }
            },
        },
        404: {"description": "Order not found"},
    },
)
async def record_payment(
    order_id: int,
    request: RecordPaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    """
    Register a payment against an order.

    **Example request:**
    ```json
    {"amount": "30.00", "method": "transfer", "bank": "Banco Pichincha", "receipt_reference": "TRX-88120"}
    ```

    **Returns:**
    - 201: Payment recorded, with the order's new totals
    - 400: Amount not positive, or above the outstanding balance
    - 404: Order not found
    """
    uow = SqlAlchemyUnitOfWork(session)
    command = RecordPaymentCommandDTO(order_id=order_id, **request.model_dump())

    use_case = RecordPayment(
        uow, SqlAlchemyOrderRepository(session), SqlAlchemyPartialPaymentRepository(session), policy
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/orders/{order_id}/payments", response_model=ListPaymentsResponseDTO)
async def list_payments(order_id: int, session: AsyncSession = Depends(get_session)):
    use_case = ListPayments(SqlAlchemyOrderRepository(session), SqlAlchemyPartialPaymentRepository(session))
    result = await use_case.execute(order_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("/orders/{order_id}/payments/summary", response_model=PaymentSummaryDTO)
async def get_payment_summary(order_id: int, session: AsyncSession = Depends(get_session)):
    use_case = GetPaymentSummary(SqlAlchemyOrderRepository(session), SqlAlchemyPartialPaymentRepository(session))
    result = await use_case.execute(order_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.delete("/payments/{payment_id}", response_model=PaymentResultDTO)
async def reverse_payment(
    payment_id: int,
    session: AsyncSession = Depends(get_session),
    policy: RetryPolicy = Depends(get_retry_policy),
):
    """Remove a payment; the order's totals are recomputed from the remaining payments."""
    uow = SqlAlchemyUnitOfWork(session)
    use_case = ReversePayment(
        uow, SqlAlchemyOrderRepository(session), SqlAlchemyPartialPaymentRepository(session), policy
    )
    result = await use_case.execute(payment_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value
