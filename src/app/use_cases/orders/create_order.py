"""CreateOrder Use Case

Creates an order with its line items, consumes its material and, when the
order is paid in full up front, records the payment. The receipt number is
issued first in its own transaction; everything else happens in one
transaction, so if any step fails the order, its items, the roll deduction
and the payment all disappear together and the receipt number is skipped.
"""

import logging
from typing import Dict, Optional
from libs.result import Result, Return
from src.app.errors import validation_error
from src.app.repositories.order_repository import OrderRepository
from src.app.services.material_policy import MaterialPolicy, RollSelection
from src.app.services.payment_reconciler import PaymentReconciler
from src.app.services.receipt_sequencer import ReceiptSequencer
from src.app.services.roll_allocator import RollAllocator
from src.app.services.transaction_runner import RetryPolicy, TransactionRunner
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.receipts.next_receipt_number import NextReceiptNumber
from src.app.use_cases.rolls.dtos import AllocationResponseDTO
from src.domain.amounts import ZERO
from src.domain.order import Order, OrderStatus, PaymentStatus
from .dtos import CreateOrderCommandDTO, OrderDTO
from .line_items import price_line_items

logger = logging.getLogger(__name__)


class CreateOrder:
    """
    Use Case: Create an order

    Business Rules:
    1. At least one line item; total = sum of item totals
    2. The receipt number comes from the day's sequence
    3. If the work type consumes material, the printed length is allocated
       once from rolls of its material type (FIFO, or the given roll for
       manually selected work types)
    4. paid_in_full records exactly one payment equal to the total
    5. Allocator and sequencer errors are returned unchanged

    Flow:
    1. Price line items, check the material policy (no writes)
    2. Issue and commit the receipt number
    3. Insert order and items
    4. Allocate material
    5. Record the up-front payment
    6. Commit (or roll back steps 3-5)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        order_repo: OrderRepository,
        sequencer: ReceiptSequencer,
        allocator: RollAllocator,
        reconciler: PaymentReconciler,
        material_policies: Optional[Dict[str, MaterialPolicy]] = None,
        policy: Optional[RetryPolicy] = None,
    ):
        self.uow = uow
        self.order_repo = order_repo
        self.sequencer = sequencer
        self.allocator = allocator
        self.reconciler = reconciler
        self.material_policies = material_policies or {}
        self.policy = policy

    async def execute(self, command: CreateOrderCommandDTO) -> Result[OrderDTO]:
        checked = self._check(command)
        if checked.is_err():
            return checked
        material = checked.value

        # Own short transaction: the day's counter row is not held locked
        # while rolls are allocated. A failed order leaves a gap.
        numbered = await NextReceiptNumber(self.uow, self.sequencer, self.policy).execute()
        if numbered.is_err():
            return numbered
        receipt_number = numbered.value.receipt_number

        runner = TransactionRunner(self.uow, self.policy)
        return await runner.run(
            lambda: self._create(command, material, receipt_number),
            failure_code="CREATE_ORDER_FAILED",
            failure_message="Failed to create order",
        )

    def _check(self, command: CreateOrderCommandDTO) -> Result[Optional[MaterialPolicy]]:
        """Validate the command before anything is written; returns the material policy"""
        priced = price_line_items(command.items)
        if priced.is_err():
            return priced
        priced = priced.value

        if command.paid_in_full:
            if not command.payment_method:
                return Return.err(validation_error(
                    "A payment method is required for orders paid in full",
                    field="payment_method",
                ))
            if priced.total <= ZERO:
                return Return.err(validation_error(
                    "An order with a zero total cannot be paid in full",
                    field="paid_in_full",
                ))

        material = self.material_policies.get(command.work_type)
        if material is not None and material.requires_roll_number and command.roll_number is None:
            return Return.err(validation_error(
                f"Work type {command.work_type} requires a roll number",
                field="roll_number",
            ))

        return Return.ok(material)

    async def _create(
        self,
        command: CreateOrderCommandDTO,
        material: Optional[MaterialPolicy],
        receipt_number: str,
    ) -> Result[OrderDTO]:
        # Fresh item rows on every attempt
        priced = price_line_items(command.items).value

        order = await self.order_repo.create(
            Order(
                receipt_number=receipt_number,
                client_id=command.client_id,
                client_name=command.client_name,
                work_type=command.work_type,
                description=command.description,
                notes=command.notes,
                total=priced.total,
                amount_paid=ZERO,
                payment_status=PaymentStatus.PENDING,
                status=OrderStatus.ACTIVE,
                created_by=command.actor,
            )
        )
        items = await self.order_repo.replace_items(order.id, priced.items)

        allocation = None
        if material is not None and priced.print_length > ZERO:
            allocated = await self._allocate(material, command, order, priced.print_length)
            if allocated.is_err():
                logger.info(f"Order {receipt_number} rejected: {allocated.error.message}")
                return allocated
            allocation = allocated.value

        if command.paid_in_full:
            paid = await self.reconciler.record(
                order_id=order.id,
                amount=priced.total,
                method=command.payment_method,
                bank=command.bank,
                notes="Paid in full at order creation",
                recorded_by=command.actor,
            )
            if paid.is_err():
                return paid
            order = paid.value.order

        logger.info(
            f"Created order {receipt_number}: work_type={command.work_type}, total={priced.total}, "
            f"payment_status={order.payment_status.value}"
        )
        return Return.ok(OrderDTO.from_entity(order, items, allocation))

    async def _allocate(
        self, material: MaterialPolicy, command: CreateOrderCommandDTO, order: Order, length
    ) -> Result[AllocationResponseDTO]:
        notes = f"Order {order.receipt_number}"
        if material.roll_selection == RollSelection.MANUAL or command.roll_number is not None:
            result = await self.allocator.allocate_from_roll(
                roll_number=command.roll_number,
                material_type=material.material_type,
                required_length=length,
                order_id=order.id,
                actor=command.actor,
                notes=notes,
            )
        else:
            result = await self.allocator.allocate(
                material_type=material.material_type,
                required_length=length,
                order_id=order.id,
                actor=command.actor,
                notes=notes,
            )
        if result.is_err():
            return result

        allocation = result.value
        return Return.ok(
            AllocationResponseDTO(
                roll_number=allocation.roll_number,
                material_type=allocation.material_type,
                allocated_length=allocation.allocated_length,
                remaining_length=allocation.remaining_length,
                event_id=allocation.event_id,
            )
        )
