"""ReconcileRolls Use Case

Read-only audit of roll counters: each roll must satisfy
0 <= available <= total and used == total - available, and its available
length must match the consumption recorded since its last install or reset.
"""

import logging
import time
from datetime import datetime
from typing import List
from libs.result import Error, Result, Return
from src.app.repositories.roll_repository import RollRepository
from src.app.repositories.roll_usage_repository import RollUsageRepository
from src.domain.amounts import ZERO, quantize
from .dtos import RollDiscrepancyDTO, RollReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileRolls:

    def __init__(self, roll_repo: RollRepository, usage_repo: RollUsageRepository):
        self.roll_repo = roll_repo
        self.usage_repo = usage_repo

    async def execute(self) -> Result[RollReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            rolls = await self.roll_repo.list_by_type()
            discrepancies: List[RollDiscrepancyDTO] = []

            for roll in rolls:
                total = quantize(roll.total_length)
                available = quantize(roll.available_length)
                used = quantize(roll.used_length)

                issues = []
                if available < ZERO or available > total:
                    issues.append(("available_length out of bounds", None))
                if used != total - available:
                    issues.append(("used_length does not match total - available", None))

                consumed = await self.usage_repo.consumed_since_last_install(roll.id)
                if consumed is not None and total - consumed != available:
                    issues.append(("available_length does not match usage history", total - consumed))

                for issue, expected in issues:
                    discrepancies.append(
                        RollDiscrepancyDTO(
                            roll_number=roll.roll_number,
                            material_type=roll.material_type,
                            issue=issue,
                            total_length=total,
                            available_length=available,
                            used_length=used,
                            expected_available_length=expected,
                        )
                    )
                    logger.warning(
                        f"Roll {roll.material_type}#{roll.roll_number}: {issue} "
                        f"(total={total}, available={available}, used={used})"
                    )

            execution_time_ms = int((time.time() - start_time) * 1000)
            logger.info(
                f"Roll reconciliation complete. {len(discrepancies)} discrepancies "
                f"across {len(rolls)} rolls in {execution_time_ms}ms"
            )

            return Return.ok(
                RollReconciliationResultDTO(
                    total_rolls_checked=len(rolls),
                    discrepancies_found=len(discrepancies),
                    discrepancies=discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Roll reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile rolls",
                    reason=str(e),
                )
            )
