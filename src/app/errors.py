"""Error codes shared by the engine's use cases

VALIDATION_ERROR        caller's fault, never retried (includes invalid numbers)
PAYMENT_EXCEEDS_BALANCE validation error carrying details["max_amount"]
INSUFFICIENT_STOCK      expected business outcome, details["available_length"]
CONFLICT                lost a concurrency race after bounded retries
NOT_FOUND               referenced roll / order / payment does not exist
UNAVAILABLE             storage unreachable or deadline exceeded
"""

from decimal import Decimal
from typing import Any, Optional
from libs.result import Error

VALIDATION_ERROR = "VALIDATION_ERROR"
PAYMENT_EXCEEDS_BALANCE = "PAYMENT_EXCEEDS_BALANCE"
INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
CONFLICT = "CONFLICT"
NOT_FOUND = "NOT_FOUND"
UNAVAILABLE = "UNAVAILABLE"


def validation_error(message: str, reason: Optional[str] = None, **details: Any) -> Error:
    return Error(code=VALIDATION_ERROR, message=message, reason=reason, details=details)


def not_found(entity: str, identifier: Any) -> Error:
    return Error(
        code=NOT_FOUND,
        message=f"{entity} {identifier} not found",
        details={"entity": entity, "id": str(identifier)},
    )


def insufficient_stock(
    material_type: str,
    required_length: Decimal,
    available_length: Decimal,
    roll_number: Optional[int] = None,
    reason: Optional[str] = None,
) -> Error:
    shortfall = max(required_length - available_length, Decimal("0.00"))
    if roll_number is not None:
        message = (
            f"Roll {roll_number} ({material_type}) only has {available_length} available, "
            f"{required_length} required. Short by {shortfall}"
        )
    else:
        message = (
            f"No active {material_type} roll has {required_length} available. "
            f"Largest available on a single roll: {available_length}"
        )
    return Error(
        code=INSUFFICIENT_STOCK,
        message=message,
        reason=reason,
        details={
            "material_type": material_type,
            "roll_number": roll_number,
            "required_length": str(required_length),
            "available_length": str(available_length),
            "shortfall": str(shortfall),
        },
    )
