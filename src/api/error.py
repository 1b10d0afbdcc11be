"""API error handling

ClientError carries a use case Error out of a route; the handler turns it
into {"error": {...}} with the status code of its error code.
"""

from typing import Optional
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from libs.result import Error
from src.app import errors

STATUS_BY_CODE = {
    errors.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    errors.PAYMENT_EXCEEDS_BALANCE: status.HTTP_400_BAD_REQUEST,
    errors.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    errors.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    errors.CONFLICT: status.HTTP_409_CONFLICT,
    errors.UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class ClientError(Exception):

    def __init__(self, error: Error, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or STATUS_BY_CODE.get(
            error.code, status.HTTP_500_INTERNAL_SERVER_ERROR
        )


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.error.to_dict()})


def _validation_response(validation_errors) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": errors.VALIDATION_ERROR,
                "message": "Invalid request parameters",
                "details": {"errors": [
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                    for e in validation_errors
                ]},
            }
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _validation_response(exc.errors())


async def command_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Command DTOs built inside a route reject values the route let through"""
    return _validation_response(exc.errors())
