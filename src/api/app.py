"""FastAPI application factory"""

import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from src.api.error import ClientError, client_error_handler, command_validation_handler, request_validation_handler
from src.api.routes import orders, payments, rolls

logger = logging.getLogger("printshop.api")


def create_app(config) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(config, "CREATE_SCHEMA_ON_STARTUP", False):
            from src.adapter.services.database import create_schema
            from src.depends import engine

            await create_schema(engine)
            logger.info("Database schema ensured")
        yield

    app = FastAPI(
        title="Print Shop Ledger",
        description="Material roll ledger and payment reconciliation engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    if config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=config.CORS_ALLOW_CREDENTIALS,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            start = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
            return response

    app.add_exception_handler(ClientError, client_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, command_validation_handler)

    app.include_router(rolls.router, prefix=config.API_PREFIX)
    app.include_router(orders.router, prefix=config.API_PREFIX)
    app.include_router(payments.router, prefix=config.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health():
        return {"status": "ok"}

    return app
