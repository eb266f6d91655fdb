# errors.py - Manejadores de excepción personalizados

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.errors import PurchaseLedgerError, StoreError

logger = logging.getLogger(__name__)

GENERIC_ERROR = {"detail": "Internal server error"}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Body ausente o JSON ilegible: mismo 400 que un payload incompleto
        return JSONResponse(
            status_code=400,
            content={"detail": "Missing required fields", "code": "MISSING_FIELD"},
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        # El detalle solo va al log; el cliente recibe un 500 genérico
        logger.error("%s %s -> %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=GENERIC_ERROR)

    @app.exception_handler(PurchaseLedgerError)
    async def domain_error_handler(request: Request, exc: PurchaseLedgerError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=GENERIC_ERROR)
