# backend/app/core/errors.py
"""
Jerarquía de errores del ciclo de vida de compras.

- ValidationError (400): input del cliente, siempre con un motivo concreto.
- NotFoundError (404): la entidad pedida no existe.
- StoreError (500): fallo de infraestructura; al cliente solo le llega un
  mensaje genérico, el detalle queda en el log del servidor.
- ConsistencyWarning: el contador de un cliente no se pudo ajustar tras una
  escritura correcta. Nunca se lanza al cliente; se registra en el log.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class PurchaseLedgerError(Exception):
    """Base de todos los errores de dominio."""

    def __init__(self, message: str, code: str, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status

    def to_response(self) -> dict:
        return {"detail": self.message, "code": self.code}


# ─── Validation (400) ──────────────────────────────────────────

class ValidationError(PurchaseLedgerError):
    def __init__(self, message: str, code: str = "VALIDATION_ERROR", field: Optional[str] = None):
        super().__init__(message, code, 400)
        self.field = field


class MissingFieldError(ValidationError):
    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Missing required field: {field}", "MISSING_FIELD", field)


class TypeMismatchError(ValidationError):
    def __init__(self, field: str, expected: str):
        super().__init__(f"Field '{field}' must be {expected}", "TYPE_MISMATCH", field)
        self.expected = expected


class InvalidDateError(ValidationError):
    def __init__(self, field: str, value: Any):
        super().__init__(f"Field '{field}' is not a valid date: {value!r}", "INVALID_DATE", field)


class DuplicateActivePurchaseError(ValidationError):
    def __init__(self, client_id: str):
        super().__init__(
            f"Client '{client_id}' already has a purchase",
            "DUPLICATE_ACTIVE_PURCHASE",
            "client",
        )
        self.client_id = client_id


# ─── Not found (404) ───────────────────────────────────────────

class NotFoundError(PurchaseLedgerError):
    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} not found",
            "NOT_FOUND",
            404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure (500) ──────────────────────────────────────

class StoreError(PurchaseLedgerError):
    def __init__(self, message: str, code: str = "STORE_ERROR"):
        super().__init__(message, code, 500)


class StoreUnavailableError(StoreError):
    """Una operación contra el store falló (red, timeout, error de PostgREST)."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        detail = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown cause"
        super().__init__(f"Store {operation} failed: {detail}", "STORE_UNAVAILABLE")
        self.operation = operation
        self.cause = cause


# ─── Consistency ───────────────────────────────────────────────

@dataclass(frozen=True)
class ConsistencyWarning:
    """Compra persistida sin el ajuste de contador correspondiente."""

    operation: str
    purchase_id: str
    client_id: str
    delta: int

    @property
    def message(self) -> str:
        return (
            f"purchase_count for client {self.client_id} not adjusted by {self.delta:+d} "
            f"after {self.operation} of purchase {self.purchase_id}"
        )

    def log_extra(self) -> dict:
        return {
            "consistency_warning": True,
            "operation": self.operation,
            "purchase_id": self.purchase_id,
            "client_id": self.client_id,
            "delta": self.delta,
        }
