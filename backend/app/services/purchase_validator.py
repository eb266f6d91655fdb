# backend/app/services/purchase_validator.py
"""
Validación de payloads de compra antes de cualquier escritura.

Orden de las comprobaciones en create: campos ausentes -> tipos -> fecha ->
unicidad por cliente. Las tres primeras son funciones puras; la unicidad
consulta el repositorio y no es atómica respecto a otro create concurrente
para el mismo cliente.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Mapping, Optional

from app.core.errors import (
    DuplicateActivePurchaseError,
    InvalidDateError,
    MissingFieldError,
    TypeMismatchError,
)
from app.db.purchases import PurchaseRepository
from app.models.purchase import PurchaseCreate

# wire name -> column name
WIRE_FIELDS = {
    "client": "client",
    "details": "details",
    "totalAmount": "total_amount",
    "purchaseDate": "purchase_date",
    "purchaseStatus": "purchase_status",
}
REQUIRED_FIELDS = ("client", "details", "totalAmount", "purchaseDate")


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def _check_type(field: str, value: Any) -> None:
    if field in ("client", "details"):
        if not isinstance(value, str):
            raise TypeMismatchError(field, "a string")
    elif field == "totalAmount":
        # bool es subclase de int; "100" tampoco vale
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeMismatchError(field, "a number")
        # NaN e Infinity llegan vía json.loads y no se pueden volver a serializar
        if not math.isfinite(value):
            raise TypeMismatchError(field, "a finite number")
    elif field == "purchaseDate":
        # Por JSON solo llegan strings ISO-8601; date/datetime son para llamadas
        # internas. Un epoch numérico no se acepta.
        if not isinstance(value, (str, datetime, date)):
            raise TypeMismatchError(field, "an ISO-8601 date string")
    elif field == "purchaseStatus":
        if not isinstance(value, bool):
            raise TypeMismatchError(field, "a boolean")


def parse_purchase_date(value: Any) -> datetime:
    """ISO-8601 -> datetime con zona (UTC si viene sin zona)."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise InvalidDateError("purchaseDate", value) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def validate_create_payload(payload: Mapping[str, Any]) -> PurchaseCreate:
    if not isinstance(payload, Mapping):
        raise TypeMismatchError("body", "a JSON object")

    for field in REQUIRED_FIELDS:
        if _is_missing(payload.get(field)):
            raise MissingFieldError(field)

    for field in WIRE_FIELDS:
        if payload.get(field) is not None:
            _check_type(field, payload[field])

    status = payload.get("purchaseStatus")
    return PurchaseCreate(
        client=payload["client"].strip(),
        details=payload["details"],
        total_amount=payload["totalAmount"],
        purchase_date=parse_purchase_date(payload["purchaseDate"]),
        purchase_status=False if status is None else status,
    )


def validate_update_payload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Devuelve solo los campos mutables presentes, ya con nombre de columna.
    Claves desconocidas (incluido `id`) se ignoran.
    """
    if not isinstance(payload, Mapping):
        raise TypeMismatchError("body", "a JSON object")

    fields: Dict[str, Any] = {}
    for wire, column in WIRE_FIELDS.items():
        if wire not in payload or payload[wire] is None:
            continue
        value = payload[wire]
        _check_type(wire, value)
        if wire in ("client", "details") and not value.strip():
            raise MissingFieldError(wire, f"Field '{wire}' cannot be empty")
        if wire == "client":
            value = value.strip()
        if wire == "purchaseDate":
            value = parse_purchase_date(value)
        fields[column] = value

    if not fields:
        raise MissingFieldError("body", "Missing required fields")
    return fields


class PurchaseValidator:
    """Validación completa de un create, incluida la regla de una compra por cliente."""

    def __init__(
        self,
        repository: PurchaseRepository,
        single_purchase_per_client: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self.repository = repository
        self.single_purchase_per_client = single_purchase_per_client
        self.logger = logger or logging.getLogger(__name__)

    async def ensure_unique_client(self, client_id: str) -> None:
        existing = await self.repository.find_by_client(client_id)
        if existing:
            self.logger.info(
                "Rejecting purchase for client %s: %d purchase(s) already recorded",
                client_id,
                len(existing),
            )
            raise DuplicateActivePurchaseError(client_id)

    async def validate_create(self, payload: Mapping[str, Any]) -> PurchaseCreate:
        purchase = validate_create_payload(payload)
        if self.single_purchase_per_client:
            await self.ensure_unique_client(purchase.client)
        return purchase
