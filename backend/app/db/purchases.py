# backend/app/db/purchases.py
"""
Adaptador de la tabla de compras sobre Supabase (PostgREST).

Solo traduce llamadas de dominio a llamadas del store; no contiene reglas de
negocio. Los fallos que deja salir son NotFoundError, StoreUnavailableError y, si el
store rechaza un valor del payload, ValidationError (INVALID_VALUE).
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from app.core.errors import NotFoundError, StoreUnavailableError, ValidationError
from app.models.purchase import Purchase, PurchaseCreate, PurchaseWithClient

# Postgres: invalid_text_representation (p.ej. un valor que no es uuid)
INVALID_ID_CODE = "22P02"

PURCHASE_COLUMNS = "id, client, details, total_amount, purchase_date, purchase_status, created_at"


class PurchaseRepository:
    def __init__(
        self,
        db: AsyncClient,
        table: str = "purchases",
        clients_table: str = "clients",
        logger: Optional[logging.Logger] = None,
    ):
        self.db = db
        self.table = table
        self.clients_table = clients_table
        self.logger = logger or logging.getLogger(__name__)

    @property
    def _with_client(self) -> str:
        # La FK `client` se sustituye por la fila del cliente
        cols = PURCHASE_COLUMNS.replace("client, ", "")
        return f"{cols}, client:{self.clients_table}(*)"

    @staticmethod
    def _is_valid_id(value: str) -> bool:
        try:
            uuid.UUID(str(value))
        except ValueError:
            return False
        return True

    async def _execute(self, operation: str, query):
        try:
            return await query.execute()
        except APIError as e:
            if e.code == INVALID_ID_CODE:
                # los ids de los filtros ya vienen comprobados: el valor malo
                # viene del payload (p.ej. un client que no es uuid)
                raise ValidationError(f"Invalid value: {e.message}", "INVALID_VALUE") from e
            self.logger.error("Store %s on %s failed: %s", operation, self.table, e.message)
            raise StoreUnavailableError(operation, e) from e
        except httpx.HTTPError as e:
            self.logger.error("Store %s on %s unreachable: %s", operation, self.table, e)
            raise StoreUnavailableError(operation, e) from e

    async def find_all(self) -> List[PurchaseWithClient]:
        """Todas las compras, la más reciente primero, con su cliente."""
        res = await self._execute(
            "find_all",
            self.db.table(self.table).select(self._with_client).order("purchase_date", desc=True),
        )
        return [PurchaseWithClient.model_validate(row) for row in res.data or []]

    def _require_valid_id(self, purchase_id: str) -> None:
        # un id mal formado no puede existir: ni se consulta
        if not self._is_valid_id(purchase_id):
            raise NotFoundError("Purchase", purchase_id, "Purchase not found")

    async def find_by_id(self, purchase_id: str) -> PurchaseWithClient:
        self._require_valid_id(purchase_id)
        res = await self._execute(
            "find_by_id",
            self.db.table(self.table).select(self._with_client).eq("id", purchase_id).limit(1),
        )
        if not res.data:
            raise NotFoundError("Purchase", purchase_id, "Purchase not found")
        return PurchaseWithClient.model_validate(res.data[0])

    async def find_by_client(self, client_id: str) -> List[Purchase]:
        """Compras de un cliente, la más reciente primero. Vacío no es error."""
        if not self._is_valid_id(client_id):
            # id de cliente mal formado: no puede tener compras
            return []
        res = await self._execute(
            "find_by_client",
            self.db.table(self.table)
            .select(PURCHASE_COLUMNS)
            .eq("client", client_id)
            .order("purchase_date", desc=True),
        )
        return [Purchase.model_validate(row) for row in res.data or []]

    async def create(self, purchase: PurchaseCreate) -> Purchase:
        res = await self._execute("create", self.db.table(self.table).insert(purchase.to_row()))
        if not res.data:
            raise StoreUnavailableError("create", RuntimeError("insert returned no rows"))
        return Purchase.model_validate(res.data[0])

    async def update_by_id(self, purchase_id: str, fields: Dict[str, Any]) -> Purchase:
        """Merge-patch: solo se escriben las claves presentes en `fields`."""
        self._require_valid_id(purchase_id)
        row = {k: v.isoformat() if isinstance(v, datetime) else v for k, v in fields.items()}
        res = await self._execute(
            "update_by_id",
            self.db.table(self.table).update(row).eq("id", purchase_id),
        )
        if not res.data:
            raise NotFoundError("Purchase", purchase_id, "Purchase not found")
        return Purchase.model_validate(res.data[0])

    async def delete_by_id(self, purchase_id: str) -> Purchase:
        """Borra y devuelve la fila borrada (hace falta su client para el contador)."""
        self._require_valid_id(purchase_id)
        res = await self._execute(
            "delete_by_id",
            self.db.table(self.table).delete().eq("id", purchase_id),
        )
        if not res.data:
            raise NotFoundError("Purchase", purchase_id, "Purchase not found")
        return Purchase.model_validate(res.data[0])
