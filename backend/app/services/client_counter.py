# backend/app/services/client_counter.py
"""
Sincroniza clients.purchase_count con las compras.

El incremento es atómico en Postgres; la función esperada en Supabase es:

    create or replace function adjust_purchase_count(target_client uuid, delta int)
    returns int language sql as $$
        update clients set purchase_count = purchase_count + delta
        where id = target_client
        returning purchase_count;
    $$;

adjust() siempre se llama DESPUÉS de la escritura de la compra. Si falla, la
compra se queda y el contador deriva; reconcile() es la vía de reparación.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from app.core.errors import NotFoundError, StoreUnavailableError
from app.db.purchases import INVALID_ID_CODE, PurchaseRepository

ALLOWED_DELTAS = (1, -1)


class ClientCounterSynchronizer:
    def __init__(
        self,
        db: AsyncClient,
        repository: PurchaseRepository,
        clients_table: str = "clients",
        rpc_name: str = "adjust_purchase_count",
        logger: Optional[logging.Logger] = None,
    ):
        self.db = db
        self.repository = repository
        self.clients_table = clients_table
        self.rpc_name = rpc_name
        self.logger = logger or logging.getLogger(__name__)

    async def adjust(self, client_id: str, delta: int) -> bool:
        """
        purchase_count += delta. Devuelve False si el store falla o si el
        cliente no existe; nunca lanza por errores del store.
        """
        if delta not in ALLOWED_DELTAS:
            raise ValueError(f"delta must be +1 or -1, got {delta!r}")

        try:
            res = await self.db.rpc(
                self.rpc_name, {"target_client": client_id, "delta": delta}
            ).execute()
        except (APIError, httpx.HTTPError) as e:
            self.logger.error("purchase_count %+d for client %s failed: %s", delta, client_id, e)
            return False

        if res.data is None:
            self.logger.warning("purchase_count %+d skipped: client %s not found", delta, client_id)
            return False

        self.logger.debug("purchase_count for client %s is now %s", client_id, res.data)
        return True

    async def reconcile(self, client_id: str) -> int:
        """Recalcula el contador desde las compras reales y lo escribe tal cual."""
        purchases = await self.repository.find_by_client(client_id)
        count = len(purchases)
        try:
            res = await (
                self.db.table(self.clients_table)
                .update({"purchase_count": count})
                .eq("id", client_id)
                .execute()
            )
        except APIError as e:
            if e.code == INVALID_ID_CODE:
                raise NotFoundError("Client", client_id, "Client not found") from e
            self.logger.error("Reconcile of client %s failed: %s", client_id, e.message)
            raise StoreUnavailableError("reconcile", e) from e
        except httpx.HTTPError as e:
            self.logger.error("Reconcile of client %s failed: %s", client_id, e)
            raise StoreUnavailableError("reconcile", e) from e

        if not res.data:
            raise NotFoundError("Client", client_id, "Client not found")

        self.logger.info("Reconciled purchase_count for client %s to %d", client_id, count)
        return count
