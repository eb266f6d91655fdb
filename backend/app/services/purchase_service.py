# backend/app/services/purchase_service.py
"""
Ciclo de vida de una compra: validar -> escribir -> ajustar contador.

Cada paso se espera antes del siguiente. La escritura de la compra es la
fuente de verdad; el contador del cliente se ajusta después y, si falla, se
registra un ConsistencyWarning sin deshacer la compra ni reintentar.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from app.core.errors import ConsistencyWarning, MissingFieldError, NotFoundError
from app.db.purchases import PurchaseRepository
from app.models.purchase import Purchase, PurchaseWithClient
from app.services.client_counter import ClientCounterSynchronizer
from app.services.purchase_validator import PurchaseValidator, validate_update_payload


def _require_id(value: Optional[str], message: str) -> str:
    if value is None or not str(value).strip():
        raise MissingFieldError("id", message)
    return str(value).strip()


class PurchaseService:
    def __init__(
        self,
        repository: PurchaseRepository,
        counter: ClientCounterSynchronizer,
        validator: PurchaseValidator,
        logger: Optional[logging.Logger] = None,
    ):
        self.repository = repository
        self.counter = counter
        self.validator = validator
        self.logger = logger or logging.getLogger(__name__)

    async def _sync_counter(self, operation: str, purchase: Purchase, delta: int) -> bool:
        ok = await self.counter.adjust(purchase.client, delta)
        if not ok:
            warning = ConsistencyWarning(operation, purchase.id, purchase.client, delta)
            self.logger.warning(warning.message, extra=warning.log_extra())
        return ok

    async def list_purchases(self) -> List[PurchaseWithClient]:
        """Todas las compras (más recientes primero). Una lista vacía es un 200."""
        return await self.repository.find_all()

    async def create_purchase(self, payload: Mapping[str, Any]) -> Purchase:
        purchase = await self.validator.validate_create(payload)
        created = await self.repository.create(purchase)
        self.logger.info("Purchase %s created for client %s", created.id, created.client)
        await self._sync_counter("create", created, +1)
        return created

    async def get_purchase(self, purchase_id: Optional[str]) -> PurchaseWithClient:
        purchase_id = _require_id(purchase_id, "ID is required")
        return await self.repository.find_by_id(purchase_id)

    async def update_purchase(
        self, purchase_id: Optional[str], payload: Mapping[str, Any]
    ) -> Purchase:
        """
        Merge-patch sobre los campos presentes. No toca contadores: reasignar
        `client` deja los purchase_count del cliente viejo y del nuevo como estaban.
        """
        purchase_id = _require_id(purchase_id, "ID is required")
        fields = validate_update_payload(payload)
        updated = await self.repository.update_by_id(purchase_id, fields)
        self.logger.info("Purchase %s updated: %s", purchase_id, ", ".join(sorted(fields)))
        return updated

    async def delete_purchase(self, purchase_id: Optional[str]) -> Purchase:
        purchase_id = _require_id(purchase_id, "ID is required")
        deleted = await self.repository.delete_by_id(purchase_id)
        self.logger.info("Purchase %s deleted", deleted.id)
        if deleted.client:
            await self._sync_counter("delete", deleted, -1)
        return deleted

    async def list_client_purchases(self, client_id: Optional[str]) -> List[Purchase]:
        """
        Compras de un cliente. A diferencia de list_purchases, una lista vacía
        se trata como 404.
        """
        client_id = _require_id(client_id, "Client ID is required")
        purchases = await self.repository.find_by_client(client_id)
        if not purchases:
            raise NotFoundError("Client purchases", client_id, "No purchases found for this client")
        return purchases

    async def reconcile_client(self, client_id: Optional[str]) -> int:
        """Reescribe purchase_count del cliente con el número real de compras."""
        client_id = _require_id(client_id, "Client ID is required")
        return await self.counter.reconcile(client_id)
