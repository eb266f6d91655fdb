# backend/app/api/purchases.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status
from supabase import AsyncClient

from app.core.settings import settings
from app.db.purchases import PurchaseRepository
from app.db.supabase import get_supabase
from app.services.client_counter import ClientCounterSynchronizer
from app.services.purchase_service import PurchaseService
from app.services.purchase_validator import PurchaseValidator
from app.utils.auth import require_user  # ← puerta JWT para todo el router

router = APIRouter(dependencies=[Depends(require_user)])


def get_purchase_service(db: AsyncClient = Depends(get_supabase)) -> PurchaseService:
    """Arma el servicio por request con el handle del store inyectado."""
    repository = PurchaseRepository(
        db,
        table=settings.PURCHASES_TABLE,
        clients_table=settings.CLIENTS_TABLE,
        logger=logging.getLogger("app.db.purchases"),
    )
    counter = ClientCounterSynchronizer(
        db,
        repository,
        clients_table=settings.CLIENTS_TABLE,
        rpc_name=settings.PURCHASE_COUNT_RPC,
        logger=logging.getLogger("app.services.client_counter"),
    )
    validator = PurchaseValidator(
        repository,
        single_purchase_per_client=settings.SINGLE_PURCHASE_PER_CLIENT,
        logger=logging.getLogger("app.services.purchase_validator"),
    )
    return PurchaseService(
        repository,
        counter,
        validator,
        logger=logging.getLogger("app.services.purchase_service"),
    )


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


@router.get("/")
async def list_purchases(service: PurchaseService = Depends(get_purchase_service)):
    """Todas las compras con su cliente, más recientes primero."""
    purchases = await service.list_purchases()
    return {"purchases": [_dump(p) for p in purchases]}


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_purchase(
    payload: Any = Body(...),
    service: PurchaseService = Depends(get_purchase_service),
):
    """
    Registra una compra y suma 1 al purchase_count del cliente.
    El payload llega crudo: la validación es del servicio, no de FastAPI.
    """
    purchase = await service.create_purchase(payload)
    return {"purchase": _dump(purchase)}


@router.get("/client/{client_id}")
async def list_client_purchases(
    client_id: str,
    service: PurchaseService = Depends(get_purchase_service),
):
    purchases = await service.list_client_purchases(client_id)
    return {"purchases": [_dump(p) for p in purchases]}


@router.get("/{purchase_id}")
async def get_purchase(
    purchase_id: str,
    service: PurchaseService = Depends(get_purchase_service),
):
    purchase = await service.get_purchase(purchase_id)
    return {"purchase": _dump(purchase)}


@router.put("/{purchase_id}")
async def update_purchase(
    purchase_id: str,
    payload: Any = Body(...),
    service: PurchaseService = Depends(get_purchase_service),
):
    """Actualización parcial (merge-patch); no toca contadores."""
    purchase = await service.update_purchase(purchase_id, payload)
    return {"purchase": _dump(purchase)}


@router.delete("/{purchase_id}")
async def delete_purchase(
    purchase_id: str,
    service: PurchaseService = Depends(get_purchase_service),
):
    await service.delete_purchase(purchase_id)
    return {"message": "Purchase deleted successfully"}
