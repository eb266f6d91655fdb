# app/api/admin.py
from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.core.settings import settings
from app.services.purchase_service import PurchaseService
from app.api.purchases import get_purchase_service

router = APIRouter()


def require_admin_token(x_admin_token: str = Header(default="")) -> None:
    if not settings.ADMIN_TOKEN or x_admin_token != settings.ADMIN_TOKEN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


@router.post("/reconcile/{client_id}", dependencies=[Depends(require_admin_token)])
async def reconcile_purchase_count(
    client_id: str,
    service: PurchaseService = Depends(get_purchase_service),
):
    """
    Recalcula purchase_count de un cliente a partir de sus compras.
    Vía de reparación tras un ConsistencyWarning.
    """
    count = await service.reconcile_client(client_id)
    return {"client": client_id, "purchaseCount": count}
