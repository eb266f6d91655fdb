# backend/app/models/purchase.py - Schemas Pydantic para Purchase
#
# En el wire los campos van en camelCase (totalAmount, purchaseDate, ...);
# en Supabase las columnas son snake_case (total_amount, purchase_date, ...).

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.client import ClientOut


class PurchaseBase(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    client: str
    details: str
    total_amount: float
    purchase_date: datetime
    purchase_status: bool = False


class PurchaseCreate(PurchaseBase):
    """Payload ya validado y normalizado, listo para insertar."""

    def to_row(self) -> dict:
        row = self.model_dump()
        row["purchase_date"] = self.purchase_date.isoformat()
        return row


class Purchase(PurchaseBase):
    id: str
    created_at: Optional[datetime] = None


class PurchaseWithClient(Purchase):
    """Compra con el cliente resuelto (embed de PostgREST)."""

    client: Optional[ClientOut] = None
