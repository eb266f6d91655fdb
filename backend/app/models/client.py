# backend/app/models/client.py - Schemas Pydantic para Cliente

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ClientOut(BaseModel):
    """Cliente resuelto junto a una compra. Solo purchase_count lo toca este backend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    purchase_count: int = 0
