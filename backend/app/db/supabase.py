# supabase.py - Cliente Supabase asíncrono
# Se crea una sola vez en el lifespan de la app y se comparte vía app.state;
# los componentes lo reciben por inyección (Depends), no como global.

from fastapi import Request
from supabase import AsyncClient, acreate_client

from app.core.settings import Settings


async def create_supabase(settings: Settings) -> AsyncClient:
    # AnyHttpUrl -> str para compatibilidad con supabase-py
    return await acreate_client(str(settings.SUPABASE_URL), settings.SUPABASE_KEY)


def get_supabase(request: Request) -> AsyncClient:
    """Dependencia FastAPI: handle del store creado en el arranque."""
    return request.app.state.supabase
