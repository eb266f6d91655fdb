# backend/app/main.py
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.core.settings import log_settings, settings, should_log_settings
from app.db.supabase import create_supabase
from app.utils.errors import register_exception_handlers
from app.utils.logging import setup_logging

# Routers
from app.api.admin import router as admin_router
from app.api.purchases import router as purchases_router

# 1) Logging
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

if should_log_settings():
    log_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Un único cliente Supabase por proceso, inyectado vía get_supabase
    app.state.supabase = await create_supabase(settings)
    logger.info("Supabase client ready (%s)", settings.SUPABASE_URL)
    yield


# 2) App
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# 3) CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["authorization", "content-type", "x-admin-token"],
)


# 4) Request log
@app.middleware("http")
async def log_requests(request: Request, call_next):
    path = request.url.path
    response = await call_next(request)
    if path not in ("/health", "/health/"):
        logger.info("%s %s -> %s", request.method, path, response.status_code)
    return response


# 5) Error handlers
register_exception_handlers(app)

# 6) Routers
app.include_router(purchases_router, prefix="/purchases", tags=["purchases"])
app.include_router(admin_router,     prefix="/admin",     tags=["admin"])


# 7) Health
@app.get("/health")
def health() -> dict:
    return {"status": "ok", "version": settings.VERSION}


# 8) Run
def run() -> None:
    # PORT ya viene de Settings (env o .env)
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=False,
        access_log=True,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()
