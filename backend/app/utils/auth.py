# backend/app/utils/auth.py - verificación JWT (Bearer)
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.settings import settings

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


def decode_token(token: str, secret: Optional[str] = None, algorithm: Optional[str] = None) -> Dict[str, Any]:
    """Decodifica y verifica firma + expiración. Lanza jwt.InvalidTokenError."""
    return jwt.decode(
        token,
        secret or settings.JWT_SECRET,
        algorithms=[algorithm or settings.JWT_ALGORITHM],
        options={
            "verify_signature": True,
            "verify_exp": True,
            "verify_aud": False,
        },
    )


def require_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Puerta de autenticación de las rutas de compras.

    - Sin cabecera Authorization -> 401 (ausente)
    - Cabecera sin esquema Bearer -> se verifica el valor crudo, como token
    - Token inválido o expirado -> 403
    - OK -> claims en request.state.user, devuelve el id del usuario
    """
    raw = request.headers.get("authorization", "").strip()
    if not raw:
        logger.info("Auth: missing Authorization header on %s", request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = credentials.credentials.strip() if credentials else raw
    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        logger.info("Auth: token expired")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Token expired")
    except jwt.InvalidTokenError as e:
        logger.info("Auth: invalid token: %s", e)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")

    user_id = payload.get("sub") or payload.get("user_id")
    if not user_id:
        logger.info("Auth: token without subject, claims=%s", sorted(payload))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")

    request.state.user = payload
    return str(user_id)
