from typing import Dict, Any, List
from fastapi import Request, Response, HTTPException
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
import os
import time
import hashlib
import logging
from marketplace.utils.security import COOKIE_NAME, bearer_token

logger = logging.getLogger(__name__)

def _client_key(req: Request) -> str:
    # Jeton de l'appelant (hashé, Bearer puis cookie) sinon IP; toujours par chemin
    token = bearer_token(req) or req.cookies.get(COOKIE_NAME)
    if token:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()[:16]
        return f"user:{digest}:{req.url.path}"
    ip = req.client.host if req.client else "local"
    return f"ip:{ip}:{req.url.path}"

def _local_window_exceeded(request: Request, times: int, seconds: int) -> bool:
    """Fenêtre glissante en mémoire (app.state._rl_store), pour le dev sans Redis."""
    now = time.time()
    key = _client_key(request)
    store: Dict[str, List[float]] = getattr(request.app.state, "_rl_store", None) or {}
    recent = [t for t in store.get(key, []) if now - t < seconds]
    exceeded = len(recent) >= times
    if not exceeded:
        recent.append(now)
    store[key] = recent
    request.app.state._rl_store = store
    return exceeded

def optional_rate_limit(times: int, seconds: int):
    """
    Dépendance de rate limiting tolérante:
    - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre glissante en mémoire
    - app.state.rate_limit_enabled is False: désactivé (tests)
    - sinon fastapi-limiter (Redis); une panne du limiteur ne bloque jamais la requête
    """
    async def _identifier(req: Request) -> str:
        return _client_key(req)

    async def _dep(request: Request, response: Response):
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            if _local_window_exceeded(request, times, seconds):
                raise HTTPException(status_code=429, detail="Too Many Requests")
            return

        if getattr(request.app.state, "rate_limit_enabled", None) is False:
            return
        if getattr(FastAPILimiter, "redis", None) is None:
            return

        try:
            await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, response)
        except HTTPException:
            raise
        except Exception as e:
            # Redis indisponible: pas de 429 en prod
            logger.warning("rate limiter unavailable on %s: %s", request.url.path, e)
    return _dep

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
    return {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": "redis" if limiter_ready else None,
    }
