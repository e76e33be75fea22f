"""
Lifespan FastAPI du service de règlement.
Au démarrage:
- signale les collaborateurs non configurés (Stripe, Supabase service-role), sans jamais logguer de secret
- branche fastapi-limiter sur Redis (ou fakeredis) pour /payments/intent et /accounts/connect
À l'arrêt: ferme la connexion Redis du limiteur.

Variables d'environnement du limiteur:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: aucun limiteur (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: Redis en mémoire via fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: fenêtre locale en mémoire si Redis est injoignable
  - RATE_LIMIT_REDIS_URL: URL Redis (défaut redis://127.0.0.1:6379/0)
"""
import os
import logging
import redis.asyncio as redis
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from marketplace import config

logger = logging.getLogger("uvicorn.error")

def _warn_missing_settings() -> None:
    missing = [
        name for name, value in (
            ("STRIPE_SECRET_KEY", config.STRIPE_SECRET_KEY),
            ("SUPABASE_URL", config.SUPABASE_URL),
            ("SUPABASE_SERVICE_KEY", config.SUPABASE_SERVICE_KEY),
        )
        if not value
    ]
    if missing:
        logger.warning("Settlement service started without %s", ", ".join(missing))
    logger.info(
        "Platform fee rate=%s currency=%s", config.PLATFORM_FEE_RATE, config.PAYMENT_CURRENCY,
    )

async def _init_rate_limiter(app: FastAPI) -> bool:
    """
    Initialise FastAPILimiter et positionne app.state.rate_limit_enabled.
    Retour: True si une connexion Redis (réelle ou fake) est ouverte et doit être fermée à l'arrêt.
    """
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return False

    try:
        if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
            from fakeredis.aioredis import FakeRedis
            connection = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            connection = redis.from_url(redis_url, encoding="utf-8", decode_responses=True)
        await FastAPILimiter.init(connection)
    except Exception as e:
        # Redis injoignable: limiteur dégradé, jamais bloquant
        fallback = os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1"
        app.state.rate_limit_enabled = fallback
        logger.warning(
            "Rate limiting %s after init error: %s",
            "on local in-memory fallback" if fallback else "disabled",
            e,
        )
        return False

    app.state.rate_limit_enabled = True
    logger.info("Rate limiting enabled")
    return True

@asynccontextmanager
async def lifespan(app: FastAPI):
    _warn_missing_settings()
    limiter_open = await _init_rate_limiter(app)
    try:
        yield
    finally:
        if limiter_open:
            try:
                await FastAPILimiter.close()
            except Exception as e:
                logger.warning("Rate limiter close failed: %s", e)
