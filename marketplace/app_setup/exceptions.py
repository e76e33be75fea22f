"""
Gestionnaires d'exceptions.
- MarketplaceError: JSON {error, message, kind, ...extra} avec le code HTTP de la catégorie.
- RequestValidationError (pydantic): catégorie 'validation' en 400.
- HTTPException: code conservé, même forme JSON.
- Toute autre exception: 500 journalisée, jamais de trace brute côté client.
À enregistrer avant register_basic_middlewares: ces réponses passent alors sous le middleware CORS
et portent les en-têtes CORS aussi en cas d'échec.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace.errors import MarketplaceError

logger = logging.getLogger(__name__)

def _http_kind(status_code: int) -> str:
    return {
        400: "validation",
        401: "unauthenticated",
        403: "forbidden",
        404: "not_found",
        422: "validation",
        429: "rate_limited",
    }.get(status_code, "error")

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers d'erreurs du service.
    - UX API uniquement: pas de redirection HTML, le front lit 'message' (et 'payment_reference').
    """
    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.kind, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{where}: {first.get('msg')}" if where else str(first.get("msg") or "Requête invalide")
        return JSONResponse(
            status_code=400,
            content={"error": message, "message": message, "kind": "validation"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message, "message": message, "kind": _http_kind(exc.status_code)},
            headers=getattr(exc, "headers", None),
        )

    # Middleware plutôt qu'exception_handler(Exception): ce dernier s'exécute hors du middleware CORS
    @app.middleware("http")
    async def catch_unhandled(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("Erreur non gérée %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "message": "Internal server error", "kind": "error"},
            )
