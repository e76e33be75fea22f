"""
Middlewares transverses du service de règlement.
- register_basic_middlewares: panier en session signée, hôtes acceptés, en-têtes proxy, CORS.
- register_security_middleware: en-têtes de sécurité sur toutes les réponses (API JSON/CSV uniquement),
  plus Access-Control-Allow-Origin "*" sans Origin quand CORS est ouvert.
Notes:
- add_middleware empile: le dernier ajouté s'exécute en premier. CORS est donc ajouté en dernier
  pour répondre aux préflights OPTIONS et poser ses en-têtes sur chaque réponse, erreurs comprises.
- Pas de CSRF: les endpoints mutatifs s'authentifient par Bearer, pas par cookie de session.
"""
from typing import List
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from starlette.middleware.sessions import SessionMiddleware
try:
    from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware
except Exception:
    ProxyHeadersMiddleware = None
from marketplace.config import ALLOWED_HOSTS, COOKIE_SECURE, CORS_ORIGINS, SESSION_SECRET_KEY

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cache-Control": "no-store",
}
HSTS_VALUE = "max-age=63072000; includeSubDomains; preload"
BARE_OPTIONS_HEADERS = {
    "Access-Control-Allow-Methods": "DELETE, GET, HEAD, OPTIONS, PATCH, POST, PUT",
    "Access-Control-Allow-Headers": "*",
}

def _trusted_hosts() -> List[str]:
    # CORS ouvert ('*'): les appels arrivent de n'importe quel domaine front/proxy
    if "*" in CORS_ORIGINS:
        return ALLOWED_HOSTS + ["*"]
    return ALLOWED_HOSTS

def register_basic_middlewares(app: FastAPI) -> None:
    """
    Ajoute, de l'intérieur vers l'extérieur:
    - SessionMiddleware: cookie signé portant le panier (jamais persisté côté store).
    - TrustedHostMiddleware: défense host header.
    - ProxyHeadersMiddleware (uvicorn, si dispo): schéma/IP client depuis X-Forwarded-*.
    - CORSMiddleware: origines CORS_ORIGINS ('*' par défaut), toutes méthodes et en-têtes.
      Avec '*', pas de credentials (interdit par la norme CORS).
    """
    app.add_middleware(
        SessionMiddleware,
        secret_key=SESSION_SECRET_KEY,
        session_cookie="mp_cart",
        https_only=COOKIE_SECURE,
        same_site="lax",
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=_trusted_hosts())
    if ProxyHeadersMiddleware:
        app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

def register_security_middleware(app: FastAPI) -> None:
    """
    En-têtes de sécurité sur toutes les réponses.
    Avec CORS ouvert ('*'), l'en-tête Access-Control-Allow-Origin est posé même sans Origin
    (CORSMiddleware ne répond qu'aux requêtes cross-origin), et un OPTIONS nu reçoit un 200 vide.
    """
    open_cors = "*" in CORS_ORIGINS

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        if open_cors and request.method == "OPTIONS":
            # Les préflights avec Origin sont déjà servis par CORSMiddleware (plus externe)
            response = Response(status_code=200, headers=BARE_OPTIONS_HEADERS)
        else:
            response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if open_cors:
            response.headers.setdefault("Access-Control-Allow-Origin", "*")
        if COOKIE_SECURE:
            response.headers.setdefault("Strict-Transport-Security", HSTS_VALUE)
        return response
