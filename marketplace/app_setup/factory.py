"""
Factory d'application recommandée pour les entrypoints (ex: marketplace.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre, dans cet ordre:
      1) gestionnaires d'exceptions (+ filet 500 en middleware interne)
      2) en-têtes de sécurité
      3) middlewares de base: session, hosts, proxy, CORS (le plus externe)
      4) tous les routers (comptes, paiements, panier, commandes, flux, health)
    Retour:
      FastAPI prêt à être utilisé par le serveur ASGI.
    """
    app = FastAPI(title="Marketplace Settlement API", lifespan=lifespan)
    register_exception_handlers(app)
    register_security_middleware(app)
    register_basic_middlewares(app)
    register_routers(app)
    return app
