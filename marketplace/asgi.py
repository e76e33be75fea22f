"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn avec workers uvicorn) importe `marketplace.asgi:app`.
- Toute la configuration FastAPI (routes, middlewares, CORS, erreurs) est centralisée
  dans marketplace.app_setup, ce fichier ne fait qu'exposer l'instance `app`.
"""

from marketplace.app import app
