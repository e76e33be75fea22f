"""
Registre central des routers.
- Comptes: onboarding Stripe Connect, retour d'onboarding, suppression de compte
- Paiements: autorisation de paiement fractionné
- Panier / Commandes: panier de session, commit de commande, tableau de bord vendeur
- Flux: export CSV des produits promus
- Health
"""
from fastapi import FastAPI
from marketplace.accounts import views as accounts_views
from marketplace.payments import views as payments_views
from marketplace.orders import views as orders_views
from marketplace.feed import views as feed_views
from marketplace.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(accounts_views.router)
    app.include_router(payments_views.router)
    app.include_router(orders_views.cart_router)
    app.include_router(orders_views.router)
    app.include_router(feed_views.router)
    app.include_router(health_router)
