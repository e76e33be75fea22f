import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, Depends
from starlette.concurrency import run_in_threadpool

from marketplace.accounts.models import Identity
from marketplace.errors import ValidationError
from marketplace.utils.rate_limit import optional_rate_limit
from marketplace.utils.security import require_user
from marketplace.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments", tags=["Payments API"])

# module marketplace.payments.views
@router.post("/intent", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_payment_intent(request: Request, user: Identity = Depends(require_user)) -> Dict[str, Any]:
    """
    Crée l'autorisation de paiement fractionné pour le panier de l'acheteur.
    - Entrée JSON: { "amount": 19.99, "vendor_id": "<uuid>", "idempotency_key": "<opt>" }
    - En-tête optionnel Idempotency-Key (prioritaire sur le champ du body)
    - Sécurité: require_user + rate limit (10 req / 60s)
    - Réponse: {clientSecret, paymentIntentId, amount, platformFee, vendorShare, currency}
    - Erreurs: 400 validation / vendeur non connecté, 404 vendeur inconnu, 500 Stripe/base
    """
    try:
        body = await request.json()
    except Exception:
        raise ValidationError("Invalid JSON in request body")
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON in request body")

    idempotency_key = request.headers.get("Idempotency-Key") or body.get("idempotency_key")
    # Appels Stripe/Supabase bloquants: hors de la boucle d'événements
    return await run_in_threadpool(
        payments_service.create_payment_intent,
        amount=body.get("amount"),
        vendor_id=body.get("vendor_id"),
        buyer_id=user.id,
        idempotency_key=idempotency_key,
    )
