"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Toute erreur stripe.StripeError est convertie en UpstreamPaymentError (message + code conservés).
Aucun appel n'est rejoué: une création de PaymentIntent rejouée à l'aveugle risque un double débit.
"""
import logging
from typing import Any, Dict, Optional

import stripe

from marketplace.errors import UpstreamPaymentError

logger = logging.getLogger(__name__)

# module marketplace.payments.stripe_client
def require_stripe() -> stripe:
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY si disponible.
    - En absence de clé, les appels Stripe échoueront côté SDK (ex: No API key provided).
    """
    from marketplace.config import STRIPE_SECRET_KEY
    if STRIPE_SECRET_KEY:
        stripe.api_key = STRIPE_SECRET_KEY
    return stripe

def _as_dict(obj: Any) -> Dict[str, Any]:
    # StripeObject expose to_dict(); les doubles de test renvoient déjà des dict
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj or {})

def _upstream(action: str, e: Exception) -> UpstreamPaymentError:
    message = getattr(e, "user_message", None) or str(e) or "Unknown Stripe error"
    code = getattr(e, "code", None)
    logger.error("Stripe %s failed: %s (%s)", action, message, code)
    return UpstreamPaymentError(f"Stripe error: {message}", code=code)

def create_express_account(*, vendor_id: str) -> Dict[str, Any]:
    """
    Crée un sous-compte Connect de type 'express' (Stripe gère l'UI de conformité).
    - metadata.vendor_id permet de vérifier la propriété au retour d'onboarding.
    """
    require_stripe()
    try:
        account = stripe.Account.create(
            type="express",
            capabilities={
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
            metadata={"vendor_id": vendor_id},
        )
    except stripe.StripeError as e:
        raise _upstream("Account.create", e) from e
    return _as_dict(account)

def retrieve_account(account_id: str) -> Dict[str, Any]:
    """Lit un sous-compte Connect (details_submitted, metadata, ...)."""
    require_stripe()
    try:
        return _as_dict(stripe.Account.retrieve(account_id))
    except stripe.StripeError as e:
        raise _upstream("Account.retrieve", e) from e

def create_onboarding_link(*, account_id: str, refresh_url: str, return_url: str) -> Dict[str, Any]:
    """
    Crée un lien d'onboarding (durée de vie limitée) pour le sous-compte.
    Retour: dict incluant "url".
    """
    require_stripe()
    try:
        link = stripe.AccountLink.create(
            account=account_id,
            refresh_url=refresh_url,
            return_url=return_url,
            type="account_onboarding",
        )
    except stripe.StripeError as e:
        raise _upstream("AccountLink.create", e) from e
    return _as_dict(link)

def create_payment_intent(
    *,
    amount: int,
    currency: str,
    destination: str,
    application_fee_amount: int,
    metadata: Dict[str, str],
    idempotency_key: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Crée un PaymentIntent à destination (destination charge):
    - amount / application_fee_amount en unités mineures
    - transfer_data.destination: sous-compte du vendeur
    - idempotency_key: transmise à Stripe si fournie par le client (retry sûr)
    Retour: dict incluant "id" et "client_secret".
    """
    require_stripe()
    options: Dict[str, Any] = {}
    if idempotency_key:
        options["idempotency_key"] = idempotency_key
    try:
        intent = stripe.PaymentIntent.create(
            amount=amount,
            currency=currency,
            application_fee_amount=application_fee_amount,
            transfer_data={"destination": destination},
            metadata=metadata,
            **options,
        )
    except stripe.StripeError as e:
        raise _upstream("PaymentIntent.create", e) from e
    return _as_dict(intent)

def retrieve_payment_intent(payment_intent_id: str) -> Dict[str, Any]:
    """Lit un PaymentIntent (status, amount, metadata) pour confirmer le paiement côté serveur."""
    require_stripe()
    try:
        return _as_dict(stripe.PaymentIntent.retrieve(payment_intent_id))
    except stripe.StripeError as e:
        raise _upstream("PaymentIntent.retrieve", e) from e
