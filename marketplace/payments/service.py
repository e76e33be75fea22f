"""
Cas d'usage 'payments': autorisation de paiement fractionné.
Orchestre accounts.repository (profil vendeur), split (calcul) et stripe_client (PaymentIntent).
"""
from decimal import Decimal
from typing import Any, Dict, Optional
import logging

from marketplace import config
from marketplace.accounts import repository as accounts_repository
from marketplace.errors import NotFoundError, UpstreamPaymentError, ValidationError, VendorNotConnectedError

from . import split
from . import stripe_client

logger = logging.getLogger(__name__)

def create_payment_intent(
    *,
    amount: Any,
    vendor_id: Optional[str],
    buyer_id: Optional[str] = None,
    idempotency_key: Optional[str] = None,
    fee_rate: Optional[Decimal] = None,
) -> Dict[str, Any]:
    """
    Crée l'autorisation de paiement d'une commande mono-vendeur.
    Étapes:
      1) Valide amount (> 0) et vendor_id (présent) -> ValidationError, sans appel Stripe
      2) Charge le profil vendeur -> NotFoundError si absent
      3) Refuse un vendeur sans stripe_account_id -> VendorNotConnectedError
      4) Calcule le split (unités mineures, commission PLATFORM_FEE_RATE)
      5) Crée le PaymentIntent (destination = sous-compte, application_fee = commission)
    Retour: {clientSecret, paymentIntentId, amount, platformFee, vendorShare, currency}
    """
    value = split.parse_amount(amount)
    vendor_id = str(vendor_id or "").strip()
    if not vendor_id:
        raise ValidationError("Vendor ID is required.")

    vendor = accounts_repository.get_vendor_account(vendor_id)
    if vendor is None:
        raise NotFoundError("Vendor not found.", vendor_id=vendor_id)
    if not vendor.is_connected:
        logger.warning("payments.create_payment_intent refused: vendor %s not connected", vendor_id)
        raise VendorNotConnectedError(vendor_id)

    amounts = split.compute_split(value, fee_rate if fee_rate is not None else config.PLATFORM_FEE_RATE)

    metadata = {"vendor_id": vendor_id}
    if buyer_id:
        metadata["buyer_id"] = buyer_id

    intent = stripe_client.create_payment_intent(
        amount=amounts.amount_minor,
        currency=config.PAYMENT_CURRENCY,
        destination=vendor.payment_account_id,
        application_fee_amount=amounts.platform_fee_minor,
        metadata=metadata,
        idempotency_key=idempotency_key,
    )
    client_secret = intent.get("client_secret")
    if not client_secret:
        raise UpstreamPaymentError("No client secret received from Stripe")

    logger.info(
        "payments.create_payment_intent ok intent=%s vendor=%s amount=%s fee=%s",
        intent.get("id"), vendor_id, amounts.amount_minor, amounts.platform_fee_minor,
    )
    return {
        "clientSecret": client_secret,
        "paymentIntentId": intent.get("id"),
        "amount": amounts.amount_minor,
        "platformFee": amounts.platform_fee_minor,
        "vendorShare": amounts.vendor_share_minor,
        "currency": config.PAYMENT_CURRENCY,
    }
