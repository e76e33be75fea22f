"""
Taxonomie d'erreurs du service de règlement.

Chaque erreur porte:
- kind: catégorie stable exposée au client (validation, not_found, ...)
- status_code: code HTTP associé à la catégorie
- extra: champs additionnels sérialisés tels quels dans la réponse JSON

Les services lèvent ces erreurs; app_setup.exceptions les convertit en JSON
{error, message, kind, ...extra}. Rien ne doit remonter au client sous une
autre forme.
"""
from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = {k: v for k, v in extra.items() if v is not None}

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "message": self.message, "kind": self.kind}
        body.update(self.extra)
        return body


class ValidationError(MarketplaceError):
    kind = "validation"
    status_code = 400


class VendorNotConnectedError(MarketplaceError):
    """Le vendeur n'a pas de sous-compte Stripe: aucune autorisation ne doit lui être émise."""
    kind = "vendor_not_connected"
    status_code = 400

    def __init__(self, vendor_id: str):
        super().__init__("vendor not connected to payments", vendor_id=vendor_id)


class UnauthenticatedError(MarketplaceError):
    kind = "unauthenticated"
    status_code = 401


class ForbiddenError(MarketplaceError):
    kind = "forbidden"
    status_code = 403


class NotFoundError(MarketplaceError):
    kind = "not_found"
    status_code = 404


class UpstreamPaymentError(MarketplaceError):
    """Refus ou panne Stripe: message et code transmis tels quels."""
    kind = "upstream_payment_error"
    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None, **extra: Any):
        super().__init__(message, code=code, **extra)
        self.code = code


class UpstreamStoreError(MarketplaceError):
    kind = "upstream_store_error"
    status_code = 500


class InconsistentStateError(MarketplaceError):
    """
    Paiement encaissé mais commande non enregistrée.
    payment_reference permet une réconciliation manuelle (PaymentIntent Stripe).
    """
    kind = "inconsistent_state"
    status_code = 500

    def __init__(self, payment_reference: str, detail: str = "", order_id: Optional[str] = None):
        message = "payment succeeded, order not recorded"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, payment_reference=payment_reference, order_id=order_id)
        self.payment_reference = payment_reference
        self.order_id = order_id
