"""
Module 'payments' (feature-first): point d'entrée public.
Réunit calcul du partage plateforme/vendeur, client Stripe Connect et service d'autorisation.
"""

from .split import SplitAmounts, parse_amount, to_minor_units, compute_split
from .stripe_client import (
    require_stripe,
    create_express_account,
    retrieve_account,
    create_onboarding_link,
    retrieve_payment_intent,
)
from .service import create_payment_intent

__all__ = [
    # split
    "SplitAmounts",
    "parse_amount",
    "to_minor_units",
    "compute_split",
    # stripe
    "require_stripe",
    "create_express_account",
    "retrieve_account",
    "create_onboarding_link",
    "retrieve_payment_intent",
    # services
    "create_payment_intent",
]
