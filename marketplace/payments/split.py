"""
Calcul pur du paiement fractionné (pas de Stripe, pas de DB).
Toute l'arithmétique se fait en Decimal puis en unités mineures entières (centimes).
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from marketplace.errors import ValidationError

# Plafond d'un PaymentIntent Stripe (99 999 999 unités mineures)
MAX_AMOUNT = Decimal("999999.99")

# module marketplace.payments.split
@dataclass(frozen=True)
class SplitAmounts:
    amount_minor: int
    platform_fee_minor: int
    vendor_share_minor: int


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_amount(raw: Any) -> Decimal:
    """
    Convertit un montant reçu du client (str|int|float) en Decimal strictement positif.
    - Les float passent par str() pour éviter de figer leur représentation binaire.
    - Soulève ValidationError si absent, non numérique, non fini, <= 0 ou > MAX_AMOUNT.
    """
    if raw is None or raw == "" or isinstance(raw, bool):
        raise ValidationError("Amount is required.")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("Amount must be a number.")
    if not amount.is_finite():
        raise ValidationError("Amount must be a number.")
    if amount <= 0:
        raise ValidationError("Amount must be greater than 0.")
    if amount > MAX_AMOUNT:
        raise ValidationError(f"Amount must not exceed {MAX_AMOUNT}.")
    return amount


def to_minor_units(amount: Decimal) -> int:
    """Montant en devise -> unités mineures (x100, arrondi au plus proche, .5 vers le haut)."""
    try:
        return _round_half_up(amount * 100)
    except InvalidOperation:
        raise ValidationError("Amount is out of range.")


def compute_split(amount: Decimal, fee_rate: Decimal) -> SplitAmounts:
    """
    Répartit un montant entre plateforme et vendeur.
    - platform_fee = round(amount_minor * fee_rate)
    - vendor_share = amount_minor - platform_fee (jamais arrondi séparément)
    Ex: 19.99 à 10% -> 1999 / 200 / 1799.
    """
    amount_minor = to_minor_units(amount)
    if amount_minor <= 0:
        raise ValidationError("Amount must be at least one minor unit.")
    platform_fee = _round_half_up(Decimal(amount_minor) * fee_rate)
    return SplitAmounts(
        amount_minor=amount_minor,
        platform_fee_minor=platform_fee,
        vendor_share_minor=amount_minor - platform_fee,
    )
