# module marketplace.orders.models
"""Types du domaine Commandes: ligne de panier, statut et cycle de vie d'une commande."""
from dataclasses import dataclass, asdict
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Mapping

from marketplace.errors import ValidationError


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"

    @classmethod
    def parse(cls, raw: Any) -> "OrderStatus":
        value = str(raw or "").strip().lower()
        for status in cls:
            if status.value.lower() == value:
                return status
        raise ValidationError(f"Statut inconnu: {raw!r}")


# Delivered et Cancelled sont terminaux
ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset({
        OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED,
    }),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class CartLine:
    """Ligne de panier: le prix est un instantané capturé à l'ajout, jamais relu au catalogue."""
    product_id: str
    price: Decimal
    quantity: int
    vendor_id: str
    name: str = ""

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "CartLine":
        """
        Construit une ligne depuis un dict client/session.
        - Accepte 'product_id' ou 'id' comme identifiant produit.
        - Soulève ValidationError si un champ est manquant ou invalide.
        """
        product_id = str(raw.get("product_id") or raw.get("id") or "").strip()
        vendor_id = str(raw.get("vendor_id") or "").strip()
        if not product_id or not vendor_id:
            raise ValidationError("Ligne de panier invalide (product_id/vendor_id)")
        raw_quantity = raw.get("quantity")
        try:
            price = Decimal(str(raw.get("price")))
            quantity = Decimal(str(raw_quantity).strip())
        except Exception:
            raise ValidationError(f"Ligne de panier invalide pour {product_id}")
        if not price.is_finite() or price < 0:
            raise ValidationError(f"Ligne de panier invalide pour {product_id}")
        # Quantité entière uniquement: 2.7 ou "2.5" sont refusés, jamais tronqués
        if (
            isinstance(raw_quantity, bool)
            or not quantity.is_finite()
            or quantity != quantity.to_integral_value()
            or quantity <= 0
        ):
            raise ValidationError(f"Quantité invalide pour {product_id}")
        return cls(product_id=product_id, price=price, quantity=int(quantity), vendor_id=vendor_id, name=str(raw.get("name") or ""))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # Decimal -> str pour rester sérialisable (cookie de session, JSON)
        data["price"] = str(self.price)
        return data
