"""Génération du flux CSV des produits promus (Google Merchant Center).
Tout ou rien: une erreur de lecture interrompt la génération, aucun flux partiel n'est produit.
"""
import csv
import io
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List

from marketplace import config
from . import repository

FEED_HEADER = [
    "id",
    "title",
    "description",
    "link",
    "image_link",
    "price",
    "availability",
    "brand",
    "custom_label_0",
]
AVAILABILITY = "in stock"

def _price(raw: Any) -> str:
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        value = Decimal("0")
    return f"{value:.2f} {config.PAYMENT_CURRENCY.upper()}"

def feed_row(product: Dict[str, Any], base_url: str) -> List[str]:
    """Une ligne du flux; brand = business_name du vendeur (fallback FEED_DEFAULT_BRAND)."""
    vendor = product.get("vendor") or {}
    if isinstance(vendor, list):
        vendor = vendor[0] if vendor else {}
    product_id = str(product.get("id") or "")
    return [
        product_id,
        str(product.get("name") or ""),
        str(product.get("description") or ""),
        f"{base_url.rstrip('/')}/products/{product_id}",
        str(product.get("image_url") or config.FEED_PLACEHOLDER_IMAGE),
        _price(product.get("price")),
        AVAILABILITY,
        str(vendor.get("business_name") or config.FEED_DEFAULT_BRAND),
        str(product.get("vendor_id") or ""),
    ]

def render_feed(products: Iterable[Dict[str, Any]], base_url: str) -> str:
    """Sérialise en CSV (quoting minimal: virgules, guillemets et retours ligne sont échappés)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(FEED_HEADER)
    for product in products:
        writer.writerow(feed_row(product, base_url))
    return buffer.getvalue()

def generate_promoted_feed(base_url: str) -> str:
    return render_feed(repository.fetch_promoted_listings(), base_url)
