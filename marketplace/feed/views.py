from fastapi import APIRouter, Request
from fastapi.responses import Response

from marketplace.config import BASE_URL
from . import service as feed_service

router = APIRouter(prefix="/feed", tags=["Feed"])

def public_base_url(request: Request) -> str:
    """URL publique du storefront: en-têtes X-Forwarded-* (proxy) sinon BASE_URL."""
    proto = request.headers.get("x-forwarded-proto")
    host = request.headers.get("x-forwarded-host")
    if proto and host:
        return f"{proto}://{host}"
    return BASE_URL

@router.get("/promoted")
def promoted_feed(request: Request) -> Response:
    """Flux CSV des produits promus, servi en pièce jointe product_feed.csv."""
    body = feed_service.generate_promoted_feed(public_base_url(request))
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="product_feed.csv"'},
    )
