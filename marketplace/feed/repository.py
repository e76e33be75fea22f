from typing import List
import logging

import marketplace.infra.supabase_client as supabase_client
from marketplace.errors import UpstreamStoreError

logger = logging.getLogger(__name__)

# module marketplace.feed.repository
def fetch_promoted_listings() -> List[dict]:
    """
    Produits promus avec le nom commercial de leur vendeur.
    - Table: products, filtre is_promoted = true, tri par id (flux stable)
    - Jointure: profiles via la FK products_vendor_id_fkey (alias 'vendor')
    - Soulève UpstreamStoreError si la requête échoue (pas de flux partiel)
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("products")
            .select(
                "id, name, description, price, image_url, vendor_id, "
                "vendor:profiles!products_vendor_id_fkey(business_name)"
            )
            .eq("is_promoted", True)
            .order("id")
            .execute()
        )
    except Exception as e:
        logger.exception("feed.repository.fetch_promoted_listings failed")
        raise UpstreamStoreError(f"Failed to fetch products: {e}") from e
    return res.data or []
