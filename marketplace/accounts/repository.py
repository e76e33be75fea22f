"""Couche d'accès aux données (Supabase) pour le domaine Comptes.
Tables/API: profiles (sous-compte Stripe du vendeur), Supabase Auth (get_user, admin.delete_user).
Contrairement à un affichage best-effort, ici une erreur du store n'est jamais convertie en
valeur neutre: elle devient UpstreamStoreError pour que l'appelant puisse la distinguer d'un 'introuvable'.
"""
from typing import Any, Dict, Optional
import logging

import marketplace.infra.supabase_client as supabase_client
from marketplace.accounts.models import VendorAccount
from marketplace.errors import UpstreamStoreError

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, role, business_name, stripe_account_id, onboarding_completed"

# module marketplace.accounts.repository
def get_vendor_account(vendor_id: str) -> Optional[VendorAccount]:
    """
    Lit le profil vendeur (table profiles) via le client service-role.
    - Retour: VendorAccount ou None si aucune ligne.
    - Soulève UpstreamStoreError si la requête échoue.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("profiles")
            .select(PROFILE_COLUMNS)
            .eq("id", vendor_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("accounts.repository.get_vendor_account failed id=%s", vendor_id)
        raise UpstreamStoreError(f"Database error: {e}") from e
    rows = res.data or []
    return VendorAccount.from_row(rows[0]) if rows else None

def set_payment_account(vendor_id: str, account_id: str, onboarding_completed: bool) -> Dict[str, Any]:
    """
    Enregistre stripe_account_id + onboarding_completed sur le profil du vendeur.
    - Soulève UpstreamStoreError si l'update échoue ou ne touche aucune ligne.
    """
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("profiles")
            .update({"stripe_account_id": account_id, "onboarding_completed": onboarding_completed})
            .eq("id", vendor_id)
            .execute()
        )
    except Exception as e:
        logger.exception("accounts.repository.set_payment_account failed id=%s account=%s", vendor_id, account_id)
        raise UpstreamStoreError(f"Database error: {e}") from e
    rows = res.data or []
    if not rows:
        raise UpstreamStoreError(f"Profil introuvable pour le vendeur {vendor_id}")
    return rows[0]

def get_user_from_access_token(access_token: str, use_service: bool = False) -> Dict[str, Any]:
    """Récupère et normalise l'utilisateur depuis supabase.auth.get_user(access_token).
    - use_service: passe par le client service-role (déprovisionnement), sinon client anon.
    - Les exceptions GoTrue (token invalide/expiré) remontent telles quelles.
    """
    client = supabase_client.get_service_supabase() if use_service else supabase_client.get_supabase()
    res = client.auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
        }
    return user or {}

def delete_auth_user(user_id: str) -> None:
    """Suppression admin (GoTrue) de l'identité; profils et produits suivent par cascade côté base."""
    supabase_client.get_service_supabase().auth.admin.delete_user(user_id)
