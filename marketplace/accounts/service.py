"""Couche service du domaine Comptes.
Rôles:
- Résoudre une identité explicite depuis un jeton (Supabase Auth).
- Provisionner un sous-compte Stripe Connect pour un vendeur et produire le lien d'onboarding.
- Finaliser l'onboarding (jambe de retour): rattacher le sous-compte au profil.
- Déprovisionner (supprimer) le compte de l'appelant, de façon irréversible.
"""
from typing import Optional
from urllib.parse import urlencode
import logging

from marketplace import config
from marketplace.errors import (
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    UpstreamStoreError,
    ValidationError,
)
from marketplace.payments import stripe_client
from . import repository
from .models import Identity, role_from_metadata

logger = logging.getLogger(__name__)

# --- Identité ---

def resolve_identity(access_token: str, use_service: bool = False) -> Identity:
    """Normalise l'utilisateur issu de supabase.auth.get_user(access_token):
    - Retourne Identity(id, email, role, token); le rôle est résolu ici, une seule fois
    - Soulève UnauthenticatedError si le jeton est invalide, expiré ou sans utilisateur
    """
    try:
        raw = repository.get_user_from_access_token(access_token, use_service=use_service)
    except Exception as e:
        logger.info("accounts.resolve_identity rejected token: %s", e)
        raise UnauthenticatedError("Session expirée, veuillez vous connecter") from e
    uid = raw.get("id")
    if not uid:
        raise UnauthenticatedError("User not found or token is invalid.")
    return Identity(
        id=str(uid),
        email=raw.get("email"),
        role=role_from_metadata(raw.get("user_metadata")),
        token=access_token,
    )

# --- Provisioning Stripe Connect ---

def onboarding_urls(origin: Optional[str], account_id: str) -> tuple[str, str]:
    """Construit (refresh_url, return_url) à partir de l'origine du front (fallback BASE_URL)."""
    base = (origin or config.BASE_URL).rstrip("/")
    refresh_url = f"{base}{config.CONNECT_REFRESH_PATH}"
    return_url = f"{base}{config.CONNECT_RETURN_PATH}?{urlencode({'account_id': account_id})}"
    return refresh_url, return_url

def provision_vendor_account(identity: Identity, origin: Optional[str]) -> str:
    """Onboarding vendeur:
    - Réservé aux vendeurs (ForbiddenError sinon)
    - Réutilise le sous-compte déjà rattaché au profil s'il existe et n'a pas fini l'onboarding
    - Refuse (ValidationError) un vendeur déjà onboardé
    - Sinon crée un sous-compte express puis un lien d'onboarding
    - Ne persiste pas l'id du sous-compte: c'est la jambe de retour qui le fera
    Retour: URL d'onboarding Stripe.
    """
    if not identity.is_vendor:
        raise ForbiddenError("Réservé aux vendeurs")

    profile = repository.get_vendor_account(identity.id)
    account_id = profile.payment_account_id if profile else None
    created = False
    if account_id:
        account = stripe_client.retrieve_account(account_id)
        if account.get("details_submitted"):
            raise ValidationError("Vendor already onboarded.", account_id=account_id)
        logger.info("accounts.provision reusing account=%s vendor=%s", account_id, identity.id)
    else:
        account = stripe_client.create_express_account(vendor_id=identity.id)
        account_id = account["id"]
        created = True
        logger.info("accounts.provision created account=%s vendor=%s", account_id, identity.id)

    refresh_url, return_url = onboarding_urls(origin, account_id)
    try:
        link = stripe_client.create_onboarding_link(
            account_id=account_id, refresh_url=refresh_url, return_url=return_url
        )
    except Exception:
        if created:
            # Sous-compte orphelin: laissé en place, tracé pour nettoyage manuel
            logger.error("accounts.provision orphaned account=%s vendor=%s", account_id, identity.id)
        raise
    return link["url"]

def complete_vendor_onboarding(identity: Identity, account_id: str) -> dict:
    """Jambe de retour de l'onboarding:
    - Vérifie que le sous-compte appartient à l'appelant (metadata.vendor_id)
    - Persiste stripe_account_id et onboarding_completed (= details_submitted)
    """
    if not identity.is_vendor:
        raise ForbiddenError("Réservé aux vendeurs")
    account_id = (account_id or "").strip()
    if not account_id:
        raise ValidationError("account_id manquant")

    account = stripe_client.retrieve_account(account_id)
    owner = (account.get("metadata") or {}).get("vendor_id")
    if owner != identity.id:
        raise ForbiddenError("Sous-compte appartenant à un autre vendeur")

    completed = bool(account.get("details_submitted"))
    repository.set_payment_account(identity.id, account_id, completed)
    logger.info("accounts.onboarding saved account=%s vendor=%s completed=%s", account_id, identity.id, completed)
    return {"account_id": account_id, "onboarding_completed": completed}

# --- Déprovisionnement ---

def deprovision_account(access_token: Optional[str]) -> None:
    """Suppression de compte (irréversible, confirmée en amont par l'UI):
    - Valide le jeton via Supabase Auth (client service-role) -> UnauthenticatedError sinon
    - Supprime l'identité via l'API admin; profils/produits suivent par cascade
    - Aucune suppression n'est tentée si le jeton est invalide
    """
    if not access_token:
        raise UnauthenticatedError("Missing authorization header")
    identity = resolve_identity(access_token, use_service=True)
    try:
        repository.delete_auth_user(identity.id)
    except Exception as e:
        logger.exception("accounts.deprovision delete failed user=%s", identity.id)
        message = getattr(e, "message", None) or str(e)
        if "not found" in message.lower():
            raise NotFoundError(message) from e
        raise UpstreamStoreError(message) from e
    logger.info("accounts.deprovision deleted user=%s", identity.id)
