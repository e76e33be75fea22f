from fastapi import Request, Depends
from typing import Optional

from marketplace.accounts.models import Identity
from marketplace.errors import ForbiddenError, UnauthenticatedError

COOKIE_NAME = "sb_access"

def bearer_token(request: Request) -> Optional[str]:
    """Extrait le jeton de l'en-tête 'Authorization: Bearer <token>' (None si absent/vide)."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header[:7].lower() == "bearer ":
        return auth_header[7:].strip() or None
    return None

def get_current_user(request: Request) -> Identity:
    # Hybride: priorité au Bearer, fallback cookie
    token = bearer_token(request) or request.cookies.get(COOKIE_NAME)
    if not token:
        raise UnauthenticatedError("Non authentifié")

    # Délégué au service Comptes (validation du jeton par Supabase Auth)
    from marketplace.accounts.service import resolve_identity
    return resolve_identity(token)

def require_user(user: Identity = Depends(get_current_user)) -> Identity:
    return user

def require_vendor(user: Identity = Depends(get_current_user)) -> Identity:
    if not user.is_vendor:
        raise ForbiddenError("Réservé aux vendeurs")
    return user
