# module marketplace.accounts.views

"""Endpoints du domaine Comptes.
- POST /accounts/connect: crée (ou réutilise) le sous-compte Stripe et renvoie {url} d'onboarding.
- POST /accounts/connect/return: jambe de retour, rattache le sous-compte au profil.
- POST /accounts/delete: supprime le compte du porteur du jeton Bearer.
Sécurité:
- require_vendor: impose un vendeur authentifié pour l'onboarding.
- /accounts/delete valide lui-même le Bearer (pas de cookie, pas de dépendance partagée).
"""
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from marketplace.accounts.models import Identity
from marketplace.utils.rate_limit import optional_rate_limit
from marketplace.utils.security import bearer_token, require_vendor
from . import service as accounts_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/accounts", tags=["Accounts API"])


@router.post("/connect", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def connect_account(request: Request, user: Identity = Depends(require_vendor)) -> Dict[str, Any]:
    """Lance l'onboarding Stripe Connect du vendeur.
    - L'origine du front (en-tête Origin) sert de base aux URLs refresh/return.
    - Retourne {"url": "<lien d'onboarding>"}.
    """
    origin = request.headers.get("origin")
    url = accounts_service.provision_vendor_account(user, origin)
    return {"url": url}


@router.post("/connect/return")
async def connect_account_return(request: Request, user: Identity = Depends(require_vendor)) -> Dict[str, Any]:
    """Accepte account_id en query ou JSON body {"account_id": "..."}."""
    account_id = request.query_params.get("account_id")
    if not account_id:
        try:
            body = await request.json()
            account_id = (body or {}).get("account_id")
        except Exception:
            account_id = None
    return await run_in_threadpool(accounts_service.complete_vendor_onboarding, user, account_id or "")


@router.post("/delete")
def delete_account(request: Request) -> Dict[str, Any]:
    """Supprime définitivement le compte associé au jeton Bearer.
    - La confirmation explicite est à la charge de l'UI; ce endpoint n'en ajoute pas.
    - Erreurs: 401 si jeton absent/invalide (aucune suppression tentée).
    """
    accounts_service.deprovision_account(bearer_token(request))
    return {"message": "Account deleted successfully"}
