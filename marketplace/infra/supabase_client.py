"""
Clients Supabase partagés, construits à la première utilisation.
- get_supabase(): client anon, sert à valider un jeton utilisateur (auth.get_user)
- get_service_supabase(): client service-role (bypass RLS): profils vendeurs, écritures de
  commandes, flux produits et API admin Auth (delete_user)
Les repositories appellent ces fonctions via le module (supabase_client.get_...) pour rester patchables.
"""
from typing import Optional
from supabase import create_client, Client
from marketplace import config

_anon_client: Optional[Client] = None
_service_client: Optional[Client] = None

def _require_url() -> str:
    if not config.SUPABASE_URL:
        raise RuntimeError("SUPABASE_URL manquant: impossible de joindre le store")
    return config.SUPABASE_URL

def get_supabase() -> Client:
    global _anon_client
    if _anon_client is None:
        _anon_client = create_client(_require_url(), config.SUPABASE_ANON)
    return _anon_client

def get_service_supabase() -> Client:
    global _service_client
    if not config.SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_KEY manquant pour get_service_supabase()")
    if _service_client is None:
        _service_client = create_client(_require_url(), config.SUPABASE_SERVICE_KEY)
    return _service_client
