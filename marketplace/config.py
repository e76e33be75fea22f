# marketplace.config
from decimal import Decimal, InvalidOperation
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du service de règlement marketplace.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe), sécurité cookies, CORS/hosts
- Expose la politique de commission plateforme (PLATFORM_FEE_RATE) et la devise
- Fournit les chemins de redirection de l'onboarding Stripe Connect
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _fee_rate(raw: str) -> Decimal:
    """
    Parse PLATFORM_FEE_RATE en Decimal.
    - Doit être dans [0, 1): une commission de 100% ne laisserait rien au vendeur.
    """
    try:
        rate = Decimal(_clean_env(raw) or "0.10")
    except InvalidOperation:
        raise RuntimeError(f"PLATFORM_FEE_RATE invalide: {raw!r}")
    if rate < 0 or rate >= 1:
        raise RuntimeError(f"PLATFORM_FEE_RATE hors bornes [0, 1): {rate}")
    return rate

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("PROJECT_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Cookies / session (panier côté client, signé)
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = _clean_env(os.getenv("SESSION_SECRET_KEY") or "replace_me_with_a_long_random_secret")

# CORS: permissif par défaut (les clients front et Merchant Center appellent depuis n'importe où)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

# Stripe: clé secrète plateforme (appels serveur uniquement)
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")

# Politique de paiement fractionné
PLATFORM_FEE_RATE = _fee_rate(os.getenv("PLATFORM_FEE_RATE") or "0.10")
PAYMENT_CURRENCY = _clean_env(os.getenv("PAYMENT_CURRENCY") or "usd").lower()

# Onboarding Stripe Connect: chemins relatifs à l'origine du front
CONNECT_REFRESH_PATH = os.getenv("CONNECT_REFRESH_PATH", "/dashboard")
CONNECT_RETURN_PATH = os.getenv("CONNECT_RETURN_PATH", "/stripe-return")

# Flux produits promus (Merchant Center)
FEED_DEFAULT_BRAND = os.getenv("FEED_DEFAULT_BRAND", "Marketplace")
FEED_PLACEHOLDER_IMAGE = os.getenv("FEED_PLACEHOLDER_IMAGE", "https://via.placeholder.com/300")

BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:5173").rstrip("/")
