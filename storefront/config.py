# storefront.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du storefront.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Paystack), sécurité cookies, CORS/hosts
- Fournit le gabarit d'URL des boutiques (callback de paiement, redirections)
Les modules lisent ces valeurs via `from storefront import config` (monkeypatch possible en tests).
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

def _float_env(name: str, default: float) -> float:
    try:
        return float(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

# Supabase: URL et clés (anon/service)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Paystack: clé secrète (sert aussi à signer les webhooks) et paramètres réseau
PAYSTACK_SECRET_KEY = _clean_env(os.getenv("PAYSTACK_SECRET_KEY") or "")
PAYSTACK_WEBHOOK_SECRET = _clean_env(os.getenv("PAYSTACK_WEBHOOK_SECRET") or "") or PAYSTACK_SECRET_KEY
PAYSTACK_BASE_URL = _clean_env(os.getenv("PAYSTACK_BASE_URL") or "https://api.paystack.co").rstrip("/")
PAYSTACK_CURRENCY = _clean_env(os.getenv("PAYSTACK_CURRENCY") or "NGN")
PAYSTACK_TIMEOUT = _float_env("PAYSTACK_TIMEOUT", 10.0)
PAYSTACK_MAX_RETRIES = _int_env("PAYSTACK_MAX_RETRIES", 3)
PAYSTACK_RETRY_WAIT_MAX = _float_env("PAYSTACK_RETRY_WAIT_MAX", 4.0)

# Commission plateforme appliquée aux sous-comptes des vendeurs (en %)
PLATFORM_FEE_PERCENTAGE = _float_env("PLATFORM_FEE_PERCENTAGE", 10.0)

# URLs publiques du storefront
APP_URL = _clean_env(os.getenv("APP_URL") or os.getenv("NEXT_PUBLIC_APP_URL") or "http://localhost:8000").rstrip("/")
CHECKOUT_CALLBACK_PATH = "/" + os.getenv("CHECKOUT_CALLBACK_PATH", "/checkout/success").strip().strip("/")
# Page de retour Paystack servie par cette application
CHECKOUT_SUCCESS_ROUTE = "/tenants/{slug}" + CHECKOUT_CALLBACK_PATH
SIGN_IN_URL = _clean_env(os.getenv("SIGN_IN_URL") or "/sign-in")

# Cookies / sécurité
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

# Panier persistant (Redis) et pagination de la bibliothèque
CART_REDIS_URL = _clean_env(os.getenv("CART_REDIS_URL") or "redis://127.0.0.1:6379/1")
LIBRARY_PAGE_SIZE = _int_env("LIBRARY_PAGE_SIZE", 10)


def checkout_callback_url(slug: str) -> str:
    """callback_url transmis à Paystack: toujours une route de CHECKOUT_SUCCESS_ROUTE sur APP_URL."""
    return APP_URL + CHECKOUT_SUCCESS_ROUTE.format(slug=slug)
