"""Couche d'accès aux données (Supabase) pour les acheteurs.
- get_user_by_id: profil applicatif (table users), utilisé par le webhook pour retrouver l'acheteur.
- get_user_from_access_token: délègue la validation de session à Supabase Auth.
"""
from typing import Any, Dict, Optional
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.errors import InternalError

logger = logging.getLogger(__name__)

def get_user_by_id(user_id: str) -> Optional[dict]:
    """Récupère un utilisateur par id.
    - None si introuvable
    - InternalError si la base ne répond pas (le webhook renvoie alors 500 pour être rejoué)
    """
    if not user_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("users")
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception:
        logger.exception("users.repository.get_user_by_id failed id=%s", user_id)
        raise InternalError("Utilisateurs indisponibles")
    rows = res.data or []
    return rows[0] if rows else None

def get_user_from_access_token(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l'utilisateur depuis supabase.auth.get_user(access_token)."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
            "app_metadata": getattr(user, "app_metadata", None),
        }
    return user or {}
