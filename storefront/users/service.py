"""Session acheteur: token Supabase -> utilisateur normalisé {id, email, metadata, role, token}."""
from typing import Any, Dict, Optional

from storefront.users import repository

def determine_role(metadata: Optional[Dict[str, Any]]) -> str:
    role_lower = str((metadata or {}).get("role", "")).lower()
    if role_lower == "admin":
        return "admin"
    return "user"

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise user issu de supabase.auth.get_user(access_token); le rôle vient de app_metadata puis user_metadata."""
    raw = repository.get_user_from_access_token(access_token)
    metadata = raw.get("user_metadata") or {}
    app_metadata = raw.get("app_metadata") or {}
    role = determine_role(app_metadata if app_metadata.get("role") else metadata)
    return {
        "id": raw.get("id"),
        "email": raw.get("email"),
        "metadata": metadata,
        "role": role,
        "token": access_token,
    }
