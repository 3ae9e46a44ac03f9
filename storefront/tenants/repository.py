from typing import Any, Dict, Optional
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.errors import InternalError

logger = logging.getLogger(__name__)

def _get_one(column: str, value: str) -> Optional[dict]:
    if not value:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("tenants")
            .select("*")
            .eq(column, value)
            .limit(1)
            .execute()
        )
    except Exception:
        logger.exception("tenants.repository lookup failed %s=%s", column, value)
        raise InternalError("Vendeurs indisponibles")
    rows = res.data or []
    return rows[0] if rows else None

def get_tenant_by_slug(slug: str) -> Optional[dict]:
    return _get_one("slug", slug)

def get_tenant_by_id(tenant_id: str) -> Optional[dict]:
    return _get_one("id", tenant_id)

def update_tenant(tenant_id: str, data: Dict[str, Any]) -> Optional[dict]:
    """Ligne mise à jour, None si le vendeur n'existe pas; InternalError si la base échoue."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("tenants")
            .update(data)
            .eq("id", tenant_id)
            .execute()
        )
    except Exception:
        logger.exception("tenants.repository.update_tenant failed id=%s", tenant_id)
        raise InternalError("Enregistrement du vendeur impossible")
    rows = res.data or []
    return rows[0] if rows else None
