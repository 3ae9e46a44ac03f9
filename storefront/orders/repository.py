"""
Ledger des commandes (table 'orders').
- paystack_reference est UNIQUE: c'est le seul point de sérialisation entre webhook,
  vérification serveur et vérification déclenchée par le client.
- insert_order remonte ConflictError sur violation d'unicité (code Postgres 23505).
- Les lectures de la bibliothèque retournent des valeurs neutres en cas d'erreur (refus par défaut).
"""
from typing import Any, Dict, List, Optional
import logging

from postgrest.exceptions import APIError

import storefront.infra.supabase_client as supabase_client
from storefront.errors import ConflictError, InternalError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

ORDER_STATUSES = ("pending", "success", "failed")

def _error_code(e: APIError) -> Optional[str]:
    code = getattr(e, "code", None)
    if code:
        return str(code)
    if e.args and isinstance(e.args[0], dict):
        return e.args[0].get("code")
    return None

# module storefront.orders.repository
def get_order_by_reference(reference: str) -> Optional[dict]:
    if not reference:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("*")
            .eq("paystack_reference", reference)
            .limit(1)
            .execute()
        )
    except Exception:
        logger.exception("orders.repository.get_order_by_reference failed reference=%s", reference)
        raise InternalError("Commandes indisponibles")
    rows = res.data or []
    return rows[0] if rows else None

def insert_order(row: Dict[str, Any]) -> dict:
    """
    Insère une commande.
    - ConflictError si une commande existe déjà pour cette référence
    - InternalError pour toute autre erreur de stockage
    """
    try:
        res = supabase_client.get_service_supabase().table("orders").insert(row).execute()
    except APIError as e:
        if _error_code(e) == UNIQUE_VIOLATION:
            raise ConflictError(f"Commande déjà enregistrée pour {row.get('paystack_reference')}")
        logger.exception("orders.repository.insert_order failed reference=%s", row.get("paystack_reference"))
        raise InternalError("Enregistrement de la commande impossible")
    except Exception:
        logger.exception("orders.repository.insert_order failed reference=%s", row.get("paystack_reference"))
        raise InternalError("Enregistrement de la commande impossible")
    data = res.data or []
    if isinstance(data, list) and data:
        return data[0]
    return dict(row)

def update_order_status(order_id: str, status: str) -> Optional[dict]:
    if status not in ORDER_STATUSES:
        raise ValueError(f"statut inconnu: {status}")
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .update({"status": status})
            .eq("id", order_id)
            .execute()
        )
    except Exception:
        logger.exception("orders.repository.update_order_status failed id=%s status=%s", order_id, status)
        raise InternalError("Mise à jour de la commande impossible")
    rows = res.data or []
    return rows[0] if rows else None

def list_successful_orders_for_user(user_id: str) -> List[dict]:
    """Commandes réussies d'un utilisateur, plus récentes d'abord. [] si erreur."""
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("id, product_ids, created_at")
            .eq("user_id", user_id)
            .eq("status", "success")
            .order("created_at", desc=True)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_successful_orders_for_user failed user_id=%s", user_id)
        return []

def has_successful_order_for_product(user_id: str, product_id: str) -> bool:
    """Vrai si une commande réussie de `user_id` contient `product_id`. False si erreur."""
    if not user_id or not product_id:
        return False
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("id")
            .eq("user_id", user_id)
            .eq("status", "success")
            .contains("product_ids", [product_id])
            .limit(1)
            .execute()
        )
        return bool(res.data)
    except Exception:
        logger.exception("orders.repository.has_successful_order_for_product failed user_id=%s product_id=%s", user_id, product_id)
        return False

def list_orders_for_user(user_id: str, limit: int = 50) -> List[dict]:
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("id, tenant_id, product_ids, product_names, items, paystack_reference, status, total_amount, created_at")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_orders_for_user failed user_id=%s", user_id)
        return []

def list_orders_for_tenant(tenant_id: str, limit: int = 100) -> List[dict]:
    """Commandes d'un vendeur pour le reporting admin. [] si erreur."""
    if not tenant_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("*")
            .eq("tenant_id", tenant_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("orders.repository.list_orders_for_tenant failed tenant_id=%s", tenant_id)
        return []
