"""
Accès aux données 'products' (catalogue faisant autorité pour les prix).
Les lectures du checkout remontent InternalError si la base est indisponible:
un catalogue vide ne doit pas être confondu avec des produits introuvables.
"""
from typing import Any, Dict, Iterable, List, Optional
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.errors import InternalError

logger = logging.getLogger(__name__)

# module storefront.products.repository
def fetch_products_by_ids(ids: Iterable[str]) -> List[dict]:
    """Récupère les produits par leurs IDs (archivés compris)."""
    id_list = [str(i) for i in ids if i]
    if not id_list:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("products")
            .select("*")
            .in_("id", id_list)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("products.repository.fetch_products_by_ids failed ids=%s", id_list)
        raise InternalError("Catalogue indisponible")

def fetch_tenant_products(ids: Iterable[str], tenant_id: str) -> List[dict]:
    """Produits non archivés appartenant au vendeur `tenant_id` parmi `ids`."""
    id_list = [str(i) for i in ids if i]
    if not id_list or not tenant_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("products")
            .select("*")
            .in_("id", id_list)
            .eq("tenant_id", tenant_id)
            .eq("is_archived", False)
            .execute()
        )
        return res.data or []
    except Exception:
        logger.exception("products.repository.fetch_tenant_products failed tenant_id=%s ids=%s", tenant_id, id_list)
        raise InternalError("Catalogue indisponible")

def get_products_map(ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
    """Retourne un dict {id: produit} à partir d'une liste d'IDs."""
    return {str(p.get("id")): p for p in fetch_products_by_ids(ids)}

def get_product(product_id: str) -> Optional[dict]:
    if not product_id:
        return None
    rows = fetch_products_by_ids([product_id])
    return rows[0] if rows else None

def update_product_variants(product_id: str, variants: List[Dict[str, Any]]) -> bool:
    try:
        (
            supabase_client.get_service_supabase()
            .table("products")
            .update({"variants": variants})
            .eq("id", product_id)
            .execute()
        )
        return True
    except Exception:
        logger.exception("products.repository.update_product_variants failed id=%s", product_id)
        return False
