"""
Bibliothèque de l'acheteur: lectures seules sur le ledger des commandes.
- Un produit est débloqué dès qu'une commande 'success' de l'utilisateur le contient.
- Refus par défaut: toute erreur de lecture du ledger équivaut à « non acheté ».
"""
from typing import Any, Dict, List, Optional
import logging

from storefront import config
from storefront.errors import NotFoundError, UnauthorizedError, ValidationError
from storefront.orders import repository as orders_repository
from storefront.products import repository as products_repository
from storefront.products.service import strip_protected

logger = logging.getLogger(__name__)

def purchased_product_ids(user_id: str) -> List[str]:
    """Ids achetés, aplatis et dédoublonnés (ordre de première apparition, commandes récentes d'abord)."""
    ids: List[str] = []
    seen = set()
    for order in orders_repository.list_successful_orders_for_user(user_id):
        for pid in order.get("product_ids") or []:
            pid = str(pid)
            if pid not in seen:
                seen.add(pid)
                ids.append(pid)
    return ids

def list_purchased(user_id: str, cursor: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
    """
    Page `cursor` (à partir de 1) des produits achetés par `user_id`.
    Retour: {"docs", "totalDocs", "page", "limit", "hasNextPage"}; `content` n'est pas inclus.
    """
    limit = limit or config.LIBRARY_PAGE_SIZE
    if cursor < 1 or limit < 1:
        raise ValidationError("Pagination invalide")

    ids = purchased_product_ids(user_id)
    start = (cursor - 1) * limit
    page_ids = ids[start:start + limit]
    by_id = products_repository.get_products_map(page_ids) if page_ids else {}
    docs = [strip_protected(by_id[pid]) for pid in page_ids if pid in by_id]
    return {
        "docs": docs,
        "totalDocs": len(ids),
        "page": cursor,
        "limit": limit,
        "hasNextPage": start + limit < len(ids),
    }

def has_purchased(user_id: str, product_id: str) -> bool:
    return orders_repository.has_successful_order_for_product(user_id, product_id)

def get_unlocked_product(user_id: str, product_id: str) -> Dict[str, Any]:
    """Produit complet (contenu protégé compris) si l'utilisateur l'a acheté."""
    product = products_repository.get_product(product_id)
    if not product:
        raise NotFoundError("Produit introuvable")
    if not has_purchased(user_id, product_id):
        logger.info("library.access refusé user_id=%s product_id=%s", user_id, product_id)
        raise UnauthorizedError("Produit non acheté", status_code=403)
    return product
