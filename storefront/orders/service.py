"""Couche service du ledger de commandes.
Rôle central: materialize_order, la primitive idempotente « créer si absente »
partagée par le webhook Paystack et les deux déclencheurs de vérification.
- Pré-contrôle par référence (chemin rapide des relivraisons)
- Insertion protégée par l'unicité de paystack_reference
- ConflictError (course perdue) = succès silencieux: la commande existante est relue
"""
from typing import Any, Dict, List, Optional, Tuple
import logging

from storefront.errors import ConflictError, InternalError
from storefront.orders import repository
from storefront.payments.pricing import from_minor_units

logger = logging.getLogger(__name__)

def build_order_row(
    *,
    reference: str,
    user_id: str,
    tenant_id: str,
    products: List[Dict[str, Any]],
    amount_minor: Any,
    transaction_id: Optional[Any] = None,
) -> Dict[str, Any]:
    """Construit la ligne 'orders' depuis la TransactionMetadata relue chez Paystack."""
    return {
        "tenant_id": tenant_id,
        "user_id": user_id,
        "product_ids": [str(p.get("id")) for p in products],
        "product_names": [p.get("name") or "" for p in products],
        "items": [
            {
                "productId": str(p.get("id")),
                "productName": p.get("name") or "",
                "variantId": p.get("variantId") or None,
                "variantName": p.get("variantName") or None,
                "priceAtPurchase": p.get("price"),
                "quantity": p.get("quantity") or 1,
            }
            for p in products
        ],
        "paystack_reference": reference,
        "paystack_transaction_id": str(transaction_id) if transaction_id is not None else None,
        "status": "success",
        "total_amount": from_minor_units(amount_minor),
    }

def _ensure_success(order: dict) -> dict:
    if order.get("status") == "success" or not order.get("id"):
        return order
    logger.info("orders.materialize: %s %s -> success", order.get("paystack_reference"), order.get("status"))
    return repository.update_order_status(order["id"], "success") or {**order, "status": "success"}

def materialize_order(row: Dict[str, Any]) -> Tuple[dict, bool]:
    """
    Crée la commande si et seulement si aucune n'existe pour row['paystack_reference'].
    Retour: (commande, created) où created=False signifie no-op (déjà matérialisée).
    """
    reference = row.get("paystack_reference")
    if not reference:
        raise InternalError("Référence de transaction manquante")

    existing = repository.get_order_by_reference(reference)
    if existing:
        logger.info("orders.materialize: %s déjà enregistrée (no-op)", reference)
        return _ensure_success(existing), False

    try:
        created = repository.insert_order(row)
    except ConflictError:
        # Un autre déclencheur a inséré entre le pré-contrôle et l'insertion
        logger.info("orders.materialize: %s insérée en concurrence (no-op)", reference)
        existing = repository.get_order_by_reference(reference)
        if not existing:
            raise InternalError("Commande en conflit introuvable")
        return _ensure_success(existing), False

    logger.info(
        "orders.materialize: %s créée user_id=%s tenant_id=%s products=%s",
        reference, row.get("user_id"), row.get("tenant_id"), len(row.get("product_ids") or []),
    )
    return created, True

def get_user_orders(user_id: str) -> List[dict]:
    return repository.list_orders_for_user(user_id)

def get_tenant_orders(tenant_id: str, limit: int = 100) -> List[dict]:
    return repository.list_orders_for_tenant(tenant_id, limit=limit)
