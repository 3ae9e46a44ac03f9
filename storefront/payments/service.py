"""
Cas d'usage 'payments': orchestre catalogue, pricing, Paystack, metadata et ledger.
- initiate_purchase: panier -> transaction Paystack (URL de paiement hébergée)
- handle_webhook_event: événement charge.success signé -> commande
- verify_transaction: vérification synchrone (page de retour ou listener client) -> commande
Les deux chemins de confirmation convergent sur orders.service.materialize_order.
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from storefront import config
from storefront.errors import GatewayError, NotFoundError, UnauthorizedError, ValidationError
from storefront.orders import service as orders_service
from storefront.products import repository as products_repository
from storefront.products.service import strip_protected
from storefront.tenants import repository as tenants_repository
from storefront.tenants import service as tenants_service
from storefront.users import repository as users_repository

from . import metadata as meta
from . import paystack_client
from . import pricing

logger = logging.getLogger(__name__)

CHARGE_SUCCESS = "charge.success"

# module storefront.payments.service
def get_products(ids: Iterable[str]) -> Dict[str, Any]:
    """
    Hydrate le panier: produits demandés + prix total de base.
    - NotFoundError si un id est inconnu ou archivé (le client vide alors son panier)
    - Le contenu protégé (content) n'est jamais renvoyé
    """
    id_list = list(dict.fromkeys(str(i).strip() for i in ids if str(i).strip()))
    if not id_list:
        return {"docs": [], "totalDocs": 0, "totalPrice": 0.0}
    products = [p for p in products_repository.fetch_products_by_ids(id_list) if not p.get("is_archived")]
    if len(products) != len(id_list):
        raise NotFoundError("Produits introuvables")
    total = sum(pricing.price_from_product(p) for p in products)
    return {
        "docs": [strip_protected(p) for p in products],
        "totalDocs": len(products),
        "totalPrice": total,
    }

def callback_url_for(tenant_slug: str) -> str:
    return config.checkout_callback_url(tenant_slug)

def initiate_purchase(tenant_slug: str, items: List[Dict[str, Any]], buyer: Dict[str, Any]) -> Dict[str, Any]:
    """
    Prépare la transaction Paystack pour le panier d'un vendeur.
    Préconditions (aucun effet de bord si l'une échoue):
      1) tous les produits existent, non archivés, appartiennent au vendeur -> sinon NotFoundError
      2) le vendeur a un sous-compte Paystack -> sinon ValidationError
      3) total serveur > 0 -> sinon ValidationError
    Retour: {"url", "reference", "amount"}; GatewayError si Paystack échoue.
    """
    lines = pricing.aggregate_items(items)

    tenant = tenants_repository.get_tenant_by_slug(tenant_slug)
    if not tenant:
        raise NotFoundError("Vendeur introuvable")

    product_ids = list(dict.fromkeys(line["product_id"] for line in lines))
    products = products_repository.fetch_tenant_products(product_ids, str(tenant["id"]))
    if len(products) != len(product_ids):
        raise NotFoundError("Produits introuvables")

    if not tenants_service.is_payment_enabled(tenant):
        raise ValidationError("Ce vendeur n'accepte pas encore les paiements")

    priced = pricing.resolve_prices(lines, {str(p["id"]): p for p in products})
    if priced["missing_ids"]:
        raise NotFoundError("Produits introuvables")
    amount = pricing.to_minor_units(priced["total"])
    if amount <= 0:
        raise ValidationError("Montant invalide")

    email = (buyer.get("email") or "").strip()
    if not email:
        raise ValidationError("Email de l'acheteur manquant")

    metadata = meta.make_metadata(str(buyer["id"]), str(tenant["id"]), priced["lines"])
    data = paystack_client.initialize_transaction(
        email=email,
        amount=amount,
        subaccount=tenant["paystack_subaccount_code"],
        callback_url=callback_url_for(tenant_slug),
        metadata=metadata,
    )
    url = data.get("authorization_url")
    if not url:
        logger.error("payments.initiate: authorization_url absente data=%s", data)
        raise GatewayError("Impossible de créer la session Paystack", payload=data)

    logger.info(
        "payments.initiate tenant=%s user_id=%s amount=%s reference=%s",
        tenant_slug, buyer.get("id"), amount, data.get("reference"),
    )
    return {"url": url, "reference": data.get("reference"), "amount": amount}

def _resolve_tenant_id(tenant_id: Optional[str], products: List[Dict[str, Any]]) -> str:
    """Vendeur depuis la metadata, sinon déduit du premier produit."""
    if tenant_id:
        tenant = tenants_repository.get_tenant_by_id(tenant_id)
    else:
        product = products_repository.get_product(str(products[0].get("id")))
        owner = (product or {}).get("tenant_id")
        tenant = tenants_repository.get_tenant_by_id(str(owner)) if owner else None
    if not tenant:
        raise NotFoundError("Vendeur introuvable pour la transaction")
    return str(tenant["id"])

def _reduce_variant_stock(products: List[Dict[str, Any]]) -> None:
    """
    Décrémente le stock des variantes achetées (jamais sous 0).
    Best-effort: un échec est loggé et n'invalide pas la commande.
    """
    for item in products:
        variant_id = item.get("variantId")
        if not variant_id:
            continue
        try:
            product = products_repository.get_product(str(item.get("id")))
            if not product or not product.get("has_variants"):
                continue
            qty = int(item.get("quantity") or 1)
            variants = []
            for v in product.get("variants") or []:
                if str(v.get("id")) == str(variant_id):
                    v = {**v, "stock": max(0, int(v.get("stock") or 0) - qty)}
                variants.append(v)
            if products_repository.update_product_variants(str(product["id"]), variants):
                logger.info("payments.stock: -%s produit=%s variante=%s", qty, product["id"], variant_id)
        except Exception:
            logger.exception("payments.stock: échec produit=%s variante=%s", item.get("id"), variant_id)

def _confirm(reference: str, transaction: Dict[str, Any], user_id: str, tenant_id: Optional[str],
             products: List[Dict[str, Any]]) -> Tuple[dict, bool]:
    buyer = users_repository.get_user_by_id(user_id)
    if not buyer:
        raise NotFoundError("Acheteur introuvable pour la transaction")
    resolved_tenant_id = _resolve_tenant_id(tenant_id, products)

    row = orders_service.build_order_row(
        reference=reference,
        user_id=str(buyer["id"]),
        tenant_id=resolved_tenant_id,
        products=products,
        amount_minor=transaction.get("amount"),
        transaction_id=transaction.get("id"),
    )
    order, created = orders_service.materialize_order(row)
    if created:
        _reduce_variant_stock(products)
    return order, created

def handle_webhook_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Traite un événement Paystack dont la signature a déjà été validée.
    - Autre que charge.success, ou metadata sans userId/products: {"status": "ignored"}
    - Sinon matérialise la commande: {"status": "ok", "created": bool}
    Les échecs de lookup/stockage remontent (la vue répond 500, Paystack rejoue).
    """
    event_type = (event or {}).get("event")
    if event_type != CHARGE_SUCCESS:
        logger.info("payments.webhook: événement ignoré %s", event_type)
        return {"status": "ignored"}

    data = event.get("data") or {}
    if not isinstance(data, dict):
        logger.warning("payments.webhook: data non objet, ignoré")
        return {"status": "ignored"}
    reference = data.get("reference")
    user_id, tenant_id, products = meta.extract_metadata(event)
    if not reference or not user_id or not products:
        logger.warning("payments.webhook: metadata incomplète reference=%s user_id=%s", reference, user_id)
        return {"status": "ignored"}
    if data.get("status") not in (None, "success"):
        logger.info("payments.webhook: %s status=%s, aucune commande", reference, data.get("status"))
        return {"status": "ignored"}

    order, created = _confirm(reference, data, user_id, tenant_id, products)
    logger.info("payments.webhook reference=%s created=%s order_id=%s", reference, created, order.get("id"))
    return {"status": "ok", "created": created}

def verify_transaction(reference: str, user: Dict[str, Any]) -> Dict[str, Any]:
    """
    Vérification synchrone au retour de Paystack (ne fait jamais confiance à l'URL).
    - Lit le statut faisant autorité via paystack_client.verify_transaction
    - status != success: ValidationError, aucune écriture
    - Transaction d'un autre acheteur: UnauthorizedError (403)
    - Sinon même matérialisation idempotente que le webhook
    """
    reference = (reference or "").strip()
    if not reference:
        raise ValidationError("Référence de transaction manquante")

    transaction = paystack_client.verify_transaction(reference)
    status = transaction.get("status")
    if status != "success":
        logger.info("payments.verify: %s non confirmée status=%s", reference, status)
        raise ValidationError(f"Paiement non confirmé (status={status})")

    user_id, tenant_id, products = meta.extract_metadata_from_transaction(transaction)
    if not user_id or not products:
        raise ValidationError("Métadonnées de transaction invalides")
    if user_id != str(user.get("id")):
        raise UnauthorizedError("Transaction appartenant à un autre utilisateur", status_code=403)

    order, created = _confirm(transaction.get("reference") or reference, transaction, user_id, tenant_id, products)
    return {
        "success": True,
        "message": "Achat confirmé" if created else "Achat déjà confirmé",
        "created": created,
        "orderId": order.get("id"),
    }
