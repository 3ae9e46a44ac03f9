"""
Endpoints du pipeline de paiement Paystack.
- /api/v1/checkout/*: RPC du client (hydratation du panier, achat, vérification)
- /api/v1/paystack/webhook: événements Paystack signés (HMAC-SHA512 du corps brut)
- config.CHECKOUT_SUCCESS_ROUTE (/tenants/{slug}/checkout/success): page de retour Paystack (callback_url), redirige selon le résultat
Sécurité:
- require_user sur les RPC et la page de retour; le webhook n'est authentifié que par sa signature.
- optional_rate_limit sur purchase et verify.
"""
import json
import logging
import urllib.parse
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

from storefront import config
from storefront.errors import StorefrontError
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import require_user

from . import service as payments_service
from .schemas import PurchaseRequest, VerifyRequest
from .signature import SIGNATURE_HEADER, verify_signature

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])
webhook_router = APIRouter(prefix="/api/v1/paystack", tags=["Paystack"])
web_router = APIRouter(tags=["Checkout Web"])

# module storefront.payments.views
@router.get("/products")
def get_products(ids: str = "") -> Dict[str, Any]:
    """
    Hydrate le panier: {docs, totalDocs, totalPrice}.
    - ids séparés par des virgules
    - 404 si un produit est introuvable ou archivé
    """
    return payments_service.get_products(i for i in ids.split(","))

@router.post("/purchase", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def purchase(body: PurchaseRequest, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """
    Crée la transaction Paystack pour le panier d'un vendeur.
    - Entrée: {"tenantSlug": "...", "items": [{"productId", "variantId"?, "variantName"?, "quantity"}]}
    - Retour: {"url": <authorization_url>, "reference": "..."}
    - Prix toujours résolus côté serveur
    """
    result = payments_service.initiate_purchase(body.tenant_slug, body.cart_items(), user)
    return {"url": result["url"], "reference": result["reference"]}

@router.post("/verify", dependencies=[Depends(optional_rate_limit(times=20, seconds=60))])
def verify(body: VerifyRequest, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """Vérifie une transaction auprès de Paystack et matérialise la commande (idempotent)."""
    return payments_service.verify_transaction(body.reference, user)

@webhook_router.post("/webhook", include_in_schema=False)
async def paystack_webhook(request: Request):
    """
    Webhook Paystack.
    - 400: signature absente/invalide, corps non JSON ou data non objet (Paystack ne doit pas rejouer)
    - 200: {"status": "ok", "created": bool} ou {"status": "ignored"}
    - 500: secret non configuré ou échec de lookup/stockage (Paystack rejoue)
    """
    secret = config.PAYSTACK_WEBHOOK_SECRET
    if not secret:
        logger.error("payments.webhook: PAYSTACK_WEBHOOK_SECRET manquant")
        return JSONResponse(status_code=500, content={"detail": "Server misconfigured"})

    raw_body = await request.body()
    if not verify_signature(raw_body, request.headers.get(SIGNATURE_HEADER), secret):
        logger.warning("payments.webhook: signature invalide")
        return JSONResponse(status_code=400, content={"detail": "Invalid signature"})

    try:
        event = json.loads(raw_body)
    except ValueError:
        return JSONResponse(status_code=400, content={"detail": "Invalid payload"})
    if not isinstance(event, dict) or not isinstance(event.get("data") or {}, dict):
        logger.warning("payments.webhook: payload mal formé")
        return JSONResponse(status_code=400, content={"detail": "Invalid payload"})

    try:
        result = await run_in_threadpool(payments_service.handle_webhook_event, event)
    except Exception:
        logger.exception("payments.webhook: échec du traitement event=%s", event.get("event"))
        return JSONResponse(status_code=500, content={"detail": "Webhook processing failed"})
    return JSONResponse(result)

@web_router.get(config.CHECKOUT_SUCCESS_ROUTE, name="checkout_success_page")
def checkout_success_page(
    slug: str,
    reference: Optional[str] = None,
    trxref: Optional[str] = None,
    user: Dict[str, Any] = Depends(require_user),
):
    """
    Page de retour Paystack: vérifie la transaction côté serveur puis redirige.
    - succès: /tenants/{slug}/library
    - échec: /tenants/{slug}/checkout?error=<message>
    """
    ref = reference or trxref
    if not ref:
        return RedirectResponse(url=f"/tenants/{slug}", status_code=HTTP_303_SEE_OTHER)
    try:
        payments_service.verify_transaction(ref, user)
    except StorefrontError as e:
        logger.info("payments.success_page: %s échec %s", ref, e.message)
        msg = urllib.parse.quote_plus(e.message)
        return RedirectResponse(url=f"/tenants/{slug}/checkout?error={msg}", status_code=HTTP_303_SEE_OTHER)
    return RedirectResponse(url=f"/tenants/{slug}/library", status_code=HTTP_303_SEE_OTHER)
