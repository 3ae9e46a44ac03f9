"""Logique applicative des vendeurs (tenants).
- is_payment_enabled: précondition du checkout et de la création de produits
- onboard_tenant: rattache le vendeur à Paystack (destinataire de virement + sous-compte)
"""
from typing import Any, Dict
import logging

from storefront import config
from storefront.errors import NotFoundError, ValidationError, InternalError
from storefront.payments import paystack_client
from storefront.tenants import repository

logger = logging.getLogger(__name__)

PUBLIC_FIELDS = ("id", "slug", "name", "image", "paystack_details_submitted")

def is_payment_enabled(tenant: Dict[str, Any]) -> bool:
    return bool(
        tenant
        and tenant.get("paystack_details_submitted")
        and (tenant.get("paystack_subaccount_code") or "").strip()
    )

def can_create_products(tenant: Dict[str, Any]) -> bool:
    """Un vendeur ne peut publier de produits qu'une fois payable via Paystack."""
    return is_payment_enabled(tenant)

def public_view(tenant: Dict[str, Any]) -> Dict[str, Any]:
    view = {k: tenant.get(k) for k in PUBLIC_FIELDS}
    view["payment_enabled"] = is_payment_enabled(tenant)
    return view

def get_tenant(slug: str) -> Dict[str, Any]:
    tenant = repository.get_tenant_by_slug(slug)
    if not tenant:
        raise NotFoundError("Vendeur introuvable")
    return tenant

def onboard_tenant(slug: str) -> Dict[str, Any]:
    """
    Rattache un vendeur existant à Paystack:
    1) vérifie le compte bancaire (lecture, rejouée si erreur réseau; ignorée en mode test)
    2) crée le destinataire de virement (nuban)
    3) crée le sous-compte avec la commission plateforme
    4) enregistre les codes et passe paystack_details_submitted à True
    Les erreurs Paystack remontent en GatewayError; rien n'est écrit avant l'étape 4.
    """
    tenant = get_tenant(slug)
    bank_code = (tenant.get("bank_code") or "").strip()
    account_number = (tenant.get("account_number") or "").strip()
    if not bank_code or not account_number:
        raise ValidationError("Coordonnées bancaires manquantes")

    name = tenant.get("name") or tenant.get("slug") or slug
    account_name = tenant.get("account_name")
    if not paystack_client.is_test_mode():
        resolved = paystack_client.resolve_account_number(account_number, bank_code)
        account_name = resolved.get("account_name") or account_name

    recipient = paystack_client.create_transfer_recipient(name, account_number, bank_code)
    fee = tenant.get("platform_fee_percentage")
    if fee is None:
        fee = config.PLATFORM_FEE_PERCENTAGE
    subaccount = paystack_client.create_subaccount(name, bank_code, account_number, fee)

    update = {
        "account_name": account_name or recipient.get("account_name"),
        "paystack_recipient_code": recipient.get("recipient_code"),
        "paystack_subaccount_code": subaccount.get("subaccount_code"),
        "platform_fee_percentage": fee,
        "paystack_details_submitted": True,
    }
    saved = repository.update_tenant(tenant["id"], update)
    if saved is None:
        raise InternalError("Enregistrement du vendeur impossible")
    logger.info("tenants.onboard: %s subaccount=%s", slug, update["paystack_subaccount_code"])
    return {**tenant, **update}
