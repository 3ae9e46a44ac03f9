"""
Endpoints vendeurs.
- GET /api/v1/tenants/{slug}: vue publique (payment_enabled compris)
- POST /api/v1/tenants/{slug}/paystack: rattachement Paystack (admin)
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from storefront.utils.security import require_admin
from . import service as tenants_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tenants", tags=["Tenants"])

@router.get("/{slug}")
def get_tenant(slug: str):
    return tenants_service.public_view(tenants_service.get_tenant(slug))

@router.post("/{slug}/paystack")
def onboard_tenant(slug: str, admin: Dict[str, Any] = Depends(require_admin)):
    logger.info("tenants.onboard demandé slug=%s admin=%s", slug, admin.get("id"))
    tenant = tenants_service.onboard_tenant(slug)
    return tenants_service.public_view(tenant)
