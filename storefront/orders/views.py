from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from storefront.utils.security import require_admin, require_user
from . import service as orders_service

router = APIRouter(prefix="/api/v1/orders", tags=["Orders"])

@router.get("/me")
def my_orders(user: Dict[str, Any] = Depends(require_user)):
    return orders_service.get_user_orders(user["id"])

@router.get("/tenant/{tenant_id}")
def tenant_orders(
    tenant_id: str,
    limit: int = Query(100, ge=1, le=500),
    admin: Dict[str, Any] = Depends(require_admin),
):
    """Reporting admin: commandes d'un vendeur, plus récentes d'abord."""
    return orders_service.get_tenant_orders(tenant_id, limit=limit)
