"""
Endpoints API de la bibliothèque (produits achetés).
- Sécurité: toutes les routes requièrent un utilisateur authentifié (require_user).
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from storefront.utils.security import require_user
from . import service as library_service

router = APIRouter(prefix="/api/v1/library", tags=["Library"])

@router.get("")
def list_library(
    cursor: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    user: Dict[str, Any] = Depends(require_user),
):
    """Produits achetés par l'utilisateur, paginés: {docs, totalDocs, page, limit, hasNextPage}."""
    return library_service.list_purchased(user["id"], cursor=cursor, limit=limit)

@router.get("/{product_id}")
def get_library_product(product_id: str, user: Dict[str, Any] = Depends(require_user)):
    """
    Produit débloqué, contenu protégé compris.
    - 404 si le produit n'existe pas
    - 403 si l'utilisateur ne l'a pas acheté
    """
    return library_service.get_unlocked_product(user["id"], product_id)
