"""
Sérialisation/désérialisation des métadonnées Paystack (userId, tenantId, products).
"""
import json
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class ProductMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    price: float = 0
    quantity: int = 1
    variant_id: Optional[str] = Field(default=None, alias="variantId")
    variant_name: Optional[str] = Field(default=None, alias="variantName")


class TransactionMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    tenant_id: Optional[str] = Field(default=None, alias="tenantId")
    products: List[ProductMetadata] = Field(default_factory=list)

# module storefront.payments.metadata
def make_metadata(user_id: str, tenant_id: str, lines: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Construit la TransactionMetadata embarquée dans la transaction Paystack.
    - lines: lignes valorisées issues de pricing.resolve_prices (prix serveur)
    """
    meta = TransactionMetadata(
        user_id=user_id,
        tenant_id=tenant_id,
        products=[
            ProductMetadata(
                id=line["product_id"],
                name=line.get("name") or "",
                price=line["unit_price"],
                quantity=line.get("quantity") or 1,
                variant_id=line.get("variant_id"),
                variant_name=line.get("variant_name"),
            )
            for line in lines
        ],
    )
    return meta.model_dump(by_alias=True, exclude_none=True)

def _parse_metadata(raw: Any) -> Tuple[Optional[str], Optional[str], List[Dict[str, Any]]]:
    """
    Tolérant aux erreurs: metadata peut revenir en dict ou en chaîne JSON.
    Retourne (user_id, tenant_id, products) avec products=[] si illisible.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raw = {}
    if not isinstance(raw, dict):
        raw = {}
    user_id = raw.get("userId") or None
    tenant_id = raw.get("tenantId") or None
    products = raw.get("products")
    if not isinstance(products, list):
        products = []
    cleaned = [p for p in products if isinstance(p, dict) and p.get("id")]
    return (str(user_id) if user_id else None, str(tenant_id) if tenant_id else None, cleaned)

def extract_metadata(event: Dict[str, Any]) -> Tuple[Optional[str], Optional[str], List[Dict[str, Any]]]:
    """
    Extrait (user_id, tenant_id, products) depuis un event webhook Paystack.
    - Attend event.data.metadata.{userId, tenantId, products}
    """
    data = (event.get("data") or {}) if isinstance(event, dict) else {}
    return _parse_metadata(data.get("metadata") if isinstance(data, dict) else None)

def extract_metadata_from_transaction(transaction: Dict[str, Any]) -> Tuple[Optional[str], Optional[str], List[Dict[str, Any]]]:
    """Extrait (user_id, tenant_id, products) depuis la réponse de verify_transaction."""
    return _parse_metadata((transaction or {}).get("metadata") if isinstance(transaction, dict) else None)
