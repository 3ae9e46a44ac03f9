"""
Résolution des prix côté serveur (pas de réseau, pas de DB).
Les prix viennent uniquement du catalogue; le panier client ne fournit que ids et quantités.
"""
from typing import Any, Dict, Iterable, List, Optional

from storefront.errors import ValidationError

# module storefront.payments.pricing
def _to_price(value: Any) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    return price if price == price else 0.0  # NaN -> 0

def price_from_product(product: Dict[str, Any]) -> float:
    """
    Prix de base d'un produit (float).
    - Autorise str|float|int; 0.0 si parsing impossible.
    """
    return _to_price(product.get("price"))

def find_variant(product: Dict[str, Any], variant_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if not variant_id or not product.get("has_variants"):
        return None
    for variant in product.get("variants") or []:
        if str(variant.get("id")) == str(variant_id):
            return variant
    return None

def variant_label(variant: Dict[str, Any]) -> Optional[str]:
    parts = [str(variant.get(k)) for k in ("color", "size") if variant.get(k)]
    return " / ".join(parts) or None

def resolve_unit_price(product: Dict[str, Any], variant_id: Optional[str] = None) -> float:
    """
    Prix unitaire faisant autorité:
    - variant_price de la variante si le produit a des variantes et qu'elle déclare un prix
    - sinon le prix de base (variante inconnue comprise)
    """
    variant = find_variant(product, variant_id)
    if variant is not None and variant.get("variant_price") not in (None, ""):
        return _to_price(variant.get("variant_price"))
    return price_from_product(product)

def aggregate_items(items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Agrège un panier brut [{product_id, variant_id?, variant_name?, quantity}, ...]
    par paire (product_id, variant_id), en sommant les quantités.
    - Ignore les lignes invalides (id vide, quantity <= 0); quantité absente = 1.
    - Soulève ValidationError si aucune ligne valide n'est présente.
    """
    merged: Dict[tuple, Dict[str, Any]] = {}
    for it in items or []:
        product_id = str(it.get("product_id") or "").strip()
        raw_qty = it.get("quantity")
        try:
            qty = 1 if raw_qty is None else int(raw_qty)
        except (TypeError, ValueError):
            qty = 0
        if not product_id or qty <= 0:
            continue
        variant_id = str(it.get("variant_id") or "").strip() or None
        key = (product_id, variant_id)
        if key in merged:
            merged[key]["quantity"] += qty
        else:
            merged[key] = {
                "product_id": product_id,
                "variant_id": variant_id,
                "variant_name": it.get("variant_name") or None,
                "quantity": qty,
            }
    if not merged:
        raise ValidationError("Panier invalide")
    return list(merged.values())

def resolve_prices(items: Iterable[Dict[str, Any]], products_by_id: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Calcule les lignes valorisées et le total.
    Retour: {"lines": [...], "total": float, "missing_ids": [...]}
    - Produit inconnu: exclu du total et listé dans missing_ids (à l'appelant de décider).
    - Variante inconnue: prix de base, variant_id retiré de la ligne.
    """
    lines: List[Dict[str, Any]] = []
    missing: List[str] = []
    total = 0.0
    for it in items:
        product_id = str(it.get("product_id"))
        product = products_by_id.get(product_id)
        if not product:
            if product_id not in missing:
                missing.append(product_id)
            continue
        qty = int(it.get("quantity") or 1)
        variant = find_variant(product, it.get("variant_id"))
        unit_price = resolve_unit_price(product, it.get("variant_id"))
        subtotal = unit_price * qty
        total += subtotal
        lines.append({
            "product_id": product_id,
            "name": product.get("name") or "Produit",
            "variant_id": str(variant["id"]) if variant is not None else None,
            "variant_name": (variant_label(variant) or it.get("variant_name")) if variant is not None else None,
            "unit_price": unit_price,
            "quantity": qty,
            "subtotal": subtotal,
        })
    return {"lines": lines, "total": total, "missing_ids": missing}

def to_minor_units(amount: float) -> int:
    """Montant en unités mineures (kobo) pour Paystack."""
    return int(round(amount * 100))

def from_minor_units(amount: Any) -> float:
    return _to_price(amount) / 100
