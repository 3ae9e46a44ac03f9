"""Vues métier du catalogue: le champ `content` est le contenu protégé, réservé aux acheteurs."""
from typing import Any, Dict

PROTECTED_FIELDS = ("content",)

def strip_protected(product: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in product.items() if k not in PROTECTED_FIELDS}

