"""
Panier multi-vendeurs: {tenant_slug -> [CartLineItem]}.
- Une ligne est identifiée par (product_id, variant_id), unique par panier vendeur.
- Aucune logique réseau: la persistance est injectée (voir storage.py).
"""
from typing import Any, Dict, List, Optional

from storefront.cart.models import CartLineItem
from storefront.errors import NotFoundError


class CartStore:
    def __init__(self, storage):
        self._storage = storage

    # --- lecture ---

    def _load(self) -> Dict[str, List[CartLineItem]]:
        state = self._storage.load() or {}
        carts: Dict[str, List[CartLineItem]] = {}
        for slug, lines in state.items():
            items: List[CartLineItem] = []
            for raw in lines or []:
                try:
                    items.append(CartLineItem.model_validate(raw))
                except ValueError:
                    # ligne corrompue: ignorée plutôt que de perdre tout le panier
                    continue
            carts[slug] = items
        return carts

    def _save(self, carts: Dict[str, List[CartLineItem]]) -> None:
        self._storage.save({slug: [i.to_wire() for i in items] for slug, items in carts.items()})

    def get_items(self, tenant_slug: str) -> List[CartLineItem]:
        return list(self._load().get(tenant_slug, []))

    def is_in_cart(self, tenant_slug: str, product_id: str, variant_id: Optional[str] = None) -> bool:
        key = (product_id, variant_id or None)
        return any(item.key == key for item in self.get_items(tenant_slug))

    def total_items(self, tenant_slug: str) -> int:
        return len(self.get_items(tenant_slug))

    # --- mutations ---

    def add_product(
        self,
        tenant_slug: str,
        product_id: str,
        variant_id: Optional[str] = None,
        variant_name: Optional[str] = None,
        quantity: int = 1,
    ) -> None:
        """Ajoute la ligne si la paire (produit, variante) est absente; sinon ne fait rien."""
        carts = self._load()
        items = carts.setdefault(tenant_slug, [])
        line = CartLineItem(
            product_id=product_id,
            variant_id=variant_id,
            variant_name=variant_name,
            quantity=quantity,
        )
        if any(item.key == line.key for item in items):
            return
        items.append(line)
        self._save(carts)

    def remove_product(self, tenant_slug: str, product_id: str, variant_id: Optional[str] = None) -> None:
        carts = self._load()
        key = (product_id, variant_id or None)
        carts[tenant_slug] = [item for item in carts.get(tenant_slug, []) if item.key != key]
        self._save(carts)

    def update_quantity(self, tenant_slug: str, product_id: str, quantity: int, variant_id: Optional[str] = None) -> None:
        """Met à jour la quantité d'une ligne existante; quantité <= 0 retire la ligne."""
        if quantity <= 0:
            self.remove_product(tenant_slug, product_id, variant_id)
            return
        carts = self._load()
        key = (product_id, variant_id or None)
        for item in carts.get(tenant_slug, []):
            if item.key == key:
                item.quantity = quantity
        self._save(carts)

    def toggle_product(
        self,
        tenant_slug: str,
        product_id: str,
        variant_id: Optional[str] = None,
        variant_name: Optional[str] = None,
    ) -> bool:
        """Ajoute ou retire la ligne; retourne True si elle est dans le panier après l'appel."""
        if self.is_in_cart(tenant_slug, product_id, variant_id):
            self.remove_product(tenant_slug, product_id, variant_id)
            return False
        self.add_product(tenant_slug, product_id, variant_id, variant_name)
        return True

    def clear_cart(self, tenant_slug: str) -> None:
        carts = self._load()
        carts[tenant_slug] = []
        self._save(carts)

    def clear_all(self) -> None:
        self._save({})

    def to_purchase_items(self, tenant_slug: str) -> List[Dict[str, Any]]:
        """Corps `items` attendu par POST /api/v1/checkout/purchase."""
        return [item.to_wire() for item in self.get_items(tenant_slug)]


def reconcile_after_checkout(store: CartStore, tenant_slug: str, error: Optional[Exception] = None) -> bool:
    """
    Politique de nettoyage après vérification d'un paiement.
    - Succès (error=None): le panier du vendeur est vidé.
    - Échec NotFoundError (produit disparu/archivé): panier vidé, il ne pourra plus aboutir.
    - Tout autre échec (réseau, passerelle...): panier conservé.
    Retourne True si le panier a été vidé.
    """
    if error is None or isinstance(error, NotFoundError):
        store.clear_cart(tenant_slug)
        return True
    return False
