"""Corps des RPC checkout (camelCase sur le fil)."""
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from storefront.cart.models import CartLineItem


class PurchaseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tenant_slug: str = Field(alias="tenantSlug", min_length=1)
    items: List[CartLineItem] = Field(min_length=1)

    def cart_items(self) -> List[dict]:
        return [item.model_dump() for item in self.items]


class VerifyRequest(BaseModel):
    reference: str = Field(min_length=1)
