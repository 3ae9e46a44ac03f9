"""
Ligne de panier telle qu'envoyée par le client (format camelCase sur le fil).
Jamais de prix: le serveur résout toujours les montants depuis le catalogue.
"""
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartLineItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId", min_length=1)
    variant_id: Optional[str] = Field(default=None, alias="variantId")
    variant_name: Optional[str] = Field(default=None, alias="variantName")
    quantity: int = Field(default=1, ge=1)

    @field_validator("product_id")
    @classmethod
    def _strip_product_id(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("productId requis")
        return v

    @field_validator("variant_id", "variant_name")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        return v or None

    @property
    def key(self) -> Tuple[str, Optional[str]]:
        return (self.product_id, self.variant_id)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
