"""
Module 'payments' (feature-first): point d'entrée public.
Réunit pricing, metadata Paystack, signature webhook, client Paystack et cas d'usage.
"""

from .pricing import (
    aggregate_items,
    resolve_prices,
    resolve_unit_price,
    price_from_product,
    to_minor_units,
    from_minor_units,
)
from .metadata import make_metadata, extract_metadata, extract_metadata_from_transaction
from .signature import compute_signature, verify_signature
from .paystack_client import require_paystack, initialize_transaction, verify_transaction as paystack_verify_transaction
from .service import get_products, initiate_purchase, handle_webhook_event, verify_transaction

__all__ = [
    # pricing
    "aggregate_items",
    "resolve_prices",
    "resolve_unit_price",
    "price_from_product",
    "to_minor_units",
    "from_minor_units",
    # metadata
    "make_metadata",
    "extract_metadata",
    "extract_metadata_from_transaction",
    # signature
    "compute_signature",
    "verify_signature",
    # paystack
    "require_paystack",
    "initialize_transaction",
    "paystack_verify_transaction",
    # services
    "get_products",
    "initiate_purchase",
    "handle_webhook_event",
    "verify_transaction",
]
