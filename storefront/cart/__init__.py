"""
Module 'cart': panier côté client, persistance injectée.
"""

from .models import CartLineItem
from .storage import MemoryCartStorage, RedisCartStorage
from .store import CartStore, reconcile_after_checkout

__all__ = [
    "CartLineItem",
    "CartStore",
    "MemoryCartStorage",
    "RedisCartStorage",
    "reconcile_after_checkout",
]
