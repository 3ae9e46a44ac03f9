"""
Backends de persistance du panier.
Contrat: load() -> {tenant_slug: [ligne_wire, ...]} et save(état complet).
- MemoryCartStorage: tests et sessions éphémères.
- RedisCartStorage: stockage durable (une clé JSON par propriétaire de panier).
"""
import json
import logging
from typing import Any, Dict, List, Optional

import redis

from storefront import config

logger = logging.getLogger(__name__)

CartState = Dict[str, List[Dict[str, Any]]]


class MemoryCartStorage:
    def __init__(self, initial: Optional[CartState] = None):
        self._state: CartState = json.loads(json.dumps(initial or {}))

    def load(self) -> CartState:
        return json.loads(json.dumps(self._state))

    def save(self, state: CartState) -> None:
        self._state = json.loads(json.dumps(state))


class RedisCartStorage:
    """
    Panier persistant dans Redis sous la clé `cart:<owner>`.
    - owner: identifiant du navigateur ou de l'utilisateur
    - ttl: expiration glissante en secondes (None = pas d'expiration)
    Un contenu illisible est traité comme un panier vide.
    """

    def __init__(self, owner: str, client: Optional[redis.Redis] = None, ttl: Optional[int] = 60 * 60 * 24 * 30):
        if not owner:
            raise ValueError("owner requis")
        self.key = f"cart:{owner}"
        self.ttl = ttl
        self._client = client or redis.from_url(config.CART_REDIS_URL, encoding="utf-8", decode_responses=True)

    def load(self) -> CartState:
        raw = self._client.get(self.key)
        if not raw:
            return {}
        try:
            state = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("cart.storage: contenu illisible pour %s, panier réinitialisé", self.key)
            return {}
        return state if isinstance(state, dict) else {}

    def save(self, state: CartState) -> None:
        payload = json.dumps(state)
        if self.ttl:
            self._client.set(self.key, payload, ex=self.ttl)
        else:
            self._client.set(self.key, payload)
