"""
Factory d'application pour les entrypoints (storefront.asgi, python -m storefront).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
import logging

from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import (
    register_basic_middlewares,
    register_security_middleware,
    register_no_cache_middleware,
    register_force_https_middleware,
)
from .exceptions import register_exception_handlers
from .routers import register_routers

logger = logging.getLogger(__name__)

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre, dans l'ordre:
      1) middlewares de base (CORS, TrustedHost, proxy headers)
      2) en-têtes de sécurité, no-cache
      3) gestionnaires d'exceptions
      4) routers (checkout, webhook, bibliothèque, commandes, vendeurs, health)
      5) redirection HTTPS, ajoutée en dernier pour s'exécuter en premier
    """
    app = FastAPI(title="Storefront Checkout API", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_no_cache_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    register_force_https_middleware(app)
    logger.debug("create_app: %s routes", len(app.routes))
    return app
