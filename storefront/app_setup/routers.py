"""
Registre central des routers.
- Web: page de retour Paystack (/tenants/{slug}/checkout/success)
- API v1: checkout, webhook Paystack, bibliothèque, commandes, vendeurs
- Health: health_router
"""
from fastapi import FastAPI
from storefront.payments import views as payments_views
from storefront.library.views import router as library_router
from storefront.orders.views import router as orders_router
from storefront.tenants.views import router as tenants_router
from storefront.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # Pages web
    app.include_router(payments_views.web_router)
    # API v1
    app.include_router(payments_views.router)
    app.include_router(payments_views.webhook_router)
    app.include_router(library_router)
    app.include_router(orders_router)
    app.include_router(tenants_router)
    # Health & monitoring
    app.include_router(health_router)
