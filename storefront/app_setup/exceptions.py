"""
Gestionnaires d'exceptions utilisés par la factory.
- StorefrontError (métier): {"detail": message} avec le code HTTP porté par l'erreur.
- HTTPException 401/403 sur une page HTML (hors /api/*): redirection vers la connexion.
- Sinon réponse JSON FastAPI standard.
"""
import logging
import urllib.parse
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.status import HTTP_303_SEE_OTHER

from storefront import config
from storefront.errors import GatewayError, StorefrontError

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        if isinstance(exc, GatewayError):
            detail = f"Erreur du prestataire de paiement: {exc.message}"
        else:
            detail = exc.message
        if exc.status_code >= 500:
            logger.error("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})

    @app.exception_handler(HTTPException)
    async def html_redirect_on_auth_errors(request: Request, exc: HTTPException):
        if exc.status_code in (401, 403):
            accept = (request.headers.get("accept") or "").lower()
            is_api = request.url.path.startswith("/api/")
            if "text/html" in accept and not is_api:
                detail = str(getattr(exc, "detail", "")) or (
                    "Veuillez vous connecter" if exc.status_code == 401 else "Accès interdit"
                )
                msg = urllib.parse.quote_plus(detail)
                nxt = urllib.parse.quote_plus(request.url.path)
                return RedirectResponse(url=f"{config.SIGN_IN_URL}?error={msg}&next={nxt}", status_code=HTTP_303_SEE_OTHER)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))
