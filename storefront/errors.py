"""
Taxonomie des erreurs métier du pipeline checkout → commande.

Chaque erreur porte un message destiné à l'appelant et un code HTTP.
Le handler enregistré dans app_setup.exceptions les convertit en {"detail": message}.
- ValidationError: entrée invalide, détectée avant tout effet de bord (400)
- NotFoundError: vendeur/produit/commande absent (404)
- UnauthorizedError: session manquante (401) ou ressource d'un autre utilisateur (403)
- ConflictError: matérialisation en double; le service la résout en succès silencieux
- InternalError: échec inattendu (base indisponible, etc.)
- GatewayError: l'API Paystack a refusé ou n'a pas répondu (message amont conservé)
"""
from typing import Any, Dict, Optional


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(StorefrontError):
    status_code = 400


class NotFoundError(StorefrontError):
    status_code = 404


class UnauthorizedError(StorefrontError):
    status_code = 401


class ConflictError(StorefrontError):
    status_code = 409


class InternalError(StorefrontError):
    status_code = 500


class GatewayError(InternalError):
    """Erreur Paystack: `payload` garde la réponse amont complète pour les logs."""

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None, status_code: Optional[int] = None):
        super().__init__(message, status_code=status_code)
        self.payload = payload or {}
