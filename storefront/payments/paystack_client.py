"""
Adaptateur Paystack: centralise les appels HTTP et la configuration Paystack.
- Écritures (initialize, transferrecipient, subaccount): jamais rejouées automatiquement,
  un rejeu pourrait créer une seconde transaction côté Paystack.
- Lectures (verify, bank/resolve): rejouées via tenacity sur erreurs de transport.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from storefront import config
from storefront.errors import GatewayError

logger = logging.getLogger(__name__)

# module storefront.payments.paystack_client
def require_paystack() -> str:
    """
    Retourne la clé secrète Paystack configurée.
    - Soulève GatewayError si PAYSTACK_SECRET_KEY est absente (aucun appel possible).
    """
    if not config.PAYSTACK_SECRET_KEY:
        raise GatewayError("PAYSTACK_SECRET_KEY manquant")
    return config.PAYSTACK_SECRET_KEY

def is_test_mode() -> bool:
    return (config.PAYSTACK_SECRET_KEY or "").startswith("sk_test_")

def _http_client() -> httpx.Client:
    """Client httpx authentifié (point de substitution en tests via MockTransport)."""
    return httpx.Client(
        base_url=config.PAYSTACK_BASE_URL,
        headers={
            "Authorization": f"Bearer {require_paystack()}",
            "Content-Type": "application/json",
        },
        timeout=config.PAYSTACK_TIMEOUT,
    )

def _read_retrying() -> Retrying:
    return Retrying(
        stop=stop_after_attempt(max(1, config.PAYSTACK_MAX_RETRIES)),
        wait=wait_exponential(multiplier=0.5, max=config.PAYSTACK_RETRY_WAIT_MAX),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )

def _unwrap(response: httpx.Response, action: str) -> Dict[str, Any]:
    """
    Normalise une réponse Paystack {status, message, data}.
    - Retourne `data` si HTTP 2xx et status=true.
    - Sinon GatewayError avec le message amont (payload complet loggé).
    """
    try:
        body = response.json()
    except ValueError:
        body = {"message": response.text}
    if not isinstance(body, dict):
        body = {"data": body}

    if response.is_success and body.get("status") is True:
        return body.get("data") or {}

    logger.error("paystack.%s failed status=%s body=%s", action, response.status_code, body)
    raise GatewayError(body.get("message") or "Erreur Paystack", payload=body)

def _request(method: str, path: str, action: str, *, json: Optional[Dict[str, Any]] = None,
             params: Optional[Dict[str, Any]] = None, retry: bool = False) -> Dict[str, Any]:
    def _send() -> httpx.Response:
        with _http_client() as client:
            return client.request(method, path, json=json, params=params)

    try:
        response = _read_retrying()(_send) if retry else _send()
    except httpx.HTTPError as e:
        logger.exception("paystack.%s transport error", action)
        raise GatewayError(f"Paystack injoignable: {e}") from e
    return _unwrap(response, action)

def initialize_transaction(
    *,
    email: str,
    amount: int,
    subaccount: str,
    callback_url: str,
    metadata: Dict[str, Any],
    currency: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Initialise une transaction Paystack (page de paiement hébergée).
    - amount: en unités mineures (kobo)
    - subaccount + transaction_charge=0: la commission configurée sur le sous-compte s'applique
    - metadata: TransactionMetadata relue à la confirmation
    Retour: {"authorization_url", "access_code", "reference"}
    """
    payload = {
        "email": email,
        "amount": amount,
        "currency": currency or config.PAYSTACK_CURRENCY,
        "subaccount": subaccount,
        "transaction_charge": 0,
        "callback_url": callback_url,
        "metadata": metadata,
    }
    return _request("POST", "/transaction/initialize", "initialize_transaction", json=payload)

def verify_transaction(reference: str) -> Dict[str, Any]:
    """
    Lit l'état faisant autorité d'une transaction.
    Retour: {"id", "status", "reference", "amount", "metadata", ...}
    """
    return _request("GET", f"/transaction/verify/{reference}", "verify_transaction", retry=True)

def resolve_account_number(account_number: str, bank_code: str) -> Dict[str, Any]:
    """Vérifie un compte bancaire: {"account_number", "account_name"}."""
    return _request(
        "GET",
        "/bank/resolve",
        "resolve_account_number",
        params={"account_number": account_number, "bank_code": bank_code},
        retry=True,
    )

def create_transfer_recipient(name: str, account_number: str, bank_code: str) -> Dict[str, Any]:
    """Crée un destinataire de virement (type nuban). En mode test, code généré localement."""
    if is_test_mode():
        return {"recipient_code": f"RCP_TEST_{account_number[-5:]}", "account_name": f"{name} (Test Account)"}
    payload = {
        "type": "nuban",
        "name": name,
        "account_number": account_number,
        "bank_code": bank_code,
        "currency": config.PAYSTACK_CURRENCY,
    }
    return _request("POST", "/transferrecipient", "create_transfer_recipient", json=payload)

def create_subaccount(business_name: str, bank_code: str, account_number: str, percentage_charge: float) -> Dict[str, Any]:
    """Crée le sous-compte du vendeur avec la commission plateforme. En mode test, code généré localement."""
    if is_test_mode():
        return {"subaccount_code": f"SUB_TEST_{account_number[-5:]}", "business_name": f"{business_name} (Test)"}
    payload = {
        "business_name": business_name,
        "settlement_bank": bank_code,
        "account_number": account_number,
        "percentage_charge": percentage_charge,
    }
    return _request("POST", "/subaccount", "create_subaccount", json=payload)
