"""
Signature des webhooks Paystack: HMAC-SHA512 (hex) du corps brut avec la clé secrète.
Fonctions pures, sans lecture de requête ni parsing JSON.
"""
import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADER = "x-paystack-signature"

# module storefront.payments.signature
def compute_signature(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()

def verify_signature(raw_body: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Vrai si `signature` correspond au HMAC du corps brut exact.
    - Faux si la signature ou le secret est vide.
    - Comparaison en temps constant, sur des octets (en-tête Latin-1 arbitraire accepté).
    """
    if not signature or not secret:
        return False
    expected = compute_signature(raw_body, secret).encode("ascii")
    received = signature.strip().lower().encode("latin-1", "replace")
    return hmac.compare_digest(expected, received)
