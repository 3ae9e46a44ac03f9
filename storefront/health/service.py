from urllib.parse import urlparse
import socket

from storefront import config
import storefront.infra.supabase_client as supabase_client
from storefront.payments import paystack_client

CHECKED_TABLES = ("users", "tenants", "products", "orders")

def _check_table(client, name: str):
    try:
        res = client.table(name).select("id").limit(1).execute()
        return {"ok": True, "rows": len(res.data or [])}
    except Exception as e:
        return {"ok": False, "error": str(e)}

def health_supabase_info():
    effective_url = config.SUPABASE_URL
    parsed = urlparse(effective_url) if effective_url else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname:
        try:
            socket.getaddrinfo(hostname, 443)
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "supabase_url": effective_url,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "error": None,
        "tables": {},
    }
    try:
        client = supabase_client.get_service_supabase()
        for t in CHECKED_TABLES:
            info["tables"][t] = _check_table(client, t)
        info["connect_ok"] = True
    except Exception as e:
        info["error"] = str(e)
    return info

def health_paystack_info():
    """Configuration Paystack (sans secret): présence des clés et mode test."""
    return {
        "secret_configured": bool(config.PAYSTACK_SECRET_KEY),
        "webhook_secret_configured": bool(config.PAYSTACK_WEBHOOK_SECRET),
        "test_mode": paystack_client.is_test_mode(),
        "base_url": config.PAYSTACK_BASE_URL,
        "currency": config.PAYSTACK_CURRENCY,
    }
