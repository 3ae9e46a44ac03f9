import copy
import os
import threading
import uuid
from typing import Any, Dict, Generator, List

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from storefront import config as sf_config
from storefront.app_setup.factory import create_app
from storefront.payments.signature import compute_signature
from storefront.utils.security import require_user, require_admin

WEBHOOK_SECRET = "sk_test_webhook_secret"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


# --- Faux client Supabase (PostgREST) en mémoire ---

class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self._db = db
        self.table = table
        self.op = "select"
        self.payload: Any = None
        self.filters: List = []
        self.order_by = None
        self.max_rows = None

    def select(self, columns: str = "*"):
        self.op = "select"
        return self

    def insert(self, row):
        self.op = "insert"
        self.payload = row
        return self

    def update(self, data):
        self.op = "update"
        self.payload = data
        return self

    def eq(self, column, value):
        self.filters.append(lambda r: r.get(column) == value)
        return self

    def in_(self, column, values):
        wanted = set(values)
        self.filters.append(lambda r: r.get(column) in wanted)
        return self

    def contains(self, column, values):
        self.filters.append(lambda r: all(v in (r.get(column) or []) for v in values))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    def execute(self):
        return self._db.execute(self)


class FakeSupabase:
    """
    Sous-ensemble de l'API supabase-py utilisé par les repositories.
    - Contrainte d'unicité sur orders.paystack_reference (APIError code 23505)
    - Exécution sérialisée par un verrou, comme une base transactionnelle
    - fail_tables: tables qui lèvent une erreur (base indisponible)
    """

    def __init__(self, tables: Dict[str, List[dict]] = None):
        self.tables: Dict[str, List[dict]] = copy.deepcopy(tables or {})
        self.unique = {"orders": ("paystack_reference",)}
        self.fail_tables = set()
        self.lock = threading.Lock()
        self._seq = 0

    def table(self, name: str) -> FakeQuery:
        if name in self.fail_tables:
            raise RuntimeError(f"table {name} indisponible")
        return FakeQuery(self, name)

    def _match(self, q: FakeQuery) -> List[dict]:
        return [r for r in self.tables.setdefault(q.table, []) if all(f(r) for f in q.filters)]

    def execute(self, q: FakeQuery) -> FakeResponse:
        with self.lock:
            if q.op == "insert":
                rows = q.payload if isinstance(q.payload, list) else [q.payload]
                created = []
                for row in rows:
                    for col in self.unique.get(q.table, ()):
                        if any(r.get(col) == row.get(col) for r in self.tables.setdefault(q.table, [])):
                            raise APIError({
                                "code": "23505",
                                "message": f'duplicate key value violates unique constraint "{q.table}_{col}_key"',
                                "details": "",
                                "hint": "",
                            })
                    self._seq += 1
                    stored = {"id": str(uuid.uuid4()), "created_at": f"2026-01-01T00:{self._seq // 60:02d}:{self._seq % 60:02d}", **copy.deepcopy(row)}
                    self.tables[q.table].append(stored)
                    created.append(copy.deepcopy(stored))
                return FakeResponse(created)

            matched = self._match(q)
            if q.op == "update":
                for r in matched:
                    r.update(copy.deepcopy(q.payload))
                return FakeResponse(copy.deepcopy(matched))

            if q.order_by:
                column, desc = q.order_by
                matched = sorted(matched, key=lambda r: r.get(column) or "", reverse=desc)
            if q.max_rows is not None:
                matched = matched[: q.max_rows]
            return FakeResponse(copy.deepcopy(matched))

    def rows(self, table: str) -> List[dict]:
        return self.tables.get(table, [])


def seed_tables() -> Dict[str, List[dict]]:
    return {
        "users": [
            {"id": "test-user", "email": "test@example.com"},
            {"id": "other-user", "email": "other@example.com"},
        ],
        "tenants": [
            {
                "id": "tenant-1",
                "slug": "acme",
                "name": "Acme Studio",
                "paystack_subaccount_code": "ACCT_acme",
                "paystack_details_submitted": True,
                "platform_fee_percentage": 10,
                "bank_code": "058",
                "account_number": "0123456789",
            },
            {
                "id": "tenant-2",
                "slug": "nopay",
                "name": "No Pay",
                "paystack_subaccount_code": None,
                "paystack_details_submitted": False,
                "bank_code": "044",
                "account_number": "9876543210",
            },
        ],
        "products": [
            {
                "id": "P1",
                "tenant_id": "tenant-1",
                "name": "Poster",
                "price": 3000,
                "is_archived": False,
                "has_variants": True,
                "variants": [
                    {"id": "V1", "color": "Rouge", "size": "A2", "variant_price": 5000, "stock": 3},
                    {"id": "V2", "size": "A3", "stock": 1},
                ],
                "content": "poster-hd.zip",
            },
            {
                "id": "P2",
                "tenant_id": "tenant-1",
                "name": "Ebook",
                "price": "1500",
                "is_archived": False,
                "has_variants": False,
                "variants": [],
                "content": "ebook.pdf",
            },
            {
                "id": "P3",
                "tenant_id": "tenant-1",
                "name": "Ancien cours",
                "price": 2000,
                "is_archived": True,
                "has_variants": False,
                "variants": [],
                "content": "old.mp4",
            },
            {
                "id": "P4",
                "tenant_id": "tenant-2",
                "name": "Produit d'un autre vendeur",
                "price": 1000,
                "is_archived": False,
                "has_variants": False,
                "variants": [],
                "content": "other.zip",
            },
        ],
        "orders": [],
    }


def paystack_transaction(reference: str, *, user_id: str = "test-user", tenant_id: str = "tenant-1",
                         status: str = "success", products: List[dict] = None, amount: int = 500000) -> Dict[str, Any]:
    """Transaction Paystack telle que renvoyée par /transaction/verify ou dans event.data."""
    if products is None:
        products = [{"id": "P1", "name": "Poster", "price": 5000, "quantity": 1, "variantId": "V1", "variantName": "Rouge / A2"}]
    metadata = {"userId": user_id, "products": products}
    if tenant_id:
        metadata["tenantId"] = tenant_id
    return {
        "id": 4099260516,
        "status": status,
        "reference": reference,
        "amount": amount,
        "currency": "NGN",
        "metadata": metadata,
    }


@pytest.fixture()
def fake_db(monkeypatch) -> FakeSupabase:
    db = FakeSupabase(seed_tables())
    monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda: db)
    monkeypatch.setattr("storefront.infra.supabase_client.get_supabase", lambda: db)
    return db


@pytest.fixture()
def paystack_keys(monkeypatch):
    monkeypatch.setattr(sf_config, "PAYSTACK_SECRET_KEY", WEBHOOK_SECRET)
    monkeypatch.setattr(sf_config, "PAYSTACK_WEBHOOK_SECRET", WEBHOOK_SECRET)
    return WEBHOOK_SECRET


@pytest.fixture()
def sign():
    def _sign(raw_body: bytes, secret: str = WEBHOOK_SECRET) -> str:
        return compute_signature(raw_body, secret)
    return _sign


@pytest.fixture(scope="session")
def app():
    return create_app()


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    fake_user: Dict[str, Any] = {
        "id": "test-user",
        "email": "test@example.com",
        "role": "user",
        "metadata": {"full_name": "Test User"},
        "token": "fake-token",
    }
    app.dependency_overrides[require_user] = lambda: fake_user
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)


@pytest.fixture
def authenticated_admin_client(app, client):
    def _override_require_admin():
        return {"id": "admin-user-id", "role": "admin", "email": "admin@example.com"}
    app.dependency_overrides[require_admin] = _override_require_admin
    yield client
    app.dependency_overrides.pop(require_admin, None)


@pytest.fixture()
def make_transaction():
    return paystack_transaction
