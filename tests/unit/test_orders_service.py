import pytest

from storefront.errors import ConflictError, InternalError
from storefront.orders import repository as orders_repository
from storefront.orders import service as orders_service


PRODUCTS = [
    {"id": "P1", "name": "Poster", "price": 5000, "quantity": 1, "variantId": "V1", "variantName": "Rouge / A2"},
    {"id": "P2", "name": "Ebook", "price": 1500, "quantity": 2},
]


def _row(reference="REF123"):
    return orders_service.build_order_row(
        reference=reference,
        user_id="test-user",
        tenant_id="tenant-1",
        products=PRODUCTS,
        amount_minor=800000,
        transaction_id=4099260516,
    )


def test_build_order_row():
    row = _row()
    assert row["product_ids"] == ["P1", "P2"]
    assert row["product_names"] == ["Poster", "Ebook"]
    assert row["items"][0] == {
        "productId": "P1", "productName": "Poster", "variantId": "V1",
        "variantName": "Rouge / A2", "priceAtPurchase": 5000, "quantity": 1,
    }
    assert row["items"][1]["variantId"] is None
    assert row["total_amount"] == 8000.0
    assert row["status"] == "success"
    assert row["paystack_transaction_id"] == "4099260516"


def test_materialize_order_creates_once(fake_db):
    order, created = orders_service.materialize_order(_row())
    again, created_again = orders_service.materialize_order(_row())

    assert created is True
    assert created_again is False
    assert again["id"] == order["id"]
    assert len(fake_db.rows("orders")) == 1


def test_conflict_after_precheck_is_silent_success(fake_db, monkeypatch):
    orders_service.materialize_order(_row("REF456"))
    calls = {"n": 0}
    real = orders_repository.get_order_by_reference

    def _stale_precheck(reference):
        # le pré-contrôle ne voit pas encore la ligne concurrente
        calls["n"] += 1
        return None if calls["n"] == 1 else real(reference)

    monkeypatch.setattr(orders_repository, "get_order_by_reference", _stale_precheck)
    order, created = orders_service.materialize_order(_row("REF456"))

    assert created is False
    assert order["paystack_reference"] == "REF456"
    assert len(fake_db.rows("orders")) == 1


def test_insert_order_raises_conflict_on_unique_violation(fake_db):
    orders_repository.insert_order(_row("REF789"))
    with pytest.raises(ConflictError):
        orders_repository.insert_order(_row("REF789"))


def test_existing_pending_order_is_moved_to_success(fake_db):
    fake_db.tables["orders"].append({"id": "o-1", "paystack_reference": "REFP", "status": "pending"})

    order, created = orders_service.materialize_order(_row("REFP"))

    assert created is False
    assert order["status"] == "success"
    assert fake_db.rows("orders")[0]["status"] == "success"


def test_storage_failure_raises_internal_error(fake_db):
    fake_db.fail_tables.add("orders")
    with pytest.raises(InternalError):
        orders_service.materialize_order(_row())


def test_missing_reference_is_rejected(fake_db):
    row = _row()
    row["paystack_reference"] = ""
    with pytest.raises(InternalError):
        orders_service.materialize_order(row)


def test_ledger_reads_default_deny_on_error(fake_db):
    fake_db.fail_tables.add("orders")
    assert orders_repository.list_successful_orders_for_user("test-user") == []
    assert orders_repository.has_successful_order_for_product("test-user", "P1") is False
    assert orders_service.get_user_orders("test-user") == []
    assert orders_service.get_tenant_orders("tenant-1") == []


def test_update_order_status_rejects_unknown_status(fake_db):
    with pytest.raises(ValueError):
        orders_repository.update_order_status("o-1", "refunded")
