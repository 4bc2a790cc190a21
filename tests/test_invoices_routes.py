import pytest

from invoicer.core import config
from invoicer.models.invoice import Invoice
from invoicer.models.invoice_item import InvoiceItem
from tests.api_client import build_client, signup_and_login
from tests.fixtures_data import ACME_CUSTOMER, BOB_SIGNUP, INVOICE_DATES, INVOICE_ITEMS


@pytest.fixture(autouse=True)
def _second_factor_off(monkeypatch):
    monkeypatch.setattr(config, "ENABLE_2FA", False)


def _setup_owner(client):
    headers = signup_and_login(client)
    customer_id = client.post("/api/customers", json=ACME_CUSTOMER, headers=headers).json()["id"]
    return headers, customer_id


def _create_invoice(client, headers, customer_id, **overrides):
    payload = {
        "customerId": customer_id,
        **INVOICE_DATES,
        "items": INVOICE_ITEMS,
        "taxPercentage": 10,
        **overrides,
    }
    return client.post("/api/invoices", json=payload, headers=headers)


def test_create_invoice_computes_total_from_items_and_tax():
    client, db, _ = build_client()
    headers, customer_id = _setup_owner(client)

    response = _create_invoice(client, headers, customer_id)

    assert response.status_code == 201
    body = response.json()
    assert body["subtotal"] == 25.0
    assert body["taxAmount"] == 2.5
    assert body["total"] == 27.5
    assert body["status"] == "unpaid"
    assert body["customer"]["name"] == "Acme Corp"
    assert [item["description"] for item in body["items"]] == ["Design", "Hosting"]
    assert db.query(InvoiceItem).count() == 2


def test_client_supplied_total_is_ignored():
    client, _, _ = build_client()
    headers, customer_id = _setup_owner(client)

    response = _create_invoice(client, headers, customer_id, total=1, taxPercentage=0)

    assert response.status_code == 201
    assert response.json()["total"] == 25.0


def test_total_rounds_half_up_to_cents():
    client, _, _ = build_client()
    headers, customer_id = _setup_owner(client)

    response = _create_invoice(
        client,
        headers,
        customer_id,
        items=[{"description": "Odd", "quantity": 1, "price": "0.05"}],
        taxPercentage=50,
    )

    assert response.json()["total"] == 0.08


def test_invoice_requires_at_least_one_item():
    client, db, _ = build_client()
    headers, customer_id = _setup_owner(client)

    response = _create_invoice(client, headers, customer_id, items=[])

    assert response.status_code == 400
    assert db.query(Invoice).count() == 0


@pytest.mark.parametrize(
    "item",
    [
        {"description": "Zero", "quantity": 0, "price": 1},
        {"description": "Negative", "quantity": 1, "price": -1},
    ],
)
def test_invalid_items_are_rejected(item):
    client, _, _ = build_client()
    headers, customer_id = _setup_owner(client)

    response = _create_invoice(client, headers, customer_id, items=[item])

    assert response.status_code == 400


def test_invoice_for_foreign_customer_is_rejected_and_nothing_persists():
    client, db, _ = build_client()
    _, alice_customer_id = _setup_owner(client)
    bob = signup_and_login(client, BOB_SIGNUP)

    response = _create_invoice(client, bob, alice_customer_id)

    assert response.status_code == 404
    assert response.json()["code"] == "INVALID_CUSTOMER"
    assert db.query(Invoice).count() == 0
    assert db.query(InvoiceItem).count() == 0


def test_invoices_are_isolated_per_user():
    client, _, _ = build_client()
    alice, customer_id = _setup_owner(client)
    bob = signup_and_login(client, BOB_SIGNUP)
    invoice_id = _create_invoice(client, alice, customer_id).json()["id"]

    assert client.get("/api/invoices", headers=bob).json() == []
    assert client.get(f"/api/invoices/{invoice_id}", headers=bob).status_code == 404
    assert client.get(f"/api/invoices/{invoice_id}/items", headers=bob).status_code == 404
    assert client.get(f"/api/invoices/{invoice_id}/pdf", headers=bob).status_code == 404
    assert client.put(f"/api/invoices/{invoice_id}", json={"status": "paid"}, headers=bob).status_code == 404
    assert client.delete(f"/api/invoices/{invoice_id}", headers=bob).status_code == 404
    assert [inv["id"] for inv in client.get("/api/invoices", headers=alice).json()] == [invoice_id]


def test_list_invoice_items():
    client, _, _ = build_client()
    headers, customer_id = _setup_owner(client)
    invoice_id = _create_invoice(client, headers, customer_id).json()["id"]

    response = client.get(f"/api/invoices/{invoice_id}/items", headers=headers)

    assert response.status_code == 200
    assert [(i["quantity"], i["price"]) for i in response.json()] == [(2, 10.0), (1, 5.0)]


def test_update_changes_status_and_keeps_total():
    client, _, _ = build_client()
    headers, customer_id = _setup_owner(client)
    invoice_id = _create_invoice(client, headers, customer_id).json()["id"]

    response = client.put(
        f"/api/invoices/{invoice_id}",
        json={"status": "paid", "dueDate": "2024-02-15"},
        headers=headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "paid"
    assert body["dueDate"] == "2024-02-15"
    assert body["total"] == 27.5


@pytest.mark.parametrize(
    "changes",
    [{"items": INVOICE_ITEMS}, {"total": 1}, {"taxPercentage": 0}],
)
def test_update_rejects_fields_fixed_at_creation(changes):
    client, _, _ = build_client()
    headers, customer_id = _setup_owner(client)
    invoice_id = _create_invoice(client, headers, customer_id).json()["id"]

    response = client.put(f"/api/invoices/{invoice_id}", json=changes, headers=headers)

    assert response.status_code == 400


def test_update_to_foreign_customer_is_rejected():
    client, _, _ = build_client()
    alice, customer_id = _setup_owner(client)
    bob = signup_and_login(client, BOB_SIGNUP)
    bob_customer_id = client.post("/api/customers", json=ACME_CUSTOMER, headers=bob).json()["id"]
    invoice_id = _create_invoice(client, alice, customer_id).json()["id"]

    response = client.put(f"/api/invoices/{invoice_id}", json={"customerId": bob_customer_id}, headers=alice)

    assert response.status_code == 404
    assert client.get(f"/api/invoices/{invoice_id}", headers=alice).json()["customerId"] == customer_id


def test_delete_invoice_removes_items():
    client, db, _ = build_client()
    headers, customer_id = _setup_owner(client)
    invoice_id = _create_invoice(client, headers, customer_id).json()["id"]

    response = client.delete(f"/api/invoices/{invoice_id}", headers=headers)

    assert response.status_code == 204
    assert db.query(Invoice).count() == 0
    assert db.query(InvoiceItem).count() == 0
    assert client.get(f"/api/invoices/{invoice_id}", headers=headers).status_code == 404


def test_statistics_summarise_paid_unpaid_and_overdue():
    client, _, _ = build_client()
    headers, customer_id = _setup_owner(client)
    paid_id = _create_invoice(client, headers, customer_id).json()["id"]
    client.put(f"/api/invoices/{paid_id}", json={"status": "paid"}, headers=headers)
    _create_invoice(client, headers, customer_id, taxPercentage=0, dueDate="2000-01-31", date="2000-01-01")
    _create_invoice(client, headers, customer_id, taxPercentage=0, dueDate="2999-01-31")

    response = client.get("/api/invoices/statistics", headers=headers)

    assert response.status_code == 200
    assert response.json() == {
        "collected": 27.5,
        "due": 50.0,
        "openInvoices": 2,
        "overdueInvoices": 1,
    }


def test_export_pdf():
    client, _, _ = build_client()
    headers, customer_id = _setup_owner(client)
    invoice_id = _create_invoice(client, headers, customer_id).json()["id"]

    response = client.get(f"/api/invoices/{invoice_id}/pdf", headers=headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert f"invoice_{invoice_id}.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")
