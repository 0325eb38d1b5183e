from __future__ import annotations

from conftest import category_id, register_and_login


def create(client, headers, **payload):
    return client.post("/transactions", json=payload, headers=headers)


def test_create_expense(client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    resp = create(client, auth_headers, amount="25000", description="Nasi goreng",
                  type="EXPENSE", categoryId=food, date="2025-03-15T12:30:00.000Z")
    assert resp.status_code == 201
    tx = resp.get_json()
    assert tx["amount"] == 25000
    assert tx["type"] == "EXPENSE"
    assert tx["date"] == "2025-03-15T12:30:00"
    assert tx["category"]["name"] == "Makanan"


def test_create_defaults_date_to_now(client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    resp = create(client, auth_headers, amount=10, description="Teh", type="EXPENSE", categoryId=food)
    assert resp.status_code == 201
    assert resp.get_json()["date"]


def test_create_savings_without_category(client, auth_headers):
    resp = create(client, auth_headers, amount=500000, description="Dana darurat", type="SAVINGS")
    assert resp.status_code == 201
    assert resp.get_json()["categoryId"] is None


def test_create_requires_fields(client, auth_headers):
    resp = create(client, auth_headers, amount=10, type="EXPENSE")
    assert resp.status_code == 400


def test_create_rejects_bad_type(client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    resp = create(client, auth_headers, amount=10, description="x", type="REFUND", categoryId=food)
    assert resp.status_code == 400


def test_create_rejects_negative_amount(client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    resp = create(client, auth_headers, amount=-5, description="x", type="EXPENSE", categoryId=food)
    assert resp.status_code == 400


def test_create_rejects_non_numeric_amount(client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    resp = create(client, auth_headers, amount="lots", description="x", type="EXPENSE", categoryId=food)
    assert resp.status_code == 400


def test_create_expense_needs_category(client, auth_headers):
    resp = create(client, auth_headers, amount=10, description="x", type="EXPENSE")
    assert resp.status_code == 400


def test_create_with_foreign_category_is_404(app, client, auth_headers):
    other = app.test_client()
    _, other_headers = register_and_login(other, "Andi", "andi@example.com")
    theirs = category_id(other, other_headers, "Makanan")

    resp = create(client, auth_headers, amount=10, description="x", type="EXPENSE", categoryId=theirs)
    assert resp.status_code == 404


def test_create_rejects_bad_date(client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    resp = create(client, auth_headers, amount=10, description="x", type="EXPENSE",
                  categoryId=food, date="next tuesday")
    assert resp.status_code == 400


def test_list_filters(client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    salary = category_id(client, auth_headers, "Gaji")
    create(client, auth_headers, amount=100, description="a", type="EXPENSE", categoryId=food,
           date="2025-03-01")
    create(client, auth_headers, amount=200, description="b", type="EXPENSE", categoryId=food,
           date="2025-04-10")
    create(client, auth_headers, amount=900, description="c", type="INCOME", categoryId=salary,
           date="2025-03-05")

    everything = client.get("/transactions", headers=auth_headers).get_json()
    assert [t["description"] for t in everything] == ["b", "c", "a"]

    expenses = client.get("/transactions?type=EXPENSE", headers=auth_headers).get_json()
    assert {t["description"] for t in expenses} == {"a", "b"}

    by_category = client.get(f"/transactions?categoryId={salary}", headers=auth_headers).get_json()
    assert [t["description"] for t in by_category] == ["c"]

    march = client.get(
        "/transactions?startDate=2025-03-01&endDate=2025-03-31%2023:59:59", headers=auth_headers
    ).get_json()
    assert {t["description"] for t in march} == {"a", "c"}


def test_list_rejects_bad_category_filter(client, auth_headers):
    assert client.get("/transactions?categoryId=abc", headers=auth_headers).status_code == 400


def test_update_partial(client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    shop = category_id(client, auth_headers, "Belanja")
    tx = create(client, auth_headers, amount=100, description="a", type="EXPENSE",
                categoryId=food, date="2025-03-01").get_json()

    resp = client.put(f"/transactions/{tx['id']}", json={"amount": 150, "categoryId": shop},
                      headers=auth_headers)
    assert resp.status_code == 200
    updated = resp.get_json()
    assert updated["amount"] == 150
    assert updated["description"] == "a"
    assert updated["category"]["name"] == "Belanja"
    assert updated["date"] == "2025-03-01T00:00:00"


def test_update_rejects_blank_description(client, auth_headers):
    tx = create(client, auth_headers, amount=100, description="Tabungan", type="SAVINGS").get_json()

    for blank in ("", "   "):
        resp = client.put(f"/transactions/{tx['id']}", json={"description": blank},
                          headers=auth_headers)
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Description cannot be empty"}

    listed = client.get("/transactions", headers=auth_headers).get_json()
    assert [t["description"] for t in listed] == ["Tabungan"]


def test_update_unknown_transaction_is_404(client, auth_headers):
    resp = client.put("/transactions/9999", json={"amount": 1}, headers=auth_headers)
    assert resp.status_code == 404


def test_update_to_expense_requires_category(client, auth_headers):
    tx = create(client, auth_headers, amount=100, description="s", type="SAVINGS").get_json()
    resp = client.put(f"/transactions/{tx['id']}", json={"type": "EXPENSE"}, headers=auth_headers)
    assert resp.status_code == 400


def test_other_users_transactions_are_invisible(app, client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    tx = create(client, auth_headers, amount=100, description="mine", type="EXPENSE",
                categoryId=food).get_json()

    other = app.test_client()
    _, other_headers = register_and_login(other, "Andi", "andi@example.com")
    assert other.get("/transactions", headers=other_headers).get_json() == []
    assert other.put(f"/transactions/{tx['id']}", json={"amount": 1},
                     headers=other_headers).status_code == 404
    assert other.delete(f"/transactions/{tx['id']}", headers=other_headers).status_code == 404


def test_delete(client, auth_headers):
    food = category_id(client, auth_headers, "Makanan")
    tx = create(client, auth_headers, amount=100, description="a", type="EXPENSE",
                categoryId=food).get_json()

    assert client.delete(f"/transactions/{tx['id']}", headers=auth_headers).status_code == 200
    assert client.get("/transactions", headers=auth_headers).get_json() == []
    assert client.delete(f"/transactions/{tx['id']}", headers=auth_headers).status_code == 404
