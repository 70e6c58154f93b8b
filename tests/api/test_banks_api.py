"""
Tests for bank account and bank transaction endpoints.

These test the HTTP layer: status codes, response format and
error mapping. Balance arithmetic is covered by the service tests.
"""

from decimal import Decimal


def open_account(client, number="ACC-001", currency="USD", opening="0", country="UAE"):
    response = client.post("/banks", json={
        "account_name": f"Operating {currency}",
        "bank_name": "Emirates NBD",
        "account_number": number,
        "country": country,
        "currency": currency,
        "opening_balance": opening,
    })
    assert response.status_code == 201
    return response.json()


class TestBankAccounts:

    def test_create_account_returns_data(self, client):
        data = open_account(client, opening="250.00", currency="aed")
        assert data["currency"] == "AED"
        assert Decimal(data["current_balance"]) == Decimal("250.00")
        assert data["status"] == "active"

    def test_duplicate_account_number_returns_400(self, client):
        open_account(client)
        response = client.post("/banks", json={
            "account_name": "Again",
            "bank_name": "Emirates NBD",
            "account_number": "ACC-001",
        })
        assert response.status_code == 400

    def test_unknown_account_returns_404(self, client):
        assert client.get("/banks/999").status_code == 404
        assert client.get("/banks/999/balance").status_code == 404

    def test_list_filters_by_currency(self, client):
        open_account(client, "A-1", "USD")
        open_account(client, "A-2", "PKR")
        response = client.get("/banks", params={"currency": "PKR"})
        assert [a["account_number"] for a in response.json()] == ["A-2"]

    def test_status_change(self, client):
        account = open_account(client)
        response = client.patch(f"/banks/{account['id']}/status", json={"new_status": "inactive"})
        assert response.status_code == 200
        assert response.json()["status"] == "inactive"

        again = client.patch(f"/banks/{account['id']}/status", json={"new_status": "inactive"})
        assert again.status_code == 400

    def test_opening_balance_adjustment_moves_balance(self, client):
        account = open_account(client, opening="100.00")
        response = client.patch(f"/banks/{account['id']}/opening-balance", json={
            "opening_balance": "150.00",
            "reason": "Bank statement correction",
        })
        assert response.status_code == 200
        assert Decimal(response.json()["current_balance"]) == Decimal("150.00")


class TestBankTransactions:

    def test_deposit_shows_in_balance(self, client):
        account = open_account(client, opening="100.00")
        response = client.post("/bank-transactions", json={
            "bank_account_id": account["id"],
            "transaction_type": "deposit",
            "amount": "40.00",
            "currency": "USD",
            "description": "Cash deposit",
        })
        assert response.status_code == 201

        balance = client.get(f"/banks/{account['id']}/balance").json()
        assert Decimal(balance["balance"]) == Decimal("140.00")
        assert balance["is_clean"] is True
        assert balance["anomalies"] == []

    def test_wrong_sign_returns_400(self, client):
        account = open_account(client)
        response = client.post("/bank-transactions", json={
            "bank_account_id": account["id"],
            "transaction_type": "withdrawal",
            "amount": "40.00",
            "currency": "USD",
            "description": "Cash withdrawal",
        })
        assert response.status_code == 400

    def test_reverse_then_reverse_again(self, client):
        account = open_account(client, opening="100.00")
        txn = client.post("/bank-transactions", json={
            "bank_account_id": account["id"],
            "transaction_type": "fee",
            "amount": "-5.00",
            "currency": "USD",
            "description": "Wire fee",
        }).json()

        first = client.post(f"/bank-transactions/{txn['id']}/reverse", json={})
        assert first.status_code == 200
        assert first.json()["is_reversed"] is True

        second = client.post(f"/bank-transactions/{txn['id']}/reverse", json={})
        assert second.status_code == 400

        balance = client.get(f"/banks/{account['id']}/balance").json()
        assert Decimal(balance["balance"]) == Decimal("100.00")

    def test_transfer_between_accounts(self, client):
        source = open_account(client, "S-1", opening="500.00")
        destination = open_account(client, "D-1")
        response = client.post("/bank-transactions/transfer", json={
            "from_bank_account_id": source["id"],
            "to_bank_account_id": destination["id"],
            "amount": "200.00",
            "currency": "USD",
        })
        assert response.status_code == 201

        assert Decimal(client.get(f"/banks/{source['id']}/balance").json()["balance"]) == Decimal("300.00")
        assert Decimal(client.get(f"/banks/{destination['id']}/balance").json()["balance"]) == Decimal("200.00")

    def test_overdrawing_transfer_returns_400(self, client):
        source = open_account(client, "S-1", opening="50.00")
        destination = open_account(client, "D-1")
        response = client.post("/bank-transactions/transfer", json={
            "from_bank_account_id": source["id"],
            "to_bank_account_id": destination["id"],
            "amount": "200.00",
            "currency": "USD",
        })
        assert response.status_code == 400
        assert "Insufficient balance" in response.json()["detail"]

    def test_unknown_transaction_returns_404(self, client):
        assert client.post("/bank-transactions/404/cancel").status_code == 404
