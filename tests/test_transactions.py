"""
Tests for the ledger endpoints.

These tests verify:
  - Each transfer appears once in the ledger of both parties
  - Listings are newest first and paginate with limit/offset
  - Per-account listings only include transfers touching that account
  - A single transfer is visible to the owner of either side, 403 to
    everyone else, 404 when unknown
  - Deposits and withdrawals change balances but are not ledger entries
"""

import pytest


async def open_account(client, balance_cents=0, headers=None) -> int:
    response = await client.post(
        "/accounts",
        json={"bank_name": "First Bank", "balance_cents": balance_cents},
        headers=headers,
    )
    return response.json()["id"]


async def transfer(client, source, destination, amount_cents, headers=None):
    response = await client.post(
        "/transactions",
        json={
            "source_account_id": source,
            "destination_account_id": destination,
            "amount_cents": amount_cents,
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestTransactionListing:
    """Tests for GET /transactions and GET /accounts/{id}/transactions."""

    async def test_list_transactions_newest_first(self, authenticated_client):
        a = await open_account(authenticated_client, 10000)
        b = await open_account(authenticated_client)

        first = await transfer(authenticated_client, a, b, 100)
        second = await transfer(authenticated_client, a, b, 200)
        third = await transfer(authenticated_client, b, a, 50)

        response = await authenticated_client.get("/transactions")
        assert response.status_code == 200
        assert [t["id"] for t in response.json()] == [third["id"], second["id"], first["id"]]

    async def test_list_transactions_paginates(self, authenticated_client):
        a = await open_account(authenticated_client, 10000)
        b = await open_account(authenticated_client)
        for amount in (100, 200, 300, 400):
            await transfer(authenticated_client, a, b, amount)

        response = await authenticated_client.get("/transactions?limit=2&offset=1")
        assert response.status_code == 200
        assert [t["amount_cents"] for t in response.json()] == [300, 200]

    async def test_invalid_pagination_rejected(self, authenticated_client):
        response = await authenticated_client.get("/transactions?limit=0")
        assert response.status_code == 400

    async def test_account_listing_only_includes_that_account(self, authenticated_client):
        a = await open_account(authenticated_client, 10000)
        b = await open_account(authenticated_client)
        c = await open_account(authenticated_client)

        await transfer(authenticated_client, a, b, 100)
        await transfer(authenticated_client, a, c, 200)
        await transfer(authenticated_client, c, b, 50)

        txns_b = await authenticated_client.get(f"/accounts/{b}/transactions")
        assert sorted(t["amount_cents"] for t in txns_b.json()) == [50, 100]

        txns_a = await authenticated_client.get(f"/accounts/{a}/transactions")
        assert sorted(t["amount_cents"] for t in txns_a.json()) == [100, 200]

    async def test_deposits_and_withdrawals_are_not_ledger_entries(self, authenticated_client):
        account_id = await open_account(authenticated_client)
        await authenticated_client.put(
            f"/accounts/{account_id}/deposit", json={"amount_cents": 5000}
        )
        await authenticated_client.put(
            f"/accounts/{account_id}/withdraw", json={"amount_cents": 1000}
        )

        response = await authenticated_client.get(f"/accounts/{account_id}/transactions")
        assert response.json() == []

    async def test_recipient_sees_incoming_transfer(self, client, make_user):
        headers_a = await make_user("sender@example.com")
        headers_b = await make_user("recipient@example.com")
        a = await open_account(client, 10000, headers=headers_a)
        b = await open_account(client, headers=headers_b)

        txn = await transfer(client, a, b, 2500, headers=headers_a)

        response = await client.get("/transactions", headers=headers_b)
        assert [t["id"] for t in response.json()] == [txn["id"]]

    async def test_unrelated_user_sees_nothing(self, client, make_user):
        headers_a = await make_user("sender@example.com")
        headers_c = await make_user("bystander@example.com")
        a = await open_account(client, 10000, headers=headers_a)
        b = await open_account(client, headers=headers_a)
        await transfer(client, a, b, 2500, headers=headers_a)

        response = await client.get("/transactions", headers=headers_c)
        assert response.json() == []

    async def test_cannot_list_other_users_account_transactions(self, client, make_user):
        headers_a = await make_user("owner@example.com")
        headers_b = await make_user("snoop@example.com")
        a = await open_account(client, headers=headers_a)

        response = await client.get(f"/accounts/{a}/transactions", headers=headers_b)
        assert response.status_code == 403


class TestSingleTransaction:
    """Tests for GET /transactions/{id}."""

    async def test_get_single_transaction(self, authenticated_client):
        a = await open_account(authenticated_client, 10000)
        b = await open_account(authenticated_client)
        txn = await transfer(authenticated_client, a, b, 1234)

        response = await authenticated_client.get(f"/transactions/{txn['id']}")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == txn["id"]
        assert data["amount_cents"] == 1234
        assert data["source_account_id"] == a
        assert data["destination_account_id"] == b

    async def test_recipient_can_view_transaction(self, client, make_user):
        headers_a = await make_user("sender@example.com")
        headers_b = await make_user("recipient@example.com")
        a = await open_account(client, 10000, headers=headers_a)
        b = await open_account(client, headers=headers_b)
        txn = await transfer(client, a, b, 700, headers=headers_a)

        response = await client.get(f"/transactions/{txn['id']}", headers=headers_b)
        assert response.status_code == 200

    async def test_unrelated_user_gets_403(self, client, make_user):
        headers_a = await make_user("sender@example.com")
        headers_c = await make_user("bystander@example.com")
        a = await open_account(client, 10000, headers=headers_a)
        b = await open_account(client, headers=headers_a)
        txn = await transfer(client, a, b, 700, headers=headers_a)

        response = await client.get(f"/transactions/{txn['id']}", headers=headers_c)
        assert response.status_code == 403

    async def test_unknown_transaction_returns_404(self, authenticated_client):
        response = await authenticated_client.get("/transactions/99999")
        assert response.status_code == 404
        assert response.json()["error_type"] == "transaction_not_found"
