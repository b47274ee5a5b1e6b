#!/usr/bin/env python3
"""
Demo seed script — populates a running API with sample data for demos.

!! NOT FOR PRODUCTION !!
This script registers users with known passwords, opens accounts, and
moves money around through the public HTTP API. It is intended ONLY for
local demos and frontend development.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000

    # Delete the local SQLite database file (restart the server afterwards):
    python demo/seed.py --reset
"""

import argparse
import asyncio
import os
import random
import sys

import httpx

BASE_URL = "http://localhost:8000"

# ---------------------------------------------------------------------------
# Demo users
# ---------------------------------------------------------------------------

USERS = [
    {
        "name": "Alice Chen",
        "email": "alice.chen@example.com",
        "password": "AliceDemo123!",
        "identity_type": "passport",
        "identity_number": "P1029384",
        "address": "12 Harbour Street, Springfield",
        "accounts": [
            {"bank_name": "Demo Bank", "opening_cents": 850_00},
            {"bank_name": "Demo Savings", "opening_cents": 5_000_00},
        ],
    },
    {
        "name": "Bob Martinez",
        "email": "bob.martinez@example.com",
        "password": "BobDemo123!",
        "identity_type": "national_id",
        "identity_number": "N5566778",
        "address": "4 Elm Road, Shelbyville",
        "accounts": [
            {"bank_name": "Demo Bank", "opening_cents": 1_200_00},
        ],
    },
    {
        "name": "Carol Nguyen",
        "email": "carol.nguyen@example.com",
        "password": "CarolDemo123!",
        "identity_type": "driver_license",
        "identity_number": "D99001122",
        "address": "77 Lake View, Ogdenville",
        "accounts": [
            {"bank_name": "Demo Bank", "opening_cents": 3_200_00},
        ],
    },
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    print(f"  {msg}")


def cents_to_dollars(cents: int) -> str:
    return f"${cents / 100:,.2f}"


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(client: httpx.AsyncClient, user: dict) -> str:
    resp = await client.post(f"{BASE_URL}/auth/register", json={
        "name": user["name"],
        "email": user["email"],
        "password": user["password"],
        "identity_type": user["identity_type"],
        "identity_number": user["identity_number"],
        "address": user["address"],
    })
    resp.raise_for_status()
    return resp.json()["token"]


async def open_account(client: httpx.AsyncClient, token: str, bank_name: str) -> dict:
    resp = await client.post(
        f"{BASE_URL}/accounts",
        json={"bank_name": bank_name},
        headers=auth_header(token),
    )
    resp.raise_for_status()
    return resp.json()


async def deposit(client: httpx.AsyncClient, token: str, account_id: int, amount_cents: int) -> dict:
    resp = await client.put(
        f"{BASE_URL}/accounts/{account_id}/deposit",
        json={"amount_cents": amount_cents},
        headers=auth_header(token),
    )
    resp.raise_for_status()
    return resp.json()


async def withdraw(client: httpx.AsyncClient, token: str, account_id: int, amount_cents: int) -> dict:
    resp = await client.put(
        f"{BASE_URL}/accounts/{account_id}/withdraw",
        json={"amount_cents": amount_cents},
        headers=auth_header(token),
    )
    return resp.json()


async def transfer(client: httpx.AsyncClient, token: str,
                   source_id: int, destination_id: int, amount_cents: int) -> dict:
    resp = await client.post(
        f"{BASE_URL}/transactions",
        json={
            "amount_cents": amount_cents,
            "source_account_id": source_id,
            "destination_account_id": destination_id,
        },
        headers=auth_header(token),
    )
    return resp.json()


# ---------------------------------------------------------------------------
# Seed logic
# ---------------------------------------------------------------------------

async def seed(base_url: str) -> None:
    global BASE_URL
    BASE_URL = base_url

    print("\n========================================")
    print("  DEMO SEED — NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            health = await client.get(f"{BASE_URL}/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {BASE_URL}")
            print("  Start the server first: uvicorn bank_api.main:app --reload\n")
            sys.exit(1)

        # name, token, account id of each user's first account
        primary: list[dict] = []

        for user in USERS:
            print(f"Creating {user['name']}...")
            token = await register(client, user)
            log(f"Login: {user['email']} / {user['password']}")

            for i, acct_info in enumerate(user["accounts"]):
                account = await open_account(client, token, acct_info["bank_name"])
                await deposit(client, token, account["id"], acct_info["opening_cents"])
                log(
                    f"  {acct_info['bank_name']} {account['bank_account_number']}: "
                    f"{cents_to_dollars(acct_info['opening_cents'])}"
                )
                if i == 0:
                    primary.append({"name": user["name"], "token": token, "account_id": account["id"]})

            # A little cash withdrawal activity
            result = await withdraw(
                client, token, primary[-1]["account_id"], random.randint(20_00, 80_00)
            )
            if "error_type" not in result:
                log(f"  Cash withdrawal, balance now {cents_to_dollars(result['balance_cents'])}")

        print("\nCreating transfers between users...")
        for _ in range(3):
            for a, b in zip(primary, primary[1:] + primary[:1]):
                amount = random.randint(10_00, 150_00)
                result = await transfer(client, a["token"], a["account_id"], b["account_id"], amount)
                if "error_type" not in result:
                    log(f"{a['name']} -> {b['name']}: {cents_to_dollars(amount)}")
                else:
                    log(f"{a['name']} -> {b['name']}: refused ({result['error_type']})")

    print("\n========================================")
    print("  SEED COMPLETE — Login Credentials")
    print("========================================")
    for u in USERS:
        print(f"  {u['email']:<30s} {u['password']}")
    print()


def reset_database() -> None:
    """Delete the default SQLite database file so the server recreates it on restart."""
    db_path = os.path.normpath(os.path.join(os.path.dirname(__file__), "..", "bank.db"))
    if os.path.exists(db_path):
        os.remove(db_path)
        print(f"\n  Deleted {db_path}")
        print("  Restart the server to recreate empty tables.\n")
    else:
        print(f"\n  No database found at {db_path}\n")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Demo seed script — NOT FOR PRODUCTION",
        epilog="Creates sample users, accounts, and transfers for demos.",
    )
    parser.add_argument(
        "--base-url", default="http://localhost:8000",
        help="Base URL of the running API (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="Delete the database file and exit (restart server to recreate)",
    )
    args = parser.parse_args()

    if args.reset:
        reset_database()
        return

    await seed(args.base_url)


if __name__ == "__main__":
    asyncio.run(main())
