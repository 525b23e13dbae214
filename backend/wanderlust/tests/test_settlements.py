"""
Tests for settlement endpoints.
"""
from decimal import Decimal
from wanderlust.models.expense import ExpenseShare
from wanderlust.models.trip import Traveler


def add_expense(client, trip_id, **fields):
    response = client.post(f"/api/expenses/{trip_id}", json=fields)
    assert response.status_code == 201, response.text
    return response.json()


def test_settlement_for_single_expense(client, trip, travelers):
    add_expense(client, trip["id"], description="Dinner", amount="90", payer_id=travelers["Alice"])

    response = client.get(f"/api/settlement/{trip['id']}")
    assert response.status_code == 200
    body = response.json()

    alice = str(travelers["Alice"])
    assert [(t["from_name"], t["to_name"]) for t in body["transfers"]] == [("Bob", "Alice"), ("Charlie", "Alice")]
    assert all(t["to_id"] == alice for t in body["transfers"])
    assert all(Decimal(t["amount"]) == Decimal("30") for t in body["transfers"])
    assert Decimal(body["total_spent"]) == Decimal("90")
    assert body["participant_count"] == 3
    assert {b["name"]: Decimal(b["balance"]) for b in body["net_balances"]} == {
        "Alice": Decimal("60"),
        "Bob": Decimal("-30"),
        "Charlie": Decimal("-30"),
    }
    assert "Bob -> Alice: $30.00" in body["summary"]
    assert "Total spent: $90.00" in body["summary"]


def test_settlement_empty_ledger(client, trip):
    body = client.get(f"/api/settlement/{trip['id']}").json()
    assert body["transfers"] == []
    assert "All settled up!" in body["summary"]


def test_balances_endpoint(client, trip, travelers):
    add_expense(
        client, trip["id"], description="Taxi", amount="100",
        payer_id=travelers["Alice"], split_between=[travelers["Alice"], travelers["Bob"]]
    )

    body = client.get(f"/api/settlement/{trip['id']}/balances").json()
    balances = {k: Decimal(v) for k, v in body["balances"].items()}

    assert balances == {
        str(travelers["Alice"]): Decimal("50"),
        str(travelers["Bob"]): Decimal("-50"),
        str(travelers["Charlie"]): Decimal("0"),
    }
    assert body["currency"] == "USD"


def test_settlement_is_scoped_to_folder(client, trip, travelers):
    folder = client.post(f"/api/expenses/{trip['id']}/folders", json={"name": "Day trip"}).json()
    add_expense(client, trip["id"], description="Hotel", amount="300", payer_id=travelers["Alice"])
    add_expense(
        client, trip["id"], description="Boat", amount="60",
        payer_id=travelers["Bob"], split_between=[travelers["Bob"], travelers["Charlie"]],
        folder_id=folder["id"]
    )

    default_folder = client.get(f"/api/settlement/{trip['id']}").json()
    assert Decimal(default_folder["total_spent"]) == Decimal("300")
    assert default_folder["folder_id"] == trip["folders"][0]["id"]

    day_trip = client.get(f"/api/settlement/{trip['id']}", params={"folder_id": folder["id"]}).json()
    assert [(t["from_name"], t["to_name"], Decimal(t["amount"])) for t in day_trip["transfers"]] == [
        ("Charlie", "Bob", Decimal("30")),
    ]

    everything = client.get(f"/api/settlement/{trip['id']}", params={"all_folders": True}).json()
    assert Decimal(everything["total_spent"]) == Decimal("360")
    assert everything["folder_id"] is None
    # Alice +200, Bob -100 + 30 = -70, Charlie -100 - 30 = -130
    assert [(t["from_name"], t["to_name"], Decimal(t["amount"])) for t in everything["transfers"]] == [
        ("Charlie", "Alice", Decimal("130")),
        ("Bob", "Alice", Decimal("70")),
    ]


def test_settlement_unknown_folder(client, trip):
    response = client.get(f"/api/settlement/{trip['id']}", params={"folder_id": 999})
    assert response.status_code == 404


def test_settlement_uses_trip_currency(client, trip, travelers):
    client.put(f"/api/trips/{trip['id']}", json={"currency": "EUR"})
    add_expense(client, trip["id"], description="Dinner", amount="20", split_between=[travelers["Bob"]])

    body = client.get(f"/api/settlement/{trip['id']}").json()
    assert body["currency"] == "EUR"
    assert "Bob -> Alice: €20.00" in body["summary"]


def test_dangling_reference_is_a_conflict(client, db, trip, travelers):
    expense = add_expense(client, trip["id"], description="Dinner", amount="90")

    # A traveler from another trip sneaks into the split
    other = client.post("/api/trips", json={"name": "Other", "traveler_names": ["Zoe"]}).json()
    stranger = db.query(Traveler).filter(Traveler.trip_id == other["id"]).first()
    db.add(ExpenseShare(expense_id=expense["id"], traveler_id=stranger.id))
    db.commit()

    response = client.get(f"/api/settlement/{trip['id']}")
    assert response.status_code == 409
    assert str(stranger.id) in response.json()["detail"]
