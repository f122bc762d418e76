"""API tests for the expense blueprint against an in-memory MongoDB."""
from datetime import datetime, timedelta, timezone

from bson import ObjectId

from splitledger.core.expense_service import ExpenseService
from splitledger.expenses.models import utcnow
from splitledger.extensions import get_db
from splitledger.utils.enums import ErrorCode


def _post_expense(client, headers, **body):
    return client.post("/api/v1/expenses/", json=body, headers=headers)


def test_requires_token(client):
    resp = client.get("/api/v1/expenses/")
    assert resp.status_code == 401


def test_add_equal_expense(client, users, auth_headers):
    alice, bob, carol = users["alice"], users["bob"], users["carol"]

    resp = _post_expense(
        client, auth_headers(alice),
        description="Dinner", amount=100, participants=[alice, bob, carol],
        split_method="equal"
    )

    assert resp.status_code == 201
    expense = resp.get_json()["expense"]
    assert expense["payer_id"] == alice
    assert [a["user_id"] for a in expense["allocations"]] == [alice, bob, carol]
    assert [a["amount"] for a in expense["allocations"]] == [33.34, 33.33, 33.33]

    stored = get_db().expenses.find_one({"_id": ObjectId(expense["_id"])})
    assert stored["payer_id"] == ObjectId(alice)
    assert len(stored["allocations"]) == 3


def test_add_percentage_expense_keeps_percentages(client, users, auth_headers):
    alice, bob = users["alice"], users["bob"]

    resp = _post_expense(
        client, auth_headers(alice),
        description="Hotel", amount=200, participants=[alice, bob],
        split_method="percentage",
        split_details=[
            {"user_id": alice, "percentage": 50},
            {"user_id": bob, "percentage": 50},
        ]
    )

    assert resp.status_code == 201
    allocations = resp.get_json()["expense"]["allocations"]
    assert allocations == [
        {"user_id": alice, "amount": 100.0, "percentage": 50.0},
        {"user_id": bob, "amount": 100.0, "percentage": 50.0},
    ]


def test_exact_sum_mismatch_is_rejected_and_not_stored(client, users, auth_headers):
    alice, bob, carol = users["alice"], users["bob"], users["carol"]

    resp = _post_expense(
        client, auth_headers(alice),
        description="Tickets", amount=90, participants=[alice, bob, carol],
        split_method="exact",
        split_details=[
            {"user_id": alice, "amount": 30},
            {"user_id": bob, "amount": 30},
            {"user_id": carol, "amount": 29.5},
        ]
    )

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["code"] == "sum_mismatch"
    assert "89.50" in body["error"] and "90" in body["error"]
    assert get_db().expenses.count_documents({}) == 0


def test_missing_fields(client, users, auth_headers):
    resp = _post_expense(client, auth_headers(users["alice"]), amount=10)
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "missing_fields"


def test_payer_must_be_included(client, users, auth_headers):
    resp = _post_expense(
        client, auth_headers(users["alice"]),
        description="Taxi", amount=10, participants=[users["bob"]],
        split_method="equal"
    )
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "payer_not_participant"


def test_malformed_participant_id(client, users, auth_headers):
    alice = users["alice"]
    resp = _post_expense(
        client, auth_headers(alice),
        description="Taxi", amount=10, participants=[alice, "not-an-id"],
        split_method="equal"
    )
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_participant_id"


def test_unknown_participant(client, users, auth_headers):
    alice = users["alice"]
    resp = _post_expense(
        client, auth_headers(alice),
        description="Taxi", amount=10, participants=[alice, str(ObjectId())],
        split_method="equal"
    )
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "participant_not_found"


def test_unknown_split_method(client, users, auth_headers):
    alice, bob = users["alice"], users["bob"]
    resp = _post_expense(
        client, auth_headers(alice),
        description="Taxi", amount=10, participants=[alice, bob],
        split_method="shares"
    )
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "unknown_split_method"


def test_list_expenses_for_payer_and_participant(client, users, auth_headers):
    alice, bob, carol = users["alice"], users["bob"], users["carol"]
    _post_expense(client, auth_headers(alice), description="Lunch", amount=30,
                  participants=[alice, bob], split_method="equal")
    _post_expense(client, auth_headers(bob), description="Cab", amount=12,
                  participants=[bob, carol], split_method="equal")

    alice_list = client.get("/api/v1/expenses/", headers=auth_headers(alice)).get_json()
    bob_list = client.get("/api/v1/expenses/", headers=auth_headers(bob)).get_json()

    assert alice_list["count"] == 1
    assert bob_list["count"] == 2
    assert {e["description"] for e in bob_list["expenses"]} == {"Lunch", "Cab"}


def test_balance_sheet_reports_both_directions(client, users, auth_headers):
    alice, bob = users["alice"], users["bob"]
    _post_expense(client, auth_headers(alice), description="Snacks", amount=30,
                  participants=[alice, bob], split_method="equal")
    _post_expense(client, auth_headers(bob), description="Fuel", amount=50,
                  participants=[alice, bob], split_method="equal")

    resp = client.get("/api/v1/expenses/balance-sheet", headers=auth_headers(alice))

    assert resp.status_code == 200
    sheet = resp.get_json()
    assert sheet["owes"] == [{"user_id": bob, "name": "bob", "amount": 25.0}]
    assert sheet["owed_to"] == [{"user_id": bob, "name": "bob", "amount": 15.0}]
    assert sheet["total_owes"] == 25.0
    assert sheet["total_owed_to"] == 15.0


def test_balance_edges_use_names(client, users, auth_headers):
    alice, bob, carol = users["alice"], users["bob"], users["carol"]
    _post_expense(client, auth_headers(carol), description="Groceries", amount=90,
                  participants=[alice, bob, carol], split_method="equal")

    resp = client.get("/api/v1/expenses/balance-sheet/edges", headers=auth_headers(alice))

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["count"] == 2
    assert {(r["from"], r["to"], r["amount"]) for r in body["edges"]} == {
        ("alice", "carol", 30.0),
        ("bob", "carol", 30.0),
    }


def test_same_participant_in_two_cases_is_a_duplicate(client, users, auth_headers):
    alice, bob = users["alice"], users["bob"]

    resp = _post_expense(
        client, auth_headers(alice),
        description="Dinner", amount=90, participants=[alice, alice.upper(), bob],
        split_method="equal"
    )

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "duplicate_participants"
    assert get_db().expenses.count_documents({}) == 0


def test_upper_case_ids_are_stored_in_one_spelling(client, users, auth_headers):
    alice, bob = users["alice"], users["bob"]

    resp = _post_expense(
        client, auth_headers(alice),
        description="Dinner", amount=90, participants=[alice.upper(), bob],
        split_method="exact",
        split_details=[
            {"user_id": alice.upper(), "amount": 45},
            {"user_id": bob.upper(), "amount": 45},
        ]
    )

    assert resp.status_code == 201
    expense = resp.get_json()["expense"]
    assert expense["payer_id"] == alice
    assert [a["user_id"] for a in expense["allocations"]] == [alice, bob]

    stored = get_db().expenses.find_one({"_id": ObjectId(expense["_id"])})
    assert stored["participants"] == [ObjectId(alice), ObjectId(bob)]

    sheet = client.get("/api/v1/expenses/balance-sheet", headers=auth_headers(bob)).get_json()
    assert sheet["owes"] == [{"user_id": alice, "name": "alice", "amount": 45.0}]


def test_huge_amount_is_a_validation_error(client, users, auth_headers):
    alice, bob = users["alice"], users["bob"]

    resp = _post_expense(
        client, auth_headers(alice),
        description="Yacht", amount="1e27", participants=[alice, bob],
        split_method="equal"
    )

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_amount"
    assert get_db().expenses.count_documents({}) == 0


def test_get_user_expenses_reports_malformed_id(app):
    expenses, error = ExpenseService.get_user_expenses("not-an-id")

    assert expenses == []
    assert error.code == ErrorCode.INVALID_PARTICIPANT_ID


def test_listing_with_malformed_identity_is_rejected(client, auth_headers):
    resp = client.get("/api/v1/expenses/", headers=auth_headers("not-an-id"))

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_participant_id"


def test_created_at_is_naive_utc():
    now = utcnow()

    assert now.tzinfo is None
    assert abs(now - datetime.now(timezone.utc).replace(tzinfo=None)) < timedelta(seconds=5)
