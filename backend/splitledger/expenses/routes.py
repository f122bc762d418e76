# splitledger/expenses/routes.py

from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from splitledger.core import ExpenseService, BalanceAggregator, UserDirectory
from splitledger.expenses.reports import build_balance_sheet, build_edge_rows, counterparty_ids
from splitledger.utils.errors import internal_error

expenses_bp = Blueprint("expenses", __name__)

@expenses_bp.route("/", methods=["POST"])
@jwt_required()
def add_expense():
    """
    Add an expense paid by the current user.

    Request body:
    {
        "description": "Dinner",
        "amount": 90.00,
        "participants": ["<user_id>", ...],  // must include the current user
        "split_method": "equal|exact|percentage",
        "split_details": [{"user_id": "...", "amount": 30}]  // or "percentage"
    }
    """
    user_id = get_jwt_identity()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    try:
        expense, error = ExpenseService.create_expense(
            payer_id=user_id,
            description=data.get("description"),
            amount=data.get("amount"),
            participants=data.get("participants"),
            split_method=data.get("split_method"),
            split_details=data.get("split_details")
        )
    except Exception:
        current_app.logger.exception("Error in add_expense")
        return jsonify(internal_error("Error adding expense").to_dict()), 500

    if error:
        return jsonify(error.to_dict()), error.http_status

    return jsonify({
        "message": "Expense added successfully",
        "expense": expense.to_dict()
    }), 201


@expenses_bp.route("/", methods=["GET"])
@jwt_required()
def get_user_expenses():
    """Expenses where the current user is the payer or a participant."""
    user_id = get_jwt_identity()

    try:
        expenses, error = ExpenseService.get_user_expenses(user_id)
        if error:
            return jsonify(error.to_dict()), error.http_status
    except Exception:
        current_app.logger.exception("Error in get_user_expenses")
        return jsonify(internal_error("Error fetching expenses").to_dict()), 500

    return jsonify({
        "message": "Expenses fetched successfully",
        "count": len(expenses),
        "expenses": [e.to_dict() for e in expenses]
    })


@expenses_bp.route("/balance-sheet", methods=["GET"])
@jwt_required()
def get_balance_sheet():
    """
    Who the current user owes and who owes them.

    Amounts owed in both directions with the same person are listed
    separately, not netted.
    """
    user_id = UserDirectory.canonical_id(get_jwt_identity())

    try:
        expenses, error = ExpenseService.get_user_expenses(user_id)
        if error:
            return jsonify(error.to_dict()), error.http_status
        view = BalanceAggregator.compute_balance(user_id, expenses)
        names = UserDirectory.display_names(counterparty_ids(view))
    except Exception:
        current_app.logger.exception("Error in get_balance_sheet")
        return jsonify(internal_error("Error computing balance sheet").to_dict()), 500

    return jsonify(build_balance_sheet(view, names))


@expenses_bp.route("/balance-sheet/edges", methods=["GET"])
@jwt_required()
def get_balance_edges():
    """
    Flattened debts between every user in the current user's expenses.

    Returns:
    {
        "edges": [{"from": "bob", "to": "alice", "from_user": "...", "to_user": "...", "amount": 25.0}],
        "count": 1
    }
    """
    user_id = get_jwt_identity()

    try:
        expenses, error = ExpenseService.get_user_expenses(user_id)
        if error:
            return jsonify(error.to_dict()), error.http_status
        edges = BalanceAggregator.flatten_edges(expenses)
        user_ids = list(dict.fromkeys([e.debtor for e in edges] + [e.creditor for e in edges]))
        names = UserDirectory.display_names(user_ids)
    except Exception:
        current_app.logger.exception("Error in get_balance_edges")
        return jsonify(internal_error("Error computing balance edges").to_dict()), 500

    rows = build_edge_rows(edges, names)
    return jsonify({"edges": rows, "count": len(rows)})
