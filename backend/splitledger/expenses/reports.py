"""Balance sheet rows for the API, with user names in place of ids."""
from typing import Dict, Any, List

from splitledger.expenses.models import BalanceView, DebtEdge


def counterparty_ids(view: BalanceView) -> List[str]:
    return list(dict.fromkeys(list(view.owes) + list(view.owed_to)))


def build_balance_sheet(view: BalanceView, names: Dict[str, str]) -> Dict[str, Any]:
    """
    Render a BalanceView as lists of counterparty rows.

    Returns:
    {
        "owes": [{"user_id": "...", "name": "bob", "amount": 25.0}],
        "owed_to": [...],
        "total_owes": 25.0,
        "total_owed_to": 15.0
    }
    """
    def rows(mapping):
        return [
            {"user_id": uid, "name": names.get(uid, uid), "amount": float(amount)}
            for uid, amount in sorted(mapping.items(), key=lambda kv: -kv[1])
        ]

    return {
        "owes": rows(view.owes),
        "owed_to": rows(view.owed_to),
        "total_owes": float(view.total_owes),
        "total_owed_to": float(view.total_owed_to),
    }


def build_edge_rows(edges: List[DebtEdge], names: Dict[str, str]) -> List[Dict[str, Any]]:
    """One row per debt edge: who owes whom and how much."""
    return [
        {
            "from": names.get(e.debtor, e.debtor),
            "to": names.get(e.creditor, e.creditor),
            "from_user": e.debtor,
            "to_user": e.creditor,
            "amount": float(e.amount),
        }
        for e in edges
    ]
