"""
Balance Aggregator - who owes whom across a set of expenses.

Responsibilities:
- Classify each allocation of an expense as a debt edge (or the payer's own share)
- Accumulate a single user's owes / owed-to figures per counterparty
- Flatten the same figures into a directed edge list for every participant
"""
from collections import defaultdict
from decimal import Decimal
from typing import Optional, Dict, Iterable, List

from splitledger.expenses.models import Allocation, BalanceView, DebtEdge, Expense
from splitledger.core.split_service import quantize


class BalanceAggregator:
    """Computes balances from immutable expense snapshots."""

    @staticmethod
    def classify_entry(payer_id: str, allocation: Allocation) -> Optional[DebtEdge]:
        """
        Turn one allocation into a debt edge.

        The payer's own share is not a debt and yields ``None``; every other
        participant owes the payer their allocated amount.
        """
        if allocation.participant_id == payer_id:
            return None
        return DebtEdge(
            debtor=allocation.participant_id,
            creditor=payer_id,
            amount=allocation.amount
        )

    @classmethod
    def compute_balance(cls, subject_id: str, expenses: Iterable[Expense]) -> BalanceView:
        """
        Get a user's balance across expenses.

        Args:
            subject_id: User the balance is computed for
            expenses: Expenses where the user is payer or participant;
                other expenses contribute nothing

        Returns:
            BalanceView with per-counterparty amounts rounded to the cent.
            Reciprocal debts with the same counterparty are reported on
            both sides rather than netted.
        """
        owes: Dict[str, Decimal] = defaultdict(Decimal)
        owed_to: Dict[str, Decimal] = defaultdict(Decimal)

        for expense in expenses:
            for allocation in expense.allocations:
                edge = cls.classify_entry(expense.payer_id, allocation)
                if edge is None:
                    continue
                if edge.debtor == subject_id:
                    owes[edge.creditor] += edge.amount
                elif edge.creditor == subject_id:
                    owed_to[edge.debtor] += edge.amount

        owes = {k: quantize(v) for k, v in owes.items()}
        owed_to = {k: quantize(v) for k, v in owed_to.items()}

        return BalanceView(
            owes=owes,
            owed_to=owed_to,
            total_owes=sum(owes.values(), Decimal("0.00")),
            total_owed_to=sum(owed_to.values(), Decimal("0.00"))
        )

    @classmethod
    def flatten_edges(cls, expenses: Iterable[Expense]) -> List[DebtEdge]:
        """
        Directed debt edges between every pair of users in the expense set.

        Each participant is treated as the subject in turn and their ``owes``
        mapping becomes one edge per creditor, so the figures always match
        what ``compute_balance`` reports for either side.
        """
        expenses = list(expenses)

        users: List[str] = []
        for expense in expenses:
            for user_id in expense.participants:
                if user_id not in users:
                    users.append(user_id)

        edges = []
        for user_id in users:
            touching = [e for e in expenses if e.involves(user_id)]
            view = cls.compute_balance(user_id, touching)
            for creditor, amount in view.owes.items():
                edges.append(DebtEdge(debtor=user_id, creditor=creditor, amount=amount))
        return edges
