"""
Expense Service - records expenses and reads them back for balances.

Responsibilities:
- Validate the request fields the split engine does not know about
- Canonicalise participant ids so one user cannot appear under two spellings
- Run the Split Allocator
- Confirm participants exist in the user directory
- Persist the expense with its allocations as one document
- Fetch every expense a user pays for or takes part in
"""
from typing import Optional, Any, List, Tuple
from bson import ObjectId

from splitledger.core.split_service import SplitAllocator, to_money, quantize
from splitledger.core.user_directory import UserDirectory
from splitledger.expenses.models import Expense, utcnow
from splitledger.extensions import db as mongo
from splitledger.utils.enums import SplitMethod, ErrorCode
from splitledger.utils.errors import LedgerError


class ExpenseService:
    """Service for creating and reading expenses."""

    @classmethod
    def create_expense(
        cls,
        payer_id: str,
        description: str,
        amount: Any,
        participants: List[str],
        split_method: str,
        split_details: Any = None
    ) -> Tuple[Optional[Expense], Optional[LedgerError]]:
        """
        Create an expense with calculated allocations.

        Args:
            payer_id: Authenticated user who paid
            description: Free text
            amount: Expense total
            participants: Participant user ids, payer included
            split_method: equal | exact | percentage
            split_details: Entries for exact / percentage splits

        Returns:
            Tuple of (expense, error message)
        """
        if not str(description or "").strip() or amount in (None, "") or not participants or not split_method:
            return None, LedgerError(ErrorCode.MISSING_FIELDS, "All fields are required")

        # ObjectId hex is case-insensitive: compare ids in one spelling
        payer_id = UserDirectory.canonical_id(payer_id)
        if isinstance(participants, (list, tuple)):
            participants = [UserDirectory.canonical_id(p) for p in participants]
        split_details = cls._canonical_split_details(split_details)

        allocations, error = SplitAllocator.allocate(
            amount, participants, payer_id, split_method, split_details
        )
        if error:
            return None, error

        error = UserDirectory.ensure_exist(participants)
        if error:
            return None, error

        expense = Expense(
            id=str(ObjectId()),
            payer_id=payer_id,
            description=str(description).strip(),
            amount=quantize(to_money(amount)),
            participants=tuple(participants),
            split_method=SplitMethod(split_method),
            allocations=tuple(allocations),
            created_at=utcnow()
        )

        # Single insert: allocations are never visible without their expense
        mongo.expenses.insert_one(expense.to_document())
        return expense, None

    @classmethod
    def get_user_expenses(cls, user_id: str) -> Tuple[List[Expense], Optional[LedgerError]]:
        """
        Expenses where the user is the payer or a participant, newest first.

        Returns:
            Tuple of (expenses, error); a malformed ``user_id`` yields an
            empty list with an ``INVALID_PARTICIPANT_ID`` error
        """
        oids, error = UserDirectory.parse_ids([user_id])
        if error:
            return [], error
        oid = oids[0]

        docs = mongo.expenses.find({
            "$or": [
                {"payer_id": oid},
                {"participants": oid}
            ]
        }).sort("created_at", -1)

        return [Expense.from_document(d) for d in docs], None

    @staticmethod
    def _canonical_split_details(split_details: Any) -> Any:
        """Same id spelling for split entries as for participants; other shapes pass through."""
        if isinstance(split_details, dict):
            canonical = {UserDirectory.canonical_id(k): v for k, v in split_details.items()}
            # Two spellings of one id would collapse into one key; leave them for the coverage check
            return canonical if len(canonical) == len(split_details) else split_details
        if isinstance(split_details, (list, tuple)):
            return [
                {**entry, "user_id": UserDirectory.canonical_id(entry.get("user_id"))}
                if isinstance(entry, dict) else entry
                for entry in split_details
            ]
        return split_details
