"""Expense models."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Dict, Any, Tuple

from bson import ObjectId

from splitledger.utils.enums import SplitMethod


def utcnow() -> datetime:
    """Naive UTC timestamp, the form pymongo hands back from the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_decimal(value) -> Decimal:
    """Read a stored amount back as Decimal without float noise."""
    return Decimal(str(value))


# ==================== SPLIT DETAILS ====================

@dataclass(frozen=True)
class ExactShare:
    """One caller-supplied entry of an ``exact`` split."""
    participant_id: str
    amount: Decimal


@dataclass(frozen=True)
class PercentageShare:
    """One caller-supplied entry of a ``percentage`` split."""
    participant_id: str
    percentage: Decimal


@dataclass(frozen=True)
class Allocation:
    """Amount a participant owes toward the payer of an expense."""
    participant_id: str
    amount: Decimal
    percentage: Optional[Decimal] = None  # only kept for percentage splits

    def to_document(self) -> Dict[str, Any]:
        doc = {
            "user_id": ObjectId(self.participant_id),
            "amount": float(self.amount),
        }
        if self.percentage is not None:
            doc["percentage"] = float(self.percentage)
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Allocation":
        percentage = doc.get("percentage")
        return cls(
            participant_id=str(doc["user_id"]),
            amount=to_decimal(doc["amount"]),
            percentage=to_decimal(percentage) if percentage is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {"user_id": self.participant_id, "amount": float(self.amount)}
        if self.percentage is not None:
            data["percentage"] = float(self.percentage)
        return data


# ==================== EXPENSE ====================

@dataclass(frozen=True)
class Expense:
    """A recorded expense together with its computed allocations."""
    id: str
    payer_id: str
    description: str
    amount: Decimal
    participants: Tuple[str, ...]
    split_method: SplitMethod
    allocations: Tuple[Allocation, ...]
    created_at: datetime = field(default_factory=utcnow)

    def involves(self, user_id: str) -> bool:
        return user_id == self.payer_id or user_id in self.participants

    def to_document(self) -> Dict[str, Any]:
        """MongoDB document; allocations are embedded so they are written with the expense."""
        return {
            "_id": ObjectId(self.id),
            "payer_id": ObjectId(self.payer_id),
            "description": self.description,
            "amount": float(self.amount),
            "participants": [ObjectId(p) for p in self.participants],
            "split_method": self.split_method.value,
            "allocations": [a.to_document() for a in self.allocations],
            "created_at": self.created_at,
        }

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Expense":
        return cls(
            id=str(doc["_id"]),
            payer_id=str(doc["payer_id"]),
            description=doc.get("description", ""),
            amount=to_decimal(doc["amount"]),
            participants=tuple(str(p) for p in doc.get("participants", [])),
            split_method=SplitMethod(doc["split_method"]),
            allocations=tuple(Allocation.from_document(a) for a in doc.get("allocations", [])),
            created_at=doc.get("created_at") or utcnow(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "_id": self.id,
            "payer_id": self.payer_id,
            "description": self.description,
            "amount": float(self.amount),
            "participants": list(self.participants),
            "split_method": self.split_method.value,
            "allocations": [a.to_dict() for a in self.allocations],
            "created_at": self.created_at.isoformat(),
        }


# ==================== BALANCES ====================

@dataclass(frozen=True)
class DebtEdge:
    """``debtor`` owes ``creditor`` ``amount``."""
    debtor: str
    creditor: str
    amount: Decimal


@dataclass
class BalanceView:
    """
    Balance of one subject user, recomputed per request.

    ``owes`` maps counterparty -> amount the subject owes them,
    ``owed_to`` maps counterparty -> amount they owe the subject.
    Reciprocal figures are kept apart, never netted.
    """
    owes: Dict[str, Decimal] = field(default_factory=dict)
    owed_to: Dict[str, Decimal] = field(default_factory=dict)
    total_owes: Decimal = Decimal("0.00")
    total_owed_to: Decimal = Decimal("0.00")