"""
Split Allocator - turns an expense total and a split method into
per-participant allocations.

Responsibilities:
- Validate amount, participant set and payer membership
- Calculate equal splits (residual cent goes to the first participant)
- Validate and keep exact splits verbatim
- Calculate percentage splits (no residual correction)
- Parse raw split details into tagged share records

Pure: no database access, no existence checks on participant ids.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Any, List, Tuple, Union

from splitledger.expenses.models import Allocation, ExactShare, PercentageShare
from splitledger.utils.enums import SplitMethod, ErrorCode
from splitledger.utils.errors import LedgerError

CENT = Decimal("0.01")
TOLERANCE = Decimal("0.01")
HUNDRED = Decimal("100")
# Keeps every cent-quantize within the default 28-digit decimal context
MAX_MONEY = Decimal("1e15")

Share = Union[ExactShare, PercentageShare]


def to_money(value: Any) -> Optional[Decimal]:
    """Parse a finite number below ``MAX_MONEY`` into Decimal; ``None`` when it is not one."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not number.is_finite() or abs(number) >= MAX_MONEY:
        return None
    return number


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class SplitAllocator:
    """Validates an expense split and computes its allocations."""

    # Keys accepted for each split method's raw entries
    VALUE_KEYS = {
        SplitMethod.EXACT: "amount",
        SplitMethod.PERCENTAGE: "percentage",
    }

    @classmethod
    def allocate(
        cls,
        amount: Any,
        participants: List[str],
        payer_id: str,
        split_method: Union[str, SplitMethod],
        split_details: Any = None
    ) -> Tuple[Optional[List[Allocation]], Optional[LedgerError]]:
        """
        Allocate ``amount`` across ``participants``.

        Checks run in a fixed order and the first failure is returned:
        amount, participant set, payer membership, then the policy.

        Args:
            amount: Expense total (int, float, str or Decimal)
            participants: Ordered participant ids; the first one absorbs
                the rounding residual of an equal split
            payer_id: User who paid; must be one of the participants
            split_method: equal | exact | percentage
            split_details: Share records or raw entries for exact/percentage

        Returns:
            Tuple of (allocations, error)
        """
        total = to_money(amount)
        if total is None or quantize(total) <= 0:
            return None, LedgerError(ErrorCode.INVALID_AMOUNT, f"Amount must be greater than 0 and below {MAX_MONEY:,.0f}")
        total = quantize(total)

        error = cls._validate_participants(participants)
        if error:
            return None, error

        if payer_id not in participants:
            return None, LedgerError(
                ErrorCode.PAYER_NOT_PARTICIPANT,
                "Expense creator must be included in participants"
            )

        try:
            method = SplitMethod(split_method)
        except ValueError:
            return None, LedgerError(
                ErrorCode.UNKNOWN_SPLIT_METHOD,
                f"Invalid split method: {split_method}"
            )

        if method == SplitMethod.EQUAL:
            return cls.calculate_equal_split(total, participants), None

        shares, error = cls.parse_split_details(method, split_details)
        if error:
            return None, error

        error = cls._validate_coverage(method, participants, shares)
        if error:
            return None, error

        if method == SplitMethod.EXACT:
            return cls.calculate_exact_split(total, shares)
        return cls.calculate_percentage_split(total, shares)

    @classmethod
    def calculate_equal_split(
        cls,
        total: Decimal,
        participant_ids: List[str]
    ) -> List[Allocation]:
        """
        Calculate equal split among participants.

        Every share is rounded to the cent and the whole residual
        (``total - share * n``) is added to the first participant, so the
        allocations always sum to ``total`` exactly.
        """
        n = len(participant_ids)
        share = quantize(total / n)
        residual = total - share * n

        allocations = []
        for i, user_id in enumerate(participant_ids):
            amount = share + residual if i == 0 else share
            allocations.append(Allocation(participant_id=user_id, amount=amount))
        return allocations

    @classmethod
    def calculate_exact_split(
        cls,
        total: Decimal,
        shares: List[ExactShare]
    ) -> Tuple[Optional[List[Allocation]], Optional[LedgerError]]:
        """Check exact amounts add up to the total and keep them as given."""
        amounts_sum = sum((s.amount for s in shares), Decimal("0"))
        if abs(amounts_sum - total) > TOLERANCE:
            return None, LedgerError(
                ErrorCode.SUM_MISMATCH,
                f"Exact amounts ({amounts_sum:.2f}) do not sum up to total ({total:.2f})"
            )

        return [Allocation(participant_id=s.participant_id, amount=s.amount) for s in shares], None

    @classmethod
    def calculate_percentage_split(
        cls,
        total: Decimal,
        shares: List[PercentageShare]
    ) -> Tuple[Optional[List[Allocation]], Optional[LedgerError]]:
        """
        Calculate split based on percentages.

        Each amount is rounded on its own; unlike the equal split there is no
        residual pass, so the allocations may drift from the total by a few
        cents.
        """
        total_pct = sum((s.percentage for s in shares), Decimal("0"))
        if abs(total_pct - HUNDRED) > TOLERANCE:
            return None, LedgerError(
                ErrorCode.PERCENTAGE_MISMATCH,
                f"Percentages ({total_pct:.2f}%) do not add up to 100%"
            )

        allocations = [
            Allocation(
                participant_id=s.participant_id,
                amount=quantize(total * s.percentage / HUNDRED),
                percentage=s.percentage
            )
            for s in shares
        ]
        return allocations, None

    @classmethod
    def parse_split_details(
        cls,
        split_method: SplitMethod,
        split_details: Any
    ) -> Tuple[Optional[List[Share]], Optional[LedgerError]]:
        """
        Turn raw split details into tagged share records.

        Accepts share records as-is, a list of ``{"user_id", <value>}``
        dicts, or a ``{user_id: value}`` mapping.
        """
        label = "Exact amounts" if split_method == SplitMethod.EXACT else "Percentages"
        if not split_details:
            return None, LedgerError(
                ErrorCode.MISSING_SPLIT_DETAILS,
                f"{label} are required for {split_method.value} split"
            )

        record_type = ExactShare if split_method == SplitMethod.EXACT else PercentageShare
        value_key = cls.VALUE_KEYS[split_method]

        if isinstance(split_details, dict):
            entries = [{"user_id": k, value_key: v} for k, v in split_details.items()]
        elif isinstance(split_details, (list, tuple)):
            entries = split_details
        else:
            return None, LedgerError(ErrorCode.INVALID_SHARE, f"{label} must be a list of entries")

        shares = []
        for entry in entries:
            if isinstance(entry, record_type):
                shares.append(entry)
                continue
            if not isinstance(entry, dict):
                return None, LedgerError(ErrorCode.INVALID_SHARE, f"Malformed entry in {label.lower()}: {entry!r}")

            user_id = entry.get("user_id")
            value = to_money(entry.get(value_key))
            if not isinstance(user_id, str) or not user_id:
                return None, LedgerError(ErrorCode.INVALID_SHARE, f"Entry is missing user_id: {entry!r}")
            if value is None:
                return None, LedgerError(ErrorCode.INVALID_SHARE, f"Entry for {user_id} has no valid {value_key}")
            shares.append(record_type(user_id, value))

        for share in shares:
            value = share.amount if isinstance(share, ExactShare) else share.percentage
            if value < 0:
                return None, LedgerError(
                    ErrorCode.INVALID_SHARE,
                    f"Negative {cls.VALUE_KEYS[split_method]} for user {share.participant_id}"
                )

        return shares, None

    @classmethod
    def _validate_participants(cls, participants: Any) -> Optional[LedgerError]:
        if not isinstance(participants, (list, tuple)) or len(participants) == 0:
            return LedgerError(ErrorCode.NO_PARTICIPANTS, "At least one participant is required")

        for p in participants:
            if not isinstance(p, str) or not p.strip():
                return LedgerError(ErrorCode.INVALID_PARTICIPANT_ID, "Invalid participant IDs")

        if len(set(participants)) != len(participants):
            return LedgerError(ErrorCode.DUPLICATE_PARTICIPANTS, "Duplicate participants in expense")

        return None

    @classmethod
    def _validate_coverage(
        cls,
        split_method: SplitMethod,
        participants: List[str],
        shares: List[Share]
    ) -> Optional[LedgerError]:
        """One entry per participant, no extras, no omissions."""
        label = "Exact amounts" if split_method == SplitMethod.EXACT else "Percentages"
        share_ids = [s.participant_id for s in shares]

        if len(set(share_ids)) != len(share_ids):
            return LedgerError(ErrorCode.COVERAGE_MISMATCH, f"{label} contain the same participant twice")

        missing = [p for p in participants if p not in share_ids]
        extra = [s for s in share_ids if s not in participants]
        if missing:
            return LedgerError(
                ErrorCode.COVERAGE_MISMATCH,
                f"{label} must include all participants, missing: {', '.join(missing)}"
            )
        if extra:
            return LedgerError(
                ErrorCode.COVERAGE_MISMATCH,
                f"{label} include users who are not participants: {', '.join(extra)}"
            )
        return None
