from enum import Enum

class SplitMethod(str, Enum):
    EQUAL = "equal"
    EXACT = "exact"
    PERCENTAGE = "percentage"

class ErrorCode(str, Enum):
    # Input validation
    MISSING_FIELDS = "missing_fields"
    INVALID_AMOUNT = "invalid_amount"
    NO_PARTICIPANTS = "no_participants"
    INVALID_PARTICIPANT_ID = "invalid_participant_id"
    DUPLICATE_PARTICIPANTS = "duplicate_participants"
    PAYER_NOT_PARTICIPANT = "payer_not_participant"
    UNKNOWN_SPLIT_METHOD = "unknown_split_method"

    # Split consistency
    MISSING_SPLIT_DETAILS = "missing_split_details"
    INVALID_SHARE = "invalid_share"
    COVERAGE_MISMATCH = "coverage_mismatch"
    SUM_MISMATCH = "sum_mismatch"
    PERCENTAGE_MISMATCH = "percentage_mismatch"

    # Collaborator-surfaced
    PARTICIPANT_NOT_FOUND = "participant_not_found"

    INTERNAL_ERROR = "internal_error"
