"""
Claim Status Definitions

Defines all possible statuses for a reimbursement claim.
"""
from enum import Enum


class ClaimStatus(str, Enum):
    """
    Enum representing the lifecycle of a claim.

    Fast path:  (creation) -> PAID
    Slow path:  (creation) -> NEEDS_REVIEW -> PAID | DENIED

    SUBMITTED is reserved for a future flow where claims wait before the
    threshold decision. Nothing produces it yet.
    """
    SUBMITTED = "Submitted"
    PAID = "Paid"
    NEEDS_REVIEW = "NeedsReview"
    DENIED = "Denied"
