"""
Claim State Machine

Manages the status transitions allowed for reimbursement claims.
"""
from typing import Dict, List, Set

from apollo.core.errors import InvalidClaimStatus
from apollo.core.models import Claim
from apollo.core.states import ClaimStatus


class ClaimStateMachine:
    """
    State machine for claim status transitions.

    A new claim enters directly as PAID (fast path) or NEEDS_REVIEW (slow
    path). PAID and DENIED are terminal.
    """

    # Define valid transitions (from_status -> set of valid to_statuses)
    TRANSITIONS: Dict[ClaimStatus, Set[ClaimStatus]] = {
        ClaimStatus.SUBMITTED: set(),  # Reserved, never produced
        ClaimStatus.NEEDS_REVIEW: {ClaimStatus.PAID, ClaimStatus.DENIED},
        ClaimStatus.PAID: set(),  # Terminal state
        ClaimStatus.DENIED: set()  # Terminal state
    }

    def initial_status(self, amount: int, fast_claim_threshold: int) -> ClaimStatus:
        """Pick the creation status for a claim of ``amount``."""
        if amount <= fast_claim_threshold:
            return ClaimStatus.PAID
        return ClaimStatus.NEEDS_REVIEW

    def get_valid_transitions(self, claim: Claim) -> List[ClaimStatus]:
        """Get the statuses reachable from the claim's status."""
        return sorted(self.TRANSITIONS.get(claim.status, set()), key=lambda s: s.value)

    def can_transition(self, claim: Claim, target: ClaimStatus) -> bool:
        return target in self.TRANSITIONS.get(claim.status, set())

    def is_terminal(self, status: ClaimStatus) -> bool:
        return status in (ClaimStatus.PAID, ClaimStatus.DENIED)

    def require(self, claim: Claim, target: ClaimStatus) -> None:
        """
        Check a transition without applying it.

        Raises:
            InvalidClaimStatus: If the claim's status does not permit ``target``
        """
        if not self.can_transition(claim, target):
            raise InvalidClaimStatus(
                f"Invalid transition from {claim.status.value} to {target.value}. "
                f"Valid transitions: {[s.value for s in self.get_valid_transitions(claim)]}"
            )

    def transition(self, claim: Claim, target: ClaimStatus, now: int) -> Claim:
        """
        Execute a status transition.

        Returns:
            Updated copy of the claim with the new status and updated_time
        """
        self.require(claim, target)
        return claim.model_copy(update={"status": target, "updated_time": now})
