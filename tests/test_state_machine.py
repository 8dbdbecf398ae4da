import pytest

from apollo.core.errors import InvalidClaimStatus
from apollo.core.models import Claim
from apollo.core.states import ClaimStatus
from apollo.state_machine.machine import ClaimStateMachine

from conftest import EVIDENCE


def make_claim(status: ClaimStatus) -> Claim:
    return Claim(
        member="member:x",
        amount=1_000,
        status=status,
        submitted_time=100,
        updated_time=100,
        evidence_hash=EVIDENCE,
    )


class TestClaimStateMachine:

    def setup_method(self):
        self.machine = ClaimStateMachine()

    def test_initial_status_uses_threshold(self):
        assert self.machine.initial_status(500, 500) == ClaimStatus.PAID
        assert self.machine.initial_status(501, 500) == ClaimStatus.NEEDS_REVIEW
        assert self.machine.initial_status(1, 0) == ClaimStatus.NEEDS_REVIEW

    def test_needs_review_can_be_paid_or_denied(self):
        claim = make_claim(ClaimStatus.NEEDS_REVIEW)
        assert self.machine.get_valid_transitions(claim) == [ClaimStatus.DENIED, ClaimStatus.PAID]

    @pytest.mark.parametrize("status", [ClaimStatus.PAID, ClaimStatus.DENIED, ClaimStatus.SUBMITTED])
    def test_no_transitions_out_of(self, status):
        claim = make_claim(status)
        assert self.machine.get_valid_transitions(claim) == []
        for target in ClaimStatus:
            with pytest.raises(InvalidClaimStatus):
                self.machine.transition(claim, target, now=200)

    def test_transition_returns_updated_copy(self):
        claim = make_claim(ClaimStatus.NEEDS_REVIEW)

        updated = self.machine.transition(claim, ClaimStatus.DENIED, now=200)

        assert updated.status == ClaimStatus.DENIED
        assert updated.updated_time == 200
        assert updated.submitted_time == 100
        assert claim.status == ClaimStatus.NEEDS_REVIEW

    def test_terminal_statuses(self):
        assert self.machine.is_terminal(ClaimStatus.PAID)
        assert self.machine.is_terminal(ClaimStatus.DENIED)
        assert not self.machine.is_terminal(ClaimStatus.NEEDS_REVIEW)

    def test_claim_serializes_evidence_as_hex(self):
        claim = make_claim(ClaimStatus.PAID)
        dumped = claim.model_dump(mode="json")
        assert dumped["evidence_hash"] == EVIDENCE.hex()
        assert dumped["status"] == "Paid"
        assert Claim.model_validate(dumped).evidence_hash == EVIDENCE
