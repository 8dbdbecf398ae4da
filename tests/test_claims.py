import pytest

from apollo.core import keys
from apollo.core.errors import (
    ArithmeticOverflow,
    InsufficientPoolBalance,
    InvalidClaimStatus,
    InvalidParameter,
    RecordNotFound,
    Unauthorized,
)
from apollo.core.numeric import U64_MAX
from apollo.core.states import ClaimStatus
from apollo.protocol.protocol import Protocol

from conftest import APH, AUTHORITY, EVIDENCE, USDC, fund_premium_pool


def _pool(protocol):
    return protocol.pool_balances()["premium_pool"]


class TestSubmitClaim:

    def test_small_claim_is_paid_immediately(self, protocol, member, clock):
        fund_premium_pool(protocol, 900)
        before = protocol.balance_of(member, USDC)

        key, claim = protocol.submit_claim(member, 300, EVIDENCE)

        assert key == keys.claim_key(keys.member_key(member), 0)
        assert claim.status == ClaimStatus.PAID
        assert claim.amount == 300
        assert claim.member == keys.member_key(member)
        assert claim.submitted_time == claim.updated_time == clock.now
        assert claim.evidence_hash == EVIDENCE
        assert _pool(protocol) == 700
        assert protocol.balance_of(member, USDC) == before + 300
        assert protocol.get_member(member).claim_count == 1

    def test_claim_at_threshold_is_paid(self, protocol, member):
        fund_premium_pool(protocol, 900)
        _, claim = protocol.submit_claim(member, 500, EVIDENCE)
        assert claim.status == ClaimStatus.PAID

    def test_underfunded_pool_fails_whole_submission(self, protocol, member):
        assert _pool(protocol) == 100
        before = protocol.balance_of(member, USDC)

        with pytest.raises(InsufficientPoolBalance):
            protocol.submit_claim(member, 300, EVIDENCE)

        with pytest.raises(RecordNotFound):
            protocol.get_claim(keys.claim_key(keys.member_key(member), 0))
        assert protocol.get_member(member).claim_count == 0
        assert _pool(protocol) == 100
        assert protocol.balance_of(member, USDC) == before
        assert protocol.list_claims() == []

    def test_large_claim_needs_review(self, protocol, member):
        fund_premium_pool(protocol, 5_000)
        before = protocol.balance_of(member, USDC)

        _, claim = protocol.submit_claim(member, 1_000, EVIDENCE)

        assert claim.status == ClaimStatus.NEEDS_REVIEW
        assert _pool(protocol) == 5_100
        assert protocol.balance_of(member, USDC) == before
        assert protocol.get_member(member).claim_count == 1

    def test_large_claim_needs_review_even_with_empty_pool(self, protocol, member):
        _, claim = protocol.submit_claim(member, 1_000, EVIDENCE)
        assert claim.status == ClaimStatus.NEEDS_REVIEW

    def test_zero_threshold_never_auto_pays(self, clock):
        protocol = Protocol(clock=clock)
        protocol.initialize(AUTHORITY, USDC, APH, 0)
        policy_key, _ = protocol.create_policy(AUTHORITY, 100, 5_000)
        protocol.mint("alice", USDC, 1_000)
        protocol.enroll_member("alice", policy_key)

        _, claim = protocol.submit_claim("alice", 1, EVIDENCE)

        assert claim.status == ClaimStatus.NEEDS_REVIEW

    def test_claims_are_keyed_by_member_sequence(self, protocol, member):
        first, _ = protocol.submit_claim(member, 1_000, EVIDENCE)
        second, _ = protocol.submit_claim(member, 2_000, EVIDENCE)

        member_key = keys.member_key(member)
        assert first == keys.claim_key(member_key, 0)
        assert second == keys.claim_key(member_key, 1)
        assert protocol.get_member(member).claim_count == 2

    def test_zero_amount_rejected(self, protocol, member):
        with pytest.raises(InvalidParameter):
            protocol.submit_claim(member, 0, EVIDENCE)
        assert protocol.get_member(member).claim_count == 0

    @pytest.mark.parametrize("evidence", [b"", bytes(31), bytes(33)])
    def test_evidence_must_be_32_bytes(self, protocol, member, evidence):
        with pytest.raises(InvalidParameter):
            protocol.submit_claim(member, 1_000, evidence)

    def test_non_member_cannot_claim(self, protocol, alice):
        with pytest.raises(RecordNotFound):
            protocol.submit_claim(alice, 100, EVIDENCE)

    def test_claim_counter_overflow_rolls_back_payout(self, protocol, member):
        fund_premium_pool(protocol, 900)
        key = keys.member_key(member)
        protocol.membership.save(key, protocol.get_member(member).model_copy(update={"claim_count": U64_MAX}))
        before = protocol.balance_of(member, USDC)

        with pytest.raises(ArithmeticOverflow):
            protocol.submit_claim(member, 100, EVIDENCE)

        assert _pool(protocol) == 1_000
        assert protocol.balance_of(member, USDC) == before
        assert protocol.list_claims() == []
        assert protocol.get_member(member).claim_count == U64_MAX

    def test_submit_never_produces_submitted_status(self, protocol, member):
        fund_premium_pool(protocol, 1_000)
        for amount in (1, 500, 501, 10_000):
            protocol.submit_claim(member, amount, EVIDENCE)
        statuses = {claim.status for _, claim in protocol.list_claims()}
        assert statuses == {ClaimStatus.PAID, ClaimStatus.NEEDS_REVIEW}


class TestApproveClaim:

    @pytest.fixture
    def pending(self, protocol, member):
        key, _ = protocol.submit_claim(member, 1_000, EVIDENCE)
        return key

    def test_approve_pays_claimant(self, protocol, member, pending, clock):
        fund_premium_pool(protocol, 2_000)
        before = protocol.balance_of(member, USDC)
        clock.advance(3_600)

        claim = protocol.approve_claim(AUTHORITY, pending)

        assert claim.status == ClaimStatus.PAID
        assert claim.updated_time == clock.now
        assert claim.submitted_time == clock.now - 3_600
        assert protocol.balance_of(member, USDC) == before + 1_000
        assert _pool(protocol) == 1_100

    def test_second_approve_rejected_without_transfer(self, protocol, member, pending):
        fund_premium_pool(protocol, 2_000)
        protocol.approve_claim(AUTHORITY, pending)
        balance = protocol.balance_of(member, USDC)

        with pytest.raises(InvalidClaimStatus):
            protocol.approve_claim(AUTHORITY, pending)

        assert protocol.balance_of(member, USDC) == balance
        assert _pool(protocol) == 1_100

    def test_fast_paid_claim_cannot_be_approved(self, protocol, member):
        fund_premium_pool(protocol, 1_000)
        key, _ = protocol.submit_claim(member, 200, EVIDENCE)
        with pytest.raises(InvalidClaimStatus):
            protocol.approve_claim(AUTHORITY, key)

    def test_only_authority_may_approve(self, protocol, member, pending):
        fund_premium_pool(protocol, 2_000)
        with pytest.raises(Unauthorized):
            protocol.approve_claim(member, pending)
        assert protocol.get_claim(pending).status == ClaimStatus.NEEDS_REVIEW
        assert _pool(protocol) == 2_100

    def test_underfunded_pool_keeps_claim_pending(self, protocol, pending):
        with pytest.raises(InsufficientPoolBalance):
            protocol.approve_claim(AUTHORITY, pending)
        assert protocol.get_claim(pending).status == ClaimStatus.NEEDS_REVIEW
        assert _pool(protocol) == 100

    def test_unknown_claim(self, protocol):
        with pytest.raises(RecordNotFound):
            protocol.approve_claim(AUTHORITY, keys.claim_key("member:none", 0))


class TestDenyClaim:

    @pytest.fixture
    def pending(self, protocol, member):
        key, _ = protocol.submit_claim(member, 1_000, EVIDENCE)
        return key

    def test_deny_moves_no_funds(self, protocol, member, pending, clock):
        fund_premium_pool(protocol, 2_000)
        balance = protocol.balance_of(member, USDC)
        clock.advance(10)

        claim = protocol.deny_claim(AUTHORITY, pending)

        assert claim.status == ClaimStatus.DENIED
        assert claim.updated_time == clock.now
        assert protocol.balance_of(member, USDC) == balance
        assert _pool(protocol) == 2_100

    def test_denied_claim_cannot_be_approved(self, protocol, pending):
        fund_premium_pool(protocol, 2_000)
        protocol.deny_claim(AUTHORITY, pending)

        with pytest.raises(InvalidClaimStatus):
            protocol.approve_claim(AUTHORITY, pending)
        with pytest.raises(InvalidClaimStatus):
            protocol.deny_claim(AUTHORITY, pending)
        assert _pool(protocol) == 2_100

    def test_only_authority_may_deny(self, protocol, member, pending):
        with pytest.raises(Unauthorized):
            protocol.deny_claim(member, pending)
        assert protocol.get_claim(pending).status == ClaimStatus.NEEDS_REVIEW


class TestQueriesAndAudit:

    def test_list_claims_filters(self, protocol, member):
        fund_premium_pool(protocol, 1_000)
        paid, _ = protocol.submit_claim(member, 100, EVIDENCE)
        pending, _ = protocol.submit_claim(member, 1_000, EVIDENCE)

        assert [k for k, _ in protocol.list_claims(owner=member)] == [paid, pending]
        assert [k for k, _ in protocol.list_claims(status=ClaimStatus.NEEDS_REVIEW)] == [pending]
        assert protocol.list_claims(owner="nobody") == []

    def test_failed_operations_are_not_audited(self, protocol, member):
        entries = len(protocol.audit_log())

        with pytest.raises(InsufficientPoolBalance):
            protocol.submit_claim(member, 300, EVIDENCE)

        assert len(protocol.audit_log()) == entries

    def test_audit_records_claim_outcome(self, protocol, member):
        key, _ = protocol.submit_claim(member, 1_000, EVIDENCE)
        entry = protocol.audit_log()[-1]

        assert entry.actor == member
        assert entry.operation == "submit_claim"
        assert entry.detail == {"claim": key, "amount": 1_000, "status": "NeedsReview"}
