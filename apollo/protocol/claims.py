"""
Claim Adjudicator

Creates claims, auto-pays those at or below the fast-claim threshold, and
exposes the authority-only approve/deny transitions for the rest.

The threshold bounds how much can be paid without review. It is an
admission gate, not a fraud check.
"""
import logging
from typing import Callable, List, Optional, Tuple

from apollo.core import keys
from apollo.core.errors import InvalidParameter
from apollo.core.models import EVIDENCE_HASH_SIZE, Claim, Member
from apollo.core.numeric import U64_MAX, checked_add
from apollo.core.states import ClaimStatus
from apollo.ledger.store import RecordStore
from apollo.state_machine.machine import ClaimStateMachine

from .config import ConfigRegistry
from .membership import MembershipLedger
from .pools import CustodialPools

logger = logging.getLogger(__name__)


class ClaimAdjudicator:
    def __init__(
        self,
        store: RecordStore,
        configs: ConfigRegistry,
        membership: MembershipLedger,
        pools: CustodialPools,
        state_machine: ClaimStateMachine,
        clock: Callable[[], int],
    ):
        self.store = store
        self.configs = configs
        self.membership = membership
        self.pools = pools
        self.state_machine = state_machine
        self.clock = clock

    def submit_claim(self, caller: str, amount: int, evidence_hash: bytes) -> Tuple[str, Claim]:
        """
        Submit a claim against the caller's membership.

        Claims at or below the fast-claim threshold are paid immediately from
        the premium pool. If the pool cannot cover them the whole submission
        fails; the claim is not demoted to review. Larger claims are stored as
        NEEDS_REVIEW with no transfer.

        Raises:
            InvalidParameter: If amount is zero or the digest is not 32 bytes
            RecordNotFound: If the caller is not a member
            InsufficientPoolBalance: If a fast-path claim cannot be covered
            ArithmeticOverflow: If the member's claim counter is exhausted
        """
        config = self.configs.load()
        if not 0 < amount <= U64_MAX:
            raise InvalidParameter("Claim amount must be greater than zero")
        if not isinstance(evidence_hash, (bytes, bytearray)) or len(evidence_hash) != EVIDENCE_HASH_SIZE:
            raise InvalidParameter(f"Evidence hash must be exactly {EVIDENCE_HASH_SIZE} bytes")

        member_key = keys.member_key(caller)
        member = self.membership.get_member(caller)
        claim_key = keys.claim_key(member_key, member.claim_count)
        now = self.clock()

        status = self.state_machine.initial_status(amount, config.fast_claim_threshold)
        if status == ClaimStatus.PAID:
            self.pools.require_premium_balance(amount)
            self.pools.pay_claim(member.owner, amount)

        claim = Claim(
            member=member_key,
            amount=amount,
            status=status,
            submitted_time=now,
            updated_time=now,
            evidence_hash=bytes(evidence_hash),
        )
        self.store.put(claim_key, claim)
        self.membership.save(
            member_key,
            member.model_copy(update={"claim_count": checked_add(member.claim_count, 1)}),
        )

        logger.info(f"Claim {claim_key} submitted by {caller} for {amount}: {status.value}")
        return claim_key, claim

    def approve_claim(self, caller: str, claim_key: str) -> Claim:
        """
        Approve a NEEDS_REVIEW claim and pay the claimant.

        Raises:
            Unauthorized: If caller is not the authority
            InvalidClaimStatus: If the claim is not awaiting review
            InsufficientPoolBalance: If the premium pool cannot cover it
        """
        self.configs.require_authority(caller)
        claim = self.get_claim(claim_key)
        # Re-checked on every call; a concurrent deny may already have landed
        self.state_machine.require(claim, ClaimStatus.PAID)
        self.pools.require_premium_balance(claim.amount)

        member = self.store.require(claim.member, Member)
        self.pools.pay_claim(member.owner, claim.amount)

        claim = self.state_machine.transition(claim, ClaimStatus.PAID, self.clock())
        self.store.put(claim_key, claim)
        logger.info(f"Claim {claim_key} approved by {caller}; paid {claim.amount} to {member.owner}")
        return claim

    def deny_claim(self, caller: str, claim_key: str) -> Claim:
        """
        Deny a NEEDS_REVIEW claim. No funds move.

        Raises:
            Unauthorized: If caller is not the authority
            InvalidClaimStatus: If the claim is not awaiting review
        """
        self.configs.require_authority(caller)
        claim = self.get_claim(claim_key)
        claim = self.state_machine.transition(claim, ClaimStatus.DENIED, self.clock())
        self.store.put(claim_key, claim)
        logger.info(f"Claim {claim_key} denied by {caller}")
        return claim

    def get_claim(self, claim_key: str) -> Claim:
        return self.store.require(claim_key, Claim)

    def list_claims(
        self,
        owner: Optional[str] = None,
        status: Optional[ClaimStatus] = None,
    ) -> List[Tuple[str, Claim]]:
        """List claims, optionally for one member owner and/or one status."""
        member_key = keys.member_key(owner) if owner is not None else None
        return [
            (key, claim)
            for key, claim in self.store.items(Claim)
            if (member_key is None or claim.member == member_key)
            and (status is None or claim.status == status)
        ]
