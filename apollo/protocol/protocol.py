"""
Protocol Facade

Wires the components together and runs every operation inside one host
transaction.

Initialization order:
    HostLedger -> ConfigRegistry -> CustodialPools -> PolicyRegistry
    -> MembershipLedger -> StakeLedger -> ClaimAdjudicator

Every component receives references to the components it depends on; none
of them reads global state.
"""
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

from apollo.core.models import AuditLogEntry, Claim, Member, Policy, ProtocolConfig, Stake
from apollo.core.states import ClaimStatus
from apollo.ledger.host import HostLedger
from apollo.state_machine.machine import ClaimStateMachine

from .claims import ClaimAdjudicator
from .config import ConfigRegistry
from .membership import MembershipLedger
from .policies import PolicyRegistry
from .pools import CustodialPools
from .staking import StakeLedger

logger = logging.getLogger(__name__)


def system_clock() -> int:
    return int(time.time())


class Protocol:
    """Operation surface of the mutual-insurance core."""

    def __init__(self, host: HostLedger | None = None, clock: Callable[[], int] | None = None):
        self.host = host or HostLedger()
        self.clock = clock or system_clock
        self.state_machine = ClaimStateMachine()

        self.configs = ConfigRegistry(self.host.store)
        self.pools = CustodialPools(self.host.tokens, self.configs)
        self.policies = PolicyRegistry(self.host.store, self.configs)
        self.membership = MembershipLedger(
            self.host.store, self.configs, self.policies, self.pools, self.clock
        )
        self.staking = StakeLedger(self.host.store, self.configs, self.pools, self.clock)
        self.claims = ClaimAdjudicator(
            self.host.store, self.configs, self.membership, self.pools, self.state_machine, self.clock
        )
        self._audit_log: List[AuditLogEntry] = []

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def initialize(
        self,
        caller: str,
        denomination_a_id: str,
        denomination_b_id: str,
        fast_claim_threshold: int,
    ) -> ProtocolConfig:
        with self.host.transaction():
            config = self.configs.initialize(caller, denomination_a_id, denomination_b_id, fast_claim_threshold)
            self.pools.open()
            self._record(caller, "initialize", {
                "denomination_a_id": denomination_a_id,
                "denomination_b_id": denomination_b_id,
                "fast_claim_threshold": fast_claim_threshold,
            })
        return config

    def create_policy(self, caller: str, monthly_premium: int, coverage_limit: int) -> Tuple[str, Policy]:
        with self.host.transaction():
            key, policy = self.policies.create_policy(caller, monthly_premium, coverage_limit)
            self._record(caller, "create_policy", {
                "policy": key,
                "monthly_premium": monthly_premium,
                "coverage_limit": coverage_limit,
            })
        return key, policy

    def enroll_member(self, caller: str, policy_key: str) -> Tuple[str, Member]:
        with self.host.transaction():
            key, member = self.membership.enroll_member(caller, policy_key)
            self._record(caller, "enroll_member", {"policy": policy_key, "member": key})
        return key, member

    def pay_premium(self, caller: str, policy_key: str) -> int:
        with self.host.transaction():
            amount = self.membership.pay_premium(caller, policy_key)
            self._record(caller, "pay_premium", {"policy": policy_key, "amount": amount})
        return amount

    def stake(self, caller: str, amount: int) -> Tuple[str, Stake]:
        with self.host.transaction():
            key, stake = self.staking.stake(caller, amount)
            self._record(caller, "stake", {"stake": key, "amount": amount, "total": stake.amount})
        return key, stake

    def unstake(self, caller: str) -> int:
        with self.host.transaction():
            amount = self.staking.unstake(caller)
            self._record(caller, "unstake", {"amount": amount})
        return amount

    def submit_claim(self, caller: str, amount: int, evidence_hash: bytes) -> Tuple[str, Claim]:
        with self.host.transaction():
            key, claim = self.claims.submit_claim(caller, amount, evidence_hash)
            self._record(caller, "submit_claim", {
                "claim": key,
                "amount": amount,
                "status": claim.status.value,
            })
        return key, claim

    def approve_claim(self, caller: str, claim_key: str) -> Claim:
        with self.host.transaction():
            claim = self.claims.approve_claim(caller, claim_key)
            self._record(caller, "approve_claim", {"claim": claim_key, "amount": claim.amount})
        return claim

    def deny_claim(self, caller: str, claim_key: str) -> Claim:
        with self.host.transaction():
            claim = self.claims.deny_claim(caller, claim_key)
            self._record(caller, "deny_claim", {"claim": claim_key})
        return claim

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def config(self) -> ProtocolConfig:
        return self.configs.load()

    def require_authority(self, caller: str) -> ProtocolConfig:
        return self.configs.require_authority(caller)

    def pool_balances(self) -> Dict[str, int]:
        self.configs.load()
        return {
            "premium_pool": self.pools.premium_balance(),
            "capital_pool": self.pools.capital_balance(),
        }

    def get_policy(self, key: str) -> Policy:
        return self.policies.get_policy(key)

    def list_policies(self) -> List[Tuple[str, Policy]]:
        return self.policies.list_policies()

    def get_member(self, owner: str) -> Member:
        return self.membership.get_member(owner)

    def get_stake(self, owner: str) -> Stake:
        return self.staking.get_stake(owner)

    def get_claim(self, key: str) -> Claim:
        return self.claims.get_claim(key)

    def claimant(self, claim: Claim) -> Member:
        return self.host.store.require(claim.member, Member)

    def list_claims(
        self,
        owner: Optional[str] = None,
        status: Optional[ClaimStatus] = None,
    ) -> List[Tuple[str, Claim]]:
        return self.claims.list_claims(owner=owner, status=status)

    def balance_of(self, owner: str, denomination: str) -> int:
        return self.host.tokens.balance_of(owner, denomination)

    def audit_log(self) -> List[AuditLogEntry]:
        return list(self._audit_log)

    # ------------------------------------------------------------------
    # Test deployments
    # ------------------------------------------------------------------

    def mint(self, owner: str, denomination: str, amount: int) -> int:
        """Credit tokens to an owner on the in-process ledger."""
        with self.host.transaction():
            self.host.tokens.mint(owner, denomination, amount)
        return self.balance_of(owner, denomination)

    def _record(self, actor: str, operation: str, detail: dict) -> None:
        """Append an audit entry. Called last inside the operation's transaction, so entries follow commit order."""
        self._audit_log.append(
            AuditLogEntry(actor=actor, operation=operation, timestamp=self.clock(), detail=detail)
        )
