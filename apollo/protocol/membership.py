"""
Membership Ledger

Enrolls identities into policies and accepts premium payments into the
premium pool.
"""
import logging
from typing import Callable, Tuple

from apollo.core import keys
from apollo.core.errors import AlreadyEnrolled
from apollo.core.models import Member
from apollo.ledger.store import RecordStore

from .config import ConfigRegistry
from .policies import PolicyRegistry
from .pools import CustodialPools

logger = logging.getLogger(__name__)


class MembershipLedger:
    def __init__(
        self,
        store: RecordStore,
        configs: ConfigRegistry,
        policies: PolicyRegistry,
        pools: CustodialPools,
        clock: Callable[[], int],
    ):
        self.store = store
        self.configs = configs
        self.policies = policies
        self.pools = pools
        self.clock = clock

    def enroll_member(self, caller: str, policy_key: str) -> Tuple[str, Member]:
        """
        Enroll ``caller`` in a policy, collecting the first premium.

        The Member record is written only after the premium transfer
        succeeds; a failed transfer leaves no record.

        Raises:
            AlreadyEnrolled: If the caller already has a Member record
            RecordNotFound: If the policy does not exist
        """
        self.configs.load()
        key = keys.member_key(caller)
        if self.store.exists(key):
            raise AlreadyEnrolled(f"{caller} is already enrolled")
        policy = self.policies.get_policy(policy_key)

        self.pools.collect_premium(caller, policy.monthly_premium)

        member = Member(
            owner=caller,
            policy=policy_key,
            active=True,
            join_time=self.clock(),
            claim_count=0,
        )
        self.store.put(key, member)
        logger.info(f"Enrolled {caller} in policy {policy_key}")
        return key, member

    def pay_premium(self, caller: str, policy_key: str) -> int:
        """
        Pay one premium for a policy.

        Any caller may pay any policy's premium; membership is not checked.

        Returns:
            The amount paid
        """
        self.configs.load()
        policy = self.policies.get_policy(policy_key)
        self.pools.collect_premium(caller, policy.monthly_premium)
        logger.info(f"{caller} paid premium of {policy.monthly_premium} for policy {policy_key}")
        return policy.monthly_premium

    def get_member(self, owner: str) -> Member:
        return self.store.require(keys.member_key(owner), Member)

    def save(self, key: str, member: Member) -> None:
        self.store.put(key, member)
