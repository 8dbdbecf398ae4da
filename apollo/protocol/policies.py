"""
Policy Registry

Creates immutable coverage templates. Only the authority may create them;
there is no update or delete path.
"""
import logging
from typing import List, Tuple

from apollo.core import keys
from apollo.core.errors import InvalidParameter
from apollo.core.models import Policy
from apollo.core.numeric import U64_MAX, checked_add
from apollo.ledger.store import RecordStore

from .config import ConfigRegistry

logger = logging.getLogger(__name__)


class PolicyRegistry:
    def __init__(self, store: RecordStore, configs: ConfigRegistry):
        self.store = store
        self.configs = configs

    def create_policy(self, caller: str, monthly_premium: int, coverage_limit: int) -> Tuple[str, Policy]:
        """
        Create a policy at the next counter value.

        Returns:
            (policy key, policy)

        Raises:
            Unauthorized: If caller is not the authority
            InvalidParameter: If either amount is zero or out of range
            ArithmeticOverflow: If the policy counter is exhausted
        """
        config = self.configs.require_authority(caller)
        for name, value in (("monthly_premium", monthly_premium), ("coverage_limit", coverage_limit)):
            if not 0 < value <= U64_MAX:
                raise InvalidParameter(f"{name} must be greater than zero")

        key = keys.policy_key(config.next_policy_id)
        next_id = checked_add(config.next_policy_id, 1)
        policy = Policy(creator=caller, monthly_premium=monthly_premium, coverage_limit=coverage_limit)
        self.store.put(key, policy)
        self.configs.save(config.model_copy(update={"next_policy_id": next_id}))

        logger.info(f"Created policy {key} (premium={monthly_premium}, coverage={coverage_limit})")
        return key, policy

    def get_policy(self, key: str) -> Policy:
        return self.store.require(key, Policy)

    def list_policies(self) -> List[Tuple[str, Policy]]:
        return list(self.store.items(Policy))
