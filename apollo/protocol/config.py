"""
Protocol Configuration

Creates and reads the singleton ProtocolConfig and performs the authority
check used by every privileged operation.
"""
import logging

from apollo.core import keys
from apollo.core.errors import AlreadyInitialized, InvalidParameter, NotInitialized, Unauthorized
from apollo.core.models import ProtocolConfig
from apollo.core.numeric import U64_MAX
from apollo.ledger.store import RecordStore

logger = logging.getLogger(__name__)


class ConfigRegistry:
    """Owner of the ProtocolConfig singleton."""

    def __init__(self, store: RecordStore):
        self.store = store
        self.key = keys.config_key()

    def initialize(
        self,
        caller: str,
        denomination_a_id: str,
        denomination_b_id: str,
        fast_claim_threshold: int,
    ) -> ProtocolConfig:
        """
        Create the singleton with ``caller`` as authority.

        A threshold of 0 means no claim is ever auto-approved.

        Raises:
            AlreadyInitialized: If a config already exists
        """
        if self.store.exists(self.key):
            raise AlreadyInitialized()
        if not 0 <= fast_claim_threshold <= U64_MAX:
            raise InvalidParameter("fast_claim_threshold must fit in an unsigned 64-bit amount")
        if not caller or not denomination_a_id or not denomination_b_id:
            raise InvalidParameter("Authority and denomination ids must be non-empty")

        config = ProtocolConfig(
            authority=caller,
            denomination_a_id=denomination_a_id,
            denomination_b_id=denomination_b_id,
            fast_claim_threshold=fast_claim_threshold,
            next_policy_id=0,
        )
        self.store.put(self.key, config)
        logger.info(
            f"Protocol initialized by {caller} "
            f"(premium={denomination_a_id}, capital={denomination_b_id}, "
            f"threshold={fast_claim_threshold})"
        )
        return config

    def is_initialized(self) -> bool:
        return self.store.exists(self.key)

    def load(self) -> ProtocolConfig:
        config = self.store.get(self.key, ProtocolConfig)
        if config is None:
            raise NotInitialized()
        return config

    def save(self, config: ProtocolConfig) -> None:
        self.store.put(self.key, config)

    def require_authority(self, caller: str) -> ProtocolConfig:
        """Load the config and require ``caller`` to be its authority."""
        config = self.load()
        if caller != config.authority:
            logger.warning(f"Rejected privileged call from {caller}")
            raise Unauthorized()
        return config
