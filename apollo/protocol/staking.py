"""
Stake Ledger

Tracks capital-token balances staked into the capital pool.
"""
import logging
from typing import Callable, Tuple

from apollo.core import keys
from apollo.core.errors import InvalidParameter, Unauthorized
from apollo.core.models import Stake
from apollo.core.numeric import U64_MAX, checked_add
from apollo.ledger.store import RecordStore

from .config import ConfigRegistry
from .pools import CustodialPools

logger = logging.getLogger(__name__)


class StakeLedger:
    def __init__(
        self,
        store: RecordStore,
        configs: ConfigRegistry,
        pools: CustodialPools,
        clock: Callable[[], int],
    ):
        self.store = store
        self.configs = configs
        self.pools = pools
        self.clock = clock

    def stake(self, caller: str, amount: int) -> Tuple[str, Stake]:
        """
        Stake ``amount`` of the capital token.

        Deposits accumulate; every deposit resets ``start_time``.

        Raises:
            InvalidParameter: If amount is zero or out of range
            Unauthorized: If the stake record belongs to another owner
            ArithmeticOverflow: If the accumulated amount would overflow
        """
        self.configs.load()
        if not 0 < amount <= U64_MAX:
            raise InvalidParameter("Stake amount must be greater than zero")

        self.pools.deposit_capital(caller, amount)

        key = keys.stake_key(caller)
        stake = self.store.get(key, Stake)
        if stake is None:
            stake = Stake(owner=caller)
        elif stake.owner != caller:
            raise Unauthorized(f"Stake record {key} belongs to another owner")

        stake = stake.model_copy(update={
            "amount": checked_add(stake.amount, amount),
            "start_time": self.clock(),
        })
        self.store.put(key, stake)
        logger.info(f"{caller} staked {amount} (total {stake.amount})")
        return key, stake

    def unstake(self, caller: str) -> int:
        """
        Withdraw the entire staked amount.

        Returns:
            The amount returned to the caller

        Raises:
            InvalidParameter: If nothing is staked
        """
        self.configs.load()
        key = keys.stake_key(caller)
        stake = self.store.get(key, Stake)
        if stake is None or stake.amount == 0:
            raise InvalidParameter("Nothing staked")
        if stake.owner != caller:
            raise Unauthorized(f"Stake record {key} belongs to another owner")

        amount = stake.amount
        self.pools.release_capital(caller, amount)
        self.store.put(key, stake.model_copy(update={"amount": 0}))
        logger.info(f"{caller} unstaked {amount}")
        return amount

    def get_stake(self, owner: str) -> Stake:
        return self.store.require(keys.stake_key(owner), Stake)
