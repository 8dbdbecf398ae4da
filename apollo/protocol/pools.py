"""
Custodial Pools

The premium pool (denomination A) and capital pool (denomination B). Both
are owned by a control key derived from the protocol config; no external
identity can authorize a debit from them.
"""
import logging

from apollo.core import keys
from apollo.core.errors import InsufficientPoolBalance, InvalidParameter
from apollo.ledger.tokens import ControlKey, TokenLedger

from .config import ConfigRegistry

logger = logging.getLogger(__name__)


class CustodialPools:
    """Transfer source/target for every money-moving operation."""

    def __init__(self, tokens: TokenLedger, configs: ConfigRegistry):
        self.tokens = tokens
        self.configs = configs
        self.premium_pool = keys.derive_key(keys.PREMIUM_POOL, configs.key)
        self.capital_pool = keys.derive_key(keys.CAPITAL_POOL, configs.key)
        self._control_key = ControlKey(configs.key)

    def open(self) -> None:
        """Open both pool accounts for the configured denominations."""
        config = self.configs.load()
        self.tokens.open_custodial_account(self.premium_pool, config.denomination_a_id, self._control_key)
        self.tokens.open_custodial_account(self.capital_pool, config.denomination_b_id, self._control_key)

    def premium_balance(self) -> int:
        return self.tokens.balance(self.premium_pool)

    def capital_balance(self) -> int:
        return self.tokens.balance(self.capital_pool)

    def require_premium_balance(self, amount: int) -> None:
        balance = self.premium_balance()
        if balance < amount:
            raise InsufficientPoolBalance(
                f"Premium pool holds {balance}, cannot pay {amount}"
            )

    # -- deposits, signed by the paying identity --

    def collect_premium(self, payer: str, amount: int) -> None:
        denomination = self.configs.load().denomination_a_id
        self._deposit(payer, denomination, self.premium_pool, amount)

    def deposit_capital(self, staker: str, amount: int) -> None:
        denomination = self.configs.load().denomination_b_id
        self._deposit(staker, denomination, self.capital_pool, amount)

    # -- withdrawals, signed by the control key --

    def pay_claim(self, recipient: str, amount: int) -> None:
        denomination = self.configs.load().denomination_a_id
        self._withdraw(self.premium_pool, recipient, denomination, amount)

    def release_capital(self, recipient: str, amount: int) -> None:
        denomination = self.configs.load().denomination_b_id
        self._withdraw(self.capital_pool, recipient, denomination, amount)

    def _deposit(self, payer: str, denomination: str, pool: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidParameter("Transfer amount must be positive")
        source = keys.token_account_key(payer, denomination)
        self.tokens.transfer(source, pool, amount, signer=payer)
        logger.info(f"Moved {amount} {denomination} from {payer} into {pool}")

    def _withdraw(self, pool: str, recipient: str, denomination: str, amount: int) -> None:
        if amount <= 0:
            raise InvalidParameter("Transfer amount must be positive")
        destination = self.tokens.open_account(recipient, denomination)
        self.tokens.transfer(pool, destination, amount, signer=self._control_key)
        logger.info(f"Moved {amount} {denomination} from {pool} to {recipient}")
