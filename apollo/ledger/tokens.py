"""
Token Ledger

The fungible-token transfer primitive: debit one account, credit another,
atomically. Each account holds a single denomination. Custodial accounts are
owned by a capability object instead of an external identity and can only
be debited by presenting that same object.
"""
import logging
from typing import Dict, Union

from pydantic import BaseModel, Field

from apollo.core.keys import token_account_key
from apollo.core.numeric import U64_MAX

logger = logging.getLogger(__name__)


class TransferError(Exception):
    """Base class for failures of the transfer primitive."""

    code = "TransferError"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UnknownAccount(TransferError):
    code = "UnknownAccount"


class DenominationMismatch(TransferError):
    code = "DenominationMismatch"


class InsufficientFunds(TransferError):
    code = "InsufficientFunds"


class SignerMismatch(TransferError):
    code = "SignerMismatch"


class BalanceOverflow(TransferError):
    code = "BalanceOverflow"


class ControlKey:
    """Capability that authorizes debits from custodial accounts."""

    __slots__ = ("identity",)

    def __init__(self, identity: str):
        self.identity = identity

    def __repr__(self) -> str:
        return f"ControlKey({self.identity!r})"


Signer = Union[str, ControlKey]


class TokenAccount(BaseModel):
    """Balance of one denomination held by one owner."""
    key: str
    owner: str
    denomination: str
    balance: int = Field(default=0, ge=0, le=U64_MAX)

    class Config:
        frozen = True


class TokenLedger:
    """
    In-process token ledger.

    Accounts are immutable values replaced on every change, so a shallow
    copy of the account table is a complete snapshot.
    """

    def __init__(self):
        self._accounts: Dict[str, TokenAccount] = {}
        self._custodians: Dict[str, ControlKey] = {}

    def open_account(self, owner: str, denomination: str) -> str:
        """Open (or return) the owner's account for a denomination."""
        key = token_account_key(owner, denomination)
        if key not in self._accounts:
            self._accounts[key] = TokenAccount(key=key, owner=owner, denomination=denomination)
        return key

    def open_custodial_account(self, key: str, denomination: str, control_key: ControlKey) -> str:
        """Open an account that only ``control_key`` can debit."""
        if key in self._accounts:
            return key
        self._accounts[key] = TokenAccount(key=key, owner=control_key.identity, denomination=denomination)
        self._custodians[key] = control_key
        logger.info(f"Opened custodial account {key} ({denomination})")
        return key

    def get_account(self, key: str) -> TokenAccount:
        account = self._accounts.get(key)
        if account is None:
            raise UnknownAccount(f"Token account {key} does not exist")
        return account

    def balance(self, key: str) -> int:
        return self.get_account(key).balance

    def balance_of(self, owner: str, denomination: str) -> int:
        account = self._accounts.get(token_account_key(owner, denomination))
        return account.balance if account else 0

    def mint(self, owner: str, denomination: str, amount: int) -> str:
        """Credit new tokens to an owner's account, opening it if needed."""
        if amount <= 0:
            raise TransferError("Mint amount must be positive")
        key = self.open_account(owner, denomination)
        account = self._accounts[key]
        new_balance = account.balance + amount
        if new_balance > U64_MAX:
            raise BalanceOverflow(f"Minting {amount} overflows account {key}")
        self._accounts[key] = account.model_copy(update={"balance": new_balance})
        return key

    def transfer(self, source: str, destination: str, amount: int, signer: Signer) -> None:
        """
        Move ``amount`` from ``source`` to ``destination``.

        Raises:
            UnknownAccount: If either account does not exist
            SignerMismatch: If ``signer`` does not control ``source``
            DenominationMismatch: If the accounts hold different denominations
            InsufficientFunds: If ``source`` cannot cover ``amount``
            BalanceOverflow: If crediting ``destination`` would overflow
        """
        src = self.get_account(source)
        dst = self.get_account(destination)

        custodian = self._custodians.get(source)
        if custodian is not None:
            if signer is not custodian:
                raise SignerMismatch(f"Custodial account {source} requires its control key")
        elif not isinstance(signer, str) or signer != src.owner:
            raise SignerMismatch(f"Signer does not own account {source}")

        if src.denomination != dst.denomination:
            raise DenominationMismatch(
                f"Cannot transfer {src.denomination} into a {dst.denomination} account"
            )
        if src.balance < amount:
            raise InsufficientFunds(
                f"Account {source} holds {src.balance}, needs {amount}"
            )
        if dst.balance + amount > U64_MAX:
            raise BalanceOverflow(f"Crediting {amount} overflows account {destination}")

        if source == destination:
            return
        self._accounts[source] = src.model_copy(update={"balance": src.balance - amount})
        self._accounts[destination] = dst.model_copy(update={"balance": dst.balance + amount})

    def snapshot(self) -> Dict[str, TokenAccount]:
        return dict(self._accounts)

    def restore(self, snapshot: Dict[str, TokenAccount]) -> None:
        self._accounts = dict(snapshot)
        # Custodial accounts opened after the snapshot are rolled back too
        self._custodians = {k: v for k, v in self._custodians.items() if k in self._accounts}
