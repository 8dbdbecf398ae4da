# Ledger module - host substrate the protocol core runs on
from .host import HostLedger
from .store import RecordStore
from .tokens import (
    BalanceOverflow,
    ControlKey,
    DenominationMismatch,
    InsufficientFunds,
    SignerMismatch,
    TokenAccount,
    TokenLedger,
    TransferError,
    UnknownAccount,
)

__all__ = [
    "HostLedger",
    "RecordStore",
    "TokenLedger",
    "TokenAccount",
    "ControlKey",
    "TransferError",
    "BalanceOverflow",
    "DenominationMismatch",
    "InsufficientFunds",
    "SignerMismatch",
    "UnknownAccount",
]
