# Protocol module - the claims-and-custody state machine
from .claims import ClaimAdjudicator
from .config import ConfigRegistry
from .membership import MembershipLedger
from .policies import PolicyRegistry
from .pools import CustodialPools
from .protocol import Protocol
from .staking import StakeLedger

__all__ = [
    "Protocol",
    "ConfigRegistry",
    "CustodialPools",
    "PolicyRegistry",
    "MembershipLedger",
    "StakeLedger",
    "ClaimAdjudicator",
]
