# Core module - statuses, records, errors and key derivation
from .states import ClaimStatus
from .models import AuditLogEntry, Claim, Member, Policy, ProtocolConfig, Stake
from .errors import (
    AlreadyEnrolled,
    AlreadyInitialized,
    ArithmeticOverflow,
    InsufficientPoolBalance,
    InvalidClaimStatus,
    InvalidParameter,
    NotInitialized,
    ProtocolError,
    RecordNotFound,
    Unauthorized,
)
from .keys import derive_key

__all__ = [
    "ClaimStatus",
    "AuditLogEntry",
    "Claim",
    "Member",
    "Policy",
    "ProtocolConfig",
    "Stake",
    "ProtocolError",
    "AlreadyEnrolled",
    "AlreadyInitialized",
    "ArithmeticOverflow",
    "InsufficientPoolBalance",
    "InvalidClaimStatus",
    "InvalidParameter",
    "NotInitialized",
    "RecordNotFound",
    "Unauthorized",
    "derive_key",
]
