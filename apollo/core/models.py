"""
Protocol Record Models

Defines the durable records owned by the protocol core. Records are
frozen; transitions produce updated copies via ``model_copy``.
"""
from pydantic import BaseModel, Field, field_serializer, field_validator

from .numeric import U64_MAX
from .states import ClaimStatus

EVIDENCE_HASH_SIZE = 32


class ProtocolConfig(BaseModel):
    """Singleton protocol configuration."""
    authority: str = Field(..., min_length=1, description="Identity allowed to create policies and decide claims")
    denomination_a_id: str = Field(..., min_length=1, description="Premium token denomination")
    denomination_b_id: str = Field(..., min_length=1, description="Capital (staking) token denomination")
    fast_claim_threshold: int = Field(
        ..., ge=0, le=U64_MAX,
        description="Claims at or below this amount are paid without review"
    )
    next_policy_id: int = Field(default=0, ge=0, le=U64_MAX, description="Counter for the next policy key")

    class Config:
        frozen = True


class Policy(BaseModel):
    """A reusable coverage template members enroll against."""
    creator: str = Field(..., description="Authority that created the policy")
    monthly_premium: int = Field(..., gt=0, le=U64_MAX, description="Premium charged per payment")
    coverage_limit: int = Field(..., gt=0, le=U64_MAX, description="Maximum amount per claim")

    class Config:
        frozen = True


class Member(BaseModel):
    """Enrollment record binding one identity to one policy."""
    owner: str = Field(..., description="Enrolled identity")
    policy: str = Field(..., description="Key of the policy enrolled against")
    active: bool = Field(default=True)
    join_time: int = Field(..., description="Unix timestamp of enrollment")
    claim_count: int = Field(default=0, ge=0, le=U64_MAX, description="Number of claims submitted")

    class Config:
        frozen = True


class Stake(BaseModel):
    """Capital-token balance staked by one identity."""
    owner: str = Field(..., description="Staking identity")
    amount: int = Field(default=0, ge=0, le=U64_MAX, description="Amount held in the capital pool")
    start_time: int = Field(default=0, description="Unix timestamp of the most recent deposit")

    class Config:
        frozen = True


class Claim(BaseModel):
    """
    Reimbursement Claim

    Keyed by (member key, member claim_count at submission) so a member's
    claims are totally ordered.
    """
    member: str = Field(..., description="Key of the claimant's member record")
    amount: int = Field(..., gt=0, le=U64_MAX, description="Requested reimbursement")
    status: ClaimStatus = Field(..., description="Current lifecycle status")
    submitted_time: int = Field(..., description="Unix timestamp of submission")
    updated_time: int = Field(..., description="Unix timestamp of last status change")
    evidence_hash: bytes = Field(
        ..., min_length=EVIDENCE_HASH_SIZE, max_length=EVIDENCE_HASH_SIZE,
        description="Digest of off-ledger documentation"
    )

    class Config:
        frozen = True
        use_enum_values = False  # Keep enum objects, not just values

    @field_validator("evidence_hash", mode="before")
    @classmethod
    def _parse_hex(cls, value):
        if isinstance(value, str):
            return bytes.fromhex(value)
        return value

    @field_serializer("evidence_hash")
    def _dump_hex(self, value: bytes) -> str:
        return value.hex()


class AuditLogEntry(BaseModel):
    """Entry in the protocol audit trail."""
    actor: str = Field(..., description="Identity that invoked the operation")
    operation: str = Field(..., description="Operation name")
    timestamp: int = Field(..., description="Unix timestamp at which the operation committed")
    detail: dict = Field(default_factory=dict, description="Operation inputs and resulting record keys")
