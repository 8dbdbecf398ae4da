"""
FastAPI Endpoints for the Protocol

Exposes every protocol operation and the read-only queries over HTTP. The
caller identity is taken from the ``X-Caller`` header; verifying it is the
host's job, not this service's.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel, Field

from apollo.agents.orchestrator import AdjudicationResult
from apollo.core.keys import member_key, stake_key
from apollo.core.models import AuditLogEntry, Claim, Member, Policy, ProtocolConfig, Stake
from apollo.core.numeric import U64_MAX
from apollo.core.states import ClaimStatus
from apollo.monitors.process_monitor import ClaimMonitor
from apollo.protocol.protocol import Protocol
from apollo.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# In-process protocol (the host ledger would be external in production)
protocol = Protocol()
claim_monitor = ClaimMonitor(protocol)


def get_protocol() -> Protocol:
    return protocol


def get_monitor() -> ClaimMonitor:
    return claim_monitor


protocol_router = APIRouter(prefix="/protocol", tags=["protocol"])
policies_router = APIRouter(prefix="/policies", tags=["policies"])
members_router = APIRouter(prefix="/members", tags=["members"])
stakes_router = APIRouter(prefix="/stakes", tags=["stakes"])
claims_router = APIRouter(prefix="/claims", tags=["claims"])
ledger_router = APIRouter(prefix="/ledger", tags=["ledger"])
audit_router = APIRouter(prefix="/audit", tags=["audit"])


# ============================================
# REQUEST / RESPONSE MODELS
# ============================================

class InitializeRequest(BaseModel):
    denomination_a_id: str = Field(..., min_length=1, description="Premium token denomination")
    denomination_b_id: str = Field(..., min_length=1, description="Capital token denomination")
    fast_claim_threshold: int = Field(..., ge=0, le=U64_MAX)


class PolicyCreate(BaseModel):
    monthly_premium: int = Field(..., ge=0, le=U64_MAX)
    coverage_limit: int = Field(..., ge=0, le=U64_MAX)


class PolicyResponse(BaseModel):
    key: str
    policy: Policy


class EnrollRequest(BaseModel):
    policy: str = Field(..., description="Key of the policy to enroll in")


class MemberResponse(BaseModel):
    key: str
    member: Member


class PremiumResponse(BaseModel):
    policy: str
    amount: int


class StakeRequest(BaseModel):
    amount: int = Field(..., ge=0, le=U64_MAX)


class StakeResponse(BaseModel):
    key: str
    stake: Stake


class UnstakeResponse(BaseModel):
    amount: int


class ClaimCreate(BaseModel):
    """Request model for submitting a claim."""
    amount: int = Field(..., ge=0, le=U64_MAX, description="Requested reimbursement")
    evidence_hash: str = Field(
        ..., pattern=r"^([0-9a-fA-F]{2})*$",
        description="Hex-encoded 32-byte digest of the claim documentation"
    )


class ClaimResponse(BaseModel):
    """Response model for claim operations."""
    key: str
    claim: Claim
    message: str
    next_valid_statuses: List[ClaimStatus]


class AutoAdjudicateResponse(BaseModel):
    recommendation: AdjudicationResult
    claim: ClaimResponse


class PoolsResponse(BaseModel):
    premium_pool: int
    capital_pool: int


class MintRequest(BaseModel):
    owner: str = Field(..., min_length=1)
    denomination: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0, le=U64_MAX)


class BalanceResponse(BaseModel):
    owner: str
    denomination: str
    balance: int


def _claim_response(protocol: Protocol, key: str, claim: Claim, message: str) -> ClaimResponse:
    return ClaimResponse(
        key=key,
        claim=claim,
        message=message,
        next_valid_statuses=protocol.state_machine.get_valid_transitions(claim)
    )


# ============================================
# PROTOCOL
# ============================================

@protocol_router.post("/initialize", response_model=ProtocolConfig, status_code=status.HTTP_201_CREATED)
async def initialize(
    request: InitializeRequest,
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol)
) -> ProtocolConfig:
    """Create the protocol configuration. The caller becomes the authority."""
    return protocol.initialize(
        caller, request.denomination_a_id, request.denomination_b_id, request.fast_claim_threshold
    )


@protocol_router.get("/config", response_model=ProtocolConfig)
async def get_config(protocol: Protocol = Depends(get_protocol)) -> ProtocolConfig:
    return protocol.config()


@protocol_router.get("/pools", response_model=PoolsResponse)
async def get_pools(protocol: Protocol = Depends(get_protocol)) -> PoolsResponse:
    return PoolsResponse(**protocol.pool_balances())


# ============================================
# POLICIES
# ============================================

@policies_router.post("/", response_model=PolicyResponse, status_code=status.HTTP_201_CREATED)
async def create_policy(
    request: PolicyCreate,
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol)
) -> PolicyResponse:
    """Create a policy. Authority only."""
    key, policy = protocol.create_policy(caller, request.monthly_premium, request.coverage_limit)
    return PolicyResponse(key=key, policy=policy)


@policies_router.get("/", response_model=List[PolicyResponse])
async def list_policies(protocol: Protocol = Depends(get_protocol)) -> List[PolicyResponse]:
    return [PolicyResponse(key=key, policy=policy) for key, policy in protocol.list_policies()]


@policies_router.get("/{policy_key}", response_model=PolicyResponse)
async def get_policy(policy_key: str, protocol: Protocol = Depends(get_protocol)) -> PolicyResponse:
    return PolicyResponse(key=policy_key, policy=protocol.get_policy(policy_key))


@policies_router.post("/{policy_key}/premiums", response_model=PremiumResponse)
async def pay_premium(
    policy_key: str,
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol)
) -> PremiumResponse:
    """Pay one premium for a policy. Open to any caller."""
    amount = protocol.pay_premium(caller, policy_key)
    return PremiumResponse(policy=policy_key, amount=amount)


# ============================================
# MEMBERS
# ============================================

@members_router.post("/", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def enroll_member(
    request: EnrollRequest,
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol)
) -> MemberResponse:
    """Enroll the caller in a policy, paying the first premium."""
    key, member = protocol.enroll_member(caller, request.policy)
    return MemberResponse(key=key, member=member)


@members_router.get("/{owner}", response_model=MemberResponse)
async def get_member(owner: str, protocol: Protocol = Depends(get_protocol)) -> MemberResponse:
    return MemberResponse(key=member_key(owner), member=protocol.get_member(owner))


# ============================================
# STAKES
# ============================================

@stakes_router.post("/", response_model=StakeResponse)
async def stake(
    request: StakeRequest,
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol)
) -> StakeResponse:
    """Stake capital tokens into the capital pool."""
    key, record = protocol.stake(caller, request.amount)
    return StakeResponse(key=key, stake=record)


@stakes_router.post("/unstake", response_model=UnstakeResponse)
async def unstake(
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol)
) -> UnstakeResponse:
    """Withdraw the caller's entire stake."""
    return UnstakeResponse(amount=protocol.unstake(caller))


@stakes_router.get("/{owner}", response_model=StakeResponse)
async def get_stake(owner: str, protocol: Protocol = Depends(get_protocol)) -> StakeResponse:
    return StakeResponse(key=stake_key(owner), stake=protocol.get_stake(owner))


# ============================================
# CLAIMS
# ============================================

@claims_router.post("/", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
async def submit_claim(
    request: ClaimCreate,
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol),
    monitor: ClaimMonitor = Depends(get_monitor)
) -> ClaimResponse:
    """
    Submit a claim.

    Claims at or below the fast-claim threshold are paid immediately.
    Larger claims enter NeedsReview and are evaluated by the agents.
    """
    key, claim = protocol.submit_claim(caller, request.amount, bytes.fromhex(request.evidence_hash))
    await monitor.on_status_entered(key, claim)

    if claim.status == ClaimStatus.PAID:
        message = f"Claim paid: {claim.amount} transferred to {caller}"
    else:
        message = "Claim recorded and awaiting review"
    return _claim_response(protocol, key, claim, message)


@claims_router.get("/", response_model=List[ClaimResponse])
async def list_claims(
    owner: Optional[str] = None,
    claim_status: Optional[ClaimStatus] = Query(None, alias="status"),
    protocol: Protocol = Depends(get_protocol)
) -> List[ClaimResponse]:
    """List claims, optionally filtered by member owner and status."""
    return [
        _claim_response(protocol, key, claim, f"Claim {key}")
        for key, claim in protocol.list_claims(owner=owner, status=claim_status)
    ]


@claims_router.get("/{claim_key}", response_model=ClaimResponse)
async def get_claim(claim_key: str, protocol: Protocol = Depends(get_protocol)) -> ClaimResponse:
    claim = protocol.get_claim(claim_key)
    return _claim_response(protocol, claim_key, claim, f"Claim {claim_key} retrieved")


@claims_router.post("/{claim_key}/approve", response_model=ClaimResponse)
async def approve_claim(
    claim_key: str,
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol),
    monitor: ClaimMonitor = Depends(get_monitor)
) -> ClaimResponse:
    """Approve a claim awaiting review and pay it. Authority only."""
    claim = protocol.approve_claim(caller, claim_key)
    await monitor.on_status_entered(claim_key, claim)
    return _claim_response(protocol, claim_key, claim, f"Claim approved by {caller}")


@claims_router.post("/{claim_key}/deny", response_model=ClaimResponse)
async def deny_claim(
    claim_key: str,
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol),
    monitor: ClaimMonitor = Depends(get_monitor)
) -> ClaimResponse:
    """Deny a claim awaiting review. Authority only."""
    claim = protocol.deny_claim(caller, claim_key)
    await monitor.on_status_entered(claim_key, claim)
    return _claim_response(protocol, claim_key, claim, f"Claim denied by {caller}")


@claims_router.get("/{claim_key}/recommendation", response_model=AdjudicationResult)
async def get_recommendation(
    claim_key: str,
    protocol: Protocol = Depends(get_protocol),
    monitor: ClaimMonitor = Depends(get_monitor)
) -> AdjudicationResult:
    """Latest agent recommendation for a claim."""
    protocol.get_claim(claim_key)
    result = monitor.get_recommendation(claim_key)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No recommendation for claim {claim_key}"
        )
    return result


@claims_router.post("/{claim_key}/auto-adjudicate", response_model=AutoAdjudicateResponse)
async def auto_adjudicate(
    claim_key: str,
    caller: str = Header(..., alias="X-Caller"),
    protocol: Protocol = Depends(get_protocol),
    monitor: ClaimMonitor = Depends(get_monitor)
) -> AutoAdjudicateResponse:
    """
    Evaluate a claim awaiting review and apply the agents' recommendation.

    Authority only. Deferred claims stay in NeedsReview.
    """
    result, claim = await monitor.auto_adjudicate(caller, claim_key)
    return AutoAdjudicateResponse(
        recommendation=result,
        claim=_claim_response(protocol, claim_key, claim, result.summary)
    )


# ============================================
# LEDGER (test deployments)
# ============================================

@ledger_router.post("/mint", response_model=BalanceResponse)
async def mint(
    request: MintRequest,
    protocol: Protocol = Depends(get_protocol),
    settings: Settings = Depends(get_settings)
) -> BalanceResponse:
    """Credit tokens on the in-process ledger. Disabled unless the faucet is enabled."""
    if not settings.ENABLE_FAUCET:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Faucet is disabled"
        )
    balance = protocol.mint(request.owner, request.denomination, request.amount)
    logger.info(f"Minted {request.amount} {request.denomination} to {request.owner}")
    return BalanceResponse(owner=request.owner, denomination=request.denomination, balance=balance)


@ledger_router.get("/balances/{owner}/{denomination}", response_model=BalanceResponse)
async def get_balance(
    owner: str,
    denomination: str,
    protocol: Protocol = Depends(get_protocol)
) -> BalanceResponse:
    return BalanceResponse(
        owner=owner,
        denomination=denomination,
        balance=protocol.balance_of(owner, denomination)
    )


# ============================================
# AUDIT
# ============================================

@audit_router.get("/", response_model=List[AuditLogEntry])
async def get_audit_log(protocol: Protocol = Depends(get_protocol)) -> List[AuditLogEntry]:
    return protocol.audit_log()


routers = [
    protocol_router,
    policies_router,
    members_router,
    stakes_router,
    claims_router,
    ledger_router,
    audit_router,
]
