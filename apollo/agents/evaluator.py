"""
Agent Evaluation Module

Runs the adjudication agents that review a claim awaiting manual decision.
Agents only recommend; they never move funds or change claim status.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Tuple

from apollo.core.models import Claim, Policy

logger = logging.getLogger(__name__)


@dataclass
class AgentResult:
    """Result from an individual agent's evaluation."""
    agent_name: str
    objects: bool
    blocking: bool  # True: claim should be denied; False: decision should wait
    confidence: float
    reason: str


async def _coverage_agent_evaluate(claim: Claim, policy: Policy) -> AgentResult:
    """
    Coverage Agent: checks the claim against the policy's coverage limit.
    """
    await asyncio.sleep(0)

    over_limit = claim.amount > policy.coverage_limit

    return AgentResult(
        agent_name="Coverage Agent",
        objects=over_limit,
        blocking=True,
        confidence=0.95 if over_limit else 0.9,
        reason=f"Amount {claim.amount} exceeds coverage limit {policy.coverage_limit}" if over_limit
               else "Amount within coverage limit"
    )


async def _evidence_agent_evaluate(claim: Claim) -> AgentResult:
    """
    Evidence Agent: rejects claims whose documentation digest is empty.
    """
    await asyncio.sleep(0)

    empty = not any(claim.evidence_hash)

    return AgentResult(
        agent_name="Evidence Agent",
        objects=empty,
        blocking=True,
        confidence=0.8 if empty else 0.6,
        reason="Evidence digest is all zero bytes" if empty
               else "Evidence digest present"
    )


async def _solvency_agent_evaluate(claim: Claim, pool_balance: int) -> AgentResult:
    """
    Solvency Agent: checks whether the premium pool can pay the claim now.

    A shortfall is not a reason to deny, only to wait for more premiums.
    """
    await asyncio.sleep(0)

    short = pool_balance < claim.amount

    return AgentResult(
        agent_name="Solvency Agent",
        objects=short,
        blocking=False,
        confidence=1.0,
        reason=f"Premium pool holds {pool_balance}, needs {claim.amount}" if short
               else "Premium pool can cover the claim"
    )


async def agent_evaluation(
    claim: Claim,
    policy: Policy,
    pool_balance: int
) -> Tuple[bool, list[AgentResult]]:
    """
    Orchestrate agent evaluation of a claim.

    Runs all agents concurrently.

    Args:
        claim: The claim to evaluate
        policy: The policy the claimant is enrolled in
        pool_balance: Current premium pool balance

    Returns:
        Tuple of (any_objection: bool, agent_results: list)
    """
    results = await asyncio.gather(
        _coverage_agent_evaluate(claim, policy),
        _evidence_agent_evaluate(claim),
        _solvency_agent_evaluate(claim, pool_balance)
    )

    any_objection = any(r.objects for r in results)

    for result in results:
        logger.info(
            f"  - {result.agent_name}: "
            f"objects={result.objects}, "
            f"confidence={result.confidence:.2f}, "
            f"reason='{result.reason}'"
        )

    return any_objection, list(results)
