"""
Adjudication Orchestrator

Combines agent results into a single recommendation for a claim awaiting
review, and applies it through the authority-gated transitions.
"""
import logging
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from apollo.agents.evaluator import AgentResult
from apollo.core.models import Claim
from apollo.protocol.protocol import Protocol

logger = logging.getLogger(__name__)


class Recommendation(str, Enum):
    APPROVE = "approve"
    DENY = "deny"
    DEFER = "defer"


class AdjudicationResult(BaseModel):
    """Combined result from all agents."""
    claim_key: str
    recommendation: Recommendation
    confidence: float  # 0.0 to 1.0
    reasons: List[str]
    summary: str


class AdjudicationOrchestrator:
    """
    Aggregates agent results.

    Decision logic:
    - If ANY blocking agent objects, recommend DENY
    - Else if ANY agent objects, recommend DEFER
    - Otherwise recommend APPROVE
    """

    def evaluate_results(self, claim_key: str, results: List[AgentResult]) -> AdjudicationResult:
        blocking = [r for r in results if r.objects and r.blocking]
        deferring = [r for r in results if r.objects and not r.blocking]

        if blocking:
            recommendation = Recommendation.DENY
            deciding = blocking
        elif deferring:
            recommendation = Recommendation.DEFER
            deciding = deferring
        else:
            recommendation = Recommendation.APPROVE
            deciding = results

        reasons = [f"{r.agent_name}: {r.reason}" for r in deciding]
        confidence = min((r.confidence for r in deciding), default=0.0)

        agents_run = [f"{r.agent_name}({'!' if r.objects else 'ok'})" for r in results]
        summary = f"Agents: {', '.join(agents_run)}. Recommendation: {recommendation.value.upper()}"

        logger.info(f"Claim {claim_key}: recommendation={recommendation.value}, confidence={confidence:.2f}")

        return AdjudicationResult(
            claim_key=claim_key,
            recommendation=recommendation,
            confidence=confidence,
            reasons=reasons,
            summary=summary
        )


# Global orchestrator instance
orchestrator = AdjudicationOrchestrator()


def apply_recommendation(
    protocol: Protocol,
    caller: str,
    result: AdjudicationResult
) -> Optional[Claim]:
    """
    Apply a recommendation as ``caller``.

    APPROVE and DENY go through the normal approve/deny operations, so the
    authority check and status check still apply. DEFER leaves the claim
    untouched and returns None.
    """
    if result.recommendation == Recommendation.APPROVE:
        return protocol.approve_claim(caller, result.claim_key)
    if result.recommendation == Recommendation.DENY:
        logger.warning(f"Claim {result.claim_key} denied on recommendation: {'; '.join(result.reasons)}")
        return protocol.deny_claim(caller, result.claim_key)

    logger.info(f"Claim {result.claim_key} deferred: {'; '.join(result.reasons)}")
    return None
