"""
Claim Monitor

Watches claim status changes and triggers the adjudication agents.
"""
import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple

from apollo.agents.evaluator import agent_evaluation
from apollo.agents.orchestrator import AdjudicationResult, apply_recommendation, orchestrator
from apollo.core.models import Claim
from apollo.core.states import ClaimStatus
from apollo.protocol.protocol import Protocol

logger = logging.getLogger(__name__)

Handler = Callable[[str, Claim], Awaitable[None]]


class ClaimMonitor:
    """
    Runs event hooks when a claim enters a status.

    By default, a claim entering NEEDS_REVIEW is evaluated by the agents
    and the recommendation is kept for the authority to inspect.
    """

    def __init__(self, protocol: Protocol):
        """
        Initialize the claim monitor.

        Args:
            protocol: The protocol whose claims are monitored
        """
        self.protocol = protocol
        self._event_handlers: dict[ClaimStatus, list[Handler]] = {}
        self._recommendations: Dict[str, AdjudicationResult] = {}

        self._register_default_handlers()

    def _register_default_handlers(self) -> None:
        self.register_handler(ClaimStatus.NEEDS_REVIEW, self._on_needs_review)

    def register_handler(self, status: ClaimStatus, handler: Handler) -> None:
        """
        Register an async handler to be called when a claim enters a status.

        Args:
            status: The status that triggers the handler
            handler: Async function called with (claim_key, claim)
        """
        self._event_handlers.setdefault(status, []).append(handler)
        logger.info(f"Registered handler for status {status.value}")

    async def _on_needs_review(self, claim_key: str, claim: Claim) -> None:
        logger.info(f"Claim {claim_key} entered NEEDS_REVIEW - triggering agent evaluation")
        await self.evaluate(claim_key)

    async def on_status_entered(self, claim_key: str, claim: Claim) -> None:
        """
        Called after an operation leaves a claim in a new status.

        Runs all registered handlers for that status in registration order.
        A claim that reached a terminal status no longer has a recommendation.
        """
        for handler in self._event_handlers.get(claim.status, []):
            await handler(claim_key, claim)

        if self.protocol.state_machine.is_terminal(claim.status):
            self._recommendations.pop(claim_key, None)

    async def evaluate(self, claim_key: str) -> AdjudicationResult:
        """Run the agents on a claim and remember the recommendation."""
        claim = self.protocol.get_claim(claim_key)
        member = self.protocol.claimant(claim)
        policy = self.protocol.get_policy(member.policy)
        pool_balance = self.protocol.pool_balances()["premium_pool"]

        _, results = await agent_evaluation(claim, policy, pool_balance)
        result = orchestrator.evaluate_results(claim_key, results)
        self._recommendations[claim_key] = result
        return result

    def get_recommendation(self, claim_key: str) -> Optional[AdjudicationResult]:
        return self._recommendations.get(claim_key)

    async def auto_adjudicate(self, caller: str, claim_key: str) -> Tuple[AdjudicationResult, Claim]:
        """
        Evaluate a NEEDS_REVIEW claim and apply the recommendation as ``caller``.

        Only the authority may do this. A DEFER recommendation leaves the
        claim in NEEDS_REVIEW.

        Returns:
            (recommendation, claim after any applied decision)
        """
        self.protocol.require_authority(caller)
        claim = self.protocol.get_claim(claim_key)
        self.protocol.state_machine.require(claim, ClaimStatus.PAID)

        result = await self.evaluate(claim_key)
        updated = apply_recommendation(self.protocol, caller, result)
        if updated is None:
            return result, claim

        await self.on_status_entered(claim_key, updated)
        return result, updated
