# Agents module
from .evaluator import AgentResult, agent_evaluation
from .orchestrator import (
    AdjudicationOrchestrator,
    AdjudicationResult,
    Recommendation,
    apply_recommendation,
    orchestrator,
)

__all__ = [
    "AgentResult",
    "agent_evaluation",
    "AdjudicationOrchestrator",
    "AdjudicationResult",
    "Recommendation",
    "apply_recommendation",
    "orchestrator",
]
