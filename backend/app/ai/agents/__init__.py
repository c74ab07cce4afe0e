# AI Agents Package
from app.ai.agents.explainer import ExplanationAgent, ExplanationVariants

__all__ = [
    "ExplanationAgent",
    "ExplanationVariants",
]
