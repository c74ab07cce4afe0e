"""
K12 Tutor - AI Module Initialization
"""
from app.ai.agents import ExplanationAgent, ExplanationVariants
from app.ai.core import LLMClient, LLMResponse, get_llm_client

__all__ = [
    "ExplanationAgent",
    "ExplanationVariants",
    "LLMClient",
    "LLMResponse",
    "get_llm_client",
]
