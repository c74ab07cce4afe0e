# AI Core Module - LLM access
from app.ai.core.llm import (
    LLMClient,
    LLMResponse,
    LLMUnavailableError,
    extract_json_object,
    get_llm_client,
)

__all__ = [
    "LLMClient",
    "LLMResponse",
    "LLMUnavailableError",
    "extract_json_object",
    "get_llm_client",
]
