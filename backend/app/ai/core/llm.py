"""
K12 Tutor - Unified LLM Client
Centralized LLM access with tracing and JSON reply parsing.
"""
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from langchain_core.messages import HumanMessage, SystemMessage

from app.core.config import settings
from app.core.telemetry import get_tracer


class LLMUnavailableError(RuntimeError):
    """No provider key is configured."""
    pass


@dataclass
class LLMResponse:
    """Standardized response from LLM client."""
    content: str
    model: str
    tokens_prompt: int = 0
    tokens_completion: int = 0
    tokens_total: int = 0


_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Pull the first JSON object out of a model reply.

    Handles markdown fences and chatter around the object.

    Raises:
        ValueError: If no JSON object can be decoded
    """
    content = text.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    content = content.strip()

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        match = _JSON_OBJECT.search(content)
        if not match:
            raise ValueError("No JSON object in LLM reply")
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ValueError(f"Malformed JSON in LLM reply: {e}") from e

    if not isinstance(parsed, dict):
        raise ValueError("LLM reply is not a JSON object")
    return parsed


class LLMClient:
    """
    LLM client shared by the AI agents.

    Supports OpenAI and Anthropic chat models through LangChain. The chat
    model is built on first use, so constructing a client never needs a key.
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.4,
        timeout: Optional[int] = None,
    ):
        self.provider = provider or settings.LLM_PROVIDER
        self.model = model or (
            settings.OPENAI_MODEL if self.provider == "openai"
            else settings.ANTHROPIC_MODEL
        )
        self.temperature = temperature
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS

        self._llm = None

    @property
    def enabled(self) -> bool:
        if self.provider == "openai":
            return bool(settings.OPENAI_API_KEY)
        return bool(settings.ANTHROPIC_API_KEY)

    @property
    def llm(self):
        """Lazy-load the LLM instance."""
        if not self.enabled:
            raise LLMUnavailableError(f"No API key configured for {self.provider}")
        if self._llm is None:
            if self.provider == "openai":
                from langchain_openai import ChatOpenAI
                self._llm = ChatOpenAI(
                    model=self.model,
                    api_key=settings.OPENAI_API_KEY,
                    temperature=self.temperature,
                    timeout=self.timeout,
                )
            else:
                from langchain_anthropic import ChatAnthropic
                self._llm = ChatAnthropic(
                    model=self.model,
                    api_key=settings.ANTHROPIC_API_KEY,
                    temperature=self.temperature,
                    timeout=self.timeout,
                )
        return self._llm

    async def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        agent_name: str = "LLMClient",
    ) -> LLMResponse:
        """
        Generate a response from the LLM.

        Args:
            prompt: The user prompt.
            system_prompt: Optional system prompt.
            agent_name: Name of the calling agent (for telemetry).
        """
        with get_tracer().start_as_current_span("llm.generate") as span:
            span.set_attribute("llm.model", self.model)
            span.set_attribute("llm.provider", self.provider)
            span.set_attribute("agent.name", agent_name)
            span.set_attribute("llm.prompt_length", len(prompt))

            messages = []
            if system_prompt:
                messages.append(SystemMessage(content=system_prompt))
            messages.append(HumanMessage(content=prompt))

            response = await self.llm.ainvoke(messages)
            content = response.content if isinstance(response.content, str) else str(response.content)

            tokens_prompt = 0
            tokens_completion = 0
            usage = getattr(response, "usage_metadata", None) or {}
            if usage:
                tokens_prompt = usage.get("input_tokens", 0)
                tokens_completion = usage.get("output_tokens", 0)

            span.set_attribute("llm.tokens.total", tokens_prompt + tokens_completion)
            span.set_attribute("llm.response_length", len(content))

            return LLMResponse(
                content=content,
                model=self.model,
                tokens_prompt=tokens_prompt,
                tokens_completion=tokens_completion,
                tokens_total=tokens_prompt + tokens_completion,
            )

    async def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        agent_name: str = "LLMClient",
    ) -> Dict[str, Any]:
        """Generate a reply and parse the JSON object inside it."""
        response = await self.generate(prompt, system_prompt=system_prompt, agent_name=agent_name)
        return extract_json_object(response.content)


# Default client instance
_default_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get the default LLM client instance."""
    global _default_client
    if _default_client is None:
        _default_client = LLMClient()
    return _default_client
