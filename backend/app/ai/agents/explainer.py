"""
K12 Tutor - Explanation Agent
Re-explains a question three ways: plain text, a visual walk-through and an
everyday analogy.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Optional

from app.ai.core.llm import LLMClient, LLMUnavailableError, get_llm_client
from app.core.telemetry import service_span
from app.models.catalog import KnowledgePoint, Question

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a patient K12 tutor. Explain the solution to a
single practice question for a student of the given grade. Keep each
explanation to 2-4 short sentences and never skip the key step.

Reply with one JSON object and nothing else:
{"text": "...", "visual": "...", "analogy": "..."}

- text: a direct step-by-step explanation
- visual: describe a picture, diagram or number line the student can draw
- analogy: connect the idea to an everyday situation"""


@dataclass
class ExplanationVariants:
    text: str
    visual: str
    analogy: str
    provider: str

    def to_dict(self) -> dict:
        return asdict(self)


class ExplanationAgent:
    """
    Generates explanation variants for a question.

    Falls back to rule-based variants built from the stored explanation when
    no LLM is configured or the model reply cannot be used.
    """

    name = "ExplanationAgent"

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm_client = llm_client or get_llm_client()

    def build_prompt(self, question: Question, knowledge_point: Optional[KnowledgePoint]) -> str:
        lines = [
            f"Subject: {question.subject}",
            f"Grade: {question.grade}",
            f"Question: {question.stem}",
        ]
        if question.options:
            lines.append("Options: " + " | ".join(question.options))
        lines.append(f"Correct answer: {question.answer}")
        if question.explanation:
            lines.append(f"Reference explanation: {question.explanation}")
        if knowledge_point is not None:
            lines.append(f"Knowledge point: {knowledge_point.title}")
        return "\n".join(lines)

    async def explain(
        self,
        question: Question,
        knowledge_point: Optional[KnowledgePoint] = None,
    ) -> ExplanationVariants:
        with service_span("explanation.generate", {"question_id": question.id}) as span:
            if not self.llm_client.enabled:
                span.set_attribute("explanation.provider", "rule")
                return self.fallback(question, knowledge_point)

            try:
                data = await self.llm_client.generate_json(
                    self.build_prompt(question, knowledge_point),
                    system_prompt=SYSTEM_PROMPT,
                    agent_name=self.name,
                )
            except (LLMUnavailableError, ValueError) as e:
                logger.warning("Explanation reply unusable for question %s: %s", question.id, e)
                return self.fallback(question, knowledge_point)
            except Exception as e:
                # Provider errors (timeouts, rate limits) degrade to the stored explanation
                logger.warning("LLM call failed for question %s: %s", question.id, e)
                return self.fallback(question, knowledge_point)

            fallback = self.fallback(question, knowledge_point)
            span.set_attribute("explanation.provider", self.llm_client.provider)
            return ExplanationVariants(
                text=_clean(data.get("text")) or fallback.text,
                visual=_clean(data.get("visual")) or fallback.visual,
                analogy=_clean(data.get("analogy")) or fallback.analogy,
                provider=self.llm_client.provider,
            )

    def fallback(
        self,
        question: Question,
        knowledge_point: Optional[KnowledgePoint] = None,
    ) -> ExplanationVariants:
        topic = knowledge_point.title if knowledge_point is not None else "this topic"
        text = question.explanation or f"The correct answer is {question.answer}."
        return ExplanationVariants(
            text=text,
            visual=(
                f"Write down what the question gives you, then draw each step toward "
                f"{question.answer} as a box connected by arrows."
            ),
            analogy=(
                f"Think of {topic} like following a recipe: finish each step in order "
                f"and you arrive at {question.answer}."
            ),
            provider="rule",
        )


def _clean(value) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()
