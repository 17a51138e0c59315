"""Professional advice generation with dataset grounding and tiered fallback.

Tier order for a non-empty query:

1. out-of-scope guard (fixed sentence, no dataset lookup, no external call)
2. dataset grounding (collects advice text, never answers)
3. live generative-text call
4. dataset advice
5. fixed unavailability message

Each tier returns an ``AdviceResult`` to answer or ``None`` to fall through.
There are no retries; one failure moves straight to the next tier.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

import httpx

from telecare.agents.prompts import (
    ADVICE_HEADINGS,
    ADVICE_PROMPT,
    NO_DATASET_GUIDANCE,
    OUT_OF_SCOPE_MESSAGE,
)
from telecare.config.llm_config import get_advice_config
from telecare.config.settings import settings
from telecare.models.advice import AdviceResult
from telecare.tools.gemini_client import GeminiClient, GeminiError, GeminiHTTPError
from telecare.tools.keyword_matcher import KeywordMatcher
from telecare.utils.llm_helpers import generate_with_timeout

logger = logging.getLogger(__name__)

QUERY_REQUIRED_MESSAGE = "Symptom query is required"
NOT_CONFIGURED_MESSAGE = (
    "AI service is currently unavailable. Please consult a healthcare provider."
)
TEMPORARILY_UNAVAILABLE_MESSAGE = (
    "AI service is temporarily unavailable. Please try again later."
)
NO_RESPONSE_MESSAGE = "No response generated."

MAX_DATASET_ADVICE = 3

# Lowercase substrings that mark a query as non-medical.
NON_MEDICAL_TRIGGERS = (
    "capital of",
    "who is",
    "what is node",
    "what is javascript",
    "programming",
    "python",
    "java ",
    "c++",
    "react",
    "football",
    "cricket",
    "movie",
    "song",
    "weather",
    "stock",
    "bitcoin",
    "crypto",
    "country",
    "president",
    "prime minister",
    "capital city",
)


def is_out_of_scope(query: str) -> bool:
    lowered = query.lower()
    return any(trigger in lowered for trigger in NON_MEDICAL_TRIGGERS)


def merge_advice(advices: List[str], limit: int = MAX_DATASET_ADVICE) -> Optional[str]:
    """Deduplicate advice strings in order, cap at ``limit``, join with blank lines."""
    merged: List[str] = []
    for advice in advices:
        if advice and advice not in merged:
            merged.append(advice)
        if len(merged) >= limit:
            break
    return "\n\n".join(merged) if merged else None


def fit_to_budget(text: str, budget: int) -> str:
    """Trim text to the character budget at a paragraph or sentence boundary."""
    if len(text) <= budget:
        return text

    head = text[:budget]
    cut = head.rfind("\n\n")
    if cut < budget // 2:
        sentence_ends = [m.end() for m in re.finditer(r"[.!?](\s|$)", head)]
        cut = sentence_ends[-1] if sentence_ends else budget
    return head[:cut].rstrip()


@dataclass
class AdviceContext:
    """Per-request state shared by the tiers."""

    query: str
    dataset_advice: Optional[str] = None
    unavailable_message: str = TEMPORARILY_UNAVAILABLE_MESSAGE


AdviceTier = Callable[[AdviceContext], Awaitable[Optional[AdviceResult]]]


class AdviceGenerator:
    """Generates patient-facing advice for a free-text symptom query.

    Args:
        client: Generative-text client; an unconfigured client selects the fallbacks
        matcher: Keyword matcher over the symptoms/advice catalog
        char_budget: Maximum characters of live advice
    """

    def __init__(
        self,
        client: GeminiClient,
        matcher: KeywordMatcher,
        char_budget: Optional[int] = None,
    ):
        self.client = client
        self.matcher = matcher
        self.char_budget = char_budget or settings.advice_char_budget
        self.tiers: List[AdviceTier] = [
            self.reject_out_of_scope,
            self.ground_in_dataset,
            self.call_live_service,
            self.use_dataset_advice,
            self.report_unavailable,
        ]

    # ------------------------------------------------------------------
    # Dataset grounding
    # ------------------------------------------------------------------

    def dataset_advice(self, query: str) -> Optional[str]:
        """Merged advice of the conditions matched in the catalog, or None."""
        try:
            matched = self.matcher.match(query)
        except Exception as e:
            logger.error(f"Failed to match dataset advice: {e}")
            return None
        return merge_advice([c.advice for c in matched])

    def build_prompt(self, query: str, dataset_advice: Optional[str]) -> str:
        knowledge_base = (
            f'"""\n{dataset_advice}\n"""' if dataset_advice else NO_DATASET_GUIDANCE
        )
        return ADVICE_PROMPT.format(
            query=query,
            headings=", ".join(ADVICE_HEADINGS),
            char_budget=self.char_budget,
            knowledge_base=knowledge_base,
            out_of_scope=OUT_OF_SCOPE_MESSAGE,
        )

    def guard_output(self, text: str) -> str:
        """Apply the output contract to a live reply."""
        text = text.strip()
        if OUT_OF_SCOPE_MESSAGE in text:
            return OUT_OF_SCOPE_MESSAGE
        return fit_to_budget(text, self.char_budget)

    # ------------------------------------------------------------------
    # Tiers
    # ------------------------------------------------------------------

    async def reject_out_of_scope(self, ctx: AdviceContext) -> Optional[AdviceResult]:
        if is_out_of_scope(ctx.query):
            logger.info("Out-of-scope query short-circuited")
            return AdviceResult(success=True, message=OUT_OF_SCOPE_MESSAGE)
        return None

    async def ground_in_dataset(self, ctx: AdviceContext) -> Optional[AdviceResult]:
        ctx.dataset_advice = self.dataset_advice(ctx.query)
        return None

    async def call_live_service(self, ctx: AdviceContext) -> Optional[AdviceResult]:
        if not self.client.is_configured:
            logger.info("Gemini API key not configured, using fallback advice")
            ctx.unavailable_message = NOT_CONFIGURED_MESSAGE
            return None

        prompt = self.build_prompt(ctx.query, ctx.dataset_advice)
        try:
            text = await generate_with_timeout(self.client, prompt, get_advice_config())
        except GeminiHTTPError as e:
            logger.error(f"Gemini API error: {e.status_code} {e.body[:500]}")
            return None
        except (GeminiError, httpx.HTTPError, asyncio.TimeoutError) as e:
            logger.error(f"Gemini service error: {e}")
            return None

        if not text:
            return AdviceResult(success=True, message=NO_RESPONSE_MESSAGE)
        return AdviceResult(success=True, message=self.guard_output(text))

    async def use_dataset_advice(self, ctx: AdviceContext) -> Optional[AdviceResult]:
        if ctx.dataset_advice:
            logger.info("Falling back to dataset advice")
            return AdviceResult(success=True, message=ctx.dataset_advice)
        return None

    async def report_unavailable(self, ctx: AdviceContext) -> Optional[AdviceResult]:
        return AdviceResult(success=False, message=ctx.unavailable_message)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def generate_advice(self, query: Optional[str]) -> AdviceResult:
        """
        Produce advice for a symptom query. Never raises.

        Args:
            query: Free-text symptom description

        Returns:
            AdviceResult; ``success=False`` means the caller should use its own fallback text
        """
        if not query or not query.strip():
            return AdviceResult(success=False, message=QUERY_REQUIRED_MESSAGE)

        ctx = AdviceContext(query=query)
        try:
            for tier in self.tiers:
                result = await tier(ctx)
                if result is not None:
                    return result
        except Exception as e:
            logger.error(f"Advice generation failed: {e}", exc_info=True)
            advice = ctx.dataset_advice or self.dataset_advice(query)
            if advice:
                return AdviceResult(success=True, message=advice)

        return AdviceResult(success=False, message=TEMPORARILY_UNAVAILABLE_MESSAGE)
