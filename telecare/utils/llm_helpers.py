"""Utility functions for generative-text invocations with timeout handling."""

import asyncio
import logging
from typing import Optional

from telecare.config.llm_config import GenerationConfig
from telecare.tools.gemini_client import GeminiClient

logger = logging.getLogger(__name__)


async def generate_with_timeout(
    client: GeminiClient,
    prompt: str,
    config: GenerationConfig,
    timeout: Optional[float] = None,
) -> Optional[str]:
    """
    Invoke the generative-text service with a hard deadline.

    The httpx client carries its own timeout; this outer bound also covers
    connection setup and body parsing so a caller is never left waiting.

    Args:
        client: Configured Gemini client
        prompt: Prompt text
        config: Generation parameters
        timeout: Timeout in seconds (defaults to the client's timeout plus one second)

    Returns:
        Generated text, or None when the service produced no usable text

    Raises:
        asyncio.TimeoutError: If the deadline passes
    """
    if timeout is None:
        timeout = client.timeout + 1.0

    logger.info(f"📤 Invoking {client.model} with timeout: {timeout}s")

    try:
        text = await asyncio.wait_for(client.generate(prompt, config), timeout=timeout)
        logger.info("✅ Generative service responded successfully")
        return text

    except asyncio.TimeoutError:
        logger.error(f"⏱️ Generative service timed out after {timeout}s")
        raise
