"""Structured prescription generation with a local template fallback."""

import asyncio
import logging
import re
from datetime import date
from typing import Optional

import httpx

from telecare.agents.prompts import (
    PRESCRIPTION_DISCLAIMER,
    PRESCRIPTION_FALLBACK_TEMPLATE,
    PRESCRIPTION_HEADINGS,
    PRESCRIPTION_PROMPT,
)
from telecare.config.llm_config import get_prescription_config
from telecare.models.advice import PrescriptionInput
from telecare.tools.gemini_client import GeminiClient, GeminiError
from telecare.utils.llm_helpers import generate_with_timeout

logger = logging.getLogger(__name__)


def _today() -> str:
    return date.today().strftime("%m/%d/%Y")


def _heading_pattern(heading: str) -> "re.Pattern":
    # Heading opens its line (markdown emphasis allowed) and the line carries a colon
    return re.compile(
        rf"^[ \t#*_]*{re.escape(heading.rstrip(':'))}[^\n]*:", re.IGNORECASE | re.MULTILINE
    )


_HEADING_PATTERNS = [(h, _heading_pattern(h)) for h in PRESCRIPTION_HEADINGS]


def missing_headings(text: str) -> list:
    """Required headings that do not start any line of the text."""
    return [h for h, pattern in _HEADING_PATTERNS if not pattern.search(text)]


def fallback_prescription(data: PrescriptionInput) -> str:
    """Deterministic template carrying every required heading and the disclaimer."""
    return PRESCRIPTION_FALLBACK_TEMPLATE.format(
        date=_today(),
        symptoms=data.symptoms,
        disclaimer=PRESCRIPTION_DISCLAIMER,
    )


class PrescriptionGenerator:
    """Produces a prescription document for a patient.

    Args:
        client: Generative-text client; an unconfigured client always yields the template
    """

    def __init__(self, client: GeminiClient):
        self.client = client

    def build_prompt(self, data: PrescriptionInput) -> str:
        return PRESCRIPTION_PROMPT.format(
            symptoms=data.symptoms,
            age=data.age,
            weight=data.weight,
            allergies=data.allergies,
            medications=data.medications,
            complexity=data.complexity.value,
            specialization=data.specialization or "General Practice",
            date=_today(),
            disclaimer=PRESCRIPTION_DISCLAIMER,
        )

    def enforce_structure(self, text: Optional[str], data: PrescriptionInput) -> str:
        """Return live text that satisfies the section contract, else the template."""
        if not text or not text.strip():
            logger.warning("Gemini returned no prescription text, using template")
            return fallback_prescription(data)

        text = text.strip()
        missing = missing_headings(text)
        if missing:
            logger.warning(f"Generated prescription missing sections {missing}, using template")
            return fallback_prescription(data)

        if PRESCRIPTION_DISCLAIMER not in text:
            text = f"{text}\n{PRESCRIPTION_DISCLAIMER}"
        return text

    async def generate_prescription(self, data: PrescriptionInput) -> str:
        """
        Generate a prescription. Never raises; any failure yields the local template.

        Args:
            data: Patient attributes and classification

        Returns:
            Prescription text with all required sections and the disclaimer
        """
        if not self.client.is_configured:
            logger.info("Gemini API key not configured, using prescription template")
            return fallback_prescription(data)

        try:
            text = await generate_with_timeout(
                self.client, self.build_prompt(data), get_prescription_config()
            )
        except (GeminiError, httpx.HTTPError, asyncio.TimeoutError) as e:
            logger.error(f"Error generating prescription with Gemini: {e}")
            return fallback_prescription(data)
        except Exception as e:
            logger.error(f"Unexpected prescription generation failure: {e}", exc_info=True)
            return fallback_prescription(data)

        return self.enforce_structure(text, data)
