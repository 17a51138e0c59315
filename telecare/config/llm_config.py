"""Generation settings for the Gemini Generative Language API.

Per-use parameter assignments:
  Advice        → short patient-facing passage (512 output tokens)
  Prescription  → structured multi-section document (1024 output tokens)

Both share the low-temperature sampling profile so repeated queries read
consistently.
"""

from pydantic import BaseModel
from telecare.config.settings import settings
from typing import Any, Dict


class GenerationConfig(BaseModel):
    """Sampling parameters sent with every generateContent request."""

    temperature: float
    top_p: float
    top_k: int
    max_output_tokens: int

    def to_request(self) -> Dict[str, Any]:
        """Render in the camelCase shape the REST API expects."""
        return {
            "temperature": self.temperature,
            "topP": self.top_p,
            "topK": self.top_k,
            "maxOutputTokens": self.max_output_tokens,
        }


def _create_config(max_output_tokens: int) -> GenerationConfig:
    return GenerationConfig(
        temperature=settings.gemini_temperature,
        top_p=settings.gemini_top_p,
        top_k=settings.gemini_top_k,
        max_output_tokens=max_output_tokens,
    )


def get_advice_config() -> GenerationConfig:
    """Advice passage: concise, bounded by the advice character budget."""
    return _create_config(settings.advice_max_output_tokens)


def get_prescription_config() -> GenerationConfig:
    """Prescription document: room for all required sections."""
    return _create_config(settings.prescription_max_output_tokens)
