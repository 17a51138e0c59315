"""Advice and prescription generation models."""

from pydantic import BaseModel, Field
from telecare.models.triage import Complexity
from typing import Optional


class AdviceResult(BaseModel):
    """Result of advice generation.

    ``success=False`` tells the caller to substitute its own fallback text.
    """

    success: bool
    message: str


class PrescriptionInput(BaseModel):
    """Patient attributes plus classification fed to the prescription prompt."""

    symptoms: str
    age: str = "Not specified"
    weight: str = "Not specified"
    allergies: str = "None reported"
    medications: str = "None reported"
    complexity: Complexity = Complexity.BASIC
    specialization: Optional[str] = Field(default=None)
