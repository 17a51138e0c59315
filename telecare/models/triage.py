"""Triage classification enums and models."""

from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional


class Complexity(str, Enum):
    """Complexity tiers driving the doctor recommendation."""

    BASIC = "basic"  # Self-care guidance is enough
    COMPLEX = "complex"  # Specialist consultation advised


class DoctorRef(BaseModel):
    """Read-only projection of a doctor directory record."""

    name: str = ""
    email: str = ""
    phone: str = ""
    specialization: str = ""
    hospital: str = ""
    location: str = ""

    @classmethod
    def from_document(cls, doc: dict) -> "DoctorRef":
        return cls(
            **{
                field: str(doc.get(field) or "")
                for field in ("name", "email", "phone", "specialization", "hospital", "location")
            }
        )


class ClassificationResult(BaseModel):
    """Outcome of the rule-based symptom classifier."""

    complexity: Complexity
    should_see_doctor: bool = Field(..., alias="shouldSeeDoctor")
    specialization: Optional[str] = None
    doctors: List[DoctorRef] = Field(default_factory=list)
    message: str

    class Config:
        frozen = True
        populate_by_name = True
