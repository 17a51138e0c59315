"""MongoDB schema for stored chat consultations."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, timezone
from telecare.models.triage import Complexity
import uuid


class Consultation(BaseModel):
    """A single triage chat exchange."""

    consultation_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    query: str
    message: str
    complexity: Complexity
    should_see_doctor: bool = False
    specialization: Optional[str] = None
    doctor_emails: List[str] = Field(default_factory=list)
    matched_conditions: List[str] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "consultation_id": "123e4567-e89b-12d3-a456-426614174000",
                "user_id": "user123",
                "query": "I have a fever and headache",
                "complexity": "basic",
                "matched_conditions": ["Fever"],
            }
        }
