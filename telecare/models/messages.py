"""API request and response models."""

from pydantic import BaseModel, Field
from typing import Optional, List, Union
from datetime import datetime, timezone
from telecare.models.triage import Complexity, DoctorRef
from telecare.models.reference import Medicine, MedicineSuggestion


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatRequest(BaseModel):
    """Free-text chat message from the patient."""

    message: str = Field("", max_length=4000, description="Symptom description")
    user_id: Optional[str] = Field(None, alias="userId")

    class Config:
        populate_by_name = True


class AdviceRequest(BaseModel):
    """Request for stand-alone professional advice."""

    symptom_query: str = Field("", alias="symptomQuery", max_length=4000)

    class Config:
        populate_by_name = True


class PrescriptionRequest(BaseModel):
    """Patient attributes for a prescription recommendation."""

    symptoms: str = Field("", max_length=4000)
    age: Optional[Union[int, float, str]] = None
    weight: Optional[Union[int, float, str]] = None
    allergies: Optional[str] = None
    medications: Optional[str] = None


class ChatAdviceResponse(BaseModel):
    """Composed chat-advice payload. Field order is part of the contract."""

    success: bool = True
    message: str = ""
    complexity: Complexity
    should_see_doctor: bool = Field(..., alias="shouldSeeDoctor")
    doctors: List[DoctorRef] = Field(default_factory=list)
    specialization: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    medicines: List[MedicineSuggestion] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class PrescriptionResponse(BaseModel):
    """Composed prescription payload."""

    success: bool = True
    prescription: str
    doctor: Optional[DoctorRef] = None
    medicines: List[MedicineSuggestion] = Field(default_factory=list)
    complexity: Complexity
    timestamp: datetime = Field(default_factory=_utcnow)


class SymptomAdviceResponse(BaseModel):
    """Stand-alone advice with its classification and medicine matches."""

    success: bool
    message: str
    complexity: Complexity
    should_see_doctor: bool = Field(..., alias="shouldSeeDoctor")
    specialization: Optional[str] = None
    doctors: List[DoctorRef] = Field(default_factory=list)
    medicines: List[MedicineSuggestion] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_utcnow)

    class Config:
        populate_by_name = True


class ErrorResponse(BaseModel):
    """Structured failure returned at the route boundary."""

    success: bool = False
    message: str


class SymptomCatalogEntry(BaseModel):
    """Symptoms catalog entry in its storage shape."""

    condition: str
    symptoms: List[str] = Field(default_factory=list)
    advice: str = ""


class SymptomCatalogResponse(BaseModel):
    success: bool = True
    total: int
    conditions: List[SymptomCatalogEntry] = Field(default_factory=list)


class SpellSuggestionResponse(BaseModel):
    success: bool = True
    original_query: str = Field(..., alias="originalQuery")
    suggestions: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class SymptomSearchResponse(BaseModel):
    """Substring matches plus fuzzy spelling suggestions."""

    matches: List[SymptomCatalogEntry] = Field(default_factory=list)
    spell_suggestions: List[str] = Field(default_factory=list, alias="spellSuggestions")
    has_spelling_suggestions: bool = Field(False, alias="hasSpellingSuggestions")
    original_query: str = Field(..., alias="originalQuery")

    class Config:
        populate_by_name = True


class MedicineCatalogEntry(BaseModel):
    """Medicines catalog entry in its storage shape."""

    condition: str
    medicines: List[Medicine] = Field(default_factory=list)


class MedicinesResponse(BaseModel):
    success: bool = True
    conditions: List[MedicineCatalogEntry] = Field(default_factory=list)


class ConditionMedicinesResponse(BaseModel):
    success: bool = True
    condition: str
    medicines: List[Medicine] = Field(default_factory=list)


class ConsultationSummary(BaseModel):
    """One stored chat exchange in a user's history."""

    consultation_id: str
    created_at: datetime
    query: str
    message: str
    complexity: Complexity
    specialization: Optional[str] = None


class ConsultationHistoryResponse(BaseModel):
    """Paginated consultation history."""

    success: bool = True
    total: int
    limit: int
    offset: int
    consultations: List[ConsultationSummary]
