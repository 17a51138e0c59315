"""LangGraph state definitions for the triage workflows."""

from typing import TypedDict, Optional, List

from telecare.models.advice import AdviceResult
from telecare.models.messages import ChatAdviceResponse, PrescriptionResponse
from telecare.models.reference import MedicineSuggestion
from telecare.models.triage import ClassificationResult, DoctorRef


class ChatState(TypedDict, total=False):
    """State for the chat-advice workflow."""

    # Input
    query: str

    # Independent branches
    classification: ClassificationResult
    advice: AdviceResult
    medicines: List[MedicineSuggestion]

    # Output
    response: ChatAdviceResponse


class PrescriptionState(TypedDict, total=False):
    """State for the prescription workflow."""

    # Input
    symptoms: str
    age: str
    weight: str
    allergies: str
    medications: str

    # Classification
    classification: ClassificationResult
    specialization: str  # classifier specialization, else derived from text

    # Parallel branches
    doctor: Optional[DoctorRef]
    prescription: str
    medicines: List[MedicineSuggestion]

    # Output
    response: PrescriptionResponse
