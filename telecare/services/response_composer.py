"""Merges classification, advice, medicines and doctor lookups into response payloads."""

import logging
from typing import List, Optional

from telecare.agents.prompts import DOCTOR_RECOMMENDATION, SUGGESTED_MEDICINES
from telecare.config.settings import settings
from telecare.models.advice import AdviceResult
from telecare.models.messages import ChatAdviceResponse, PrescriptionResponse
from telecare.models.reference import Medicine, MedicineSuggestion
from telecare.models.triage import ClassificationResult, Complexity, DoctorRef
from telecare.tools.doctor_directory import (
    GENERAL_PRACTICE_PATTERN,
    DoctorDirectory,
    specialization_pattern,
)

logger = logging.getLogger(__name__)


def format_medicine(medicine: Medicine) -> str:
    """``Name (dose, frequency[, timing])``"""
    details = f"{medicine.dose}, {medicine.frequency}"
    if medicine.timing:
        details += f", {medicine.timing}"
    return f"{medicine.name} ({details})"


class ResponseComposer:
    """Builds the chat-advice and prescription payloads.

    Args:
        directory: Doctor directory for prescription doctor resolution
        max_medicines: Medicines listed in the suggestion paragraph
    """

    def __init__(self, directory: DoctorDirectory, max_medicines: Optional[int] = None):
        self.directory = directory
        self.max_medicines = max_medicines or settings.max_suggested_medicines

    def medicines_paragraph(self, medicines: List[MedicineSuggestion]) -> str:
        """Summary of the first matched condition's medicines, or empty string."""
        if not medicines:
            return ""
        first = medicines[0]
        listed = "; ".join(format_medicine(m) for m in first.medicines[: self.max_medicines])
        if not listed:
            return ""
        return SUGGESTED_MEDICINES.format(condition=first.condition, medicines=listed)

    def compose_chat(
        self,
        advice: AdviceResult,
        classification: ClassificationResult,
        medicines: List[MedicineSuggestion],
    ) -> ChatAdviceResponse:
        """
        Compose the chat-advice payload.

        Successful advice leads the message, followed by the doctor
        recommendation for complex cases. Otherwise the classifier's own
        message is used. The medicine summary is appended in both cases.
        """
        if advice.success:
            message = advice.message
            if classification.complexity == Complexity.COMPLEX and classification.doctors:
                message += DOCTOR_RECOMMENDATION.format(
                    specialization=classification.specialization
                )
        else:
            logger.info(f"Advice unavailable ({advice.message}), using classifier message")
            message = classification.message

        message += self.medicines_paragraph(medicines)

        return ChatAdviceResponse(
            success=True,
            message=message,
            complexity=classification.complexity,
            should_see_doctor=classification.should_see_doctor,
            doctors=list(classification.doctors),
            specialization=classification.specialization or None,
            medicines=list(medicines),
        )

    async def _first_doctor(self, pattern: str) -> Optional[DoctorRef]:
        try:
            doctors = await self.directory.find_by_specialization(pattern, limit=1)
        except Exception as e:
            logger.error(f"Doctor directory lookup failed for /{pattern}/: {e}")
            return None
        return doctors[0] if doctors else None

    async def resolve_doctor(
        self, classification: ClassificationResult, specialization: str
    ) -> Optional[DoctorRef]:
        """
        Pick the recommended doctor for a prescription.

        Order: first complex-case classifier doctor, first directory match for
        the specialization, first general/family/primary-care doctor, else None.
        """
        if classification.complexity == Complexity.COMPLEX and classification.doctors:
            return classification.doctors[0]

        if specialization:
            doctor = await self._first_doctor(specialization_pattern(specialization))
            if doctor:
                return doctor

        return await self._first_doctor(GENERAL_PRACTICE_PATTERN)

    def compose_prescription(
        self,
        prescription: str,
        doctor: Optional[DoctorRef],
        medicines: List[MedicineSuggestion],
        classification: ClassificationResult,
    ) -> PrescriptionResponse:
        return PrescriptionResponse(
            success=True,
            prescription=prescription,
            doctor=doctor,
            medicines=list(medicines),
            complexity=classification.complexity,
        )
