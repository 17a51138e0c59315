"""Rule-based symptom classifier.

Scores free text against a static rule table and assigns a complexity tier
and specialization. The tier and specialization depend only on the text;
the doctor list comes from the directory for complex cases.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from telecare.agents.prompts import (
    BASIC_CLASSIFICATION_MESSAGE,
    COMPLEX_CLASSIFICATION_MESSAGE,
    COMPLEX_NO_DOCTOR_SUFFIX,
    URGENT_CARE_SUFFIX,
)
from telecare.config.settings import settings
from telecare.models.triage import ClassificationResult, Complexity, DoctorRef
from telecare.tools.doctor_directory import DoctorDirectory, specialization_pattern
from telecare.utils.red_flags import (
    RED_FLAG_SPECIALIZATIONS,
    detect_red_flags,
    get_red_flag_description,
)

logger = logging.getLogger(__name__)

DEFAULT_SPECIALIZATION = "General Physician"

RED_FLAG_WEIGHT = 3
COMPLEX_INDICATOR_WEIGHT = 2
SEVERITY_MODIFIER_WEIGHT = 1

# Findings that usually need a clinician even without an emergency pattern.
COMPLEX_INDICATORS: Tuple[str, ...] = (
    "high fever",
    "blood",
    "fainting",
    "fainted",
    "jaundice",
    "palpitation",
    "irregular heartbeat",
    "weight loss",
    "lump",
    "numbness",
    "blurred vision",
    "vision loss",
    "fracture",
    "wheezing",
    "dehydrated",
    "not urinating",
    "confusion",
    "pregnant",
)

SEVERITY_MODIFIERS: Tuple[str, ...] = (
    "severe",
    "extreme",
    "unbearable",
    "intense",
    "persistent",
    "chronic",
    "worsening",
    "getting worse",
    "sudden",
    "for weeks",
    "for a month",
    "recurring",
)

# Ordered specialization table; first hit wins.
SPECIALIZATION_TABLE: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("chest pain", "heart", "palpitation", "cardiac", "blood pressure"), "Cardiologist"),
    (("breath", "wheez", "asthma", "lung", "pneumonia"), "Pulmonologist"),
    (("seizure", "stroke", "numbness", "slurred", "paralysis", "migraine", "unconscious"), "Neurologist"),
    (("suicid", "depress", "anxiety", "panic", "self-harm", "self harm"), "Psychiatrist"),
    (("stomach", "abdominal", "abdomen", "vomit", "diarrhea", "liver", "jaundice", "stool", "acidity"), "Gastroenterologist"),
    (("skin", "rash", "acne", "itch", "eczema", "psoriasis"), "Dermatologist"),
    (("bone", "fracture", "joint", "back pain", "knee", "arthritis", "sprain"), "Orthopedist"),
    (("ear pain", "earache", "hearing", "sinus", "tonsil", "throat"), "ENT Specialist"),
    (("eye", "vision"), "Ophthalmologist"),
    (("tooth", "teeth", "gum"), "Dentist"),
    (("period", "pregnan", "menstrua", "vaginal"), "Gynecologist"),
    (("urin", "kidney", "bladder"), "Urologist"),
    (("thyroid", "diabetes", "blood sugar"), "Endocrinologist"),
    (("swelling of", "hives", "allergic reaction"), "Allergist"),
)


def severity_score(text: str) -> Tuple[int, List[str]]:
    """Score symptom text.

    Returns:
        Tuple of (score, red_flag_categories)
    """
    lowered = (text or "").lower()
    _, red_flags = detect_red_flags(lowered)

    score = RED_FLAG_WEIGHT * len(red_flags)
    score += COMPLEX_INDICATOR_WEIGHT * sum(1 for k in COMPLEX_INDICATORS if k in lowered)
    score += SEVERITY_MODIFIER_WEIGHT * sum(1 for k in SEVERITY_MODIFIERS if k in lowered)
    return score, red_flags


class SymptomClassifier:
    """Deterministic severity classifier with doctor lookup for complex cases.

    Args:
        directory: Doctor directory used to list specialists
        threshold: Score at or above which a case is complex
        max_doctors: Maximum doctors attached to a complex result
    """

    def __init__(
        self,
        directory: DoctorDirectory,
        threshold: Optional[int] = None,
        max_doctors: Optional[int] = None,
        specialization_table: Sequence[Tuple[Sequence[str], str]] = SPECIALIZATION_TABLE,
    ):
        self.directory = directory
        self.threshold = threshold if threshold is not None else settings.complex_threshold_score
        self.max_doctors = max_doctors if max_doctors is not None else settings.max_recommended_doctors
        self.specialization_table = specialization_table

    def get_doctor_specialization(self, text: str) -> str:
        """Specialization for the text; General Physician when nothing matches."""
        lowered = (text or "").lower()

        for keywords, specialization in self.specialization_table:
            if any(k in lowered for k in keywords):
                return specialization

        _, red_flags = detect_red_flags(lowered)
        if red_flags:
            return RED_FLAG_SPECIALIZATIONS.get(red_flags[0], DEFAULT_SPECIALIZATION)

        return DEFAULT_SPECIALIZATION

    def classify_complexity(self, text: str) -> Tuple[Complexity, List[str]]:
        score, red_flags = severity_score(text)
        complexity = Complexity.COMPLEX if score >= self.threshold else Complexity.BASIC
        logger.debug(f"Severity score {score} (threshold {self.threshold}) -> {complexity.value}")
        return complexity, red_flags

    async def _find_specialists(self, specialization: str) -> List[DoctorRef]:
        try:
            return await self.directory.find_by_specialization(
                specialization_pattern(specialization), limit=self.max_doctors
            )
        except Exception as e:
            logger.error(f"Doctor directory lookup failed for {specialization}: {e}")
            return []

    async def process_symptom(self, text: str) -> ClassificationResult:
        """
        Classify symptom text.

        Args:
            text: Free-text symptom description

        Returns:
            ClassificationResult; complex results carry the specialization and
            any matching specialists from the directory
        """
        complexity, red_flags = self.classify_complexity(text)

        if complexity == Complexity.BASIC:
            return ClassificationResult(
                complexity=Complexity.BASIC,
                should_see_doctor=False,
                specialization=None,
                doctors=[],
                message=BASIC_CLASSIFICATION_MESSAGE,
            )

        specialization = self.get_doctor_specialization(text)
        doctors = await self._find_specialists(specialization)

        concern = ""
        if red_flags:
            concern = " (" + ", ".join(get_red_flag_description(c) for c in red_flags) + ")"

        message = COMPLEX_CLASSIFICATION_MESSAGE.format(
            concern=concern, specialization=specialization
        )
        if not doctors:
            message += COMPLEX_NO_DOCTOR_SUFFIX.format(specialization=specialization)
        if red_flags:
            message += URGENT_CARE_SUFFIX

        logger.info(
            f"Complex case: specialization={specialization}, "
            f"red_flags={red_flags}, doctors={len(doctors)}"
        )
        return ClassificationResult(
            complexity=Complexity.COMPLEX,
            should_see_doctor=True,
            specialization=specialization,
            doctors=doctors,
            message=message,
        )
