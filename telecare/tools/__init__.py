"""Tools package for the triage pipeline."""

from telecare.tools.reference_dataset import ReferenceDataset, load_catalog
from telecare.tools.keyword_matcher import (
    KeywordMatcher,
    build_advice_matcher,
    build_medicine_matcher,
)
from telecare.tools.gemini_client import GeminiClient
from telecare.tools.doctor_directory import DoctorDirectory, MongoDoctorDirectory

__all__ = [
    "ReferenceDataset",
    "load_catalog",
    "KeywordMatcher",
    "build_advice_matcher",
    "build_medicine_matcher",
    "GeminiClient",
    "DoctorDirectory",
    "MongoDoctorDirectory",
]
