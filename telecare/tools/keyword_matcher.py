"""Keyword matching from free symptom text to reference conditions.

Matching is a chain of strategies tried in order; the first strategy that
returns anything wins. All comparisons are lowercase substring checks, so
short words can match inside longer ones ("ear" in "early"). Existing inputs
depend on that behaviour; do not switch to word-boundary matching.
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from telecare.models.reference import MedicineSuggestion, ReferenceCondition
from telecare.tools.reference_dataset import ConditionCatalog

logger = logging.getLogger(__name__)


# Ordered (keywords, condition) table. Order is priority: first hit wins,
# e.g. "nausea" resolves to Vomiting/Nausea before Pregnancy Nausea.
CONDITION_KEYWORD_TABLE: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("fever", "temperature"), "Fever"),
    (("cold", "runny nose", "sneeze"), "Common Cold"),
    (("headache", "migraine", "head pain"), "Headache/Migraine"),
    (("cough", "phlegm"), "Cough"),
    (("sore throat", "throat pain"), "Sore Throat"),
    (("stomach", "indigestion", "acidity", "gastric"), "Stomach Pain/Indigestion"),
    (("diarrhea", "loose motion"), "Diarrhea"),
    (("constipation",), "Constipation"),
    (("vomit", "nausea"), "Vomiting/Nausea"),
    (("dizzy", "vertigo", "lightheaded"), "Dizziness/Vertigo"),
    (("fatigue", "body ache", "weakness"), "Fatigue/Body Ache"),
    (("back pain",), "Back Pain"),
    (("joint pain", "arthritis", "knee"), "Joint Pain/Arthritis"),
    (("muscle pain", "myalgia"), "Muscle Pain"),
    (("eye", "itchy eyes", "red eyes"), "Eye Irritation/Allergy"),
    (("ear pain", "earache"), "Ear Pain"),
    (("tooth", "toothache"), "Toothache"),
    (("gum bleed",), "Gum Bleeding"),
    (("rash", "allergy", "itching"), "Skin Rash/Allergy"),
    (("acne", "pimple"), "Acne"),
    (("sneeze", "allergic rhinitis", "itchy nose"), "Allergic Rhinitis"),
    (("asthma", "wheeze"), "Asthma (mild)"),
    (("burning urination", "urinary pain", "uti"), "UTI Symptoms (burning urination)"),
    (("frequent urination",), "Frequent Urination (non-urgent)"),
    (("period pain", "dysmenorrhea", "cramps"), "Period Pain (Dysmenorrhea)"),
    (("irregular period",), "Irregular Periods (symptomatic)"),
    (("pregnancy", "morning sickness", "nausea"), "Pregnancy Nausea"),
    (("insomnia", "sleep"), "Insomnia (short-term)"),
    (("anxiety",), "Anxiety (mild)"),
    (("depression",), "Depression (supportive)"),
    (("low blood pressure", "hypotension", "lightheaded"), "Hypotension (supportive)"),
    (("anemia", "low hemoglobin"), "Anemia (iron deficiency)"),
    (("flu", "influenza"), "Flu/Influenza"),
    (("food poisoning",), "Food Poisoning (mild)"),
    (("sunburn",), "Sunburn"),
    (("heat exhaustion", "heat stroke"), "Heat Exhaustion (supportive)"),
    (("dehydration",), "Dehydration (mild)"),
    (("allergic reaction", "hives", "swelling"), "Allergic Reaction (mild)"),
)

_NAME_SPLIT = re.compile(r"[\s/()]+")


def normalize(text: Optional[str]) -> str:
    return str(text or "").lower()


class KeywordTableStrategy:
    """First table entry with any keyword in the text, resolved against the catalog."""

    name = "keyword_table"

    def __init__(self, table: Sequence[Tuple[Sequence[str], str]] = CONDITION_KEYWORD_TABLE):
        self.table = table

    def lookup(self, text: str) -> Optional[str]:
        """Return the target condition name of the first matching entry."""
        for keywords, condition in self.table:
            if any(k in text for k in keywords):
                return condition
        return None

    def __call__(self, text: str, catalog: ConditionCatalog) -> List[ReferenceCondition]:
        target = self.lookup(text)
        if target is None:
            return []
        condition = catalog.find(target)
        if condition is None:
            logger.debug(f"Keyword table target '{target}' not present in catalog")
            return []
        return [condition]


class CatalogKeywordStrategy:
    """Conditions whose own symptom keywords appear in the text, in catalog order."""

    name = "catalog_keywords"

    def __init__(self, limit: int = 3):
        self.limit = limit

    def __call__(self, text: str, catalog: ConditionCatalog) -> List[ReferenceCondition]:
        matched = []
        for condition in catalog:
            if any(k.lower() in text for k in condition.keywords if k):
                matched.append(condition)
            if len(matched) >= self.limit:
                break
        return matched


class NameOverlapStrategy:
    """Conditions sharing any name word with the text; at most ``limit`` of them."""

    name = "name_overlap"

    def __init__(self, limit: int = 2):
        self.limit = limit

    def __call__(self, text: str, catalog: ConditionCatalog) -> List[ReferenceCondition]:
        matched = []
        for condition in catalog:
            words = _NAME_SPLIT.split(normalize(condition.name))
            if any(w and w in text for w in words):
                matched.append(condition)
            if len(matched) >= self.limit:
                break
        return matched


class KeywordMatcher:
    """Maps free text to zero or more catalog conditions.

    Args:
        catalog: Catalog to resolve matches against
        strategies: Ordered strategies; defaults to keyword table then name overlap
    """

    def __init__(self, catalog: ConditionCatalog, strategies: Optional[Sequence] = None):
        self.catalog = catalog
        self.strategies = (
            list(strategies)
            if strategies is not None
            else [KeywordTableStrategy(), NameOverlapStrategy()]
        )

    def match(self, text: Optional[str]) -> List[ReferenceCondition]:
        normalized = normalize(text)
        if not normalized.strip():
            return []

        for strategy in self.strategies:
            matched = strategy(normalized, self.catalog)
            if matched:
                logger.debug(
                    f"{strategy.name} matched {[c.name for c in matched]} for query"
                )
                return matched
        return []

    def suggest_medicines(self, text: Optional[str]) -> List[MedicineSuggestion]:
        """Match text and map each condition to its medicine list."""
        return [
            MedicineSuggestion(condition=c.name, medicines=list(c.medicines))
            for c in self.match(text)
        ]


def build_medicine_matcher(catalog: ConditionCatalog) -> KeywordMatcher:
    """Keyword table, then name overlap."""
    return KeywordMatcher(catalog)


def build_advice_matcher(catalog: ConditionCatalog) -> KeywordMatcher:
    """Keyword table, then each condition's own symptom keywords, then name overlap."""
    return KeywordMatcher(
        catalog,
        strategies=[KeywordTableStrategy(), CatalogKeywordStrategy(), NameOverlapStrategy()],
    )
